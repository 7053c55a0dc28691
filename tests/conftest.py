# tests/conftest.py
"""
Shared test doubles.

RecordingGateway stands in for a live server: it records every statement it
is asked to run and answers with queued RecordSets (an empty one when the
queue is exhausted). FakeNeo4jNode mimics ``neo4j.graph.Node``: a mapping of
properties with a ``labels`` frozenset.
"""

from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

from neo4jfluent.orm.gateway import RecordSet, StoreGateway


class FakeNeo4jNode(dict):
    """Property mapping with labels, shaped like neo4j.graph.Node."""

    def __init__(self, labels: Iterable[str], properties: Optional[Dict[str, Any]] = None):
        super().__init__(properties or {})
        self.labels = frozenset(labels)


class RecordingGateway(StoreGateway):
    """In-memory gateway that records statements and replays canned results."""

    def __init__(self, auto_identity: bool = True):
        self.auto_identity = auto_identity
        self.statements: List[Tuple[str, Dict[str, Any]]] = []
        self.responses: deque = deque()
        self.transactions = 0
        self.generated: List[str] = []
        self.entered = False
        self.exited = False

    def queue(self, *responses: Any) -> "RecordingGateway":
        """Queue RecordSets, or lists of records that get wrapped in one."""
        for response in responses:
            if not isinstance(response, RecordSet):
                response = RecordSet(response)
            self.responses.append(response)
        return self

    async def run(self, statement: str, parameters: Optional[Dict[str, Any]] = None) -> RecordSet:
        self.statements.append((statement, dict(parameters or {})))
        if self.responses:
            return self.responses.popleft()
        return RecordSet()

    async def transaction(self, callback):
        self.transactions += 1
        return await callback(self)

    def generate_identity(self) -> str:
        identity = f"uuid-{len(self.generated) + 1}"
        self.generated.append(identity)
        return identity

    @property
    def last_statement(self) -> Tuple[str, Dict[str, Any]]:
        return self.statements[-1]

    async def __aenter__(self) -> "RecordingGateway":
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.exited = True


@pytest.fixture
def gateway() -> RecordingGateway:
    """Gateway with automatic identities."""
    return RecordingGateway()


@pytest.fixture
def manual_id_gateway() -> RecordingGateway:
    """Gateway with automatic identities turned off."""
    return RecordingGateway(auto_identity=False)


@pytest.fixture
def node_record():
    """Factory: ``node_record("n", ["Person"], {"id": "1"})`` -> one result record."""
    def _make(column: str, labels: Iterable[str], properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {column: FakeNeo4jNode(labels, properties)}
    return _make
