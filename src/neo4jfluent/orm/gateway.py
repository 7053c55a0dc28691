# src/neo4jfluent/orm/gateway.py
"""
Neo4jFluent Store Gateway

Every compiled statement is executed through a StoreGateway. The gateway is
passed explicitly to queries and nodes; there is no process-wide default.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, TypeVar

from neo4j.exceptions import DriverError, Neo4jError

from neo4jfluent.config import Neo4jSettings
from neo4jfluent.exceptions import MalformedRecord, StoreFailure
from neo4jfluent.orm.engine import GraphEngine
from neo4jfluent.orm.node_query import NodeQuery

logger = logging.getLogger(__name__)

T = TypeVar('T')

_STORE_ERRORS = (Neo4jError, DriverError, ConnectionError)


class RecordSet:
    """
    Fully consumed result of one statement.

    Records only need a ``get(column)`` method, which ``neo4j.Record`` and
    plain dicts both provide.
    """

    def __init__(self, records: Optional[Iterable[Any]] = None):
        self._records: List[Any] = list(records or [])

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def count(self) -> int:
        return len(self._records)

    def first(self) -> Optional[Any]:
        return self._records[0] if self._records else None

    def values(self, column: str) -> List[Any]:
        return [record.get(column) for record in self._records]

    def scalar(self, column: str, default: Any = 0) -> Any:
        """Value of ``column`` in the first record, ``default`` when empty."""
        record = self.first()
        if record is None:
            return default
        value = record.get(column)
        return default if value is None else value

    def nodes(self, column: str) -> List[Any]:
        """
        Node values of ``column`` in result order.

        Raises:
            MalformedRecord: if a value does not expose ``labels`` and ``items()``.
        """
        nodes = []
        for index, record in enumerate(self._records):
            value = record.get(column)
            if value is None or not hasattr(value, "labels") or not callable(getattr(value, "items", None)):
                raise MalformedRecord(
                    f"Record {index} has no node in column '{column}': {value!r}"
                )
            nodes.append(value)
        return nodes


class StoreGateway(ABC):
    """
    The seam between the query compilers and the graph store.

    Subclasses implement ``run`` and ``transaction``; identity generation,
    statement logging and the ``label`` entry point are shared.
    """

    auto_identity: bool = True
    log_queries: bool = False

    @abstractmethod
    async def run(self, statement: str, parameters: Optional[Dict[str, Any]] = None) -> RecordSet:
        """Execute one statement and return all of its records."""

    @abstractmethod
    async def transaction(self, callback: Callable[[StoreGateway], Awaitable[T]]) -> T:
        """Run ``callback`` with a gateway whose statements share one transaction."""

    def generate_identity(self) -> str:
        return str(uuid.uuid4())

    def label(self, *labels: str) -> NodeQuery:
        """Start a query for nodes carrying all of ``labels``."""
        return NodeQuery(self, labels)

    def _log_statement(self, statement: str, parameters: Dict[str, Any]) -> None:
        level = logging.INFO if self.log_queries else logging.DEBUG
        logger.log(level, "Cypher: %s | parameters=%s", statement, parameters)


async def _consume(result: Any) -> RecordSet:
    return RecordSet([record async for record in result])


class GraphGateway(StoreGateway):
    """
    Gateway backed by a GraphEngine; each ``run`` uses its own session.

    Example:
        ```python
        async with GraphGateway.from_settings(Neo4jSettings()) as gateway:
            people = await gateway.label("Person").where("age", ">", 25).get()
        ```
    """

    def __init__(
        self,
        engine: GraphEngine,
        database: Optional[str] = None,
        auto_identity: bool = True,
        log_queries: bool = False,
    ):
        self.engine = engine
        self.database = database
        self.auto_identity = auto_identity
        self.log_queries = log_queries

    @classmethod
    def from_settings(cls, settings: Neo4jSettings) -> GraphGateway:
        return cls(
            GraphEngine.from_settings(settings),
            database=settings.database,
            auto_identity=settings.auto_uuid,
            log_queries=settings.log_queries,
        )

    async def run(self, statement: str, parameters: Optional[Dict[str, Any]] = None) -> RecordSet:
        parameters = parameters or {}
        self._log_statement(statement, parameters)
        try:
            async with self.engine.get_session(self.database) as session:
                result = await session.run(statement, parameters)
                return await _consume(result)
        except _STORE_ERRORS as e:
            raise StoreFailure(f"Statement failed: {e}") from e

    async def transaction(self, callback: Callable[[StoreGateway], Awaitable[T]]) -> T:
        """
        Run ``callback`` inside one write transaction.

        The transaction is committed when the callback returns and rolled back
        when it raises. It is not retried.
        """
        try:
            async with self.engine.get_session(self.database) as session:
                async with await session.begin_transaction() as tx:
                    outcome = await callback(TransactionGateway(tx, self))
                    await tx.commit()
                    return outcome
        except _STORE_ERRORS as e:
            raise StoreFailure(f"Transaction failed: {e}") from e

    async def __aenter__(self) -> GraphGateway:
        await self.engine.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.engine.close()


class TransactionGateway(StoreGateway):
    """Gateway bound to an open driver transaction."""

    def __init__(self, tx: Any, parent: StoreGateway):
        self._tx = tx
        self._parent = parent
        self.auto_identity = parent.auto_identity
        self.log_queries = parent.log_queries

    async def run(self, statement: str, parameters: Optional[Dict[str, Any]] = None) -> RecordSet:
        parameters = parameters or {}
        self._log_statement(statement, parameters)
        try:
            result = await self._tx.run(statement, parameters)
            return await _consume(result)
        except _STORE_ERRORS as e:
            raise StoreFailure(f"Statement failed: {e}") from e

    async def transaction(self, callback: Callable[[StoreGateway], Awaitable[T]]) -> T:
        # Nested transactions join the open one.
        return await callback(self)

    def generate_identity(self) -> str:
        return self._parent.generate_identity()
