# src/neo4jfluent/orm/traversal.py
"""
Neo4jFluent traversals - relationship navigation and creation

TraversalQuery extends a NodeQuery with a second pattern, so that
``gateway.label("Person").where("name", "Alice").outgoing("WORKS_FOR").label("Company")``
returns the companies Alice works for. RelationshipBuilder writes a single
relationship between two persisted nodes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from neo4jfluent.core.cypher import (
    MISSING,
    CypherStatement,
    Predicate,
    label_fragment,
    normalize_operator,
    properties_map,
    split_condition,
    validate_identifier,
    validate_limit,
    where_clause_for,
)
from neo4jfluent.core.parameters import ParameterAllocator
from neo4jfluent.exceptions import InvalidDirection, MissingEndpoint
from neo4jfluent.orm.hydration import hydrate_node
from neo4jfluent.orm.node import Node

if TYPE_CHECKING:
    from neo4jfluent.orm.gateway import StoreGateway
    from neo4jfluent.orm.node_query import NodeQuery


SOURCE = "source"
TARGET = "target"
RELATIONSHIP = "r"

DIRECTIONS = ("outgoing", "incoming", "both")


def build_relationship_pattern(direction: str, relationship_type: str) -> str:
    """
    Relationship part of a MATCH pattern for ``direction``.

    Raises:
        InvalidDirection: for anything other than outgoing, incoming or both.
    """
    if direction == "outgoing":
        return f"-[{RELATIONSHIP}:{relationship_type}]->"
    if direction == "incoming":
        return f"<-[{RELATIONSHIP}:{relationship_type}]-"
    if direction == "both":
        return f"-[{RELATIONSHIP}:{relationship_type}]-"
    raise InvalidDirection(f"Invalid relationship direction: {direction!r}")


class TraversalQuery:
    """
    Query for nodes reached from a NodeQuery's matches over one relationship type.

    Placeholders for relationship and target conditions come from the source
    query's allocator, so they never clash with the source's own parameters.
    """

    def __init__(self, source: NodeQuery, direction: str, relationship_type: str):
        if direction not in DIRECTIONS:
            raise InvalidDirection(f"Invalid relationship direction: {direction!r}")
        self.source = source
        self.direction = direction
        self.relationship_type = validate_identifier(relationship_type, "relationship type")
        self._target_labels: List[str] = []
        self._conditions: List[Tuple[Predicate, str]] = []
        self._parameters: Dict[str, Any] = {}
        self._limit: Optional[int] = None

    def label(self, *labels: str) -> TraversalQuery:
        """Require the target node to carry ``labels``."""
        self._target_labels = [validate_identifier(label, "label") for label in labels]
        return self

    def where_relationship(self, field: str, operator_or_value: Any, value: Any = MISSING) -> TraversalQuery:
        """Add a condition on the relationship's properties."""
        operator, value = split_condition(operator_or_value, value)
        return self._add_condition(RELATIONSHIP, field, operator, value)

    def where(self, field: str, operator_or_value: Any, value: Any = MISSING) -> TraversalQuery:
        """Add a condition on the target node's properties."""
        operator, value = split_condition(operator_or_value, value)
        return self._add_condition(TARGET, field, operator, value)

    def limit(self, count: int) -> TraversalQuery:
        self._limit = validate_limit(count)
        return self

    def _add_condition(self, alias: str, field: str, operator: str, value: Any) -> TraversalQuery:
        validate_identifier(field, "field name")
        parameter = self.source.allocator.next()
        self._parameters[parameter] = value
        predicate = Predicate(field=field, operator=normalize_operator(operator), parameter=parameter)
        self._conditions.append((predicate, alias))
        return self

    # =============================================================================
    # INTROSPECTION AND COMPILATION
    # =============================================================================

    @property
    def target_labels(self) -> List[str]:
        return list(self._target_labels)

    @property
    def relationship_predicates(self) -> List[Predicate]:
        return [predicate for predicate, alias in self._conditions if alias == RELATIONSHIP]

    @property
    def target_predicates(self) -> List[Predicate]:
        return [predicate for predicate, alias in self._conditions if alias == TARGET]

    @property
    def parameters(self) -> Dict[str, Any]:
        return {**self.source.parameters, **self._parameters}

    def build_relationship_pattern(self) -> str:
        return build_relationship_pattern(self.direction, self.relationship_type)

    def _pattern(self) -> str:
        return (
            self.source.match_clause(SOURCE)
            + self.source.where_clause(SOURCE)
            + f" MATCH ({SOURCE}){self.build_relationship_pattern()}"
            + f"({TARGET}{label_fragment(self._target_labels)})"
            + where_clause_for(self._conditions)
        )

    def compile_select(self, limit: Optional[int] = None) -> CypherStatement:
        text = self._pattern() + f" RETURN {TARGET}"
        limit = self._limit if limit is None else limit
        if limit is not None:
            text += f" LIMIT {limit}"
        return CypherStatement(text=text, parameters=self.parameters)

    def compile_count(self) -> CypherStatement:
        text = self._pattern() + f" RETURN count({TARGET}) AS total"
        return CypherStatement(text=text, parameters=self.parameters)

    # =============================================================================
    # TERMINAL OPERATIONS
    # =============================================================================

    async def get(self) -> List[Node]:
        """Target nodes, hydrated from the ``target`` column."""
        statement = self.compile_select()
        result = await self.source.gateway.run(statement.text, statement.parameters)
        return [hydrate_node(raw) for raw in result.nodes(TARGET)]

    async def first(self) -> Optional[Node]:
        statement = self.compile_select(limit=1)
        result = await self.source.gateway.run(statement.text, statement.parameters)
        nodes = result.nodes(TARGET)
        return hydrate_node(nodes[0]) if nodes else None

    async def count(self) -> int:
        statement = self.compile_count()
        result = await self.source.gateway.run(statement.text, statement.parameters)
        return int(result.scalar("total", 0))

    async def exists(self) -> bool:
        return await self.count() > 0

    def __repr__(self) -> str:
        return (
            f"TraversalQuery(source={self.source.labels!r}, {self.direction} "
            f"{self.relationship_type} -> {self._target_labels!r})"
        )


class RelationshipBuilder:
    """
    Creates one relationship from ``from_node`` to another persisted node.

    Example:
        ```python
        await alice.relationship("WORKS_FOR").to(acme).with_properties(since=2020).save(gateway)
        ```
    """

    def __init__(self, from_node: Node, relationship_type: str):
        self.from_node = from_node
        self.relationship_type = validate_identifier(relationship_type, "relationship type")
        self.to_node: Optional[Node] = None
        self.properties: Dict[str, Any] = {}

    def to(self, node: Node) -> RelationshipBuilder:
        self.to_node = node
        return self

    def with_properties(self, properties: Optional[Dict[str, Any]] = None, **kwargs: Any) -> RelationshipBuilder:
        """Replace the relationship's properties."""
        merged = {**(properties or {}), **kwargs}
        for key in merged:
            validate_identifier(key, "property name")
        self.properties = merged
        return self

    def compile_create(self) -> CypherStatement:
        if self.to_node is None:
            raise MissingEndpoint("Cannot create a relationship without a destination node")
        if self.from_node.identity is None:
            raise MissingEndpoint("The source node has no identity; save it first")
        if self.to_node.identity is None:
            raise MissingEndpoint("The destination node has no identity; save it first")

        parameters: Dict[str, Any] = {
            "fromId": self.from_node.identity_value(),
            "toId": self.to_node.identity_value(),
        }
        properties = properties_map(self.properties, ParameterAllocator(), parameters)
        text = (
            "MATCH (a), (b) WHERE a.id = $fromId AND b.id = $toId "
            f"CREATE (a)-[r:{self.relationship_type}{properties}]->(b) RETURN r"
        )
        return CypherStatement(text=text, parameters=parameters)

    async def save(self, gateway: StoreGateway) -> bool:
        """
        Create the relationship.

        Returns:
            True if the store returned the new relationship, False if either
            endpoint was not found.

        Raises:
            MissingEndpoint: if the destination is unset or an endpoint has no identity.
        """
        statement = self.compile_create()
        result = await gateway.run(statement.text, statement.parameters)
        return result.count() > 0
