# src/neo4jfluent/orm/node_query.py
"""
Neo4jFluent NodeQuery - fluent query builder for labelled nodes

A NodeQuery accumulates a label filter, predicates, ordering and a limit,
and compiles them into one parameterized Cypher statement when a terminal
coroutine (get, first, find, count, exists, create, update, delete) runs.
A query is meant to be used for a single terminal call.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from neo4jfluent.core.cypher import (
    MISSING,
    CypherStatement,
    Predicate,
    label_fragment,
    normalize_direction,
    normalize_operator,
    set_clause,
    split_condition,
    validate_identifier,
    validate_limit,
    where_clause,
)
from neo4jfluent.core.parameters import ParameterAllocator
from neo4jfluent.exceptions import QueryBuildError, UnsafeMutation
from neo4jfluent.orm.hydration import hydrate_node
from neo4jfluent.orm.node import IDENTITY_KEY, Node
from neo4jfluent.orm.traversal import TraversalQuery

if TYPE_CHECKING:
    from neo4jfluent.orm.gateway import StoreGateway


ALIAS = "n"


class NodeQuery:
    """
    Query builder for nodes carrying a set of labels.

    Example:
        ```python
        people = await (
            gateway.label("Person")
            .where("city", "San Francisco")
            .where("age", ">", 25)
            .order_by("name")
            .limit(5)
            .get()
        )
        ```
    """

    def __init__(self, gateway: StoreGateway, labels: Iterable[str] = ()):
        self.gateway = gateway
        self._labels: List[str] = []
        self._predicates: List[Predicate] = []
        self._parameters: Dict[str, Any] = {}
        self._order_by: Optional[Tuple[str, str]] = None
        self._limit: Optional[int] = None
        self.allocator = ParameterAllocator()
        self.label(*labels)

    # =============================================================================
    # BUILDER METHODS
    # =============================================================================

    def label(self, *labels: str) -> NodeQuery:
        """Replace the label filter."""
        unique: List[str] = []
        for label in labels:
            validate_identifier(label, "label")
            if label not in unique:
                unique.append(label)
        self._labels = unique
        return self

    def where(self, field: str, operator_or_value: Any, value: Any = MISSING) -> NodeQuery:
        """
        Add an AND condition.

        ``where("age", 30)`` means equality; ``where("age", ">", 30)`` uses the
        given operator.
        """
        operator, value = split_condition(operator_or_value, value)
        return self._add_predicate(field, operator, value, "AND")

    def or_where(self, field: str, operator_or_value: Any, value: Any = MISSING) -> NodeQuery:
        """
        Add a condition joined with a bare OR.

        No parentheses are added: ``where(a).where(b).or_where(c)`` compiles to
        ``a AND b OR c``, which Cypher reads as ``(a AND b) OR c``.
        """
        operator, value = split_condition(operator_or_value, value)
        return self._add_predicate(field, operator, value, "OR")

    def where_in(self, field: str, values: Iterable[Any]) -> NodeQuery:
        """
        Add ``n.field IN $p`` with the whole sequence bound to one placeholder.

        Raises:
            QueryBuildError: if ``values`` is a string or bytes rather than a
                collection of values.
        """
        if isinstance(values, (str, bytes)):
            raise QueryBuildError(f"where_in() needs a collection of values, got {values!r}")
        return self._add_predicate(field, "IN", list(values), "AND")

    def order_by(self, field: str, direction: str = "ASC") -> NodeQuery:
        """Order results by ``field``; replaces any earlier ordering."""
        self._order_by = (validate_identifier(field, "field name"), normalize_direction(direction))
        return self

    def limit(self, count: int) -> NodeQuery:
        """Limit the number of results; replaces any earlier limit."""
        self._limit = validate_limit(count)
        return self

    def _add_predicate(self, field: str, operator: str, value: Any, connective: str) -> NodeQuery:
        validate_identifier(field, "field name")
        operator = normalize_operator(operator)
        parameter = self.allocator.next()
        self._parameters[parameter] = value
        self._predicates.append(
            Predicate(field=field, operator=operator, parameter=parameter, connective=connective)
        )
        return self

    # =============================================================================
    # TRAVERSALS
    # =============================================================================

    def outgoing(self, relationship_type: str) -> TraversalQuery:
        """Follow ``(n)-[:TYPE]->(target)``."""
        return TraversalQuery(self, "outgoing", relationship_type)

    def incoming(self, relationship_type: str) -> TraversalQuery:
        """Follow ``(n)<-[:TYPE]-(target)``."""
        return TraversalQuery(self, "incoming", relationship_type)

    def related(self, relationship_type: str) -> TraversalQuery:
        """Follow ``(n)-[:TYPE]-(target)`` in either direction."""
        return TraversalQuery(self, "both", relationship_type)

    # =============================================================================
    # INTROSPECTION
    # =============================================================================

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    @property
    def predicates(self) -> List[Predicate]:
        return list(self._predicates)

    @property
    def parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    # =============================================================================
    # COMPILATION
    # =============================================================================

    def match_clause(self, alias: str = ALIAS) -> str:
        return f"MATCH ({alias}{label_fragment(self._labels)})"

    def where_clause(self, alias: str = ALIAS) -> str:
        return where_clause(self._predicates, alias)

    def compile_select(self) -> CypherStatement:
        text = self.match_clause() + self.where_clause() + f" RETURN {ALIAS}"
        if self._order_by is not None:
            field, direction = self._order_by
            text += f" ORDER BY {ALIAS}.{field} {direction}"
        if self._limit is not None:
            text += f" LIMIT {self._limit}"
        return CypherStatement(text=text, parameters=self.parameters)

    def compile_count(self) -> CypherStatement:
        text = self.match_clause() + self.where_clause() + f" RETURN count({ALIAS}) AS total"
        return CypherStatement(text=text, parameters=self.parameters)

    def compile_update(self, attributes: Dict[str, Any]) -> CypherStatement:
        self._guard_mutation("update")
        if not attributes:
            raise ValueError("update() needs at least one attribute")
        if IDENTITY_KEY in attributes:
            raise ValueError("'id' cannot be changed through update()")

        parameters = self.parameters
        assignments = set_clause(ALIAS, attributes, self.allocator, parameters)
        text = (
            self.match_clause() + self.where_clause() + assignments
            + f" RETURN count({ALIAS}) AS updated"
        )
        return CypherStatement(text=text, parameters=parameters)

    def compile_delete(self, detach: bool = False) -> CypherStatement:
        self._guard_mutation("delete")
        keyword = "DETACH DELETE" if detach else "DELETE"
        text = (
            self.match_clause() + self.where_clause()
            + f" {keyword} {ALIAS} RETURN count({ALIAS}) AS deleted"
        )
        return CypherStatement(text=text, parameters=self.parameters)

    def _guard_mutation(self, operation: str) -> None:
        if not self._predicates:
            raise UnsafeMutation(
                f"Refusing to {operation} every {label_fragment(self._labels) or 'node'} "
                "without a where() condition"
            )

    # =============================================================================
    # TERMINAL OPERATIONS
    # =============================================================================

    async def get(self) -> List[Node]:
        """Execute the query and hydrate every returned node, in result order."""
        statement = self.compile_select()
        result = await self.gateway.run(statement.text, statement.parameters)
        return [hydrate_node(raw) for raw in result.nodes(ALIAS)]

    async def first(self) -> Optional[Node]:
        nodes = await self.limit(1).get()
        return nodes[0] if nodes else None

    async def find(self, identity: str) -> Optional[Node]:
        """Find a node by its ``id`` property."""
        return await self.where(IDENTITY_KEY, identity).first()

    async def count(self) -> int:
        statement = self.compile_count()
        result = await self.gateway.run(statement.text, statement.parameters)
        return int(result.scalar("total", 0))

    async def exists(self) -> bool:
        return await self.count() > 0

    async def create(self, attributes: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Node:
        """
        Create a node with this query's labels and save it.

        The node is returned even if the store returned nothing; check
        ``node.persisted`` when that matters.
        """
        node = Node(labels=self._labels, attributes={**(attributes or {}), **kwargs})
        await node.save(self.gateway)
        return node

    async def update(self, attributes: Dict[str, Any]) -> int:
        """
        Set ``attributes`` on every matching node.

        Returns:
            Number of nodes updated.

        Raises:
            UnsafeMutation: if no where() condition was given.
        """
        statement = self.compile_update(attributes)
        result = await self.gateway.run(statement.text, statement.parameters)
        return int(result.scalar("updated", 0))

    async def delete(self, detach: bool = False) -> int:
        """
        Delete every matching node; ``detach=True`` removes their relationships too.

        Raises:
            UnsafeMutation: if no where() condition was given.
        """
        statement = self.compile_delete(detach=detach)
        result = await self.gateway.run(statement.text, statement.parameters)
        return int(result.scalar("deleted", 0))

    def __repr__(self) -> str:
        return f"NodeQuery(labels={self._labels!r}, predicates={len(self._predicates)})"
