# src/neo4jfluent/orm/node.py
"""
Neo4jFluent Node - schema-less graph entity

A Node is one graph node held in memory: an identity (stored as the ``id``
property), an ordered set of labels and a free-form attribute map. It knows
how to insert, update and delete itself through an explicitly passed gateway.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from neo4jfluent.core.cypher import (
    CypherStatement,
    label_fragment,
    properties_map,
    set_clause,
    validate_identifier,
)
from neo4jfluent.core.parameters import ParameterAllocator
from neo4jfluent.exceptions import MissingIdentity

if TYPE_CHECKING:
    from neo4jfluent.orm.gateway import StoreGateway
    from neo4jfluent.orm.traversal import RelationshipBuilder


IDENTITY_KEY = "id"


class Node(BaseModel):
    """
    In-memory representation of a single graph node.

    Example:
        ```python
        alice = Node(labels=["Person"], attributes={"name": "Alice", "age": 30})
        await alice.save(gateway)          # CREATE, assigns an identity
        alice.set("age", 31)
        await alice.save(gateway)          # MATCH ... SET
        await alice.delete(gateway)
        ```
    """

    identity: Optional[str] = Field(default=None, description="Value of the node's id property")
    labels: List[str] = Field(default_factory=list, description="Node labels, deduplicated")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Node properties except id")
    persisted: bool = Field(default=False, description="Whether the node is known to exist in the store")

    # Set by hydration: whether the node was read back from the store, and the
    # id exactly as stored (it may be an integer there).
    _from_store: bool = PrivateAttr(default=False)
    _stored_identity: Any = PrivateAttr(default=None)

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='before')
    @classmethod
    def extract_identity(cls, data: Any) -> Any:
        """Move an ``id`` attribute into ``identity``."""
        if not isinstance(data, dict):
            return data
        attributes = data.get('attributes')
        if isinstance(attributes, dict) and IDENTITY_KEY in attributes:
            attributes = dict(attributes)
            identity = attributes.pop(IDENTITY_KEY)
            data = {**data, 'attributes': attributes}
            if data.get('identity') is None:
                data['identity'] = identity
        return data

    @field_validator('identity', mode='before')
    @classmethod
    def coerce_identity_to_string(cls, v):
        if v is None:
            return None
        return str(v)

    @field_validator('labels')
    @classmethod
    def validate_labels(cls, v):
        """Validate label syntax and drop duplicates, keeping first occurrence."""
        unique: List[str] = []
        for label in v:
            validate_identifier(label, "label")
            if label not in unique:
                unique.append(label)
        return unique

    @field_validator('attributes')
    @classmethod
    def validate_attributes(cls, v):
        if not all(isinstance(k, str) for k in v.keys()):
            raise ValueError("All attribute keys must be strings")
        return v

    @model_validator(mode='after')
    def check_persisted_identity(self) -> Node:
        if self.persisted and self.identity is None:
            raise ValueError("A persisted node must have an identity")
        return self

    # =============================================================================
    # ATTRIBUTE ACCESS
    # =============================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get an attribute value, or ``default`` when it is not set."""
        if key == IDENTITY_KEY:
            return self.identity if self.identity is not None else default
        return self.attributes.get(key, default)

    def set(self, key: str, value: Any) -> Node:
        """Set an attribute value. The ``id`` key is reserved for ``identity``."""
        if key == IDENTITY_KEY:
            raise ValueError("'id' is reserved; assign node.identity instead")
        validate_identifier(key, "attribute name")
        self.attributes[key] = value
        return self

    def unset(self, key: str) -> Any:
        """Remove an attribute and return its value (None if absent)."""
        return self.attributes.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self.attributes

    def add_label(self, label: str) -> Node:
        validate_identifier(label, "label")
        if label not in self.labels:
            self.labels.append(label)
        return self

    def identity_value(self) -> Any:
        """
        Value to bind when matching this node by ``id``.

        The stored value when the node was read back and its identity is
        unchanged, so an integer id still matches; otherwise ``identity``.
        """
        if self._stored_identity is not None and str(self._stored_identity) == self.identity:
            return self._stored_identity
        return self.identity

    def to_dict(self) -> Dict[str, Any]:
        """Attributes plus ``id`` and ``labels``."""
        data = dict(self.attributes)
        if self.identity is not None:
            data[IDENTITY_KEY] = self.identity
        data['labels'] = list(self.labels)
        return data

    # =============================================================================
    # STATEMENTS
    # =============================================================================

    def compile_insert(self) -> CypherStatement:
        parameters: Dict[str, Any] = {}
        identity_parameter = None
        if self.identity is not None:
            identity_parameter = IDENTITY_KEY
            parameters[IDENTITY_KEY] = self.identity

        properties = properties_map(
            self.attributes, ParameterAllocator(), parameters, identity_parameter
        )
        text = f"CREATE (n{label_fragment(self.labels)}{properties}) RETURN n"
        return CypherStatement(text=text, parameters=parameters)

    def compile_update(self) -> CypherStatement:
        if self.identity is None:
            raise MissingIdentity("Cannot update a node without an identity")

        parameters: Dict[str, Any] = {IDENTITY_KEY: self.identity_value()}
        assignments = set_clause("n", self.attributes, ParameterAllocator(), parameters)
        text = f"MATCH (n) WHERE n.id = $id{assignments} RETURN n"
        return CypherStatement(text=text, parameters=parameters)

    def compile_delete(self, detach: bool = False) -> CypherStatement:
        keyword = "DETACH DELETE" if detach else "DELETE"
        return CypherStatement(
            text=f"MATCH (n) WHERE n.id = $id {keyword} n",
            parameters={IDENTITY_KEY: self.identity_value()},
        )

    # =============================================================================
    # PERSISTENCE
    # =============================================================================

    async def save(self, gateway: StoreGateway) -> bool:
        """
        Insert the node, or update it when it is already persisted.

        Returns:
            True if the store returned the written node.

        Raises:
            MissingIdentity: if a persisted node has lost its identity, or if the
                node was read from the store without an ``id`` property.
        """
        if self.persisted:
            return await self._perform_update(gateway)
        if self._from_store and self.identity is None:
            raise MissingIdentity(
                "Node was read from the store without an id; inserting it would create a duplicate"
            )
        return await self._perform_insert(gateway)

    async def _perform_insert(self, gateway: StoreGateway) -> bool:
        if self.identity is None and gateway.auto_identity:
            self.identity = gateway.generate_identity()

        statement = self.compile_insert()
        result = await gateway.run(statement.text, statement.parameters)

        if result.count() == 0:
            return False
        if self.identity is not None:
            self.persisted = True
        return True

    async def _perform_update(self, gateway: StoreGateway) -> bool:
        statement = self.compile_update()
        result = await gateway.run(statement.text, statement.parameters)
        return result.count() > 0

    async def delete(self, gateway: StoreGateway, detach: bool = False) -> bool:
        """
        Delete the node from the store.

        Returns False without sending anything when the node was never
        persisted. Otherwise the node is marked as not persisted even if the
        store matched nothing; the identity is kept.
        """
        if not self.persisted or self.identity is None:
            return False

        statement = self.compile_delete(detach=detach)
        await gateway.run(statement.text, statement.parameters)
        self.persisted = False
        return True

    async def refresh(self, gateway: StoreGateway) -> Node:
        """Reload labels and attributes from the store."""
        from neo4jfluent.orm.hydration import hydrate_node

        if self.identity is None:
            raise MissingIdentity("Cannot refresh a node without an identity")

        result = await gateway.run(
            "MATCH (n) WHERE n.id = $id RETURN n", {IDENTITY_KEY: self.identity_value()}
        )
        raw_nodes = result.nodes("n")
        if not raw_nodes:
            self.persisted = False
            return self

        fresh = hydrate_node(raw_nodes[0])
        self.labels = fresh.labels
        self.attributes = fresh.attributes
        self.persisted = True
        self._from_store = True
        self._stored_identity = fresh._stored_identity
        return self

    def relationship(self, relationship_type: str) -> RelationshipBuilder:
        """Start building an outgoing relationship from this node."""
        from neo4jfluent.orm.traversal import RelationshipBuilder

        return RelationshipBuilder(self, relationship_type)

    def __repr__(self) -> str:
        status = "persisted" if self.persisted else "new"
        return f"Node(identity={self.identity!r}, labels={self.labels!r} ({status}))"
