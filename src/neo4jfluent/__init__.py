# src/neo4jfluent/__init__.py
r"""
Neo4jFluent - schema-less fluent object layer for Neo4j

Describe nodes by label and filter them with a chainable builder; every call
compiles to a single parameterized Cypher statement:

Example:
    ```python
    from neo4jfluent import GraphGateway, Neo4jSettings

    async with GraphGateway.from_settings(Neo4jSettings()) as gateway:
        alice = await gateway.label("Person").create(name="Alice", city="San Francisco", age=30)
        acme = await gateway.label("Company", "Organization").create(name="Acme")

        await alice.relationship("WORKS_FOR").to(acme).with_properties(since=2020).save(gateway)

        people = await (
            gateway.label("Person")
            .where("city", "San Francisco")
            .where("age", ">", 25)
            .order_by("name")
            .limit(5)
            .get()
        )

        employers = await (
            gateway.label("Person")
            .where("name", "Alice")
            .outgoing("WORKS_FOR")
            .label("Company")
            .get()
        )
    ```
"""

from neo4jfluent.config import Neo4jSettings
from neo4jfluent.core.cypher import CypherStatement
from neo4jfluent.core.parameters import ParameterAllocator
from neo4jfluent.exceptions import (
    InvalidDirection,
    InvalidIdentifier,
    InvalidOperator,
    MalformedRecord,
    MissingEndpoint,
    MissingIdentity,
    Neo4jFluentError,
    QueryBuildError,
    StoreFailure,
    UnsafeMutation,
)
from neo4jfluent.orm.node import Node
from neo4jfluent.orm.hydration import hydrate_node
from neo4jfluent.orm.node_query import NodeQuery
from neo4jfluent.orm.traversal import RelationshipBuilder, TraversalQuery
from neo4jfluent.orm.gateway import GraphGateway, RecordSet, StoreGateway, TransactionGateway
from neo4jfluent.orm.engine import GraphEngine, create_graph_engine

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Neo4jSettings",

    # Entities and builders
    "Node",
    "NodeQuery",
    "TraversalQuery",
    "RelationshipBuilder",
    "CypherStatement",
    "ParameterAllocator",
    "hydrate_node",

    # Execution
    "StoreGateway",
    "GraphGateway",
    "TransactionGateway",
    "RecordSet",
    "GraphEngine",
    "create_graph_engine",

    # Errors
    "Neo4jFluentError",
    "QueryBuildError",
    "UnsafeMutation",
    "InvalidDirection",
    "InvalidIdentifier",
    "InvalidOperator",
    "MissingIdentity",
    "MissingEndpoint",
    "StoreFailure",
    "MalformedRecord",

    "__version__",
]
