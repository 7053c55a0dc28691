"""
Neo4jFluent ORM Module

Schema-less nodes, the fluent query and traversal builders that compile to
Cypher, and the gateway/engine pair that executes the statements.
"""

from neo4jfluent.orm.node import Node
from neo4jfluent.orm.hydration import hydrate_node
from neo4jfluent.orm.node_query import NodeQuery
from neo4jfluent.orm.traversal import RelationshipBuilder, TraversalQuery, build_relationship_pattern
from neo4jfluent.orm.gateway import GraphGateway, RecordSet, StoreGateway, TransactionGateway
from neo4jfluent.orm.engine import GraphEngine, create_graph_engine

__all__ = [
    # Entities
    "Node",
    "hydrate_node",

    # Query builders
    "NodeQuery",
    "TraversalQuery",
    "RelationshipBuilder",
    "build_relationship_pattern",

    # Execution
    "StoreGateway",
    "GraphGateway",
    "TransactionGateway",
    "RecordSet",
    "GraphEngine",
    "create_graph_engine",
]
