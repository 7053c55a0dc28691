"""
Neo4jFluent Core Module

Statement building blocks shared by the query compilers: placeholder
allocation, identifier and operator allow-lists, and clause fragments.
"""

from neo4jfluent.core.cypher import (
    CypherStatement,
    Predicate,
    label_fragment,
    normalize_operator,
    validate_identifier,
)
from neo4jfluent.core.parameters import ParameterAllocator

__all__ = [
    "CypherStatement",
    "Predicate",
    "ParameterAllocator",
    "label_fragment",
    "normalize_operator",
    "validate_identifier",
]
