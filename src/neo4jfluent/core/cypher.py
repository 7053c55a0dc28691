# src/neo4jfluent/core/cypher.py
"""
Neo4jFluent Cypher building blocks

Values are always bound as parameters. Labels, property names, relationship
types and operators cannot be parameters in Cypher, so they are interpolated
into the statement text and must pass the allow-lists below first.
"""

import re
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from neo4jfluent.core.parameters import ParameterAllocator
from neo4jfluent.exceptions import InvalidIdentifier, InvalidOperator, QueryBuildError


_IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

# Accepted spelling -> emitted spelling
_OPERATORS: Dict[str, str] = {
    "=": "=",
    "<>": "<>",
    "!=": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "=~": "=~",
    "IN": "IN",
    "CONTAINS": "CONTAINS",
    "STARTS WITH": "STARTS WITH",
    "ENDS WITH": "ENDS WITH",
}

_DIRECTIONS = ("ASC", "DESC")

# Marks an omitted third argument to where(); None is a legitimate value.
MISSING: Any = object()


# =============================================================================
# VALIDATION
# =============================================================================

def validate_identifier(name: str, kind: str = "identifier") -> str:
    """Ensure ``name`` can be interpolated into Cypher as-is."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise InvalidIdentifier(f"Invalid {kind}: {name!r}")
    return name


def normalize_operator(operator: str) -> str:
    """Map an accepted operator spelling onto the one emitted in Cypher."""
    key = " ".join(str(operator).split()).upper()
    try:
        return _OPERATORS[key]
    except KeyError:
        raise InvalidOperator(f"Unsupported operator: {operator!r}") from None


def normalize_direction(direction: str) -> str:
    """Validate an ORDER BY direction."""
    value = str(direction).upper()
    if value not in _DIRECTIONS:
        raise QueryBuildError(f"Order direction must be ASC or DESC, got {direction!r}")
    return value


def split_condition(operator_or_value: Any, value: Any) -> Tuple[str, Any]:
    """Resolve the two-argument (equality) and three-argument forms of where()."""
    if value is MISSING:
        return "=", operator_or_value
    return operator_or_value, value


def validate_limit(count: int) -> int:
    """Validate a LIMIT value."""
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise QueryBuildError(f"Limit must be a non-negative integer, got {count!r}")
    return count


# =============================================================================
# STATEMENT PIECES
# =============================================================================

class CypherStatement(BaseModel):
    """Compiled statement text plus the parameters it references."""

    text: str
    parameters: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.text


class Predicate(BaseModel):
    """
    One filter condition.

    The value itself is not stored here; it lives in the owning query's
    parameter mapping under ``parameter``.
    """

    field: str
    operator: str = "="
    parameter: str
    connective: Literal["AND", "OR"] = "AND"

    model_config = ConfigDict(frozen=True)

    @field_validator('field')
    @classmethod
    def validate_field(cls, v):
        return validate_identifier(v, "field name")

    @field_validator('operator')
    @classmethod
    def validate_operator(cls, v):
        return normalize_operator(v)

    def render(self, alias: str) -> str:
        """Render the condition against a pattern variable."""
        return f"{alias}.{self.field} {self.operator} ${self.parameter}"


def label_fragment(labels: Iterable[str]) -> str:
    """``['Person', 'Admin']`` -> ``':Person:Admin'``."""
    labels = list(labels)
    if not labels:
        return ""
    return ":" + ":".join(validate_identifier(label, "label") for label in labels)


def where_clause(predicates: List[Predicate], alias: str) -> str:
    """
    Join predicates into a single flat WHERE clause.

    OR-marked predicates are joined with a bare ``OR`` and are not
    parenthesized, so ``a AND b OR c`` means ``(a AND b) OR c``.
    """
    return where_clause_for([(predicate, alias) for predicate in predicates])


def where_clause_for(conditions: List[tuple]) -> str:
    """Like ``where_clause`` but with a pattern variable per predicate."""
    if not conditions:
        return ""
    parts: List[str] = []
    for index, (predicate, alias) in enumerate(conditions):
        fragment = predicate.render(alias)
        parts.append(fragment if index == 0 else f"{predicate.connective} {fragment}")
    return " WHERE " + " ".join(parts)


def properties_map(
    properties: Dict[str, Any],
    allocator: ParameterAllocator,
    parameters: Dict[str, Any],
    identity_parameter: Optional[str] = None,
) -> str:
    """
    Build an inline property map such as ``{name: $p1, id: $id}``.

    Each value is bound through ``allocator`` and written into ``parameters``.
    """
    entries: List[str] = []
    for key, value in properties.items():
        validate_identifier(key, "property name")
        name = allocator.next()
        parameters[name] = value
        entries.append(f"{key}: ${name}")
    if identity_parameter is not None:
        entries.append(f"id: ${identity_parameter}")
    if not entries:
        return ""
    return " {" + ", ".join(entries) + "}"


def set_clause(
    alias: str,
    properties: Dict[str, Any],
    allocator: ParameterAllocator,
    parameters: Dict[str, Any],
) -> str:
    """Build ``SET n.a = $p1, n.b = $p2``; empty string when nothing to set."""
    assignments: List[str] = []
    for key, value in properties.items():
        validate_identifier(key, "property name")
        name = allocator.next()
        parameters[name] = value
        assignments.append(f"{alias}.{key} = ${name}")
    if not assignments:
        return ""
    return " SET " + ", ".join(assignments)
