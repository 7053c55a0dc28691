# tests/core/test_cypher.py
"""
Tests for the Cypher building blocks:
- identifier / operator / direction / limit validation
- placeholder allocation
- WHERE, property-map and SET fragments
"""

import pytest
from pydantic import ValidationError

from neo4jfluent.core.cypher import (
    MISSING,
    CypherStatement,
    Predicate,
    label_fragment,
    normalize_direction,
    normalize_operator,
    properties_map,
    set_clause,
    split_condition,
    validate_identifier,
    validate_limit,
    where_clause,
    where_clause_for,
)
from neo4jfluent.core.parameters import ParameterAllocator
from neo4jfluent.exceptions import InvalidIdentifier, InvalidOperator, QueryBuildError


# =============================================================================
# VALIDATION
# =============================================================================

class TestIdentifierValidation:
    @pytest.mark.parametrize("name", ["Person", "first_name", "_private", "Label2", "WORKS_FOR"])
    def test_valid_identifiers(self, name):
        assert validate_identifier(name) == name

    @pytest.mark.parametrize("name", [
        "",
        "2fast",
        "first name",
        "name) DETACH DELETE n //",
        "a-b",
        "`quoted`",
        "n.name",
    ])
    def test_invalid_identifiers(self, name):
        with pytest.raises(InvalidIdentifier):
            validate_identifier(name)

    def test_non_string_identifier(self):
        with pytest.raises(InvalidIdentifier):
            validate_identifier(42)

    def test_error_mentions_kind(self):
        with pytest.raises(InvalidIdentifier, match="label"):
            validate_identifier("bad label", "label")

    def test_invalid_identifier_is_value_error(self):
        with pytest.raises(ValueError):
            validate_identifier("bad label")


class TestOperatorValidation:
    @pytest.mark.parametrize("operator,expected", [
        ("=", "="),
        ("<>", "<>"),
        ("!=", "<>"),
        ("<", "<"),
        ("<=", "<="),
        (">", ">"),
        (">=", ">="),
        ("=~", "=~"),
        ("in", "IN"),
        ("contains", "CONTAINS"),
        ("starts with", "STARTS WITH"),
        ("ENDS   WITH", "ENDS WITH"),
    ])
    def test_supported_operators(self, operator, expected):
        assert normalize_operator(operator) == expected

    @pytest.mark.parametrize("operator", ["==", "LIKE", "= 1 OR 1", "; MATCH", ""])
    def test_unsupported_operators(self, operator):
        with pytest.raises(InvalidOperator):
            normalize_operator(operator)


class TestDirectionAndLimit:
    def test_direction_is_case_insensitive(self):
        assert normalize_direction("asc") == "ASC"
        assert normalize_direction("Desc") == "DESC"

    def test_invalid_direction(self):
        with pytest.raises(QueryBuildError):
            normalize_direction("sideways")

    def test_limit_accepts_zero(self):
        assert validate_limit(0) == 0
        assert validate_limit(10) == 10

    @pytest.mark.parametrize("count", [-1, 1.5, "5", True, None])
    def test_limit_rejects_non_natural_numbers(self, count):
        with pytest.raises(QueryBuildError):
            validate_limit(count)


class TestSplitCondition:
    def test_two_argument_form_means_equality(self):
        assert split_condition("Alice", MISSING) == ("=", "Alice")

    def test_three_argument_form(self):
        assert split_condition(">", 25) == (">", 25)

    def test_explicit_none_value_is_kept(self):
        assert split_condition("<>", None) == ("<>", None)


# =============================================================================
# PARAMETER ALLOCATOR
# =============================================================================

class TestParameterAllocator:
    def test_names_are_sequential(self):
        allocator = ParameterAllocator()
        assert [allocator.next() for _ in range(3)] == ["p1", "p2", "p3"]
        assert allocator.allocated == 3

    def test_allocators_are_independent(self):
        first, second = ParameterAllocator(), ParameterAllocator()
        first.next()
        first.next()
        assert second.next() == "p1"

    def test_custom_prefix(self):
        assert ParameterAllocator(prefix="rel").next() == "rel1"


# =============================================================================
# FRAGMENTS
# =============================================================================

class TestPredicate:
    def test_render(self):
        predicate = Predicate(field="age", operator=">", parameter="p2")
        assert predicate.render("n") == "n.age > $p2"
        assert predicate.connective == "AND"

    def test_operator_normalized_on_construction(self):
        assert Predicate(field="age", operator="!=", parameter="p1").operator == "<>"

    def test_invalid_field_rejected(self):
        with pytest.raises(ValidationError):
            Predicate(field="age OR 1=1", parameter="p1")

    def test_predicates_are_frozen(self):
        predicate = Predicate(field="age", parameter="p1")
        with pytest.raises(ValidationError):
            predicate.field = "name"


class TestLabelFragment:
    def test_no_labels(self):
        assert label_fragment([]) == ""

    def test_multiple_labels_keep_order(self):
        assert label_fragment(["Company", "Organization"]) == ":Company:Organization"

    def test_invalid_label(self):
        with pytest.raises(InvalidIdentifier):
            label_fragment(["Person", "Bad Label"])


class TestWhereClause:
    def test_empty(self):
        assert where_clause([], "n") == ""

    def test_and_chain(self):
        predicates = [
            Predicate(field="city", parameter="p1"),
            Predicate(field="age", operator=">", parameter="p2"),
        ]
        assert where_clause(predicates, "n") == " WHERE n.city = $p1 AND n.age > $p2"

    def test_or_is_flat_and_unparenthesized(self):
        predicates = [
            Predicate(field="a", parameter="p1"),
            Predicate(field="b", parameter="p2"),
            Predicate(field="c", parameter="p3", connective="OR"),
        ]
        assert where_clause(predicates, "n") == " WHERE n.a = $p1 AND n.b = $p2 OR n.c = $p3"

    def test_leading_or_drops_connective(self):
        predicates = [Predicate(field="a", parameter="p1", connective="OR")]
        assert where_clause(predicates, "n") == " WHERE n.a = $p1"

    def test_mixed_aliases(self):
        conditions = [
            (Predicate(field="since", operator=">=", parameter="p2"), "r"),
            (Predicate(field="name", parameter="p3"), "target"),
        ]
        assert where_clause_for(conditions) == " WHERE r.since >= $p2 AND target.name = $p3"


class TestPropertyFragments:
    def test_properties_map_binds_each_value(self):
        parameters = {}
        fragment = properties_map({"name": "Alice", "age": 30}, ParameterAllocator(), parameters)
        assert fragment == " {name: $p1, age: $p2}"
        assert parameters == {"p1": "Alice", "p2": 30}

    def test_properties_map_with_identity(self):
        parameters = {"id": "abc"}
        fragment = properties_map({"name": "Alice"}, ParameterAllocator(), parameters, "id")
        assert fragment == " {name: $p1, id: $id}"
        assert parameters == {"id": "abc", "p1": "Alice"}

    def test_empty_properties_map(self):
        assert properties_map({}, ParameterAllocator(), {}) == ""

    def test_properties_map_rejects_bad_keys(self):
        with pytest.raises(InvalidIdentifier):
            properties_map({"bad key": 1}, ParameterAllocator(), {})

    def test_set_clause_continues_allocation(self):
        allocator = ParameterAllocator()
        allocator.next()
        parameters = {"p1": "existing"}
        fragment = set_clause("n", {"status": "active", "score": 9}, allocator, parameters)
        assert fragment == " SET n.status = $p2, n.score = $p3"
        assert parameters == {"p1": "existing", "p2": "active", "p3": 9}

    def test_empty_set_clause(self):
        assert set_clause("n", {}, ParameterAllocator(), {}) == ""


class TestCypherStatement:
    def test_str_is_text(self):
        statement = CypherStatement(text="MATCH (n) RETURN n")
        assert str(statement) == "MATCH (n) RETURN n"
        assert statement.parameters == {}

    def test_frozen(self):
        statement = CypherStatement(text="MATCH (n) RETURN n")
        with pytest.raises(ValidationError):
            statement.text = "MATCH (m) RETURN m"
