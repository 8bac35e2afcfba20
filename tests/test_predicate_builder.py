"""Tests for predicate construction and AND/OR folding."""

from __future__ import annotations

import pytest

from queryspec.entity.descriptor import EntityDescriptor
from queryspec.errors import CoercionError, UnknownField, UnsupportedOperator
from queryspec.params.schema import FilterExpression, QueryCombinator, QueryOperator
from queryspec.predicate.builder import PredicateBuilder
from queryspec.predicate.nodes import MATCH_ALL, Comparison, Junction


def _expr(field: str, operator: QueryOperator, value: str) -> FilterExpression:
    return FilterExpression(field=field, operator=operator, value=value)


def test_build_comparisons_coerce_to_field_type(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    status = tickets.field("status").enum_type
    assert status is not None

    assert builder.build(_expr("age", QueryOperator.EQUALS, "18")) == Comparison(
        "age", QueryOperator.EQUALS, 18
    )
    assert builder.build(_expr("status", QueryOperator.NOT_EQUALS, "closed")) == Comparison(
        "status", QueryOperator.NOT_EQUALS, status.closed
    )
    assert builder.build(_expr("score", QueryOperator.GREATER_THAN, "4.5")) == Comparison(
        "score", QueryOperator.GREATER_THAN, 4.5
    )
    assert builder.build(_expr("name", QueryOperator.LESS_THAN, "M")) == Comparison(
        "name", QueryOperator.LESS_THAN, "M"
    )


def test_build_like_wraps_value_in_wildcards(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    assert builder.build(_expr("name", QueryOperator.LIKE, "foo")) == Comparison(
        "name", QueryOperator.LIKE, "%foo%"
    )


def test_build_like_on_numeric_field_fails_coercion(tickets: EntityDescriptor) -> None:
    with pytest.raises(CoercionError):
        PredicateBuilder(tickets).build(_expr("age", QueryOperator.LIKE, "1"))


def test_build_ordering_on_unorderable_field_is_rejected(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    with pytest.raises(UnsupportedOperator):
        builder.build(_expr("status", QueryOperator.LESS_THAN, "open"))
    with pytest.raises(UnsupportedOperator):
        builder.build(_expr("active", QueryOperator.GREATER_THAN, "true"))


def test_build_unknown_field(tickets: EntityDescriptor) -> None:
    with pytest.raises(UnknownField):
        PredicateBuilder(tickets).build(_expr("salary", QueryOperator.EQUALS, "1"))


def test_build_bad_value_raises_coercion_error(tickets: EntityDescriptor) -> None:
    with pytest.raises(CoercionError):
        PredicateBuilder(tickets).build(_expr("age", QueryOperator.GREATER_THAN, "old"))


def test_build_unsupported_operator(tickets: EntityDescriptor) -> None:
    # Bypass validation to simulate an operator without a predicate construction.
    expr = FilterExpression.model_construct(field="age", operator="between", value="1", values=None)
    with pytest.raises(UnsupportedOperator):
        PredicateBuilder(tickets).build(expr)


def test_build_membership_from_values(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)

    any_of = builder.build(
        FilterExpression(field="age", operator=QueryOperator.EQUALS, values=["1", "2"])
    )
    assert any_of == Junction(
        QueryCombinator.OR,
        (Comparison("age", QueryOperator.EQUALS, 1), Comparison("age", QueryOperator.EQUALS, 2)),
    )

    none_of = builder.build(
        FilterExpression(field="age", operator=QueryOperator.NOT_EQUALS, values=["1", "2"])
    )
    assert none_of == Junction(
        QueryCombinator.AND,
        (
            Comparison("age", QueryOperator.NOT_EQUALS, 1),
            Comparison("age", QueryOperator.NOT_EQUALS, 2),
        ),
    )


def test_from_list_empty_yields_identity(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    assert builder.from_list([], QueryCombinator.OR) is MATCH_ALL
    assert builder.from_list([], QueryCombinator.AND) is MATCH_ALL


def test_from_list_single_expression_is_not_wrapped(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    predicate = builder.from_list([_expr("age", QueryOperator.EQUALS, "3")], QueryCombinator.OR)
    assert predicate == Comparison("age", QueryOperator.EQUALS, 3)


def test_from_list_folds_left_to_right(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    exprs = [
        _expr("age", QueryOperator.GREATER_THAN, "18"),
        _expr("age", QueryOperator.LESS_THAN, "65"),
        _expr("name", QueryOperator.EQUALS, "Ann"),
    ]

    predicate = builder.from_list(exprs, QueryCombinator.AND)

    assert predicate == Junction(
        QueryCombinator.AND,
        (
            Comparison("age", QueryOperator.GREATER_THAN, 18),
            Comparison("age", QueryOperator.LESS_THAN, 65),
            Comparison("name", QueryOperator.EQUALS, "Ann"),
        ),
    )


def test_combine_all_is_conjunctive_and_keeps_nested_or(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    either = builder.from_list(
        [_expr("name", QueryOperator.EQUALS, "a"), _expr("name", QueryOperator.EQUALS, "b")],
        QueryCombinator.OR,
    )
    adult = builder.build(_expr("age", QueryOperator.GREATER_THAN, "18"))

    combined = builder.combine_all([either, adult])

    assert combined == Junction(QueryCombinator.AND, (either, adult))
    assert builder.combine_all([]) is MATCH_ALL
    assert builder.combine_all([adult]) == adult


def test_match_all_is_neutral_for_both_combinators() -> None:
    p = Comparison("age", QueryOperator.EQUALS, 1)
    assert (MATCH_ALL & p) == p
    assert (p | MATCH_ALL) == p
    assert (MATCH_ALL | MATCH_ALL) == MATCH_ALL


def test_build_membership_over_enum_members(tickets: EntityDescriptor) -> None:
    builder = PredicateBuilder(tickets)
    status = tickets.field("status").enum_type
    assert status is not None

    none_of = builder.build(
        FilterExpression(field="status", operator=QueryOperator.NOT_EQUALS, values=["closed"])
    )
    assert none_of == Comparison("status", QueryOperator.NOT_EQUALS, status.closed)

    with pytest.raises(CoercionError):
        builder.build(
            FilterExpression(field="status", operator=QueryOperator.EQUALS, values=["open", "gone"])
        )
