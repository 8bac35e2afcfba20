"""Predicate tree.

Predicates are opaque to the planner: it only combines them with `&` / `|`. Engines (SQL, in-memory)
walk the tree to compile it into their own representation.

`MATCH_ALL` is the identity element for both combinators, so folding a list of predicates from it
never introduces a redundant node (and an OR fold never degrades into "match everything").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from queryspec.params.schema import QueryCombinator, QueryOperator


class Predicate:
    """Base class for all predicate nodes."""

    def and_(self, other: Predicate) -> Predicate:
        return combine(QueryCombinator.AND, self, other)

    def or_(self, other: Predicate) -> Predicate:
        return combine(QueryCombinator.OR, self, other)

    def __and__(self, other: Predicate) -> Predicate:
        return self.and_(other)

    def __or__(self, other: Predicate) -> Predicate:
        return self.or_(other)


@dataclass(frozen=True)
class MatchAll(Predicate):
    """Matches every record."""


MATCH_ALL = MatchAll()


@dataclass(frozen=True)
class Comparison(Predicate):
    """`field <operator> value`, with `value` already coerced to the field type.

    For `LIKE`, `value` is a pattern where `%` matches any run of characters and `_` one character.
    """

    field: str
    operator: QueryOperator
    value: Any


@dataclass(frozen=True)
class Junction(Predicate):
    """Two or more predicates joined by one combinator."""

    combinator: QueryCombinator
    parts: tuple[Predicate, ...]


def _flatten(combinator: QueryCombinator, predicate: Predicate) -> tuple[Predicate, ...]:
    if isinstance(predicate, Junction) and predicate.combinator == combinator:
        return predicate.parts
    return (predicate,)


def combine(combinator: QueryCombinator, left: Predicate, right: Predicate) -> Predicate:
    """Join two predicates, dropping identities and flattening nested junctions."""

    if isinstance(left, MatchAll):
        return right
    if isinstance(right, MatchAll):
        return left
    return Junction(combinator, _flatten(combinator, left) + _flatten(combinator, right))
