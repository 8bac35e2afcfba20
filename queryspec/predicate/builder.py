"""Filter expression to predicate conversion.

The builder resolves each expression's field through the entity descriptor, coerces the raw value
to the declared type and emits a `Comparison`. Lists of expressions are folded with AND or OR.
"""

from __future__ import annotations

from collections.abc import Iterable

from queryspec.entity.descriptor import EntityDescriptor, FieldDescriptor
from queryspec.errors import UnsupportedOperator
from queryspec.params.coerce import coerce
from queryspec.params.schema import FilterExpression, QueryCombinator, QueryOperator
from queryspec.predicate.nodes import MATCH_ALL, Comparison, Predicate, combine


class PredicateBuilder:
    """Builds and combines predicates for one entity type."""

    def __init__(self, descriptor: EntityDescriptor) -> None:
        self.descriptor = descriptor

    def build(self, expr: FilterExpression) -> Predicate:
        """Convert a single expression into a predicate.

        Raises:
            UnknownField: If the entity does not declare `expr.field`.
            CoercionError: If the value cannot be converted to the field type.
            UnsupportedOperator: For ordering comparisons on a non-orderable field, or an operator
                without a predicate construction.
        """

        field = self.descriptor.field(expr.field)

        if expr.values is not None:
            return self._build_membership(field, expr)

        builders = {
            QueryOperator.EQUALS: self._build_comparison,
            QueryOperator.NOT_EQUALS: self._build_comparison,
            QueryOperator.LESS_THAN: self._build_ordering,
            QueryOperator.GREATER_THAN: self._build_ordering,
            QueryOperator.LIKE: self._build_like,
        }

        try:
            handler = builders[expr.operator]
        except KeyError as exc:
            raise UnsupportedOperator(expr.operator, field.name) from exc

        return handler(field, expr)

    def from_list(
            self,
            exprs: Iterable[FilterExpression],
            combinator: QueryCombinator,
    ) -> Predicate:
        """Fold expressions left to right with `combinator`.

        An empty list yields the identity predicate (matches everything).
        """

        predicate: Predicate = MATCH_ALL
        for expr in exprs:
            predicate = combine(combinator, predicate, self.build(expr))
        return predicate

    @staticmethod
    def combine_all(predicates: Iterable[Predicate]) -> Predicate:
        """AND together independently built predicates."""

        predicate: Predicate = MATCH_ALL
        for p in predicates:
            predicate = predicate.and_(p)
        return predicate

    @staticmethod
    def _build_comparison(field: FieldDescriptor, expr: FilterExpression) -> Predicate:
        return Comparison(field.name, expr.operator, coerce(field, expr.value))

    @staticmethod
    def _build_ordering(field: FieldDescriptor, expr: FilterExpression) -> Predicate:
        if not field.orderable:
            raise UnsupportedOperator(expr.operator, field.name)
        return Comparison(field.name, expr.operator, coerce(field, expr.value))

    @staticmethod
    def _build_like(field: FieldDescriptor, expr: FilterExpression) -> Predicate:
        """Build a contains match: the value is wrapped as `%value%`, wildcards on both sides."""

        pattern = f"{coerce(field, '%' + str(expr.value))}%"
        return Comparison(field.name, QueryOperator.LIKE, pattern)

    @staticmethod
    def _build_membership(field: FieldDescriptor, expr: FilterExpression) -> Predicate:
        # EQUALS over a list means "any of"; NOT_EQUALS means "none of".
        combinator = QueryCombinator.OR if expr.operator == QueryOperator.EQUALS else QueryCombinator.AND

        predicate: Predicate = MATCH_ALL
        for raw in expr.values or ():
            comparison = Comparison(field.name, expr.operator, coerce(field, raw))
            predicate = combine(combinator, predicate, comparison)
        return predicate
