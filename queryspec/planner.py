"""Query planning (parameters -> predicate + page spec).

The planner walks the raw parameters once per output: pagination keys feed a `PageSpec`; filter keys
become `FilterExpression`s that the `PredicateBuilder` turns into one combined predicate. Every key
is classified, so an unrecognized key fails both passes.

Parameters may be a mapping or an iterable of `(key, value)` pairs. Pairs are processed in order:
for pagination keys the last value wins, while every filter pair contributes its own predicate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from urllib.parse import parse_qsl

from queryspec.config.settings import QuerySettings, default_settings
from queryspec.entity.descriptor import EntityDescriptor
from queryspec.errors import (
    InvalidPagination,
    MalformedSearchValue,
    NoSearchableFields,
    QueryParamsError,
)
from queryspec.params.classifier import classify, field_name
from queryspec.params.coerce import parse_integer
from queryspec.params.schema import (
    PAGINATION_KINDS,
    FieldKind,
    FilterExpression,
    PageSpec,
    QueryCombinator,
    QueryOperator,
)
from queryspec.predicate.builder import PredicateBuilder
from queryspec.predicate.nodes import MATCH_ALL, Predicate

logger = logging.getLogger(__name__)

Params = Mapping[str, str] | Iterable[tuple[str, str]]

NEGATION_MARKER = "^"
ALTERNATION_MARKER = "|"
DESCENDING_MARKER = "-"


@dataclass(frozen=True)
class QueryPlan:
    """A combined filter predicate plus the page to return."""

    predicate: Predicate
    page: PageSpec


def parse_query_string(query: str) -> list[tuple[str, str]]:
    """Split a raw URL query string into ordered, decoded `(key, value)` pairs.

    Blank values and repeated keys are preserved.
    """

    return parse_qsl(query.removeprefix("?"), keep_blank_values=True)


def _pairs(params: Params) -> list[tuple[str, str]]:
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


class QueryPlanner:
    """Plans filters and pagination for one entity type."""

    def __init__(self, descriptor: EntityDescriptor, settings: QuerySettings | None = None) -> None:
        self.descriptor = descriptor
        self.settings = settings or default_settings()
        self.builder = PredicateBuilder(descriptor)

    def plan(self, params: Params, default_filter: FilterExpression | None = None) -> QueryPlan:
        """Build both the filter predicate and the page spec."""

        pairs = _pairs(params)
        try:
            plan = QueryPlan(
                predicate=self.plan_filter(pairs, default_filter),
                page=self.plan_pagination(pairs),
            )
        except QueryParamsError as exc:
            logger.info(
                "rejected entity=%s reason=%s params=%d",
                self.descriptor.name,
                type(exc).__name__,
                len(pairs),
            )
            raise

        logger.debug(
            "planned entity=%s predicate=%r page=%r",
            self.descriptor.name,
            plan.predicate,
            plan.page,
        )
        return plan

    def plan_pagination(self, params: Params) -> PageSpec:
        """Read `limit`, `offset` and `sort` into a `PageSpec`.

        Raises:
            UnrecognizedParameter: If any key matches no classification rule.
            CoercionError: If `limit` or `offset` is not an integer.
            InvalidPagination: If `limit` or `offset` is out of range.
            UnknownField: If the sort field is not declared on the entity.
        """

        limit = self.settings.default_limit
        offset = 0
        sort = self.descriptor.first_field.name

        for key, value in _pairs(params):
            kind = classify(key)
            if kind == FieldKind.LIMIT:
                limit = parse_integer(key, value)
            elif kind == FieldKind.OFFSET:
                offset = parse_integer(key, value)
            elif kind == FieldKind.SORT:
                sort = value

        if limit <= 0:
            raise InvalidPagination(f"limit must be positive, got {limit}")
        if self.settings.max_limit is not None and limit > self.settings.max_limit:
            raise InvalidPagination(f"limit must be <= {self.settings.max_limit}, got {limit}")
        if offset < 0:
            raise InvalidPagination(f"offset must be >= 0, got {offset}")

        descending = sort.startswith(DESCENDING_MARKER)
        if descending:
            sort = sort[len(DESCENDING_MARKER):]

        sort_field = self.descriptor.field(sort)
        return PageSpec(limit=limit, offset=offset, sort_field=sort_field.name, sort_descending=descending)

    def plan_filter(self, params: Params, default_filter: FilterExpression | None = None) -> Predicate:
        """Combine the default filter and every filter parameter into one predicate.

        A single resulting predicate is returned as is; several are AND-ed; none yields the
        identity predicate.
        """

        handlers: dict[FieldKind, Callable[[str, str], Predicate]] = {
            FieldKind.FREE_TEXT: self._free_text_predicate,
            FieldKind.SEARCH: self._search_predicate,
            FieldKind.LESS_BOUND: self._less_predicate,
            FieldKind.GREATER_BOUND: self._greater_predicate,
        }

        predicates: list[Predicate] = []
        if default_filter is not None:
            predicates.append(self.builder.build(default_filter))

        for key, value in _pairs(params):
            kind = classify(key)
            if kind in PAGINATION_KINDS:
                continue
            predicates.append(handlers[kind](key, value))

        if not predicates:
            return MATCH_ALL
        if len(predicates) == 1:
            return predicates[0]
        return self.builder.combine_all(predicates)

    def _free_text_predicate(self, key: str, value: str) -> Predicate:
        searchable = self.descriptor.searchable_fields
        if not searchable:
            raise NoSearchableFields(self.descriptor.name)

        filters = [
            FilterExpression(field=f.name, operator=QueryOperator.LIKE, value=value)
            for f in searchable
        ]
        return self.builder.from_list(filters, QueryCombinator.OR)

    def _search_predicate(self, key: str, value: str) -> Predicate:
        """Build the predicate for `search[field]=value`.

        `^v` negates a single value, `a|b` matches any of the alternatives, anything else is an
        equality. Negation cannot be combined with alternation or repeated.
        """

        field = field_name(key)

        if value.startswith(NEGATION_MARKER):
            negated = value[len(NEGATION_MARKER):]
            if ALTERNATION_MARKER in negated or NEGATION_MARKER in negated:
                raise MalformedSearchValue(field, value)
            return self.builder.build(
                FilterExpression(field=field, operator=QueryOperator.NOT_EQUALS, value=negated)
            )

        if ALTERNATION_MARKER in value and NEGATION_MARKER not in value:
            tokens = [token for token in value.split(ALTERNATION_MARKER) if token]
        else:
            tokens = [value]

        filters = [
            FilterExpression(field=field, operator=QueryOperator.EQUALS, value=token)
            for token in tokens
        ]
        return self.builder.from_list(filters, QueryCombinator.OR)

    def _less_predicate(self, key: str, value: str) -> Predicate:
        return self.builder.build(
            FilterExpression(field=field_name(key), operator=QueryOperator.LESS_THAN, value=value)
        )

    def _greater_predicate(self, key: str, value: str) -> Predicate:
        return self.builder.build(
            FilterExpression(field=field_name(key), operator=QueryOperator.GREATER_THAN, value=value)
        )
