"""Query parameter models (Pydantic).

These records are the contract between the parameter classifier, the predicate builder and the
planner. A `FilterExpression` describes one atomic comparison; a `PageSpec` describes the window and
ordering of the result set.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QueryOperator(StrEnum):
    """Comparison operators supported by `FilterExpression`."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    LIKE = "like"
    LESS_THAN = "less_than"
    GREATER_THAN = "greater_than"


class QueryCombinator(StrEnum):
    """How sibling predicates are merged."""

    AND = "and"
    OR = "or"


class FieldKind(StrEnum):
    """Semantic kind of a query parameter key."""

    FREE_TEXT = "free_text"
    SEARCH = "search"
    LESS_BOUND = "less_bound"
    GREATER_BOUND = "greater_bound"
    LIMIT = "limit"
    OFFSET = "offset"
    SORT = "sort"


class SortDirection(StrEnum):
    """Result ordering direction."""

    ASC = "asc"
    DESC = "desc"


PAGINATION_KINDS = frozenset({FieldKind.LIMIT, FieldKind.OFFSET, FieldKind.SORT})

# Operators that accept a list of values instead of a single scalar.
_LIST_OPERATORS = frozenset({QueryOperator.EQUALS, QueryOperator.NOT_EQUALS})


class FilterExpression(BaseModel):
    """One atomic comparison: `field <operator> value`.

    Exactly one of `value` / `values` is set. `values` is only meaningful for `EQUALS` (the field
    equals any of the values) and `NOT_EQUALS` (the field equals none of them).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(min_length=1)
    operator: QueryOperator
    # Raw text from the query string, or an already typed scalar for caller-supplied filters.
    value: Any = None
    values: tuple[str, ...] | None = None

    @model_validator(mode="after")
    def validate_value_shape(self) -> FilterExpression:
        """Validate that exactly one of `value` / `values` is populated."""

        if (self.value is None) == (self.values is None):
            raise ValueError("exactly one of value/values must be set")
        if self.values is not None:
            if self.operator not in _LIST_OPERATORS:
                raise ValueError(f"operator {self.operator} does not accept a list of values")
            if not self.values:
                raise ValueError("values must not be empty")
        return self


class PageSpec(BaseModel):
    """Offset-based window plus a single sort key."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    limit: int = Field(gt=0)
    offset: int = Field(default=0, ge=0)
    sort_field: str = Field(min_length=1)
    sort_descending: bool = False

    @property
    def sort_direction(self) -> SortDirection:
        return SortDirection.DESC if self.sort_descending else SortDirection.ASC

    @property
    def page_number(self) -> int:
        """Zero-based index of the page this window starts in."""

        return self.offset // self.limit

    @property
    def has_previous(self) -> bool:
        return self.offset > 0

    def next_page(self) -> PageSpec:
        return self.model_copy(update={"offset": self.offset + self.limit})

    def previous_page(self) -> PageSpec:
        """Return the preceding window, clamped at offset 0."""

        return self.model_copy(update={"offset": max(self.offset - self.limit, 0)})

    def first_page(self) -> PageSpec:
        return self.model_copy(update={"offset": 0})
