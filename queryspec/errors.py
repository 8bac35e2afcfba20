"""Typed error conditions raised while planning a query.

Every error derives from `QueryParamsError`, itself a `ValueError`, so a request layer can turn the
whole family into a "bad request" with a single `except` clause. Messages are for diagnostics only.
"""

from __future__ import annotations

from typing import Any


class QueryParamsError(ValueError):
    """Base class for all query parameter errors."""


class UnrecognizedParameter(QueryParamsError):
    """Raised when a parameter key matches no classification rule."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unrecognized query parameter: {key!r}")
        self.key = key


class NoSearchableFields(QueryParamsError):
    """Raised when free-text search is requested for an entity without searchable fields."""

    def __init__(self, entity: str) -> None:
        super().__init__(f"Entity {entity!r} declares no searchable fields")
        self.entity = entity


class MalformedSearchValue(QueryParamsError):
    """Raised when negation (`^`) is combined with alternation (`|`) or repeated."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Malformed search value for field {field!r}: {value!r}")
        self.field = field
        self.value = value


class CoercionError(QueryParamsError):
    """Raised when a raw string cannot be converted to the declared field type."""

    def __init__(self, field: str, raw: Any, expected: str) -> None:
        super().__init__(f"Cannot convert {raw!r} to {expected} for field {field!r}")
        self.field = field
        self.raw = raw
        self.expected = expected


class UnsupportedOperator(QueryParamsError):
    """Raised when an operator has no predicate construction for the target field."""

    def __init__(self, operator: Any, field: str | None = None) -> None:
        message = f"Unsupported operator: {operator}"
        if field is not None:
            message += f" (field {field!r})"
        super().__init__(message)
        self.operator = operator
        self.field = field


class UnknownField(QueryParamsError):
    """Raised when a parameter refers to a field the entity does not declare."""

    def __init__(self, entity: str, field: str) -> None:
        super().__init__(f"Entity {entity!r} has no field {field!r}")
        self.entity = entity
        self.field = field


class InvalidPagination(QueryParamsError):
    """Raised when limit/offset values are out of the accepted range."""
