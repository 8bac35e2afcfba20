"""Deterministic SQL compilation of query plans.

The compiler renders a predicate tree and a page spec into a parameterized PostgreSQL query.
Identifiers (tables, columns) come from the entity descriptor and are checked against a strict
pattern; operators come from a fixed allowlist; only values become bound `%s` parameters.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from queryspec.entity.descriptor import EntityDescriptor
from queryspec.params.schema import PageSpec, QueryCombinator, QueryOperator
from queryspec.planner import QueryPlan
from queryspec.predicate.nodes import Comparison, Junction, MatchAll, Predicate


class SQLBuilderError(ValueError):
    """Raised when a plan cannot be converted into deterministic SQL."""


_ALLOWED_OPERATORS: dict[QueryOperator, str] = {
    QueryOperator.EQUALS: "=",
    QueryOperator.NOT_EQUALS: "<>",
    QueryOperator.LESS_THAN: "<",
    QueryOperator.GREATER_THAN: ">",
    QueryOperator.LIKE: "LIKE",
}

_ALLOWED_COMBINATORS: dict[QueryCombinator, str] = {
    QueryCombinator.AND: "AND",
    QueryCombinator.OR: "OR",
}

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class BuiltQuery:
    """A parameterized SQL query ready for execution."""

    sql: str
    params: tuple[Any, ...]


def _identifier(name: str) -> str:
    parts = name.split(".")
    if not all(_IDENTIFIER_RE.fullmatch(part) for part in parts):
        raise SQLBuilderError(f"Unsafe SQL identifier: {name!r}")
    return name


def _column(descriptor: EntityDescriptor, field: str) -> str:
    return _identifier(descriptor.field(field).column_name)


def _compile(predicate: Predicate, descriptor: EntityDescriptor, params: list[Any]) -> str:
    if isinstance(predicate, MatchAll):
        return "TRUE"

    if isinstance(predicate, Comparison):
        try:
            operator = _ALLOWED_OPERATORS[predicate.operator]
        except KeyError as exc:
            raise SQLBuilderError(f"Unsupported operator: {predicate.operator}") from exc
        params.append(predicate.value)
        return f"{_column(descriptor, predicate.field)} {operator} %s"

    if isinstance(predicate, Junction):
        joiner = f" {_ALLOWED_COMBINATORS[predicate.combinator]} "
        clauses = []
        for part in predicate.parts:
            clause = _compile(part, descriptor, params)
            # Nested junctions always use the other combinator (siblings are flattened).
            clauses.append(f"({clause})" if isinstance(part, Junction) else clause)
        return joiner.join(clauses)

    raise SQLBuilderError(f"Unsupported predicate: {type(predicate).__name__}")


def compile_predicate(
        predicate: Predicate,
        descriptor: EntityDescriptor,
) -> tuple[str, tuple[Any, ...]]:
    """Compile a predicate into a boolean SQL expression + params."""

    params: list[Any] = []
    sql = _compile(predicate, descriptor, params)
    return sql, tuple(params)


def _where(predicate: Predicate, descriptor: EntityDescriptor) -> tuple[str, tuple[Any, ...]]:
    if isinstance(predicate, MatchAll):
        return "", ()
    sql, params = compile_predicate(predicate, descriptor)
    return f"WHERE {sql}", params


def _select_list(descriptor: EntityDescriptor, columns: Sequence[str] | None) -> str:
    fields = columns if columns is not None else descriptor.field_names
    if not fields:
        raise SQLBuilderError("At least one column must be selected")

    items = []
    for name in fields:
        column = _column(descriptor, name)
        items.append(column if column == name else f"{column} AS {_identifier(name)}")
    return ", ".join(items)


def _order_by(descriptor: EntityDescriptor, page: PageSpec) -> str:
    direction = "DESC" if page.sort_descending else "ASC"
    return f"ORDER BY {_column(descriptor, page.sort_field)} {direction}"


def build_select(
        descriptor: EntityDescriptor,
        plan: QueryPlan,
        columns: Sequence[str] | None = None,
) -> BuiltQuery:
    """Build a paged `SELECT` for a plan.

    `columns` are field names (defaults to every declared field); stored column names that differ
    from the field name are aliased back to it.
    """

    table = _identifier(descriptor.table_name)
    where_sql, where_params = _where(plan.predicate, descriptor)

    parts = [
        f"SELECT {_select_list(descriptor, columns)} FROM {table}",
        where_sql,
        _order_by(descriptor, plan.page),
        "LIMIT %s OFFSET %s",
    ]
    sql = " ".join(p for p in parts if p)
    return BuiltQuery(sql=sql, params=where_params + (plan.page.limit, plan.page.offset))


def build_count(descriptor: EntityDescriptor, predicate: Predicate) -> BuiltQuery:
    """Build a `COUNT(*)` over every record matching the predicate (ignores paging)."""

    table = _identifier(descriptor.table_name)
    where_sql, where_params = _where(predicate, descriptor)

    sql = f"SELECT COUNT(*)::bigint FROM {table} {where_sql}".strip()
    return BuiltQuery(sql=sql, params=where_params)
