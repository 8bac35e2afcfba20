"""In-memory evaluation of predicates and page specs.

Records are plain mappings keyed by field name. A missing or `None` field never satisfies a
comparison, mirroring SQL's NULL semantics.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from queryspec.params.schema import PageSpec, QueryCombinator, QueryOperator
from queryspec.predicate.nodes import Comparison, Junction, MatchAll, Predicate

Record = Mapping[str, Any]
Matcher = Callable[[Record], bool]

_COMPARATORS: dict[QueryOperator, Callable[[Any, Any], bool]] = {
    QueryOperator.EQUALS: operator.eq,
    QueryOperator.NOT_EQUALS: operator.ne,
    QueryOperator.LESS_THAN: operator.lt,
    QueryOperator.GREATER_THAN: operator.gt,
}


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a SQL LIKE pattern (`%`, `_`) into an anchored regular expression."""

    translated = "".join(
        ".*" if ch == "%" else "." if ch == "_" else re.escape(ch)
        for ch in pattern
    )
    return re.compile(translated, flags=re.DOTALL)


def _compile_comparison(predicate: Comparison) -> Matcher:
    name = predicate.field
    expected = predicate.value

    if predicate.operator == QueryOperator.LIKE:
        regex = like_to_regex(str(expected))

        def match_like(record: Record) -> bool:
            actual = record.get(name)
            return actual is not None and regex.fullmatch(str(actual)) is not None

        return match_like

    compare = _COMPARATORS[predicate.operator]

    def match_value(record: Record) -> bool:
        actual = record.get(name)
        return actual is not None and compare(actual, expected)

    return match_value


def compile_matcher(predicate: Predicate) -> Matcher:
    """Compile a predicate into a callable over records."""

    if isinstance(predicate, MatchAll):
        return lambda record: True

    if isinstance(predicate, Comparison):
        return _compile_comparison(predicate)

    if isinstance(predicate, Junction):
        parts = [compile_matcher(p) for p in predicate.parts]
        if predicate.combinator == QueryCombinator.OR:
            return lambda record: any(m(record) for m in parts)
        return lambda record: all(m(record) for m in parts)

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def apply_page(records: Iterable[Record], page: PageSpec) -> list[Record]:
    """Sort records by the page's sort field and cut out the requested window.

    Records without a value for the sort field go last in either direction.
    """

    rows = list(records)
    present = [r for r in rows if r.get(page.sort_field) is not None]
    missing = [r for r in rows if r.get(page.sort_field) is None]

    present.sort(key=lambda r: r[page.sort_field], reverse=page.sort_descending)
    ordered = present + missing
    return ordered[page.offset: page.offset + page.limit]


def filter_records(records: Iterable[Record], predicate: Predicate) -> list[Record]:
    matcher = compile_matcher(predicate)
    return [r for r in records if matcher(r)]
