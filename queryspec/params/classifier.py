"""Query parameter key classification.

Keys are matched against a fixed, ordered rule set: four reserved keywords followed by three
bracketed patterns (`search[field]`, `less[field]`, `greater[field]`). The first matching rule wins.
"""

from __future__ import annotations

import re

from queryspec.errors import UnrecognizedParameter
from queryspec.params.schema import FieldKind

FREE_TEXT_KEY = "q"
LIMIT_KEY = "limit"
SORT_KEY = "sort"
OFFSET_KEY = "offset"

_KEYWORDS: dict[str, FieldKind] = {
    FREE_TEXT_KEY: FieldKind.FREE_TEXT,
    LIMIT_KEY: FieldKind.LIMIT,
    SORT_KEY: FieldKind.SORT,
    OFFSET_KEY: FieldKind.OFFSET,
}

_SEARCH_RE = re.compile(r"search\[(?P<field>\w*)\]")
_LESS_RE = re.compile(r"less\[(?P<field>\w*)\]")
_GREATER_RE = re.compile(r"greater\[(?P<field>\w*)\]")

_PATTERNS: tuple[tuple[re.Pattern[str], FieldKind], ...] = (
    (_SEARCH_RE, FieldKind.SEARCH),
    (_LESS_RE, FieldKind.LESS_BOUND),
    (_GREATER_RE, FieldKind.GREATER_BOUND),
)

_BRACKETED_RE = re.compile(r"(?<=\[)(.+?)(?=\])")


def classify(key: str) -> FieldKind:
    """Classify a parameter key.

    Raises:
        UnrecognizedParameter: If the key matches none of the rules.
    """

    kind = _KEYWORDS.get(key)
    if kind is not None:
        return kind

    for pattern, pattern_kind in _PATTERNS:
        if pattern.fullmatch(key):
            return pattern_kind

    raise UnrecognizedParameter(key)


def field_name(key: str) -> str:
    """Extract the bracketed field name from a key (`search[age]` -> `age`).

    A key without a bracketed part is returned unchanged.
    """

    match = _BRACKETED_RE.search(key)
    if match is None:
        return key
    return match.group()
