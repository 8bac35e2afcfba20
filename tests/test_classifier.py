"""Tests for query parameter key classification."""

from __future__ import annotations

import pytest

from queryspec.errors import UnrecognizedParameter
from queryspec.params.classifier import classify, field_name
from queryspec.params.schema import FieldKind


@pytest.mark.parametrize(
    ("key", "kind"),
    [
        ("q", FieldKind.FREE_TEXT),
        ("limit", FieldKind.LIMIT),
        ("sort", FieldKind.SORT),
        ("offset", FieldKind.OFFSET),
    ],
)
def test_classify_keywords(key: str, kind: FieldKind) -> None:
    assert classify(key) == kind


@pytest.mark.parametrize(
    ("key", "kind", "name"),
    [
        ("search[age]", FieldKind.SEARCH, "age"),
        ("search[first_name]", FieldKind.SEARCH, "first_name"),
        ("less[age]", FieldKind.LESS_BOUND, "age"),
        ("less[score2]", FieldKind.LESS_BOUND, "score2"),
        ("greater[created_at]", FieldKind.GREATER_BOUND, "created_at"),
    ],
)
def test_classify_bracketed_keys_and_extract_field(key: str, kind: FieldKind, name: str) -> None:
    assert classify(key) == kind
    assert field_name(key) == name


@pytest.mark.parametrize(
    "key",
    [
        "",
        "Q",
        "page",
        "Search[age]",
        "search(age)",
        "search[age]x",
        "xsearch[age]",
        "search[first-name]",
        "between[age]",
    ],
)
def test_classify_rejects_unknown_keys(key: str) -> None:
    with pytest.raises(UnrecognizedParameter) as exc_info:
        classify(key)
    assert exc_info.value.key == key


def test_unrecognized_parameter_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        classify("page")


def test_field_name_without_brackets_returns_key() -> None:
    assert field_name("limit") == "limit"
    assert field_name("search[]") == "search[]"
