"""Pytest configuration and shared fixtures.

The repository uses a flat layout without an installed package. This conftest ensures tests can
import the `queryspec` package when running `pytest` locally.
"""

from __future__ import annotations

import sys
from enum import StrEnum
from pathlib import Path

import pytest

# Ensure `import queryspec...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from queryspec.entity.descriptor import EntityDescriptor, FieldDescriptor, ValueKind  # noqa: E402


class Status(StrEnum):
    """Ticket status used by the sample entity."""

    open = "open"
    closed = "closed"
    pending = "pending"


@pytest.fixture
def tickets() -> EntityDescriptor:
    """A sample entity covering every value kind; `name` and `description` are searchable."""

    return EntityDescriptor(
        name="Ticket",
        table="tickets",
        fields=(
            FieldDescriptor("id", ValueKind.INTEGER),
            FieldDescriptor("name", ValueKind.TEXT, searchable=True),
            FieldDescriptor("description", ValueKind.TEXT, searchable=True, column="desc_text"),
            FieldDescriptor("age", ValueKind.INTEGER),
            FieldDescriptor("score", ValueKind.FLOAT),
            FieldDescriptor("status", ValueKind.ENUM, enum_type=Status),
            FieldDescriptor("active", ValueKind.BOOLEAN),
        ),
    )


@pytest.fixture
def counters() -> EntityDescriptor:
    """A sample entity without searchable fields."""

    return EntityDescriptor(
        name="Counter",
        fields=(
            FieldDescriptor("id", ValueKind.INTEGER),
            FieldDescriptor("label", ValueKind.TEXT),
        ),
    )
