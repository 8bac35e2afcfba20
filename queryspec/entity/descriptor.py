"""Static entity descriptors.

An `EntityDescriptor` is built once per entity type at startup and then shared read-only by every
planner call. It lists the declared fields in order, the value kind of each field and which fields
take part in free-text (`q`) search.
"""

from __future__ import annotations

import types
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum, StrEnum
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel

from queryspec.errors import UnknownField


class ValueKind(StrEnum):
    """Declared value type of a field, as far as coercion is concerned."""

    FLOAT = "float"
    INTEGER = "integer"
    ENUM = "enum"
    BOOLEAN = "boolean"
    TEXT = "text"


# Kinds whose coerced values support `<` / `>` comparisons.
ORDERABLE_KINDS = frozenset({ValueKind.FLOAT, ValueKind.INTEGER, ValueKind.TEXT})


@dataclass(frozen=True)
class FieldDescriptor:
    """A declared entity field."""

    name: str
    kind: ValueKind = ValueKind.TEXT
    enum_type: type[Enum] | None = None
    searchable: bool = False
    column: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("field name must not be empty")
        if (self.kind == ValueKind.ENUM) != (self.enum_type is not None):
            raise ValueError(f"field {self.name!r}: enum_type is required for (and only for) ENUM")

    @property
    def column_name(self) -> str:
        """Storage column name (defaults to the field name)."""

        return self.column or self.name

    @property
    def orderable(self) -> bool:
        return self.kind in ORDERABLE_KINDS


@dataclass(frozen=True)
class EntityDescriptor:
    """Ordered, immutable description of an entity type."""

    name: str
    fields: tuple[FieldDescriptor, ...]
    table: str | None = None
    _index: Mapping[str, FieldDescriptor] = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        fields = tuple(self.fields)
        if not fields:
            raise ValueError(f"entity {self.name!r} must declare at least one field")

        index: dict[str, FieldDescriptor] = {}
        for f in fields:
            if f.name in index:
                raise ValueError(f"entity {self.name!r} declares field {f.name!r} twice")
            index[f.name] = f

        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "_index", types.MappingProxyType(index))

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def first_field(self) -> FieldDescriptor:
        """The first declared field (the default sort key)."""

        return self.fields[0]

    @property
    def searchable_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.searchable]

    @property
    def table_name(self) -> str:
        return self.table or self.name

    def has_field(self, name: str) -> bool:
        return name in self._index

    def field(self, name: str) -> FieldDescriptor:
        """Look up a declared field.

        Raises:
            UnknownField: If the entity does not declare `name`.
        """

        try:
            return self._index[name]
        except KeyError as exc:
            raise UnknownField(self.name, name) from exc

    @classmethod
    def from_model(
            cls,
            model: type[BaseModel],
            *,
            name: str | None = None,
            table: str | None = None,
            searchable: Iterable[str] = (),
    ) -> EntityDescriptor:
        """Derive a descriptor from a Pydantic model class.

        Fields keep the model's declaration order. A field is searchable when it is listed in
        `searchable` or declared with `Field(json_schema_extra={"searchable": True})`.
        """

        extra_searchable = set(searchable)
        fields: list[FieldDescriptor] = []
        for field_name, info in model.model_fields.items():
            annotation = _unwrap_optional(info.annotation)
            kind, enum_type = _value_kind(annotation)

            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            is_searchable = field_name in extra_searchable or bool(extra.get("searchable", False))

            fields.append(
                FieldDescriptor(
                    name=field_name,
                    kind=kind,
                    enum_type=enum_type,
                    searchable=is_searchable,
                    column=info.alias,
                )
            )

        unknown = extra_searchable - {f.name for f in fields}
        if unknown:
            raise ValueError(f"searchable fields not declared on {model.__name__}: {sorted(unknown)}")

        return cls(name=name or model.__name__, fields=tuple(fields), table=table)


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _value_kind(annotation: Any) -> tuple[ValueKind, type[Enum] | None]:
    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return ValueKind.TEXT, None
    # bool is a subclass of int, so it must be checked first.
    if issubclass(annotation, bool):
        return ValueKind.BOOLEAN, None
    if issubclass(annotation, Enum):
        return ValueKind.ENUM, annotation
    if issubclass(annotation, int):
        return ValueKind.INTEGER, None
    if issubclass(annotation, float):
        return ValueKind.FLOAT, None
    return ValueKind.TEXT, None
