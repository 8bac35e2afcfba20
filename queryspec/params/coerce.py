"""Raw value coercion.

Query parameters always arrive as text, while predicates must compare against values typed like
the target field (ordering comparisons in particular). Coercion is a closed switch over the field's
declared `ValueKind`.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, cast

from queryspec.entity.descriptor import FieldDescriptor, ValueKind
from queryspec.errors import CoercionError

_BOOLEAN_LITERALS: dict[str, bool] = {"true": True, "false": False}

# Plain ASCII literals only: no whitespace, digit separators, non-ASCII digits, nan or inf.
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_integer(name: str, raw: str) -> int:
    """Parse a strict ASCII integer literal.

    Raises:
        CoercionError: If `raw` is not an optionally signed run of ASCII digits.
    """

    if not isinstance(raw, str) or _INTEGER_RE.fullmatch(raw) is None:
        raise CoercionError(name, raw, "integer")
    return int(raw)


def _coerce_float(field: FieldDescriptor, raw: Any) -> float:
    if isinstance(raw, float):
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        return float(raw)
    if not isinstance(raw, str) or _FLOAT_RE.fullmatch(raw) is None:
        raise CoercionError(field.name, raw, "float")
    return float(raw)


def _coerce_integer(field: FieldDescriptor, raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    return parse_integer(field.name, raw)


def _coerce_enum(field: FieldDescriptor, raw: Any) -> Any:
    # FieldDescriptor guarantees enum_type for ENUM fields.
    enum_type = cast(type[Enum], field.enum_type)
    if isinstance(raw, enum_type):
        return raw
    try:
        return enum_type[raw]
    except KeyError as exc:
        raise CoercionError(field.name, raw, f"member of {enum_type.__name__}") from exc


def _coerce_boolean(field: FieldDescriptor, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    try:
        return _BOOLEAN_LITERALS[raw]
    except (KeyError, TypeError) as exc:
        raise CoercionError(field.name, raw, "boolean ('true' or 'false')") from exc


_COERCERS = {
    ValueKind.FLOAT: _coerce_float,
    ValueKind.INTEGER: _coerce_integer,
    ValueKind.ENUM: _coerce_enum,
    ValueKind.BOOLEAN: _coerce_boolean,
}


def coerce(field: FieldDescriptor, raw: Any) -> Any:
    """Convert `raw` to the value type declared for `field`.

    Values that already have the declared type (e.g. from a caller-supplied default filter) are
    returned unchanged. `TEXT` fields pass the raw value through.

    Raises:
        CoercionError: If `raw` cannot be converted.
    """

    coercer = _COERCERS.get(field.kind)
    if coercer is None:
        return raw
    return coercer(field, raw)
