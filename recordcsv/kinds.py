"""
The closed set of value kinds a record field may declare, and the mapping from
Python annotations onto it.
"""

from __future__ import annotations

import collections.abc
import enum
import types
import typing
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, NewType, Optional, Type

from .errors import UnsupportedTypeError


class Kind(enum.Enum):
    STRING = "String"
    INTEGER = "Integer"
    LONG = "Long"
    FLOAT = "Float"
    DOUBLE = "Double"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    CHAR = "Char"
    ENUM = "Enum"
    NULLABLE = "Nullable"
    MAP = "Map"


# Annotation markers for kinds with no distinct Python builtin
Long = NewType("Long", int)
Single = NewType("Single", float)
Char = NewType("Char", str)


@dataclass(frozen=True)
class ValueKind:
    tag: Kind
    enum_type: Optional[Type[enum.Enum]] = None   # ENUM only
    inner: Optional["ValueKind"] = None           # NULLABLE only
    key: Optional["ValueKind"] = None             # MAP only
    value: Optional["ValueKind"] = None           # MAP only

    @property
    def is_nullable(self) -> bool:
        return self.tag is Kind.NULLABLE

    @property
    def is_map(self) -> bool:
        return self.tag is Kind.MAP

    def __str__(self) -> str:
        if self.tag is Kind.ENUM and self.enum_type is not None:
            return f"Enum[{self.enum_type.__name__}]"
        if self.tag is Kind.NULLABLE:
            return f"Nullable[{self.inner}]"
        if self.tag is Kind.MAP:
            return f"Map[{self.key}, {self.value}]"
        return self.tag.value


STRING = ValueKind(Kind.STRING)
INTEGER = ValueKind(Kind.INTEGER)
LONG = ValueKind(Kind.LONG)
FLOAT = ValueKind(Kind.FLOAT)
DOUBLE = ValueKind(Kind.DOUBLE)
DECIMAL = ValueKind(Kind.DECIMAL)
BOOLEAN = ValueKind(Kind.BOOLEAN)
DATETIME = ValueKind(Kind.DATETIME)
CHAR = ValueKind(Kind.CHAR)


def enum_of(enum_type: Type[enum.Enum]) -> ValueKind:
    return ValueKind(Kind.ENUM, enum_type=enum_type)


def nullable(inner: ValueKind) -> ValueKind:
    return ValueKind(Kind.NULLABLE, inner=inner)


def map_of(key: ValueKind, value: ValueKind) -> ValueKind:
    return ValueKind(Kind.MAP, key=key, value=value)


PRIMITIVE_KINDS = frozenset(
    {
        Kind.STRING, Kind.INTEGER, Kind.LONG, Kind.FLOAT, Kind.DOUBLE,
        Kind.DECIMAL, Kind.BOOLEAN, Kind.DATETIME, Kind.CHAR,
    }
)

_ANNOTATION_KINDS = {
    str: STRING,
    int: INTEGER,
    Long: LONG,
    Single: FLOAT,
    float: DOUBLE,
    Decimal: DECIMAL,
    bool: BOOLEAN,
    datetime: DATETIME,
    Char: CHAR,
}

_MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def is_scalar_kind(kind: ValueKind) -> bool:
    """True for primitives, enums and nullable-of-either."""
    if kind.tag in PRIMITIVE_KINDS:
        return True
    if kind.tag is Kind.ENUM:
        return isinstance(kind.enum_type, type) and issubclass(kind.enum_type, enum.Enum)
    if kind.tag is Kind.NULLABLE:
        return kind.inner is not None and not kind.inner.is_nullable and is_scalar_kind(kind.inner)
    return False


def is_complex_kind(kind: ValueKind) -> bool:
    """True when ``kind`` cannot be carried by a CSV column (or a map of columns)."""
    if is_scalar_kind(kind):
        return False
    if kind.tag is Kind.MAP:
        return not (
            kind.key is not None
            and kind.value is not None
            and is_scalar_kind(kind.key)
            and is_scalar_kind(kind.value)
        )
    return True


def _is_none_type(tp: Any) -> bool:
    return tp is type(None) or tp is None


def kind_from_annotation(tp: Any, *, field: str) -> ValueKind:
    """Map a resolved type annotation to its ValueKind or raise UnsupportedTypeError."""
    try:
        kind = _ANNOTATION_KINDS.get(tp)
    except TypeError:
        raise UnsupportedTypeError(field=field, declared=tp) from None
    if kind is not None:
        return kind

    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return enum_of(tp)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in (typing.Union, types.UnionType):
        members = [a for a in args if not _is_none_type(a)]
        if len(members) != 1 or len(members) == len(args):
            raise UnsupportedTypeError(field=field, declared=tp, reason="only Optional[X] unions are allowed")
        inner = kind_from_annotation(members[0], field=field)
        if not is_scalar_kind(inner) or inner.is_nullable:
            raise UnsupportedTypeError(field=field, declared=tp)
        return nullable(inner)

    if origin in _MAPPING_ORIGINS:
        if len(args) != 2:
            raise UnsupportedTypeError(field=field, declared=tp, reason="map key and value types are required")
        key = kind_from_annotation(args[0], field=field)
        value = kind_from_annotation(args[1], field=field)
        result = map_of(key, value)
        if is_complex_kind(result):
            raise UnsupportedTypeError(field=field, declared=tp)
        return result

    raise UnsupportedTypeError(field=field, declared=tp)
