from __future__ import annotations

import dataclasses
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .codec import FieldCodec, build_codec
from .errors import DuplicateColumnError, UnsupportedTypeError
from .kinds import ValueKind, is_complex_kind, kind_from_annotation
from .options import DEFAULT_OPTIONS, SerializerOptions

logger = logging.getLogger(__name__)

COLUMN_METADATA_KEY = "recordcsv.column"


# ----------------------------
# Field descriptors
# ----------------------------

@dataclass(frozen=True)
class FieldDescriptor:
    name: str                   # attribute name on the record
    kind: Any                   # ValueKind, or a type annotation to map onto one
    column: Optional[str] = None

    @property
    def column_name(self) -> str:
        return self.name if self.column is None else self.column


SchemaProvider = Callable[[Any], Sequence[FieldDescriptor]]


def column(name: str, **kwargs: Any) -> Any:
    """
    Dataclass field whose CSV column is ``name`` instead of the attribute name.
    Extra keyword arguments are passed to ``dataclasses.field``.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[COLUMN_METADATA_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def describe_fields(record_type: Any) -> List[FieldDescriptor]:
    """
    Default metadata provider.

    Uses ``record_type.describe_schema()`` when defined. Otherwise dataclass
    fields (with ``column()`` overrides), or else the public class annotations
    with overrides from an optional ``__csv_columns__`` mapping.
    """
    describe = getattr(record_type, "describe_schema", None)
    if callable(describe):
        return list(describe())

    hints = typing.get_type_hints(record_type)

    if dataclasses.is_dataclass(record_type):
        return [
            FieldDescriptor(
                name=f.name,
                kind=hints.get(f.name, f.type),
                column=f.metadata.get(COLUMN_METADATA_KEY),
            )
            for f in dataclasses.fields(record_type)
        ]

    overrides: Mapping[str, str] = getattr(record_type, "__csv_columns__", {})
    return [
        FieldDescriptor(name=name, kind=tp, column=overrides.get(name))
        for name, tp in hints.items()
        if not name.startswith("_") and typing.get_origin(tp) is not typing.ClassVar
    ]


# ----------------------------
# Resolved schema
# ----------------------------

@dataclass(frozen=True)
class ResolvedField:
    name: str
    column: str
    kind: ValueKind
    codec: Optional[FieldCodec] = None        # scalar fields
    key_codec: Optional[FieldCodec] = None    # map fields
    value_codec: Optional[FieldCodec] = None  # map fields

    @property
    def is_map(self) -> bool:
        return self.kind.is_map


@dataclass(frozen=True)
class Schema:
    record_type: Any
    fields: List[ResolvedField]

    @property
    def scalar_fields(self) -> List[ResolvedField]:
        return [f for f in self.fields if not f.is_map]

    @property
    def map_fields(self) -> List[ResolvedField]:
        return [f for f in self.fields if f.is_map]

    @property
    def columns(self) -> List[str]:
        """Column names of the scalar fields, in declaration order."""
        return [f.column for f in self.scalar_fields]


def _resolve_kind(descriptor: FieldDescriptor) -> ValueKind:
    declared = descriptor.kind
    if isinstance(declared, ValueKind):
        kind = declared
    else:
        kind = kind_from_annotation(declared, field=descriptor.name)
    if is_complex_kind(kind):
        raise UnsupportedTypeError(field=descriptor.name, declared=declared)
    return kind


def resolve_schema(
    record_type: Any,
    options: SerializerOptions = DEFAULT_OPTIONS,
    provider: Optional[SchemaProvider] = None,
) -> Schema:
    """Describe, validate and bind codecs for ``record_type``. Raises before any row is touched."""
    descriptors = (provider or describe_fields)(record_type)

    fields: List[ResolvedField] = []
    for d in descriptors:
        kind = _resolve_kind(d)
        if kind.is_map:
            assert kind.key is not None and kind.value is not None
            fields.append(ResolvedField(
                name=d.name,
                column=d.column_name,
                kind=kind,
                key_codec=build_codec(kind.key, options),
                value_codec=build_codec(kind.value, options),
            ))
        else:
            fields.append(ResolvedField(
                name=d.name,
                column=d.column_name,
                kind=kind,
                codec=build_codec(kind, options),
            ))

    owners: Dict[str, List[str]] = {}
    for f in fields:
        if not f.is_map:
            owners.setdefault(f.column, []).append(f.name)
    for col, names in owners.items():
        if len(names) > 1:
            raise DuplicateColumnError(column=col, fields=names)

    schema = Schema(record_type=record_type, fields=fields)
    logger.debug(
        "Resolved schema for %s: scalar columns=%s, map fields=%s",
        getattr(record_type, "__name__", record_type),
        schema.columns,
        [f.name for f in schema.map_fields],
    )
    return schema
