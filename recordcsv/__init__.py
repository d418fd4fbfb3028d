"""
recordcsv — records <-> CSV text with declarative column mapping (stdlib-only).

Contract (v0):
- One record type per call. Its fields come from ``describe_schema()`` when
  the type defines it, else from dataclass fields / class annotations.
- Column name = ``column("...")`` override if given, else the attribute name.
- Supported kinds: str, int (32-bit), Long, Single, float, Decimal, bool,
  datetime, Char, Enum subclasses, Optional[X] of those, and dict[K, V]
  whose K and V are any of the former. Anything else raises
  UnsupportedTypeError before a single row is read or written.
- Map fields spread into one column per key, after the scalar columns:
    Name,Math,Lit
    A,85,90
  Write: keys unioned over all records, in first-seen order; a missing key
  writes ""; a key repeating another column raises DuplicateColumnError.
  Read: header cells not claimed by a scalar column become keys (empty
  header cells are ignored).
- Empty cells: Optional[X] -> None; other kinds -> their zero value
  ("", 0, 0.0, Decimal(0), False, datetime.min, "\\x00", enum member 0/first).
  Writing None or "" both yield "".
- Quoting: cells containing the delimiter, '"', CR or LF are quoted with
  inner quotes doubled. Rows end with CRLF on every platform.
- Only the first character of ``delimiter`` is used.
- Errors abort the whole operation: UnsupportedTypeError, DuplicateColumnError,
  EmptyInputError, MissingHeaderError, ConversionError.

API:
- serialize(record_type, records, options=None) -> str
- deserialize(record_type, text, options=None, factory=None) -> lazy iterator
- RecordWriter / RecordReader for repeated use of one resolved schema
- parse_line / escape_field, serialize_field / deserialize_field

Python: 3.10+
"""

from __future__ import annotations

from .codec import FieldCodec, build_codec, deserialize_field, serialize_field
from .datetimes import format_datetime, parse_datetime
from .errors import (
    ConversionError,
    DuplicateColumnError,
    EmptyInputError,
    MissingHeaderError,
    RecordCsvError,
    UnsupportedTypeError,
)
from .flatten import DynamicColumnSet
from .kinds import (
    BOOLEAN,
    CHAR,
    DATETIME,
    DECIMAL,
    DOUBLE,
    FLOAT,
    INTEGER,
    LONG,
    STRING,
    Char,
    Kind,
    Long,
    Single,
    ValueKind,
    enum_of,
    is_complex_kind,
    map_of,
    nullable,
)
from .options import (
    DEFAULT_OPTIONS,
    INVARIANT,
    Culture,
    SerializerOptions,
    get_culture,
    register_culture,
)
from .schema import FieldDescriptor, Schema, column, describe_fields, resolve_schema
from .serializer import RecordReader, RecordWriter, deserialize, serialize
from .tokenizer import escape_field, format_row, parse_line

__version__ = "0.1.0"

__all__ = [
    "RecordCsvError",
    "UnsupportedTypeError",
    "DuplicateColumnError",
    "EmptyInputError",
    "MissingHeaderError",
    "ConversionError",
    "SerializerOptions",
    "DEFAULT_OPTIONS",
    "Culture",
    "INVARIANT",
    "get_culture",
    "register_culture",
    "Kind",
    "ValueKind",
    "STRING",
    "INTEGER",
    "LONG",
    "FLOAT",
    "DOUBLE",
    "DECIMAL",
    "BOOLEAN",
    "DATETIME",
    "CHAR",
    "Long",
    "Single",
    "Char",
    "enum_of",
    "nullable",
    "map_of",
    "is_complex_kind",
    "FieldDescriptor",
    "Schema",
    "column",
    "describe_fields",
    "resolve_schema",
    "DynamicColumnSet",
    "FieldCodec",
    "build_codec",
    "serialize_field",
    "deserialize_field",
    "format_datetime",
    "parse_datetime",
    "parse_line",
    "escape_field",
    "format_row",
    "RecordWriter",
    "RecordReader",
    "serialize",
    "deserialize",
    "__version__",
]
