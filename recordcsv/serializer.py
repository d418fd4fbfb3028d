from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .errors import ConversionError, DuplicateColumnError, EmptyInputError, MissingHeaderError
from .flatten import DynamicColumnSet, attribute_headers, collect_dynamic_columns
from .options import DEFAULT_OPTIONS, SerializerOptions
from .schema import Schema, SchemaProvider, resolve_schema
from .tokenizer import escape_field, format_row, iter_records, parse_line

logger = logging.getLogger(__name__)


# ----------------------------
# Writer
# ----------------------------

class RecordWriter:
    """
    Serializes records of one type to CSV text.
    The schema is resolved (and validated) when the writer is built.
    """

    def __init__(
        self,
        record_type: Any,
        options: SerializerOptions = DEFAULT_OPTIONS,
        *,
        provider: Optional[SchemaProvider] = None,
    ) -> None:
        self.options = options
        self.schema: Schema = resolve_schema(record_type, options, provider)

    def header_cells(self, dynamic: List[DynamicColumnSet]) -> List[str]:
        d = self.options.delimiter_char
        cells = [escape_field(c, d) for c in self.schema.columns]
        for dyn in dynamic:
            cells.extend(dyn.header_cells())
        return cells

    def _check_columns(self, dynamic: List[DynamicColumnSet]) -> None:
        owners: Dict[str, str] = {f.column: f.name for f in self.schema.scalar_fields}
        for dyn in dynamic:
            for header in dyn.headers:
                owner = owners.get(header)
                if owner is not None:
                    raise DuplicateColumnError(column=header, fields=[owner, dyn.map_field.name])
                owners[header] = dyn.map_field.name

    def row_cells(self, record: Any, dynamic: List[DynamicColumnSet]) -> List[str]:
        cells: List[str] = []
        for f in self.schema.scalar_fields:
            assert f.codec is not None
            try:
                cells.append(f.codec.serialize(getattr(record, f.name, None)))
            except ConversionError as e:
                raise e.with_context(row=None, column=f.column) from e.__cause__
        for dyn in dynamic:
            cells.extend(dyn.row_cells(record))
        return cells

    def write(self, records: Iterable[Any]) -> str:
        # Dynamic columns need every record before the header can be written
        items = list(records)
        dynamic = collect_dynamic_columns(items, self.schema)
        self._check_columns(dynamic)
        d = self.options.delimiter_char

        out: List[str] = []
        if self.options.include_header:
            out.append(format_row(self.header_cells(dynamic), d))
        for record in items:
            out.append(format_row(self.row_cells(record, dynamic), d))

        logger.debug("Serialized %d records", len(items))
        return "".join(out)


# ----------------------------
# Reader
# ----------------------------

class RecordReader:
    """
    Lazy, single-pass iterator of records parsed from CSV text.

    The schema and the header are checked on construction; rows are parsed
    one at a time as they are pulled. A bad row raises when it is reached and
    ends the iteration.
    """

    def __init__(
        self,
        record_type: Any,
        text: str,
        options: SerializerOptions = DEFAULT_OPTIONS,
        *,
        factory: Optional[Callable[[], Any]] = None,
        provider: Optional[SchemaProvider] = None,
    ) -> None:
        self.options = options
        self.schema: Schema = resolve_schema(record_type, options, provider)
        self._factory = factory or record_type
        self._delimiter = options.delimiter_char
        lines = iter_records(text, self._delimiter)
        self._row_index = 0
        self.headers: Optional[List[str]] = None

        try:
            first_line = next(lines)
        except StopIteration:
            raise EmptyInputError() from None

        if options.include_header:
            self._lines = lines
            self._row_index = 1
            self.headers = parse_line(first_line, self._delimiter)
            self._positions = self._header_positions(self.headers)
            self._dynamic = attribute_headers(self.headers, self.schema)
        else:
            self._lines = itertools.chain([first_line], lines)
            self._positions = {f.name: i for i, f in enumerate(self.schema.scalar_fields)}
            self._dynamic = []

    def _header_positions(self, headers: List[str]) -> Dict[str, int]:
        present = set(headers)
        missing = [c for c in self.schema.columns if c not in present]
        if missing:
            raise MissingHeaderError(missing)
        return {f.name: headers.index(f.column) for f in self.schema.scalar_fields}

    def __iter__(self) -> "RecordReader":
        return self

    def __next__(self) -> Any:
        if not hasattr(self, "_iter"):
            self._iter = self._iter_rows()
        return next(self._iter)

    def _iter_rows(self) -> Iterator[Any]:
        count = 0
        for line in self._lines:
            self._row_index += 1
            if not line.strip():
                continue
            yield self._parse_row(parse_line(line, self._delimiter))
            count += 1
        logger.debug("Deserialized %d records", count)

    def _parse_row(self, cells: List[str]) -> Any:
        record = self._factory()
        for f in self.schema.scalar_fields:
            assert f.codec is not None
            pos = self._positions[f.name]
            raw = cells[pos] if pos < len(cells) else ""
            try:
                value = f.codec.deserialize(raw)
            except ConversionError as e:
                raise e.with_context(row=self._row_index, column=f.column) from e.__cause__
            setattr(record, f.name, value)
        for dyn in self._dynamic:
            dyn.populate(record, cells, row=self._row_index)
        return record


def serialize(
    record_type: Any,
    records: Iterable[Any],
    options: Optional[SerializerOptions] = None,
    *,
    provider: Optional[SchemaProvider] = None,
) -> str:
    return RecordWriter(record_type, options or DEFAULT_OPTIONS, provider=provider).write(records)


def deserialize(
    record_type: Any,
    text: str,
    options: Optional[SerializerOptions] = None,
    *,
    factory: Optional[Callable[[], Any]] = None,
    provider: Optional[SchemaProvider] = None,
) -> RecordReader:
    return RecordReader(
        record_type,
        text,
        options or DEFAULT_OPTIONS,
        factory=factory,
        provider=provider,
    )
