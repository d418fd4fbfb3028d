"""
Map-valued fields spread over dynamic columns: one column per key.

On write the keys are the union of every record's map keys, in first-seen
order. On read they are the header cells no scalar column claims; with several
map fields the first one (in declaration order) whose key kind accepts the
cell takes it. Empty header cells belong to no map field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import ConversionError
from .schema import ResolvedField, Schema
from .tokenizer import escape_field

logger = logging.getLogger(__name__)


@dataclass
class DynamicColumnSet:
    map_field: ResolvedField
    keys: List[Any] = field(default_factory=list)
    # header text of each key; positions are filled on the read side only
    headers: List[str] = field(default_factory=list)
    positions: List[int] = field(default_factory=list)

    def header_cells(self) -> List[str]:
        codec = self.map_field.key_codec
        assert codec is not None
        return [escape_field(h, codec.delimiter) for h in self.headers]

    def row_cells(self, record: Any) -> List[str]:
        codec = self.map_field.value_codec
        assert codec is not None
        mapping = getattr(record, self.map_field.name, None) or {}
        cells: List[str] = []
        for key, header in zip(self.keys, self.headers):
            if key not in mapping:
                cells.append("")
                continue
            try:
                cells.append(codec.serialize(mapping[key]))
            except ConversionError as e:
                raise e.with_context(row=None, column=header) from e.__cause__
        return cells

    def populate(self, record: Any, cells: Sequence[str], *, row: int) -> None:
        codec = self.map_field.value_codec
        assert codec is not None
        target: Optional[Dict[Any, Any]] = None
        for key, header, pos in zip(self.keys, self.headers, self.positions):
            text = cells[pos] if pos < len(cells) else ""
            if text == "":
                continue
            try:
                value = codec.deserialize(text)
            except ConversionError as e:
                raise e.with_context(row=row, column=header) from e.__cause__
            if target is None:
                target = getattr(record, self.map_field.name, None)
                if target is None:
                    target = {}
                    setattr(record, self.map_field.name, target)
            target[key] = value


def collect_dynamic_columns(records: Iterable[Any], schema: Schema) -> List[DynamicColumnSet]:
    """Union the map keys of every record, per map field, keeping first-seen order."""
    sets = [DynamicColumnSet(map_field=f) for f in schema.map_fields]
    if not sets:
        return sets

    seen: List[Dict[Any, None]] = [{} for _ in sets]
    for record in records:
        for dyn, keys in zip(sets, seen):
            mapping = getattr(record, dyn.map_field.name, None)
            if mapping:
                for k in mapping:
                    keys.setdefault(k, None)
    for dyn, keys in zip(sets, seen):
        codec = dyn.map_field.key_codec
        assert codec is not None
        dyn.keys = list(keys)
        for k in dyn.keys:
            try:
                dyn.headers.append(codec.to_text(k))
            except ConversionError as e:
                raise e.with_context(row=None, column=dyn.map_field.column) from e.__cause__
        logger.debug("Map field %r expands to columns %s", dyn.map_field.name, dyn.headers)
    return sets


def attribute_headers(headers: Sequence[str], schema: Schema) -> List[DynamicColumnSet]:
    """Assign header cells not claimed by a scalar column to the map fields."""
    sets = [DynamicColumnSet(map_field=f) for f in schema.map_fields]
    claimed = set(schema.columns)

    for pos, cell in enumerate(headers):
        if cell in claimed:
            continue
        if not sets or cell == "":
            logger.debug("Ignoring unmapped column %r at position %d", cell, pos)
            continue

        first_error: Optional[ConversionError] = None
        for dyn in sets:
            codec = dyn.map_field.key_codec
            assert codec is not None
            try:
                key = codec.deserialize(cell)
            except ConversionError as e:
                if first_error is None:
                    first_error = e
                continue
            dyn.keys.append(key)
            dyn.headers.append(cell)
            dyn.positions.append(pos)
            break
        else:
            assert first_error is not None
            raise first_error.with_context(row=1, column=cell) from first_error.__cause__

    for dyn in sets:
        logger.debug("Map field %r claims columns %s", dyn.map_field.name, dyn.headers)
    return sets
