"""Exceptions raised by recordcsv."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class RecordCsvError(ValueError):
    """Base class of every error raised while serializing or deserializing."""


class UnsupportedTypeError(RecordCsvError):
    """A field is declared with a kind outside the supported set."""

    def __init__(self, *, field: str, declared: Any, reason: str = "") -> None:
        type_name = getattr(declared, "__name__", None) or str(declared)
        msg = (
            f"Field {field!r} of type {type_name!r} is not supported. "
            "Only scalar types, enums, optionals and maps of those are supported."
        )
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.field = field
        self.declared = declared
        self.reason = reason


class DuplicateColumnError(RecordCsvError):
    """Two fields claim the same column: two scalar columns, or a map key and another column."""

    def __init__(self, *, column: str, fields: Sequence[str]) -> None:
        super().__init__(
            f"Duplicate column name {column!r} used by fields: {', '.join(fields)}"
        )
        self.column = column
        self.fields = list(fields)


class EmptyInputError(RecordCsvError):
    """Deserialization was given input without any lines."""

    def __init__(self) -> None:
        super().__init__("CSV data is empty.")


class MissingHeaderError(RecordCsvError):
    """The header lacks one or more scalar columns of the schema."""

    def __init__(self, missing: Sequence[str]) -> None:
        super().__init__(f"Missing CSV headers: {', '.join(missing)}")
        self.missing = list(missing)


class ConversionError(RecordCsvError):
    """A single cell could not be converted to or from its declared kind."""

    def __init__(
        self,
        *,
        value: str,
        kind: Any,
        reason: str,
        row: Optional[int] = None,
        column: Optional[str] = None,
    ) -> None:
        where = ""
        if row is not None or column is not None:
            where = f" (row={row}, column={column!r})"
        super().__init__(
            f"Failed to convert field {value!r} to {kind}{where}: {reason}"
        )
        self.value = value
        self.kind = kind
        self.reason = reason
        self.row = row          # 1-based line index of the record, header is 1
        self.column = column    # resolved column name

    def with_context(self, *, row: Optional[int], column: Optional[str]) -> "ConversionError":
        """Return a copy carrying row/column context, chained to the same cause."""
        err = ConversionError(
            value=self.value, kind=self.kind, reason=self.reason, row=row, column=column
        )
        err.__cause__ = self.__cause__
        return err
