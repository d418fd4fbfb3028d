from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Tuple

from .datetimes import compile_pattern, parse_datetime
from .errors import ConversionError
from .kinds import Kind, ValueKind
from .options import DEFAULT_OPTIONS, Culture, SerializerOptions
from .tokenizer import escape_field

Parser = Callable[[str], Any]
Formatter = Callable[[Any], str]

_INT32_RANGE = (-(2 ** 31), 2 ** 31 - 1)
_INT64_RANGE = (-(2 ** 63), 2 ** 63 - 1)
_SINGLE_MAX = 3.4028234663852886e38

_INT_RE = re.compile(r"\s*[+-]?\d+\s*")
_SPECIAL_FLOAT_RE = re.compile(r"\s*[+-]?(?:infinity|inf|nan|∞)\s*", re.IGNORECASE)


# ----------------------------
# Numbers
# ----------------------------

def _number_re(culture: Culture, *, exponent: bool) -> "re.Pattern[str]":
    sep = re.escape(culture.decimal_separator)
    exp = r"(?:[eE][+-]?\d+)?" if exponent else ""
    return re.compile(rf"\s*[+-]?(?:\d+(?:{sep}\d*)?|{sep}\d+){exp}\s*")


def _normalize_number(raw: str, culture: Culture) -> str:
    s = raw.strip()
    if culture.decimal_separator != ".":
        s = s.replace(culture.decimal_separator, ".")
    return s


def _parse_int(raw: str, bounds: Tuple[int, int]) -> int:
    if _INT_RE.fullmatch(raw) is None:
        raise ValueError(f"Invalid integer literal: {raw!r}")
    value = int(raw.strip())
    lo, hi = bounds
    if not lo <= value <= hi:
        raise OverflowError(f"value {value} outside [{lo}, {hi}]")
    return value


def _format_int(v: Any, bounds: Tuple[int, int]) -> str:
    if isinstance(v, bool) or not isinstance(v, int):
        raise TypeError(f"expected an integer, got {type(v).__name__}")
    lo, hi = bounds
    if not lo <= v <= hi:
        raise OverflowError(f"value {v} outside [{lo}, {hi}]")
    return str(int(v))


def _parse_float(raw: str, culture: Culture, *, single: bool) -> float:
    if _SPECIAL_FLOAT_RE.fullmatch(raw) is not None:
        return float(raw.strip().replace("∞", "inf"))
    if _number_re(culture, exponent=True).fullmatch(raw) is None:
        raise ValueError(f"Invalid floating point literal: {raw!r}")
    value = float(_normalize_number(raw, culture))
    if math.isinf(value) or (single and abs(value) > _SINGLE_MAX):
        raise OverflowError(f"value {raw.strip()!r} is out of range")
    return value


def _format_float(v: Any, culture: Culture, *, single: bool = False) -> str:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise TypeError(f"expected a number, got {type(v).__name__}")
    f = float(v)
    if math.isnan(f):
        return "NaN"
    if math.isinf(f):
        return "Infinity" if f > 0 else "-Infinity"
    if single and abs(f) > _SINGLE_MAX:
        raise OverflowError(f"value {f!r} is out of single precision range")
    text = repr(f)
    if text.endswith(".0"):
        text = text[:-2]
    return text.replace(".", culture.decimal_separator)


def _parse_decimal(raw: str, culture: Culture) -> Decimal:
    if _number_re(culture, exponent=False).fullmatch(raw) is None:
        raise ValueError(f"Invalid decimal literal: {raw!r}")
    try:
        return Decimal(_normalize_number(raw, culture))
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal literal: {raw!r}") from e


def _format_decimal(v: Any, culture: Culture) -> str:
    d = v if isinstance(v, Decimal) else Decimal(str(v))
    return format(d, "f").replace(".", culture.decimal_separator)


# ----------------------------
# Other scalars
# ----------------------------

def _parse_bool(raw: str, options: SerializerOptions) -> bool:
    s = raw.strip().lower()
    if s in options.bool_true:
        return True
    if s in options.bool_false:
        return False
    raise ValueError(f"Invalid bool literal: {raw!r}")


def _format_bool(v: Any, options: SerializerOptions) -> str:
    return options.bool_true[0] if bool(v) else options.bool_false[0]


def _parse_char(raw: str) -> str:
    if len(raw) != 1:
        raise ValueError(f"Expected exactly one character, got {len(raw)}")
    return raw


def _format_char(v: Any) -> str:
    if not isinstance(v, str) or len(v) != 1:
        raise ValueError(f"expected exactly one character, got {v!r}")
    return v


def _enum_codec(kind: ValueKind) -> Tuple[Parser, Formatter]:
    enum_type = kind.enum_type
    assert enum_type is not None

    def parse(raw: str) -> Any:
        try:
            return enum_type.__members__[raw]
        except KeyError:
            raise ValueError(f"{raw!r} is not a member of {enum_type.__name__}") from None

    def format_(v: Any) -> str:
        member = v if isinstance(v, enum_type) else enum_type(v)
        return member.name

    return parse, format_


def _get_kind_codec(kind: ValueKind, options: SerializerOptions) -> Tuple[Parser, Formatter]:
    culture = options.culture_info
    tag = kind.tag

    if tag is Kind.NULLABLE:
        assert kind.inner is not None
        return _get_kind_codec(kind.inner, options)
    if tag is Kind.STRING:
        return (lambda s: s), str
    if tag is Kind.INTEGER:
        return (lambda s: _parse_int(s, _INT32_RANGE)), (lambda v: _format_int(v, _INT32_RANGE))
    if tag is Kind.LONG:
        return (lambda s: _parse_int(s, _INT64_RANGE)), (lambda v: _format_int(v, _INT64_RANGE))
    if tag is Kind.FLOAT:
        return (lambda s: _parse_float(s, culture, single=True)), (lambda v: _format_float(v, culture, single=True))
    if tag is Kind.DOUBLE:
        return (lambda s: _parse_float(s, culture, single=False)), (lambda v: _format_float(v, culture))
    if tag is Kind.DECIMAL:
        return (lambda s: _parse_decimal(s, culture)), (lambda v: _format_decimal(v, culture))
    if tag is Kind.BOOLEAN:
        return (lambda s: _parse_bool(s, options)), (lambda v: _format_bool(v, options))
    if tag is Kind.DATETIME:
        pattern = compile_pattern(options.datetime_format, culture)
        return (lambda s: parse_datetime(s, options.datetime_format, culture)), pattern.format
    if tag is Kind.CHAR:
        return _parse_char, _format_char
    if tag is Kind.ENUM:
        return _enum_codec(kind)
    raise AssertionError(f"No scalar codec for kind: {kind}")


def zero_value(kind: ValueKind) -> Any:
    """The value an empty cell yields for a non-nullable kind."""
    tag = kind.tag
    if tag is Kind.STRING:
        return ""
    if tag in (Kind.INTEGER, Kind.LONG):
        return 0
    if tag in (Kind.FLOAT, Kind.DOUBLE):
        return 0.0
    if tag is Kind.DECIMAL:
        return Decimal(0)
    if tag is Kind.BOOLEAN:
        return False
    if tag is Kind.DATETIME:
        return datetime.min
    if tag is Kind.CHAR:
        return "\x00"
    if tag is Kind.ENUM:
        assert kind.enum_type is not None
        members = list(kind.enum_type)
        for member in members:
            if member.value == 0:
                return member
        return members[0] if members else None
    if tag is Kind.NULLABLE:
        return None
    raise AssertionError(f"No zero value for kind: {kind}")


# ----------------------------
# Field codec
# ----------------------------

@dataclass(frozen=True)
class FieldCodec:
    """Text conversion for one scalar kind, resolved once per schema."""

    kind: ValueKind
    parser: Parser
    formatter: Formatter
    delimiter: str

    def to_text(self, value: Any) -> str:
        if value is None:
            return ""
        try:
            return self.formatter(value)
        except Exception as e:
            raise ConversionError(
                value=repr(value), kind=self.kind, reason=f"Format failed: {e}"
            ) from e

    def serialize(self, value: Any) -> str:
        return escape_field(self.to_text(value), self.delimiter)

    def deserialize(self, text: str) -> Any:
        if text == "":
            return None if self.kind.is_nullable else zero_value(self.kind)
        try:
            return self.parser(text)
        except Exception as e:
            raise ConversionError(
                value=text, kind=self.kind, reason=f"Parse failed: {e}"
            ) from e


def build_codec(kind: ValueKind, options: SerializerOptions = DEFAULT_OPTIONS) -> FieldCodec:
    parser, formatter = _get_kind_codec(kind, options)
    return FieldCodec(kind=kind, parser=parser, formatter=formatter, delimiter=options.delimiter)


def serialize_field(value: Any, kind: ValueKind, options: SerializerOptions = DEFAULT_OPTIONS) -> str:
    """Format one value as an escaped CSV cell."""
    return build_codec(kind, options).serialize(value)


def deserialize_field(text: str, kind: ValueKind, options: SerializerOptions = DEFAULT_OPTIONS) -> Any:
    """Convert one unescaped cell text to a value of ``kind``."""
    return build_codec(kind, options).deserialize(text)
