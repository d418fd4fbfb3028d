import math
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum

import pytest

import recordcsv
from recordcsv import (
    BOOLEAN,
    CHAR,
    DATETIME,
    DECIMAL,
    DOUBLE,
    FLOAT,
    INTEGER,
    LONG,
    STRING,
    SerializerOptions,
    enum_of,
    nullable,
)


class Color(Enum):
    RED = 1
    GREEN = 2


class Level(IntEnum):
    LOW = 1
    NONE = 0


GERMAN = SerializerOptions(delimiter=";", culture="de-DE")


def write(value, kind, **kwargs):
    return recordcsv.serialize_field(value, kind, SerializerOptions(**kwargs))


def read(text, kind, **kwargs):
    return recordcsv.deserialize_field(text, kind, SerializerOptions(**kwargs))


def test_none_writes_empty_for_every_kind():
    for kind in (STRING, INTEGER, DOUBLE, DATETIME, enum_of(Color), nullable(INTEGER)):
        assert write(None, kind) == ""


def test_scalar_formatting_defaults():
    assert write(42, INTEGER) == "42"
    assert write(2 ** 40, LONG) == "1099511627776"
    assert write(1.5, DOUBLE) == "1.5"
    assert write(85.0, DOUBLE) == "85"
    assert write(Decimal("12.50"), DECIMAL) == "12.50"
    assert write(True, BOOLEAN) == "true"
    assert write(False, BOOLEAN) == "false"
    assert write("x", CHAR) == "x"
    assert write(7, nullable(INTEGER)) == "7"


def test_special_floats_use_invariant_spelling():
    assert write(math.inf, DOUBLE) == "Infinity"
    assert write(-math.inf, DOUBLE) == "-Infinity"
    assert write(math.nan, DOUBLE) == "NaN"
    assert read("Infinity", DOUBLE) == math.inf
    assert math.isnan(read("NaN", DOUBLE))


def test_enum_writes_member_name():
    assert write(Color.GREEN, enum_of(Color)) == "GREEN"
    assert write(Level.NONE, enum_of(Level)) == "NONE"


def test_datetime_uses_configured_pattern():
    dt = datetime(1993, 5, 15)
    assert write(dt, DATETIME) == "1993-05-15 00:00:00"
    assert write(dt, DATETIME, datetime_format="yyyy/MM/dd") == "1993/05/15"
    assert write(datetime(2020, 1, 1, 15, 4), DATETIME, datetime_format="hh:mm tt") == "03:04 PM"
    assert write(datetime(2020, 1, 2, 3, 4, 5, 120000), DATETIME, datetime_format="H:m:s.fff") == "3:4:5.120"


def test_culture_formatting():
    assert recordcsv.serialize_field(1.5, DOUBLE, GERMAN) == "1,5"
    assert recordcsv.serialize_field(Decimal("2.25"), DECIMAL, GERMAN) == "2,25"
    assert write(1.5, DOUBLE, culture="de-DE") == '"1,5"'
    assert write(datetime(1993, 5, 15), DATETIME, culture="de-DE", datetime_format="yyyy/MM/dd") == "1993.05.15"
    assert write(datetime(1993, 5, 15), DATETIME, culture="de-DE", datetime_format="dd. MMMM yyyy") == "15. Mai 1993"


def test_written_text_is_escaped():
    assert write("a,b", STRING) == '"a,b"'
    assert write('say "hi"', STRING) == '"say ""hi"""'
    assert write("a,b", STRING, delimiter=";") == "a,b"


def test_empty_text_nullable_is_none():
    assert read("", nullable(INTEGER)) is None
    assert read("", nullable(DATETIME)) is None
    assert read("", nullable(enum_of(Color))) is None


def test_empty_text_non_nullable_is_zero_value():
    assert read("", INTEGER) == 0
    assert read("", LONG) == 0
    assert read("", DOUBLE) == 0.0
    assert read("", DECIMAL) == Decimal(0)
    assert read("", BOOLEAN) is False
    assert read("", STRING) == ""
    assert read("", CHAR) == "\x00"
    assert read("", DATETIME) == datetime.min
    assert read("", enum_of(Color)) is Color.RED
    assert read("", enum_of(Level)) is Level.NONE


def test_scalar_parsing():
    assert read(" 42 ", INTEGER) == 42
    assert read("-7", INTEGER) == -7
    assert read("2147483648", LONG) == 2147483648
    assert read("0.1", DOUBLE) == 0.1
    assert read("1e40", DOUBLE) == 1e40
    assert read("12.50", DECIMAL) == Decimal("12.50")
    assert read("Yes", BOOLEAN) is True
    assert read("F", BOOLEAN) is False
    assert read("a", CHAR) == "a"
    assert read("GREEN", enum_of(Color)) is Color.GREEN
    assert read("5", nullable(INTEGER)) == 5


def test_culture_parsing():
    assert recordcsv.deserialize_field("1,5", DOUBLE, GERMAN) == 1.5
    assert recordcsv.deserialize_field("2,25", DECIMAL, GERMAN) == Decimal("2.25")
    with pytest.raises(recordcsv.ConversionError):
        read("1,5", DOUBLE)


@pytest.mark.parametrize(
    "text,kind",
    [
        ("abc", INTEGER),
        ("1_000", INTEGER),
        ("2147483648", INTEGER),
        ("1.5", INTEGER),
        ("1e40", FLOAT),
        ("1e400", DOUBLE),
        ("maybe", BOOLEAN),
        ("ab", CHAR),
        ("1e3", DECIMAL),
        ("Red", enum_of(Color)),
        ("15/05/1993", DATETIME),
    ],
)
def test_parse_failures_raise_conversion_error(text, kind):
    with pytest.raises(recordcsv.ConversionError) as exc:
        read(text, kind)
    err = exc.value
    assert err.value == text
    assert err.kind == kind
    assert err.__cause__ is not None


def test_conversion_error_message_names_text_and_kind():
    with pytest.raises(recordcsv.ConversionError) as exc:
        read("abc", INTEGER)
    assert "'abc'" in str(exc.value)
    assert "Integer" in str(exc.value)
    assert isinstance(exc.value.__cause__, ValueError)


def test_datetime_parsing_pattern_and_iso_fallback():
    assert read("1993-05-15 10:20:30", DATETIME) == datetime(1993, 5, 15, 10, 20, 30)
    assert read("1993-05-15T10:20:30", DATETIME) == datetime(1993, 5, 15, 10, 20, 30)
    assert read("1993/05/15", DATETIME, datetime_format="yyyy/MM/dd") == datetime(1993, 5, 15)
    assert read("03:04 PM", DATETIME, datetime_format="hh:mm tt") == datetime(1, 1, 1, 15, 4)
    assert read("12:30 AM", DATETIME, datetime_format="hh:mm tt") == datetime(1, 1, 1, 0, 30)
    assert read("15. Mai 1993", DATETIME, culture="de-DE", datetime_format="dd. MMMM yyyy") == datetime(1993, 5, 15)
    assert read("1993.05.15", DATETIME, culture="de-DE", datetime_format="yyyy/MM/dd") == datetime(1993, 5, 15)


def test_build_codec_is_reusable():
    codec = recordcsv.build_codec(INTEGER)
    assert codec.to_text(5) == "5"
    assert codec.serialize(None) == ""
    assert codec.deserialize("9") == 9


@pytest.mark.parametrize(
    "value, kind",
    [
        (2 ** 40, INTEGER),
        (-(2 ** 31) - 1, INTEGER),
        (2 ** 63, LONG),
        (2.9, INTEGER),
        ("12", INTEGER),
        (True, INTEGER),
        (1e39, FLOAT),
        ("1.5", DOUBLE),
        ("ab", CHAR),
        ("", CHAR),
        (7, CHAR),
    ],
)
def test_write_rejects_values_outside_the_declared_kind(value, kind):
    with pytest.raises(recordcsv.ConversionError) as exc:
        write(value, kind)
    assert exc.value.kind == kind
    assert exc.value.__cause__ is not None


def test_write_accepts_values_at_the_kind_bounds():
    assert write(2 ** 31 - 1, INTEGER) == "2147483647"
    assert write(-(2 ** 31), INTEGER) == "-2147483648"
    assert write(2 ** 40, LONG) == "1099511627776"
    assert write(3, FLOAT) == "3"
    assert write(1e39, DOUBLE) == "1e+39"
    assert write("x", CHAR) == "x"


def test_format_and_parse_datetime_are_public():
    dt = datetime(1993, 5, 15, 8, 5, 3)
    assert recordcsv.format_datetime(dt, "yyyy/MM/dd", recordcsv.INVARIANT) == "1993/05/15"
    assert recordcsv.format_datetime(dt, "dd. MMMM yyyy HH:mm", recordcsv.get_culture("de-DE")) == "15. Mai 1993 08:05"
    assert recordcsv.parse_datetime("1993/05/15", "yyyy/MM/dd", recordcsv.INVARIANT) == datetime(1993, 5, 15)


def test_delimiter_char_is_the_first_delimiter_character():
    assert SerializerOptions(delimiter=";|").delimiter_char == ";"
    assert SerializerOptions().delimiter_char == ","
