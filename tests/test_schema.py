from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

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
    FieldDescriptor,
    Kind,
    column,
    enum_of,
    is_complex_kind,
    map_of,
    nullable,
)


class Suit(Enum):
    HEARTS = "h"
    SPADES = "s"


@dataclass
class Everything:
    text: str = ""
    count: int = 0
    big: recordcsv.Long = 0
    ratio: recordcsv.Single = 0.0
    value: float = 0.0
    price: Decimal = Decimal(0)
    flag: bool = False
    when: datetime = datetime.min
    initial: recordcsv.Char = "a"
    suit: Suit = Suit.HEARTS
    maybe: Optional[int] = None
    maybe_too: "int | None" = None
    scores: Dict[str, int] = field(default_factory=dict)


@dataclass
class Renamed:
    name: str = column("名前", default="")
    age: int = column("年齢", default=0)


@dataclass
class Address:
    city: str = ""


@dataclass
class WithNested:
    name: str = ""
    address: Address = field(default_factory=Address)


@dataclass
class WithList:
    name: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass
class WithMapOfMaps:
    nested: Dict[str, Dict[str, int]] = field(default_factory=dict)


@dataclass
class WithUnion:
    either: Union[int, str] = 0


@dataclass
class Clashing:
    first: str = column("Name", default="")
    second: str = column("Name", default="")


class PlainRecord:
    __csv_columns__ = {"label": "Label"}
    _hidden: int
    label: str
    amount: Optional[Decimal]


class TableRecord:
    @staticmethod
    def describe_schema():
        return [
            FieldDescriptor("code", STRING, column="Code"),
            FieldDescriptor("qty", INTEGER),
            FieldDescriptor("extra", map_of(STRING, nullable(DOUBLE))),
        ]


def kinds_of(record_type):
    return {f.name: f.kind for f in recordcsv.resolve_schema(record_type).fields}


def test_annotations_map_onto_value_kinds():
    kinds = kinds_of(Everything)
    assert kinds == {
        "text": STRING,
        "count": INTEGER,
        "big": LONG,
        "ratio": FLOAT,
        "value": DOUBLE,
        "price": DECIMAL,
        "flag": BOOLEAN,
        "when": DATETIME,
        "initial": CHAR,
        "suit": enum_of(Suit),
        "maybe": nullable(INTEGER),
        "maybe_too": nullable(INTEGER),
        "scores": map_of(STRING, INTEGER),
    }


def test_schema_partitions_scalar_and_map_fields_in_order():
    schema = recordcsv.resolve_schema(Everything)
    assert [f.name for f in schema.map_fields] == ["scores"]
    assert schema.columns[:3] == ["text", "count", "big"]
    assert "scores" not in schema.columns
    assert schema.map_fields[0].key_codec is not None
    assert schema.map_fields[0].codec is None


def test_column_override_replaces_attribute_name():
    schema = recordcsv.resolve_schema(Renamed)
    assert schema.columns == ["名前", "年齢"]
    assert [f.name for f in schema.fields] == ["name", "age"]


def test_plain_class_annotations_skip_private_names():
    schema = recordcsv.resolve_schema(PlainRecord)
    assert schema.columns == ["Label", "amount"]
    assert schema.fields[1].kind == nullable(DECIMAL)


def test_describe_schema_table_is_used_verbatim():
    descriptors = recordcsv.describe_fields(TableRecord)
    assert [d.column_name for d in descriptors] == ["Code", "qty", "extra"]
    schema = recordcsv.resolve_schema(TableRecord)
    assert schema.columns == ["Code", "qty"]
    assert schema.map_fields[0].kind.value == nullable(DOUBLE)


def test_custom_provider_overrides_discovery():
    def provider(record_type):
        return [FieldDescriptor("only", int, column="Only")]

    schema = recordcsv.resolve_schema(Everything, provider=provider)
    assert schema.columns == ["Only"]
    assert schema.fields[0].kind == INTEGER


@pytest.mark.parametrize(
    "record_type,field_name",
    [
        (WithNested, "address"),
        (WithList, "tags"),
        (WithMapOfMaps, "nested"),
        (WithUnion, "either"),
    ],
)
def test_unsupported_field_types_fail_resolution(record_type, field_name):
    with pytest.raises(recordcsv.UnsupportedTypeError) as exc:
        recordcsv.resolve_schema(record_type)
    assert exc.value.field == field_name
    assert f"Field {field_name!r}" in str(exc.value)
    assert "is not supported" in str(exc.value)


def test_unsupported_explicit_kind_fails_resolution():
    class BadTable:
        @staticmethod
        def describe_schema():
            return [FieldDescriptor("x", nullable(nullable(INTEGER)))]

    with pytest.raises(recordcsv.UnsupportedTypeError):
        recordcsv.resolve_schema(BadTable)


def test_duplicate_scalar_columns_are_rejected():
    with pytest.raises(recordcsv.DuplicateColumnError) as exc:
        recordcsv.resolve_schema(Clashing)
    assert exc.value.column == "Name"
    assert exc.value.fields == ["first", "second"]


def test_is_complex_kind():
    assert not is_complex_kind(STRING)
    assert not is_complex_kind(nullable(enum_of(Suit)))
    assert not is_complex_kind(map_of(STRING, nullable(INTEGER)))
    assert not is_complex_kind(map_of(enum_of(Suit), DATETIME))
    assert is_complex_kind(map_of(STRING, map_of(STRING, INTEGER)))
    assert is_complex_kind(nullable(nullable(INTEGER)))
    assert is_complex_kind(nullable(map_of(STRING, INTEGER)))
    assert is_complex_kind(recordcsv.ValueKind(Kind.ENUM))


def test_mapping_annotation_is_a_map_kind():
    assert recordcsv.kinds.kind_from_annotation(Mapping[int, bool], field="m") == map_of(INTEGER, BOOLEAN)
