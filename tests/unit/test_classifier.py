"""Unit tests for native type classification."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

import pytest

from rowset.core.exceptions import ArgumentError, UnsupportedTypeError
from rowset.schema import (
    TypeCategory,
    canonical_type,
    canonical_type_name,
    classify,
    is_datetime,
    is_decimal,
    is_integer,
    is_text,
    zero_value,
)


class TestPredicates:
    @pytest.mark.parametrize("name", ["NCHAR", "CHAR", "NVARCHAR", "VARCHAR", "TEXT", "NTEXT"])
    def test_text(self, name: str) -> None:
        assert is_text(name)
        assert not is_decimal(name)

    @pytest.mark.parametrize("name", ["DECIMAL", "MONEY", "NUMERIC", "SMALLMONEY"])
    def test_decimal(self, name: str) -> None:
        assert is_decimal(name)
        assert not is_text(name)

    @pytest.mark.parametrize("name", ["DATE", "DATETIME", "DATETIME2"])
    def test_datetime(self, name: str) -> None:
        assert is_datetime(name)

    def test_datetimeoffset_is_not_in_the_datetime_set(self) -> None:
        assert not is_datetime("DATETIMEOFFSET")
        assert classify("DATETIMEOFFSET") is TypeCategory.DATETIME

    @pytest.mark.parametrize("name", ["INT", "BIGINT", "SMALLINT"])
    def test_integer(self, name: str) -> None:
        assert is_integer(name)

    def test_tinyint_is_not_a_core_integer(self) -> None:
        assert not is_integer("TINYINT")
        assert classify("TINYINT") is TypeCategory.INTEGER

    def test_case_and_suffix_are_ignored(self) -> None:
        assert is_text("nvarchar(max)")
        assert is_text("VarChar(50)")
        assert is_decimal("decimal(18, 2)")
        assert is_datetime("datetime2(7)")

    @pytest.mark.parametrize("name", ["", None, "FOOBAR"])
    def test_unknown_names_are_false(self, name: str | None) -> None:
        assert not any(check(name) for check in (is_text, is_decimal, is_datetime, is_integer))


class TestCanonicalTypeName:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("VARCHAR(50)", "text"),
            ("NTEXT", "text"),
            ("DECIMAL(18,2)", "decimal"),
            ("SMALLMONEY", "decimal"),
            ("DATE", "datetime"),
            ("INT", "int32"),
            ("BIGINT", "int64"),
            ("SMALLINT", "int16"),
            ("TINYINT", "uint8"),
            ("ROWVERSION", "bytes"),
            ("TIMESTAMP", "bytes"),
            ("VARBINARY(MAX)", "bytes"),
            ("BIT", "bool"),
            ("DATETIMEOFFSET", "datetimeoffset"),
            ("FLOAT", "float64"),
            ("REAL", "float32"),
            ("TIME", "timedelta"),
            ("UNIQUEIDENTIFIER", "uuid"),
        ],
    )
    def test_vocabulary(self, name: str, expected: str) -> None:
        assert canonical_type_name(name) == expected

    def test_unknown_name_is_named_in_the_error(self) -> None:
        with pytest.raises(UnsupportedTypeError, match="FOOBAR") as info:
            canonical_type_name("FOOBAR")
        assert info.value.type_name == "FOOBAR"

    @pytest.mark.parametrize("name", ["", None, "   "])
    def test_empty_name(self, name: str | None) -> None:
        with pytest.raises(UnsupportedTypeError):
            canonical_type_name(name)

    def test_pure(self) -> None:
        assert [canonical_type_name("money") for _ in range(3)] == ["decimal"] * 3


class TestCanonicalType:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("NVARCHAR(100)", str),
            ("NUMERIC(10,4)", Decimal),
            ("DATETIME2", datetime.datetime),
            ("DATETIMEOFFSET", datetime.datetime),
            ("BIGINT", int),
            ("BIT", bool),
            ("BINARY(16)", bytes),
            ("FLOAT", float),
            ("TIME", datetime.timedelta),
            ("UNIQUEIDENTIFIER", uuid.UUID),
        ],
    )
    def test_host_types(self, name: str, expected: type) -> None:
        assert canonical_type(name) is expected

    def test_unknown(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            canonical_type("GEOGRAPHY")


class TestClassify:
    def test_categories(self) -> None:
        assert classify("char(10)") is TypeCategory.TEXT
        assert classify("MONEY") is TypeCategory.DECIMAL
        assert classify("BIGINT") is TypeCategory.INTEGER
        assert classify("ROWVERSION") is TypeCategory.BYTES
        assert classify("REAL") is TypeCategory.FLOAT
        assert classify("TIME") is TypeCategory.DURATION
        assert classify("UNIQUEIDENTIFIER") is TypeCategory.UUID

    def test_unknown(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            classify("XML")


class TestZeroValue:
    @pytest.mark.parametrize(
        ("host_type", "expected"),
        [
            (str, ""),
            (int, 0),
            (float, 0.0),
            (bool, False),
            (bytes, b""),
            (Decimal, Decimal(0)),
            (datetime.datetime, datetime.datetime.min),
            (datetime.date, datetime.date.min),
            (datetime.time, datetime.time(0)),
            (datetime.timedelta, datetime.timedelta(0)),
            (uuid.UUID, uuid.UUID("00000000-0000-0000-0000-000000000000")),
        ],
    )
    def test_host_types(self, host_type: type, expected: object) -> None:
        value = zero_value(host_type)
        assert type(value) is host_type
        assert value == expected

    def test_every_canonical_type_has_one(self) -> None:
        for name in ("NCHAR", "MONEY", "DATE", "DATETIMEOFFSET", "BIT", "BINARY", "REAL", "TIME"):
            host_type = canonical_type(name)
            assert type(zero_value(host_type)) is host_type
        assert zero_value(canonical_type("UNIQUEIDENTIFIER")).int == 0

    def test_type_without_one(self) -> None:
        with pytest.raises(ArgumentError, match="Path"):
            zero_value(type("Path", (), {"__init__": lambda self, raw: None}))
