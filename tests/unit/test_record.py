"""Unit tests for Record."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from rowset.core.enums import ColumnState
from rowset.core.exceptions import ColumnNotFoundError, MappingError, RecordStateError
from rowset.core.record import Record


@pytest.fixture
def record() -> Record:
    return Record(("id", "Name", "email", "score"), (1, "Alice", None, 9.5))


class TestAccess:
    def test_by_name_and_ordinal(self, record: Record) -> None:
        assert record["id"] == 1
        assert record[1] == "Alice"
        assert record.ordinal("score") == 3

    def test_case_insensitive_fallback(self, record: Record) -> None:
        assert record["name"] == "Alice"
        assert record["EMAIL"] is None

    def test_exact_match_wins(self) -> None:
        record = Record(("Id", "id"), ("upper", "lower"))
        assert record["Id"] == "upper"
        assert record["id"] == "lower"
        assert record["ID"] == "upper"

    def test_missing_column(self, record: Record) -> None:
        with pytest.raises(ColumnNotFoundError, match="phone"):
            record["phone"]
        with pytest.raises(ColumnNotFoundError):
            record[4]
        with pytest.raises(ColumnNotFoundError):
            record[-1]

    def test_contains_and_len(self, record: Record) -> None:
        assert "email" in record
        assert "phone" not in record
        assert len(record) == 4
        assert record.columns == ("id", "Name", "email", "score")

    def test_get_with_default(self, record: Record) -> None:
        assert record.get("email", "n/a") == "n/a"
        assert record.get("phone", "n/a") == "n/a"
        assert record.get("id", "n/a") == 1

    def test_to_dict(self, record: Record) -> None:
        assert record.to_dict() == {"id": 1, "Name": "Alice", "email": None, "score": 9.5}

    def test_from_mapping_row(self) -> None:
        record = Record.from_row({"a": 1, "b": None}, ())
        assert record.columns == ("a", "b")
        assert record["a"] == 1

    def test_from_row_keeps_repeated_names_by_ordinal(self) -> None:
        record = Record.from_row((1, 2), ("id", "id"))
        assert record.columns == ("id", "id")
        assert (record[0], record[1]) == (1, 2)
        assert record["id"] == 1
        assert record.ordinal("ID") == 0

    def test_from_mapping_row_uses_cursor_columns(self) -> None:
        record = Record.from_row({"ID": 7, "NAME": "x"}, ("id", "name"))
        assert record.columns == ("id", "name")
        assert record["name"] == "x"

    @pytest.mark.parametrize("row", [(1, 2, 3), {"a": 1}])
    def test_from_row_length_mismatch(self, row) -> None:
        with pytest.raises(MappingError, match="for 2 columns"):
            Record.from_row(row, ("a", "b"))


class TestNullHandling:
    def test_states(self, record: Record) -> None:
        assert record.state("id") is ColumnState.VALUE
        assert record.state("email") is ColumnState.NULL
        assert record.state("phone") is ColumnState.ABSENT

    def test_is_null(self, record: Record) -> None:
        assert record.is_null("email")
        assert not record.is_null("id")
        with pytest.raises(ColumnNotFoundError):
            record.is_null("phone")

    def test_null_value_is_none_regardless_of_target(self, record: Record) -> None:
        assert record.get_value("email", str) is None


class TestCoercion:
    def test_decimal_from_float(self, record: Record) -> None:
        assert record.get_value("score", Decimal) == Decimal("9.5")

    def test_uuid(self) -> None:
        value = uuid.uuid4()
        record = Record(("a", "b"), (str(value), value.bytes))
        assert record.get_value("a", uuid.UUID) == value
        assert record.get_value("b", uuid.UUID) == value

    def test_int_from_string(self) -> None:
        assert Record(("n",), ("42",)).get_value("n", int) == 42

    def test_bool_is_not_kept_as_int(self) -> None:
        assert Record(("flag",), (True,)).get_value("flag", int) == 1

    def test_failure(self, record: Record) -> None:
        with pytest.raises(MappingError, match="Name"):
            record.get_value("Name", int)


class TestInvalidation:
    def test_access_after_invalidate(self, record: Record) -> None:
        record.invalidate()
        assert not record.is_valid
        for access in (
            lambda: record["id"],
            lambda: record.get("id"),
            lambda: record.state("id"),
            lambda: record.to_dict(),
            lambda: len(record),
        ):
            with pytest.raises(RecordStateError):
                access()
        assert "invalidated" in repr(record)

    def test_records_are_invalidated_after_the_command(self, fake_db) -> None:
        db, _ = fake_db((("id",), [(1,), (2,)]))
        records = db.sql_statement("SELECT").select_many(lambda r: r)
        assert [r.is_valid for r in records] == [False, False]
