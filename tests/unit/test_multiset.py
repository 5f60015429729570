"""Unit tests for DatabaseCommand.select_multi_set."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from rowset.core.exceptions import ArgumentError, CardinalityError
from rowset.core.multiset import CollectionSet, ResultSetSpec, SingleSet
from rowset.mapping.model import ModelMapper

USERS = (("id", "name"), [(1, "Alice"), (2, "Bob")])
ORDERS = (("id", "user_id", "amount"), [(10, 1, 5.0), (11, 1, 7.5), (12, 2, 1.0)])
TOTAL = (("total",), [(13.5,)])
EMPTY = (("id",), [])


@dataclass
class User:
    id: int
    name: str


def _recording_spec(events: list, label: str, **kwargs) -> ResultSetSpec:
    return ResultSetSpec(
        on_row=lambda record: events.append((label, record[0])),
        on_complete=lambda: events.append((label, "complete")),
        **kwargs,
    )


class TestMultiSetOrdering:
    def test_rows_and_completions_in_arrival_order(self, fake_db) -> None:
        db, backend = fake_db(USERS, ORDERS, TOTAL)
        events: list = []

        db.sql_statement("EXEC get_all").select_multi_set(
            _recording_spec(events, "users"),
            _recording_spec(events, "orders"),
            _recording_spec(events, "total"),
        )

        assert events == [
            ("users", 1),
            ("users", 2),
            ("users", "complete"),
            ("orders", 10),
            ("orders", 11),
            ("orders", 12),
            ("orders", "complete"),
            ("total", 13.5),
            ("total", "complete"),
        ]
        assert backend.cursor.closed
        assert backend.connection.commits == 1
        assert backend.released == 1

    def test_builder_specs_collect_mapped_values(self, fake_db) -> None:
        db, _ = fake_db(USERS, TOTAL)
        users: CollectionSet[User] = CollectionSet(ModelMapper(User))
        total: SingleSet[float] = SingleSet(lambda record: record["total"])

        db.sql_statement("EXEC summary").select_multi_set(users, total)

        assert users.items == [User(1, "Alice"), User(2, "Bob")]
        assert total.has_value
        assert total.value == 13.5

    def test_on_result_callbacks(self, fake_db) -> None:
        db, _ = fake_db(USERS, TOTAL)
        received: dict = {}
        db.sql_statement("EXEC summary").select_multi_set(
            CollectionSet(lambda r: r["name"], on_result=lambda v: received.update(names=v)),
            SingleSet(lambda r: r["total"], on_result=lambda v: received.update(total=v)),
        )
        assert received == {"names": ["Alice", "Bob"], "total": 13.5}

    def test_specs_accepted_as_a_list(self, fake_db) -> None:
        db, _ = fake_db(USERS, TOTAL)
        users = CollectionSet(lambda r: r["id"])
        db.sql_statement("EXEC summary").select_multi_set([users, None])
        assert users.items == [1, 2]

    def test_non_row_results_are_stepped_over(self, fake_db) -> None:
        db, _ = fake_db((None, []), USERS, (None, []), TOTAL)
        users = CollectionSet(lambda r: r["id"])
        total = SingleSet(lambda r: r["total"])
        db.sql_statement("UPDATE x; SELECT ...").select_multi_set(users, total)
        assert users.items == [1, 2]
        assert total.value == 13.5


class TestNullSpecs:
    def test_null_spec_skips_result_set_unread(self, fake_db) -> None:
        db, backend = fake_db(USERS, ORDERS, TOTAL)
        events: list = []

        db.sql_statement("EXEC get_all").select_multi_set(
            _recording_spec(events, "users"),
            None,
            _recording_spec(events, "total"),
        )

        assert [label for label, _ in events] == ["users"] * 3 + ["total"] * 2
        # 2 user rows + 1 total row; the 3 order rows were never fetched
        assert backend.cursor.rows_read == 3

    def test_null_spec_at_unconsumed_position_is_an_error(self, fake_db) -> None:
        db, _ = fake_db(USERS)
        with pytest.raises(CardinalityError, match="fewer result sets"):
            db.sql_statement("EXEC x").select_multi_set(ResultSetSpec(), None)


class TestStopOnEmpty:
    def test_empty_set_stops_processing_successfully(self, fake_db) -> None:
        db, backend = fake_db(USERS, EMPTY, TOTAL)
        events: list = []

        db.sql_statement("EXEC x").select_multi_set(
            _recording_spec(events, "users"),
            _recording_spec(events, "empty", stop_on_empty=True),
            _recording_spec(events, "total"),
        )

        assert events == [("users", 1), ("users", 2), ("users", "complete")]
        assert backend.cursor.closed
        assert backend.connection.commits == 1
        assert backend.released == 1

    def test_non_empty_set_with_stop_on_empty_continues(self, fake_db) -> None:
        db, _ = fake_db(USERS, TOTAL)
        events: list = []
        db.sql_statement("EXEC x").select_multi_set(
            _recording_spec(events, "users", stop_on_empty=True),
            _recording_spec(events, "total"),
        )
        assert events[-1] == ("total", "complete")

    def test_min_rows_checked_before_stop_on_empty(self, fake_db) -> None:
        db, _ = fake_db(EMPTY)
        with pytest.raises(CardinalityError, match="fewer rows"):
            db.sql_statement("EXEC x").select_multi_set(
                ResultSetSpec(min_rows=1, stop_on_empty=True)
            )

    def test_mandatory_single_set_with_stop_on_empty_still_requires_a_row(self, fake_db) -> None:
        db, _ = fake_db(EMPTY)
        with pytest.raises(CardinalityError):
            db.sql_statement("EXEC x").select_multi_set(
                SingleSet(lambda r: r, stop_on_empty=True)
            )

    def test_optional_single_set_with_stop_on_empty(self, fake_db) -> None:
        db, _ = fake_db(EMPTY, USERS)
        header = SingleSet(lambda r: r["id"], mandatory=False, stop_on_empty=True)
        lines = CollectionSet(lambda r: r["id"])
        db.sql_statement("EXEC x").select_multi_set(header, lines)
        assert not header.has_value
        assert lines.items == []


class TestResultSetCardinality:
    def test_more_result_sets_than_specs(self, fake_db) -> None:
        db, backend = fake_db(USERS, TOTAL)
        with pytest.raises(CardinalityError, match="more result sets than expected"):
            db.sql_statement("EXEC x").select_multi_set(ResultSetSpec())
        assert backend.connection.rollbacks == 1
        assert backend.released == 1

    def test_fewer_result_sets_than_specs(self, fake_db) -> None:
        db, _ = fake_db(USERS)
        with pytest.raises(CardinalityError, match="fewer result sets"):
            db.sql_statement("EXEC x").select_multi_set(ResultSetSpec(), ResultSetSpec())

    def test_fewer_result_sets_when_next_spec_stops_on_empty(self, fake_db) -> None:
        db, _ = fake_db(USERS)
        completed: list = []
        db.sql_statement("EXEC x").select_multi_set(
            ResultSetSpec(on_complete=lambda: completed.append(0)),
            ResultSetSpec(on_complete=lambda: completed.append(1), stop_on_empty=True),
        )
        assert completed == [0]

    def test_only_next_unconsumed_spec_is_consulted(self, fake_db) -> None:
        db, _ = fake_db(USERS)
        with pytest.raises(CardinalityError, match="fewer result sets"):
            db.sql_statement("EXEC x").select_multi_set(
                ResultSetSpec(),
                ResultSetSpec(),
                ResultSetSpec(stop_on_empty=True),
            )

    def test_no_result_sets_at_all(self, fake_db) -> None:
        db, _ = fake_db((None, []))
        with pytest.raises(CardinalityError, match=r"fewer result sets \(0\)"):
            db.sql_statement("UPDATE x").select_multi_set(ResultSetSpec())


class TestRowCardinality:
    def test_max_rows_exceeded_fails_mid_stream(self, fake_db) -> None:
        db, backend = fake_db(ORDERS)
        seen: list = []
        with pytest.raises(CardinalityError, match=r"specs\[0\].*more rows than expected \(2\)"):
            db.sql_statement("EXEC x").select_multi_set(
                ResultSetSpec(on_row=lambda r: seen.append(r["id"]), max_rows=2)
            )
        assert seen == [10, 11]
        assert backend.cursor.rows_read == 3
        assert backend.cursor.closed

    def test_min_rows_not_reached(self, fake_db) -> None:
        db, _ = fake_db(USERS, ORDERS)
        completed: list = []
        with pytest.raises(CardinalityError, match=r"specs\[1\].*fewer rows \(3\).*\(4\)"):
            db.sql_statement("EXEC x").select_multi_set(
                ResultSetSpec(),
                ResultSetSpec(on_complete=lambda: completed.append(1), min_rows=4),
            )
        assert completed == []

    def test_rows_within_bounds(self, fake_db) -> None:
        db, _ = fake_db(ORDERS)
        orders = CollectionSet(lambda r: r["id"], min_rows=3, max_rows=3)
        db.sql_statement("EXEC x").select_multi_set(orders)
        assert orders.items == [10, 11, 12]


class TestArguments:
    def test_no_specs(self, fake_db) -> None:
        db, backend = fake_db(USERS)
        with pytest.raises(ArgumentError):
            db.sql_statement("EXEC x").select_multi_set()
        assert backend.acquired == 0

    def test_same_spec_twice(self, fake_db) -> None:
        db, _ = fake_db(USERS, USERS)
        spec = ResultSetSpec()
        with pytest.raises(ArgumentError, match="already used"):
            db.sql_statement("EXEC x").select_multi_set(spec, spec)

    def test_not_a_spec(self, fake_db) -> None:
        db, _ = fake_db(USERS)
        with pytest.raises(ArgumentError):
            db.sql_statement("EXEC x").select_multi_set("users")  # type: ignore[arg-type]

    @pytest.mark.parametrize(("min_rows", "max_rows"), [(-1, None), (2, 1)])
    def test_invalid_bounds(self, min_rows: int, max_rows: int | None) -> None:
        with pytest.raises(ArgumentError):
            ResultSetSpec(min_rows=min_rows, max_rows=max_rows)

    def test_callback_errors_propagate_and_release(self, fake_db) -> None:
        db, backend = fake_db(USERS)

        def explode(record) -> None:
            raise ValueError("bad row")

        with pytest.raises(ValueError, match="bad row"):
            db.sql_statement("EXEC x").select_multi_set(ResultSetSpec(on_row=explode))
        assert backend.connection.rollbacks == 1
        assert backend.released == 1
        assert backend.cursor.closed
