"""Result set specifications for multi-set commands.

A ResultSetSpec declares what one result set of a multi-set command must
look like (row bounds, stop-on-empty) and what to do with it (per-row and
completion hooks). CollectionSet and SingleSet are ready-made specs that
map rows with a Mapper and keep the results on the spec itself, so callers
read them after the command instead of mutating their own state from
inside callbacks.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from rowset.core.exceptions import ArgumentError
from rowset.core.record import Record
from rowset.mapping.protocol import as_mapper

T = TypeVar("T")


class ResultSetSpec:
    """Contract and hooks for one expected result set.

    Args:
        on_row: Called with each record of the matched result set.
        on_complete: Called once after the set is read and validated.
        min_rows: Minimum number of rows expected.
        max_rows: Maximum number of rows expected, unbounded when None.
        stop_on_empty: End the whole multi-set operation successfully when
            this set has no rows.

    Raises:
        ArgumentError: If the bounds are negative or inverted.
    """

    def __init__(
        self,
        on_row: Callable[[Record], None] | None = None,
        on_complete: Callable[[], None] | None = None,
        *,
        min_rows: int = 0,
        max_rows: int | None = None,
        stop_on_empty: bool = False,
    ) -> None:
        if min_rows < 0:
            raise ArgumentError(f"min_rows must not be negative (got {min_rows})")
        if max_rows is not None and max_rows < min_rows:
            raise ArgumentError(
                f"max_rows ({max_rows}) must not be less than min_rows ({min_rows})"
            )
        self._on_row = on_row
        self._on_complete = on_complete
        self.min_rows = min_rows
        self.max_rows = max_rows
        self.stop_on_empty = stop_on_empty

    def on_row(self, record: Record) -> None:
        if self._on_row is not None:
            self._on_row(record)

    def on_complete(self) -> None:
        if self._on_complete is not None:
            self._on_complete()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(min_rows={self.min_rows}, max_rows={self.max_rows}, "
            f"stop_on_empty={self.stop_on_empty})"
        )


class CollectionSet(ResultSetSpec, Generic[T]):
    """Maps every row of a result set into ``items``.

    Args:
        mapper: Mapper or ``record -> value`` callable.
        on_result: Optional callback receiving ``items`` on completion.
    """

    def __init__(
        self,
        mapper: Any,
        *,
        min_rows: int = 0,
        max_rows: int | None = None,
        stop_on_empty: bool = False,
        on_result: Callable[[list[T]], None] | None = None,
    ) -> None:
        super().__init__(min_rows=min_rows, max_rows=max_rows, stop_on_empty=stop_on_empty)
        self._mapper = as_mapper(mapper)
        self._on_result = on_result
        self.items: list[T] = []

    def on_row(self, record: Record) -> None:
        self.items.append(self._mapper.map_record(record))

    def on_complete(self) -> None:
        if self._on_result is not None:
            self._on_result(self.items)


class SingleSet(ResultSetSpec, Generic[T]):
    """Maps the only row of a result set into ``value``.

    A mandatory set must have exactly one row; an optional one at most one.
    ``has_value`` records whether a row arrived, independently of what the
    mapper returned for it.

    Args:
        mapper: Mapper or ``record -> value`` callable.
        mandatory: Require exactly one row.
        on_result: Optional callback receiving ``value`` on completion when
            a row arrived.
    """

    def __init__(
        self,
        mapper: Any,
        *,
        mandatory: bool = True,
        stop_on_empty: bool = False,
        on_result: Callable[[T], None] | None = None,
    ) -> None:
        super().__init__(min_rows=1 if mandatory else 0, max_rows=1, stop_on_empty=stop_on_empty)
        self._mapper = as_mapper(mapper)
        self._on_result = on_result
        self.value: T | None = None
        self.has_value = False

    def on_row(self, record: Record) -> None:
        self.value = self._mapper.map_record(record)
        self.has_value = True

    def on_complete(self) -> None:
        if self.has_value and self._on_result is not None:
            self._on_result(self.value)  # type: ignore[arg-type]
