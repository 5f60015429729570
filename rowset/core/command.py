"""Command execution.

A DatabaseCommand executes one Command (SQL text or stored procedure) on a
connection from the database's provider and turns the driver's result sets
into values:

* select_multi_set walks every result set and matches it, in order, against
  a list of ResultSetSpec (None skips a set unread).
* select_many / select_single / select_first (and the *_or_default forms)
  read the first result set, stopping as soon as the answer is known.
* scalar returns the first column of the first row; non_query returns the
  affected row count.

Each call owns its connection and cursor. The cursor is closed and the
connection released on every exit path; the connection's unit of work is
committed on success and rolled back on failure. Driver errors pass through
the vendor ErrorRecognizer exactly once.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator, Callable, Iterator, Mapping, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from rowset.core.enums import CommandKind
from rowset.core.exceptions import (
    ArgumentError,
    CardinalityError,
    MultipleRowsError,
    NoRowsError,
    RowSetError,
)
from rowset.core.multiset import ResultSetSpec
from rowset.core.params import ParameterCollection, bind_statement, build_parameters
from rowset.core.record import Record
from rowset.mapping.protocol import as_mapper
from rowset.schema.classifier import zero_value

if TYPE_CHECKING:
    from rowset.adapters.protocol import ErrorRecognizer
    from rowset.core.database import AsyncDatabase, Database

logger = logging.getLogger(__name__)

T = TypeVar("T")

ParameterBinder = Callable[[ParameterCollection], None]


@dataclass(frozen=True)
class Command:
    """Immutable description of one command invocation."""

    kind: CommandKind
    text: str
    parameters: ParameterBinder | Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ArgumentError("Command text must not be empty")


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@contextmanager
def _translate_errors(recognizer: ErrorRecognizer) -> Iterator[None]:
    """Re-raise recognized driver errors as TranslatedDatabaseError."""
    try:
        yield
    except RowSetError:
        raise
    except Exception as e:
        translated = recognizer.recognize_error(e)
        if translated is None:
            raise
        logger.debug("Translated %s into %s", type(e).__name__, type(translated).__name__)
        raise translated from e


# --- Multi-set protocol rules (shared by the sync and async executors) ---


def _validate_specs(specs: Sequence[Any]) -> tuple[ResultSetSpec | None, ...]:
    if len(specs) == 1 and isinstance(specs[0], (list, tuple)):
        specs = specs[0]
    if not specs:
        raise ArgumentError("At least one ResultSetSpec must be supplied")
    seen: set[int] = set()
    for i, spec in enumerate(specs):
        if spec is None:
            continue
        if not isinstance(spec, ResultSetSpec):
            raise ArgumentError(f"specs[{i}] is not a ResultSetSpec: {spec!r}")
        if id(spec) in seen:
            raise ArgumentError(f"specs[{i}] is already used for another result set")
        seen.add(id(spec))
    return tuple(specs)


def _check_row_count(spec: ResultSetSpec, index: int, count: int) -> None:
    if spec.max_rows is not None and count > spec.max_rows:
        raise CardinalityError(
            f"select_multi_set (specs[{index}]) has returned more rows than expected "
            f"({spec.max_rows})"
        )


def _finish_set(spec: ResultSetSpec, index: int, count: int) -> bool:
    """Validate a fully read set; return True to stop the whole operation."""
    if count < spec.min_rows:
        raise CardinalityError(
            f"select_multi_set (specs[{index}]) has returned fewer rows ({count}) "
            f"than expected ({spec.min_rows})"
        )
    if count == 0 and spec.stop_on_empty:
        logger.debug("Result set %d is empty, stopping multi-set read", index)
        return True
    spec.on_complete()
    return False


def _check_unconsumed(specs: tuple[ResultSetSpec | None, ...], index: int) -> None:
    # Only the next unconsumed spec is consulted for stop_on_empty.
    if index >= len(specs):
        return
    spec = specs[index]
    if spec is None or not spec.stop_on_empty:
        raise CardinalityError(
            f"select_multi_set has returned fewer result sets ({index}) than expected "
            f"({len(specs)})"
        )


def _too_many_sets(specs: tuple[ResultSetSpec | None, ...]) -> CardinalityError:
    return CardinalityError(
        f"select_multi_set has returned more result sets than expected ({len(specs)})"
    )


# --- Readers ---


class _ResultReader:
    """Row and result-set navigation over a DB-API cursor.

    Result sets without a description (DDL/DML inside a batch) are stepped
    over. The record handed out for a row is invalidated on the next move.
    """

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._columns: tuple[str, ...] = ()
        self._record: Record | None = None
        self._set_index = -1

    @property
    def rowcount(self) -> int:
        return int(getattr(self._cursor, "rowcount", -1))

    def start(self) -> bool:
        """Position on the first row-returning result set."""
        return self._seek(advance=False)

    def next_result_set(self) -> bool:
        return self._seek(advance=True)

    def read(self) -> Record | None:
        self._release()
        row = self._cursor.fetchone()
        if row is None:
            return None
        self._record = Record.from_row(row, self._columns)
        return self._record

    def close(self) -> None:
        self._release()
        close = getattr(self._cursor, "close", None)
        if close is not None:
            close()

    def _seek(self, *, advance: bool) -> bool:
        self._release()
        if advance and not self._nextset():
            return False
        while self._cursor.description is None:
            if not self._nextset():
                return False
        self._columns = tuple(col[0] for col in self._cursor.description)
        self._set_index += 1
        logger.debug("Reading result set %d (%d columns)", self._set_index, len(self._columns))
        return True

    def _nextset(self) -> bool:
        nextset = getattr(self._cursor, "nextset", None)
        return bool(nextset()) if nextset is not None else False

    def _release(self) -> None:
        if self._record is not None:
            self._record.invalidate()
            self._record = None


class _AsyncResultReader(_ResultReader):
    """Async flavour of _ResultReader; driver calls may be coroutines."""

    async def start(self) -> bool:  # type: ignore[override]
        return await self._seek_async(advance=False)

    async def next_result_set(self) -> bool:  # type: ignore[override]
        return await self._seek_async(advance=True)

    async def read(self) -> Record | None:  # type: ignore[override]
        self._release()
        row = await _maybe_await(self._cursor.fetchone())
        if row is None:
            return None
        self._record = Record.from_row(row, self._columns)
        return self._record

    async def close(self) -> None:  # type: ignore[override]
        self._release()
        close = getattr(self._cursor, "close", None)
        if close is not None:
            await _maybe_await(close())

    async def _seek_async(self, *, advance: bool) -> bool:
        self._release()
        if advance and not await self._nextset_async():
            return False
        while self._cursor.description is None:
            if not await self._nextset_async():
                return False
        self._columns = tuple(col[0] for col in self._cursor.description)
        self._set_index += 1
        logger.debug("Reading result set %d (%d columns)", self._set_index, len(self._columns))
        return True

    async def _nextset_async(self) -> bool:
        nextset = getattr(self._cursor, "nextset", None)
        return bool(await _maybe_await(nextset())) if nextset is not None else False


# --- Executors ---


class DatabaseCommand:
    """Synchronous executor for one Command.

    Args:
        database: The Database providing connections and error recognition.
        command: What to execute.
    """

    def __init__(self, database: Database, command: Command) -> None:
        self._database = database
        self.command = command

    @property
    def kind(self) -> CommandKind:
        return self.command.kind

    @property
    def text(self) -> str:
        return self.command.text

    def __repr__(self) -> str:
        return f"DatabaseCommand({self.command.kind.value}, {self.command.text!r})"

    @contextmanager
    def _open(self) -> Iterator[tuple[_ResultReader, ParameterCollection]]:
        parameters = build_parameters(self.command.parameters)
        adapter = self._database.adapter
        with self._database.provider.get_connection() as connection:
            try:
                cursor = self._execute(adapter, connection, parameters)
                reader = _ResultReader(cursor)
                try:
                    yield reader, parameters
                finally:
                    reader.close()
            except BaseException:
                _rollback(connection)
                raise
            connection.commit()

    def _execute(self, adapter: Any, connection: Any, parameters: ParameterCollection) -> Any:
        logger.debug("Executing %s: %s", self.command.kind.value, self.command.text)
        if self.command.kind is CommandKind.STORED_PROCEDURE:
            return adapter.call_procedure(connection, self.command.text, parameters)
        sql, params = bind_statement(self.command.text, parameters, adapter.paramstyle)
        return adapter.execute(connection, sql, params or None)

    def select_multi_set(self, *specs: ResultSetSpec | None) -> None:
        """Match each returned result set, in order, against *specs*.

        A None spec skips its result set unread. See the module docstring
        of rowset.core.multiset for the available spec types.

        Raises:
            ArgumentError: If no specs are given.
            CardinalityError: If a row or result set bound is violated.
        """
        checked = _validate_specs(specs)
        with _translate_errors(self._database), self._open() as (reader, _):
            index = 0
            has_set = reader.start()
            while has_set:
                if index >= len(checked):
                    raise _too_many_sets(checked)
                spec = checked[index]
                if spec is not None:
                    count = 0
                    while (record := reader.read()) is not None:
                        count += 1
                        _check_row_count(spec, index, count)
                        spec.on_row(record)
                    if _finish_set(spec, index, count):
                        return
                index += 1
                has_set = reader.next_result_set()
            _check_unconsumed(checked, index)

    def non_query(self, on_parameters: Callable[[ParameterCollection], None] | None = None) -> int:
        """Execute and return the number of rows affected.

        Args:
            on_parameters: Receives the parameter collection after execution,
                with output parameter values filled in.
        """
        with _translate_errors(self._database), self._open() as (reader, parameters):
            rowcount = reader.rowcount
            if on_parameters is not None:
                on_parameters(parameters)
            return rowcount

    def scalar(
        self,
        target: type[T] | None = None,
        on_parameters: Callable[[ParameterCollection], None] | None = None,
    ) -> Any:
        """Return the first column of the first row of the first result set.

        A database null or missing row yields the zero value of *target*
        (``0``, ``""``, ``datetime.min``, ...) when it is given, else None.

        Raises:
            ArgumentError: If *target* has no zero value.
        """
        with _translate_errors(self._database), self._open() as (reader, parameters):
            value = None
            if reader.start():
                record = reader.read()
                if record is not None and len(record) > 0:
                    value = record.get_value(0, target)
            if on_parameters is not None:
                on_parameters(parameters)
        if value is None and target is not None:
            return zero_value(target)
        return value

    def _select(self, mapper: Any, operation: str, *, strict: bool, first_only: bool) -> list[Any]:
        map_record = as_mapper(mapper).map_record
        items: list[Any] = []
        with _translate_errors(self._database), self._open() as (reader, _):
            if reader.start():
                while (record := reader.read()) is not None:
                    if items and strict:
                        raise MultipleRowsError(operation)
                    items.append(map_record(record))
                    if first_only:
                        break
        return items

    def select_many(self, mapper: Any) -> list[Any]:
        """Map every row of the first result set."""
        return self._select(mapper, "select_many", strict=False, first_only=False)

    def select_single(self, mapper: Any) -> Any:
        """Map the only row of the first result set.

        Raises:
            NoRowsError: If there is no row.
            MultipleRowsError: If there is more than one row.
        """
        items = self._select(mapper, "select_single", strict=True, first_only=False)
        if not items:
            raise NoRowsError("select_single")
        return items[0]

    def select_single_or_default(self, mapper: Any, default: Any = None) -> Any:
        """Like select_single, but return *default* when there is no row."""
        items = self._select(mapper, "select_single_or_default", strict=True, first_only=False)
        return items[0] if items else default

    def select_first(self, mapper: Any) -> Any:
        """Map the first row of the first result set; the rest is never read.

        Raises:
            NoRowsError: If there is no row.
        """
        items = self._select(mapper, "select_first", strict=False, first_only=True)
        if not items:
            raise NoRowsError("select_first")
        return items[0]

    def select_first_or_default(self, mapper: Any, default: Any = None) -> Any:
        """Like select_first, but return *default* when there is no row."""
        items = self._select(mapper, "select_first_or_default", strict=False, first_only=True)
        return items[0] if items else default


class AsyncDatabaseCommand:
    """Asynchronous executor for one Command.

    Mirrors DatabaseCommand; every driver interaction is awaited so task
    cancellation reaches connection acquisition, execution and each fetch.
    """

    def __init__(self, database: AsyncDatabase, command: Command) -> None:
        self._database = database
        self.command = command

    @property
    def kind(self) -> CommandKind:
        return self.command.kind

    @property
    def text(self) -> str:
        return self.command.text

    def __repr__(self) -> str:
        return f"AsyncDatabaseCommand({self.command.kind.value}, {self.command.text!r})"

    @asynccontextmanager
    async def _open(self) -> AsyncIterator[tuple[_AsyncResultReader, ParameterCollection]]:
        parameters = build_parameters(self.command.parameters)
        adapter = self._database.adapter
        async with self._database.provider.get_connection() as connection:
            try:
                cursor = await self._execute(adapter, connection, parameters)
                reader = _AsyncResultReader(cursor)
                try:
                    yield reader, parameters
                finally:
                    await reader.close()
            except BaseException:
                await _rollback_async(connection)
                raise
            await _maybe_await(connection.commit())

    async def _execute(self, adapter: Any, connection: Any, parameters: ParameterCollection) -> Any:
        logger.debug("Executing %s: %s", self.command.kind.value, self.command.text)
        if self.command.kind is CommandKind.STORED_PROCEDURE:
            return await adapter.call_procedure_async(connection, self.command.text, parameters)
        sql, params = bind_statement(self.command.text, parameters, adapter.paramstyle)
        return await adapter.execute_async(connection, sql, params or None)

    async def select_multi_set(self, *specs: ResultSetSpec | None) -> None:
        """Match each returned result set, in order, against *specs*."""
        checked = _validate_specs(specs)
        with _translate_errors(self._database):
            async with self._open() as (reader, _):
                index = 0
                has_set = await reader.start()
                while has_set:
                    if index >= len(checked):
                        raise _too_many_sets(checked)
                    spec = checked[index]
                    if spec is not None:
                        count = 0
                        while (record := await reader.read()) is not None:
                            count += 1
                            _check_row_count(spec, index, count)
                            spec.on_row(record)
                        if _finish_set(spec, index, count):
                            return
                    index += 1
                    has_set = await reader.next_result_set()
                _check_unconsumed(checked, index)

    async def non_query(
        self, on_parameters: Callable[[ParameterCollection], None] | None = None
    ) -> int:
        """Execute and return the number of rows affected."""
        with _translate_errors(self._database):
            async with self._open() as (reader, parameters):
                rowcount = reader.rowcount
                if on_parameters is not None:
                    on_parameters(parameters)
                return rowcount

    async def scalar(
        self,
        target: type[T] | None = None,
        on_parameters: Callable[[ParameterCollection], None] | None = None,
    ) -> Any:
        """Return the first column of the first row of the first result set."""
        with _translate_errors(self._database):
            async with self._open() as (reader, parameters):
                value = None
                if await reader.start():
                    record = await reader.read()
                    if record is not None and len(record) > 0:
                        value = record.get_value(0, target)
                if on_parameters is not None:
                    on_parameters(parameters)
        if value is None and target is not None:
            return zero_value(target)
        return value

    async def _select(
        self, mapper: Any, operation: str, *, strict: bool, first_only: bool
    ) -> list[Any]:
        map_record = as_mapper(mapper).map_record
        items: list[Any] = []
        with _translate_errors(self._database):
            async with self._open() as (reader, _):
                if await reader.start():
                    while (record := await reader.read()) is not None:
                        if items and strict:
                            raise MultipleRowsError(operation)
                        items.append(map_record(record))
                        if first_only:
                            break
        return items

    async def select_many(self, mapper: Any) -> list[Any]:
        """Map every row of the first result set."""
        return await self._select(mapper, "select_many", strict=False, first_only=False)

    async def select_single(self, mapper: Any) -> Any:
        """Map the only row of the first result set."""
        items = await self._select(mapper, "select_single", strict=True, first_only=False)
        if not items:
            raise NoRowsError("select_single")
        return items[0]

    async def select_single_or_default(self, mapper: Any, default: Any = None) -> Any:
        items = await self._select(
            mapper, "select_single_or_default", strict=True, first_only=False
        )
        return items[0] if items else default

    async def select_first(self, mapper: Any) -> Any:
        """Map the first row of the first result set; the rest is never read."""
        items = await self._select(mapper, "select_first", strict=False, first_only=True)
        if not items:
            raise NoRowsError("select_first")
        return items[0]

    async def select_first_or_default(self, mapper: Any, default: Any = None) -> Any:
        items = await self._select(
            mapper, "select_first_or_default", strict=False, first_only=True
        )
        return items[0] if items else default


def _rollback(connection: Any) -> None:
    try:
        connection.rollback()
    except Exception:
        logger.warning("Rollback failed while handling a command error", exc_info=True)


async def _rollback_async(connection: Any) -> None:
    try:
        await _maybe_await(connection.rollback())
    except Exception:
        logger.warning("Rollback failed while handling a command error", exc_info=True)
