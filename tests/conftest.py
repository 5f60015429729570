"""Shared test fixtures.

SQLite cannot return several result sets from one command, so multi-set
behaviour is exercised against scripted DB-API fakes: ``fake_db`` and
``fake_async_db`` build a Database whose connection provider and adapter
replay the given result sets and record what the executor did.

A result set is given as ``(columns, rows)``; ``columns=None`` describes a
non-row result (e.g. an UPDATE inside a batch).
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import pytest

from rowset.core.connection import ConnectionConfig, ConnectionManager
from rowset.core.database import AsyncDatabase, Database
from rowset.core.exceptions import ConcurrencyError, DuplicateKeyError, TranslatedDatabaseError

ResultSet = tuple[tuple[str, ...] | None, list[tuple[Any, ...]]]


class FakeDriverError(Exception):
    """Stands in for a driver exception carrying a vendor code."""

    def __init__(self, code: int, message: str = "driver failure") -> None:
        self.code = code
        super().__init__(message)


class FakeCursor:
    """DB-API cursor replaying scripted result sets."""

    def __init__(self, result_sets: list[ResultSet], rowcount: int = -1) -> None:
        self._sets = result_sets
        self._set = 0
        self._row = 0
        self.rowcount = rowcount
        self.rows_read = 0
        self.closed = False

    @property
    def description(self) -> Any:
        if self._set >= len(self._sets):
            return None
        columns = self._sets[self._set][0]
        if columns is None:
            return None
        return [(name, None, None, None, None, None, None) for name in columns]

    def fetchone(self) -> Any:
        if self._set >= len(self._sets):
            return None
        rows = self._sets[self._set][1]
        if self._row >= len(rows):
            return None
        self._row += 1
        self.rows_read += 1
        return rows[self._row - 1]

    def nextset(self) -> bool | None:
        self._set += 1
        self._row = 0
        return True if self._set < len(self._sets) else None

    def close(self) -> None:
        self.closed = True


class FakeAsyncCursor(FakeCursor):
    async def fetchone(self) -> Any:  # type: ignore[override]
        return FakeCursor.fetchone(self)

    async def nextset(self) -> bool | None:  # type: ignore[override]
        return FakeCursor.nextset(self)

    async def close(self) -> None:  # type: ignore[override]
        self.closed = True


class FakeConnection:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeBackend:
    """Connection provider and adapter in one, recording every call."""

    cursor_class: type[FakeCursor] = FakeCursor

    def __init__(
        self,
        result_sets: list[ResultSet],
        *,
        rowcount: int = -1,
        error: Exception | None = None,
        outputs: dict[str, Any] | None = None,
    ) -> None:
        self.result_sets = result_sets
        self.rowcount = rowcount
        self.error = error
        self.outputs = outputs or {}
        self.connection = FakeConnection()
        self.executed: list[tuple[str, Any]] = []
        self.cursors: list[FakeCursor] = []
        self.acquired = 0
        self.released = 0

    # --- provider ---

    @property
    def adapter(self) -> FakeBackend:
        return self

    @contextmanager
    def get_connection(self) -> Iterator[FakeConnection]:
        self.acquired += 1
        try:
            yield self.connection
        finally:
            self.released += 1

    # --- adapter ---

    @property
    def paramstyle(self) -> str:
        return "named"

    @property
    def cursor(self) -> FakeCursor:
        return self.cursors[-1]

    def _run(self, text: str, params: Any) -> FakeCursor:
        self.executed.append((text, params))
        if self.error is not None:
            raise self.error
        cursor = self.cursor_class(self.result_sets, self.rowcount)
        self.cursors.append(cursor)
        return cursor

    def execute(self, connection: Any, sql: str, params: Any = None) -> FakeCursor:
        return self._run(sql, params)

    def call_procedure(self, connection: Any, name: str, parameters: Any) -> FakeCursor:
        cursor = self._run(f"CALL {name}", parameters.values())
        for parameter in parameters:
            if parameter.is_output and parameter.name in self.outputs:
                parameter.value = self.outputs[parameter.name]
        return cursor

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        if not isinstance(error, FakeDriverError):
            return None
        if error.code == 2627:
            return DuplicateKeyError(str(error), code=error.code)
        if error.code == 1205:
            return ConcurrencyError(str(error), code=error.code)
        return None


class FakeAsyncConnection(FakeConnection):
    async def commit(self) -> None:  # type: ignore[override]
        self.commits += 1

    async def rollback(self) -> None:  # type: ignore[override]
        self.rollbacks += 1


class FakeAsyncBackend(FakeBackend):
    cursor_class = FakeAsyncCursor

    def __init__(self, result_sets: list[ResultSet], **kwargs: Any) -> None:
        super().__init__(result_sets, **kwargs)
        self.connection = FakeAsyncConnection()

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[FakeConnection]:  # type: ignore[override]
        self.acquired += 1
        try:
            yield self.connection
        finally:
            self.released += 1

    async def execute_async(self, connection: Any, sql: str, params: Any = None) -> FakeCursor:
        return self._run(sql, params)

    async def call_procedure_async(self, connection: Any, name: str, parameters: Any) -> Any:
        return self.call_procedure(connection, name, parameters)


@pytest.fixture
def fake_db():
    """Build a (Database, FakeBackend) pair replaying the given result sets.

    Usage:
        db, backend = fake_db((("id",), [(1,), (2,)]), (("name",), [("a",)]))
    """

    def _make(*result_sets: ResultSet, **kwargs: Any) -> tuple[Database, FakeBackend]:
        backend = FakeBackend(list(result_sets), **kwargs)
        return Database(backend), backend

    return _make


@pytest.fixture
def fake_async_db():
    """Async counterpart of ``fake_db``."""

    def _make(*result_sets: ResultSet, **kwargs: Any) -> tuple[AsyncDatabase, FakeAsyncBackend]:
        backend = FakeAsyncBackend(list(result_sets), **kwargs)
        return AsyncDatabase(backend), backend

    return _make


@pytest.fixture
def driver_error():
    """Factory for fake driver exceptions: ``driver_error(2627)``."""
    return FakeDriverError


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def sqlite_db(sqlite_config: ConnectionConfig) -> Iterator[Database]:
    """Database over a single in-memory SQLite connection with a users table."""
    manager = ConnectionManager(sqlite_config)
    with manager.get_connection() as conn:
        conn.execute(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL UNIQUE, "
            "email TEXT, score REAL)"
        )
        conn.executemany(
            "INSERT INTO users (id, name, email, score) VALUES (?, ?, ?, ?)",
            [(1, "Alice", "alice@example.com", 9.5), (2, "Bob", None, 0.0)],
        )
        conn.commit()
    db = Database(manager)
    yield db
    db.close()
