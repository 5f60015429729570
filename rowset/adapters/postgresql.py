"""PostgreSQL adapter - sync and async using psycopg (v3+)."""

from __future__ import annotations

from typing import Any

from rowset.adapters.chained import AsyncChainedCursor, ChainedCursor
from rowset.core.connection import ConnectionConfig
from rowset.core.exceptions import (
    ConcurrencyError,
    ConstraintViolationError,
    DuplicateKeyError,
    PoolError,
    ReferentialIntegrityError,
    TranslatedDatabaseError,
)
from rowset.core.params import ParameterCollection

# SQLSTATE → domain error
_ERRORS: dict[str, type[TranslatedDatabaseError]] = {
    "23505": DuplicateKeyError,  # unique_violation
    "23503": ReferentialIntegrityError,  # foreign_key_violation
    "23502": ConstraintViolationError,  # not_null_violation
    "23514": ConstraintViolationError,  # check_violation
    "23P01": ConstraintViolationError,  # exclusion_violation
    "40001": ConcurrencyError,  # serialization_failure
    "40P01": ConcurrencyError,  # deadlock_detected
    "55P03": ConcurrencyError,  # lock_not_available
}


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


def _call_statement(name: str, parameters: ParameterCollection) -> Any:
    """Compose ``CALL schema.proc(%(a)s, ...)`` with quoted identifiers."""
    from psycopg import sql

    return sql.SQL("CALL {}({})").format(
        sql.Identifier(*name.split(".")),
        sql.SQL(", ").join(sql.Placeholder(p.name) for p in parameters),
    )


def _read_outputs(
    row: tuple[Any, ...] | None, description: Any, parameters: ParameterCollection
) -> None:
    # INOUT/OUT arguments come back as a single row, one column per argument.
    if row is None:
        return
    values = dict(zip((col[0] for col in description), row, strict=True))
    for parameter in parameters:
        if parameter.is_output and parameter.name in values:
            parameter.value = values[parameter.name]


class PostgresqlErrorRecognizer:
    """Recognizes psycopg errors by SQLSTATE."""

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        sqlstate = getattr(error, "sqlstate", None)
        error_type = _ERRORS.get(sqlstate) if isinstance(sqlstate, str) else None
        if error_type is None:
            return None
        return error_type(str(error).strip(), code=sqlstate)


class PostgresqlSyncAdapter(PostgresqlErrorRecognizer):
    """Synchronous PostgreSQL adapter using psycopg (v3+)."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        import psycopg

        conninfo = _build_conninfo(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = psycopg.connect(conninfo)
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[Any]) -> Any:
        if not pool:
            raise PoolError("No connections available in pool")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        return connection.execute(sql, params)

    def call_procedure(self, connection: Any, name: str, parameters: ParameterCollection) -> Any:
        cursor = connection.execute(_call_statement(name, parameters), parameters.values())
        if parameters.has_outputs and cursor.description is not None:
            _read_outputs(cursor.fetchone(), cursor.description, parameters)
            # The output row is not a result set of the procedure.
            return ChainedCursor([], owner=cursor, rowcount=cursor.rowcount)
        return cursor


class PostgresqlAsyncAdapter(PostgresqlErrorRecognizer):
    """Asynchronous PostgreSQL adapter using psycopg (v3+) async support."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    async def create_pool_async(self, config: ConnectionConfig) -> list[Any]:
        import psycopg

        conninfo = _build_conninfo(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = await psycopg.AsyncConnection.connect(conninfo)
            pool.append(conn)
        return pool

    async def acquire_connection_async(self, pool: list[Any]) -> Any:
        if not pool:
            raise PoolError("No connections available in pool")
        return pool.pop()

    async def release_connection_async(self, connection: Any, pool: list[Any]) -> None:
        pool.append(connection)

    async def close_pool_async(self, pool: list[Any]) -> None:
        for conn in pool:
            await conn.close()
        pool.clear()

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        return await connection.execute(sql, params)

    async def call_procedure_async(
        self, connection: Any, name: str, parameters: ParameterCollection
    ) -> Any:
        cursor = await connection.execute(_call_statement(name, parameters), parameters.values())
        if parameters.has_outputs and cursor.description is not None:
            _read_outputs(await cursor.fetchone(), cursor.description, parameters)
            return AsyncChainedCursor([], owner=cursor, rowcount=cursor.rowcount)
        return cursor
