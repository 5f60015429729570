"""SQL Server adapter - sync (pyodbc) and async (aioodbc).

Stored procedures are called with ``EXEC proc @name = ?`` since pyodbc has
no ``callproc``. Procedures may signal application errors with
``THROW 56001..56007, 'message', 1``; these are recognized alongside the
standard constraint and deadlock errors.
"""

from __future__ import annotations

import re
from typing import Any

from rowset.core.connection import ConnectionConfig
from rowset.core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    ConcurrencyError,
    ConflictError,
    ConstraintViolationError,
    DuplicateKeyError,
    NotFoundError,
    ParameterBindingError,
    PoolError,
    TranslatedDatabaseError,
    ValidationError,
)
from rowset.core.params import ParameterCollection

_ERRORS: dict[int, type[TranslatedDatabaseError]] = {
    2627: DuplicateKeyError,  # unique constraint
    2601: DuplicateKeyError,  # unique index
    547: ConstraintViolationError,  # foreign key / check conflict
    515: ConstraintViolationError,  # cannot insert NULL
    1205: ConcurrencyError,  # deadlock victim
    56001: ValidationError,
    56002: BusinessRuleError,
    56003: AuthorizationError,
    56004: ConcurrencyError,
    56005: NotFoundError,
    56006: ConflictError,
    56007: DuplicateKeyError,
}

# "[Microsoft][ODBC Driver 18 for SQL Server][SQL Server]Text. (56001) (SQLExecDirectW)"
_MESSAGE_PATTERN = re.compile(
    r"(?:\s*\[[^\]]*\])*\s*(?P<text>.*?)\s*\((?P<number>\d+)\)\s*\(SQL\w+\)"
)

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][\w$#@]*(\.[A-Za-z_][\w$#@]*)?$")


def _build_connection_string(config: ConnectionConfig) -> str:
    """Build an ODBC connection string; ``extra`` entries are appended."""
    options = dict(config.extra)
    driver = options.pop("odbc_driver", "ODBC Driver 18 for SQL Server")
    server = config.host or "localhost"
    if config.port is not None:
        server = f"{server},{config.port}"
    parts = [f"DRIVER={{{driver}}}", f"SERVER={server}", f"DATABASE={config.database}"]
    if config.user is not None:
        parts.append(f"UID={config.user}")
    if config.password is not None:
        parts.append(f"PWD={config.password}")
    parts.extend(f"{key}={value}" for key, value in options.items())
    return ";".join(parts)


def _exec_statement(name: str, parameters: ParameterCollection) -> tuple[str, tuple[Any, ...]]:
    if not _IDENTIFIER_PATTERN.match(name):
        raise ParameterBindingError(name, "not a valid procedure name")
    for parameter in parameters:
        if parameter.is_output:
            raise ParameterBindingError(
                parameter.name, "output parameters are not supported by pyodbc"
            )
    assignments = ", ".join(f"@{p.name} = ?" for p in parameters)
    sql = f"EXEC {name} {assignments}".rstrip()
    return sql, tuple(p.value for p in parameters)


class SqlServerErrorRecognizer:
    """Recognizes SQL Server errors by native error number."""

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        if not type(error).__module__.startswith(("pyodbc", "aioodbc")):
            return None
        for arg in error.args:
            match = _MESSAGE_PATTERN.search(str(arg))
            if match is None:
                continue
            number = int(match.group("number"))
            error_type = _ERRORS.get(number)
            if error_type is not None:
                return error_type(match.group("text"), code=number)
        return None


class SqlServerSyncAdapter(SqlServerErrorRecognizer):
    """Synchronous SQL Server adapter using pyodbc."""

    @property
    def paramstyle(self) -> str:
        return "qmark"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        import pyodbc

        connection_string = _build_connection_string(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            pool.append(pyodbc.connect(connection_string, timeout=config.pool_timeout))
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
        cursor = connection.cursor()
        cursor.execute(sql, *(params or ()))
        return cursor

    def call_procedure(self, connection: Any, name: str, parameters: ParameterCollection) -> Any:
        sql, args = _exec_statement(name, parameters)
        return self.execute(connection, sql, args)


class SqlServerAsyncAdapter(SqlServerErrorRecognizer):
    """Asynchronous SQL Server adapter using aioodbc."""

    @property
    def paramstyle(self) -> str:
        return "qmark"

    async def create_pool_async(self, config: ConnectionConfig) -> list[Any]:
        import aioodbc

        dsn = _build_connection_string(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            pool.append(await aioodbc.connect(dsn=dsn, timeout=config.pool_timeout))
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
        cursor = await connection.cursor()
        await cursor.execute(sql, *(params or ()))
        return cursor

    async def call_procedure_async(
        self, connection: Any, name: str, parameters: ParameterCollection
    ) -> Any:
        sql, args = _exec_statement(name, parameters)
        return await self.execute_async(connection, sql, args)
