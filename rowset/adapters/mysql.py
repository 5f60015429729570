"""MySQL adapter - sync (mysql-connector-python) and async (aiomysql)."""

from __future__ import annotations

from typing import Any

from rowset.adapters.chained import ChainedCursor
from rowset.core.connection import ConnectionConfig
from rowset.core.exceptions import (
    ConcurrencyError,
    ConstraintViolationError,
    DuplicateKeyError,
    ParameterBindingError,
    PoolError,
    ReferentialIntegrityError,
    TranslatedDatabaseError,
)
from rowset.core.params import ParameterCollection

# Server error number → domain error
_ERRORS: dict[int, type[TranslatedDatabaseError]] = {
    1062: DuplicateKeyError,  # ER_DUP_ENTRY
    1586: DuplicateKeyError,  # ER_DUP_ENTRY_WITH_KEY_NAME
    1451: ReferentialIntegrityError,  # ER_ROW_IS_REFERENCED_2
    1452: ReferentialIntegrityError,  # ER_NO_REFERENCED_ROW_2
    1048: ConstraintViolationError,  # ER_BAD_NULL_ERROR
    3819: ConstraintViolationError,  # ER_CHECK_CONSTRAINT_VIOLATED
    1213: ConcurrencyError,  # ER_LOCK_DEADLOCK
    1205: ConcurrencyError,  # ER_LOCK_WAIT_TIMEOUT
}


def _error_number(error: BaseException) -> int | None:
    # mysql-connector exposes errno; PyMySQL/aiomysql put it first in args.
    errno = getattr(error, "errno", None)
    if isinstance(errno, int):
        return errno
    if error.args and isinstance(error.args[0], int):
        return error.args[0]
    return None


class MysqlErrorRecognizer:
    """Recognizes MySQL server errors by error number."""

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        if not type(error).__module__.startswith(("mysql.connector", "pymysql", "aiomysql")):
            return None
        number = _error_number(error)
        error_type = _ERRORS.get(number) if number is not None else None
        if error_type is None:
            return None
        return error_type(str(error), code=number)


class MysqlSyncAdapter(MysqlErrorRecognizer):
    """Synchronous MySQL adapter using mysql-connector-python."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        """Create a pool (list of connections) for MySQL."""
        import mysql.connector

        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = mysql.connector.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.database,
                **config.extra,
            )
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
        """Execute SQL and return a cursor with tuple rows."""
        cursor = connection.cursor()
        cursor.execute(sql, params or {})
        return cursor

    def call_procedure(self, connection: Any, name: str, parameters: ParameterCollection) -> Any:
        """Call a procedure; its result sets come from ``stored_results()``."""
        cursor = connection.cursor()
        args = tuple(p.value for p in parameters)
        result_args = cursor.callproc(name, args)
        for parameter, value in zip(parameters, result_args, strict=True):
            if parameter.is_output:
                parameter.value = value
        return ChainedCursor(list(cursor.stored_results()), owner=cursor, rowcount=cursor.rowcount)


class MysqlAsyncAdapter(MysqlErrorRecognizer):
    """Asynchronous MySQL adapter using aiomysql."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    async def create_pool_async(self, config: ConnectionConfig) -> list[Any]:
        """Create async MySQL connection pool."""
        import aiomysql

        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = await aiomysql.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                db=config.database,
                **config.extra,
            )
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
            conn.close()
        pool.clear()

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        """Execute SQL asynchronously and return a cursor with tuple rows."""
        cursor = await connection.cursor()
        await cursor.execute(sql, params or {})
        return cursor

    async def call_procedure_async(
        self, connection: Any, name: str, parameters: ParameterCollection
    ) -> Any:
        """Call a procedure; result sets are walked with ``nextset()``.

        aiomysql leaves OUT values in server variables, so output
        parameters are not supported here.
        """
        for parameter in parameters:
            if parameter.is_output:
                raise ParameterBindingError(
                    parameter.name, "output parameters are not supported by aiomysql"
                )
        cursor = await connection.cursor()
        await cursor.callproc(name, tuple(p.value for p in parameters))
        return cursor
