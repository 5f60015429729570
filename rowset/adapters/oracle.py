"""Oracle adapter - sync and async using oracledb.

Result sets returned from PL/SQL via DBMS_SQL.RETURN_RESULT arrive as
implicit result cursors; they are chained so the executor can walk them
with ``nextset()``.
"""

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

# ORA-nnnnn → domain error
_ERRORS: dict[int, type[TranslatedDatabaseError]] = {
    1: DuplicateKeyError,  # unique constraint violated
    2291: ReferentialIntegrityError,  # parent key not found
    2292: ReferentialIntegrityError,  # child record found
    1400: ConstraintViolationError,  # cannot insert NULL
    1407: ConstraintViolationError,  # cannot update to NULL
    2290: ConstraintViolationError,  # check constraint violated
    8177: ConcurrencyError,  # can't serialize access
    60: ConcurrencyError,  # deadlock detected
    54: ConcurrencyError,  # resource busy, NOWAIT specified
}


def _build_dsn(config: ConnectionConfig) -> str:
    """Build an Oracle DSN string from config fields (host:port/database)."""
    return f"{config.host}:{config.port}/{config.database}"


def _is_plsql(sql: str) -> bool:
    return sql.lstrip().upper().startswith(("BEGIN", "DECLARE"))


class _LowercaseCursor:
    """Cursor proxy that reports Oracle's upper-case column names in lower case.

    Rows stay tuples; only ``description`` is rewritten.
    """

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    @property
    def description(self) -> list[tuple[Any, ...]] | None:
        description = self._cursor.description
        if description is None:
            return None
        # oracledb describes columns with FetchInfo, indexable like a 7-tuple.
        return [(col[0].lower(), *(col[i] for i in range(1, 7))) for col in description]

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cursor, name)


def _bind_procedure_args(cursor: Any, parameters: ParameterCollection) -> list[Any]:
    args: list[Any] = []
    for parameter in parameters:
        if parameter.is_output:
            var = cursor.var(parameter.db_type or str)
            if parameter.value is not None:
                var.setvalue(0, parameter.value)
            args.append(var)
        else:
            args.append(parameter.value)
    return args


def _read_outputs(args: list[Any], parameters: ParameterCollection) -> None:
    for parameter, arg in zip(parameters, args, strict=True):
        if parameter.is_output:
            parameter.value = arg.getvalue()


class OracleErrorRecognizer:
    """Recognizes oracledb errors by ORA error code."""

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        if not error.args:
            return None
        code = getattr(error.args[0], "code", None)
        full_code = getattr(error.args[0], "full_code", "")
        if not isinstance(code, int) or not str(full_code).startswith("ORA-"):
            return None
        error_type = _ERRORS.get(code)
        if error_type is None:
            return None
        return error_type(str(error), code=full_code)


class OracleSyncAdapter(OracleErrorRecognizer):
    """Synchronous Oracle adapter using oracledb."""

    @property
    def paramstyle(self) -> str:
        return "named"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        """Create a 'pool' (list of connections) for Oracle."""
        import oracledb

        dsn = _build_dsn(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = oracledb.connect(user=config.user, password=config.password, dsn=dsn)
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
        """Execute SQL and return a cursor with lower-case column names."""
        cursor = connection.cursor()
        cursor.execute(sql, params or {})
        if cursor.description is None and _is_plsql(sql):
            return self._implicit_results(cursor)
        return _LowercaseCursor(cursor)

    def call_procedure(self, connection: Any, name: str, parameters: ParameterCollection) -> Any:
        cursor = connection.cursor()
        args = _bind_procedure_args(cursor, parameters)
        cursor.callproc(name, args)
        _read_outputs(args, parameters)
        return self._implicit_results(cursor)

    @staticmethod
    def _implicit_results(cursor: Any) -> ChainedCursor:
        children = [_LowercaseCursor(child) for child in cursor.getimplicitresults()]
        return ChainedCursor(children, owner=cursor, rowcount=cursor.rowcount)


class OracleAsyncAdapter(OracleErrorRecognizer):
    """Asynchronous Oracle adapter using oracledb async support."""

    @property
    def paramstyle(self) -> str:
        return "named"

    async def create_pool_async(self, config: ConnectionConfig) -> list[Any]:
        """Create an async Oracle connection pool."""
        import oracledb

        dsn = _build_dsn(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = await oracledb.connect_async(
                user=config.user, password=config.password, dsn=dsn
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
            await conn.close()
        pool.clear()

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        """Execute SQL asynchronously; column names are reported in lower case."""
        cursor = connection.cursor()
        await cursor.execute(sql, params or {})
        if cursor.description is None and _is_plsql(sql):
            return self._implicit_results(cursor)
        return _LowercaseCursor(cursor)

    async def call_procedure_async(
        self, connection: Any, name: str, parameters: ParameterCollection
    ) -> Any:
        cursor = connection.cursor()
        args = _bind_procedure_args(cursor, parameters)
        await cursor.callproc(name, args)
        _read_outputs(args, parameters)
        return self._implicit_results(cursor)

    @staticmethod
    def _implicit_results(cursor: Any) -> AsyncChainedCursor:
        children = [_LowercaseCursor(child) for child in cursor.getimplicitresults()]
        return AsyncChainedCursor(children, owner=cursor, rowcount=cursor.rowcount)
