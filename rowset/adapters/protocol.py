"""Database adapter protocols.

Every adapter module MUST implement these protocols. Adapters are also the
vendor's ErrorRecognizer: the command executor itself is vendor-agnostic.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from rowset.core.connection import ConnectionConfig
from rowset.core.exceptions import TranslatedDatabaseError
from rowset.core.params import ParameterCollection


@runtime_checkable
class ErrorRecognizer(Protocol):
    """Recognizes vendor-specific driver errors."""

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        """Return the domain error for *error*, or None if not recognized."""
        ...


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Parameter binding style: 'named', 'pyformat' or 'qmark'."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        """Execute SQL and return a DB-API cursor positioned on the first result set."""
        ...

    def call_procedure(
        self,
        connection: Any,
        name: str,
        parameters: ParameterCollection,
    ) -> Any:
        """Call a stored procedure and return a cursor over its result sets.

        Output parameter values are written back into *parameters*.
        """
        ...

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        """Return the domain error for a driver error, or None."""
        ...


@runtime_checkable
class AsyncAdapter(Protocol):
    """Asynchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Parameter binding style: 'named', 'pyformat' or 'qmark'."""
        ...

    async def create_pool_async(self, config: ConnectionConfig) -> Any:
        """Create an async connection pool."""
        ...

    async def acquire_connection_async(self, pool: Any) -> Any:
        """Acquire a connection from the async pool."""
        ...

    async def release_connection_async(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the async pool."""
        ...

    async def close_pool_async(self, pool: Any) -> None:
        """Close the async pool."""
        ...

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        """Execute SQL asynchronously and return a cursor-like object."""
        ...

    async def call_procedure_async(
        self,
        connection: Any,
        name: str,
        parameters: ParameterCollection,
    ) -> Any:
        """Call a stored procedure asynchronously and return a cursor."""
        ...

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        """Return the domain error for a driver error, or None."""
        ...
