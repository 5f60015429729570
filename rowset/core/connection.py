"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager and AsyncConnectionManager are the connection providers
used by Database / AsyncDatabase: they own the adapter and its pool and
hand out one connection per command.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

from pydantic import BaseModel, Field

from rowset.core.enums import DatabaseBackend
from rowset.core.exceptions import AdapterError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = Field(default=5, ge=1)
    pool_timeout: int = 30
    pool_recycle: int = 1800
    extra: dict[str, Any] = {}


# Adapter module mapping: backend → (module_path, sync_class, async_class)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str, str]] = {
    DatabaseBackend.SQLITE: ("rowset.adapters.sqlite", "SqliteSyncAdapter", "SqliteAsyncAdapter"),
    DatabaseBackend.POSTGRESQL: (
        "rowset.adapters.postgresql",
        "PostgresqlSyncAdapter",
        "PostgresqlAsyncAdapter",
    ),
    DatabaseBackend.MYSQL: ("rowset.adapters.mysql", "MysqlSyncAdapter", "MysqlAsyncAdapter"),
    DatabaseBackend.ORACLE: ("rowset.adapters.oracle", "OracleSyncAdapter", "OracleAsyncAdapter"),
    DatabaseBackend.SQLSERVER: (
        "rowset.adapters.sqlserver",
        "SqlServerSyncAdapter",
        "SqlServerAsyncAdapter",
    ),
}


def _load_adapter(driver: str, kind: str) -> Any:
    """Load a sync or async adapter by driver name."""
    try:
        backend = DatabaseBackend(driver.lower())
    except ValueError:
        raise AdapterError(f"Unsupported database driver: {driver}") from None

    module_path, sync_cls_name, async_cls_name = _ADAPTER_MAP[backend]
    cls_name = sync_cls_name if kind == "sync" else async_cls_name

    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load {kind} adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Synchronous connection provider using the SyncAdapter protocol.

    Args:
        config: Connection settings.
        adapter: Adapter instance to use instead of the one registered for
            ``config.driver``.
    """

    def __init__(self, config: ConnectionConfig, adapter: Any | None = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else _load_adapter(config.driver, "sync")
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool."""
        if self._pool is None:
            self._pool = self._adapter.create_pool(self.config)
            logger.info(
                "Created %s pool of %d connection(s)", self.config.driver, self.config.pool_size
            )
        return self._pool

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Get a connection from the pool as a context manager."""
        if self._pool is None:
            self.initialize_pool()
        connection = self._adapter.acquire_connection(self._pool)
        try:
            yield connection
        finally:
            self._adapter.release_connection(connection, self._pool)

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None
            logger.info("Closed %s pool", self.config.driver)


class AsyncConnectionManager:
    """Asynchronous connection provider using the AsyncAdapter protocol."""

    def __init__(self, config: ConnectionConfig, adapter: Any | None = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else _load_adapter(config.driver, "async")
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    async def initialize_pool(self) -> Any:
        """Initialize the async connection pool."""
        if self._pool is None:
            self._pool = await self._adapter.create_pool_async(self.config)
            logger.info(
                "Created async %s pool of %d connection(s)",
                self.config.driver,
                self.config.pool_size,
            )
        return self._pool

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[Any]:
        """Get an async connection from the pool as an async context manager."""
        if self._pool is None:
            await self.initialize_pool()
        connection = await self._adapter.acquire_connection_async(self._pool)
        try:
            yield connection
        finally:
            await self._adapter.release_connection_async(connection, self._pool)

    async def close_pool(self) -> None:
        """Close the async connection pool."""
        if self._pool is not None:
            await self._adapter.close_pool_async(self._pool)
            self._pool = None
            logger.info("Closed async %s pool", self.config.driver)
