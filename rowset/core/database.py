"""Database entry points.

Database couples a connection provider with the vendor error recognizer
and creates commands bound to both:

    db = Database.from_config(ConnectionConfig(driver="sqlite", database="app.db"))
    users = db.sql_statement("SELECT id, name FROM users").select_many(ModelMapper(User))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rowset.core.command import AsyncDatabaseCommand, Command, DatabaseCommand, ParameterBinder
from rowset.core.connection import AsyncConnectionManager, ConnectionConfig, ConnectionManager
from rowset.core.enums import CommandKind
from rowset.core.exceptions import TranslatedDatabaseError

Parameters = ParameterBinder | Mapping[str, Any] | None


class _DatabaseBase:
    def __init__(self, provider: Any, error_recognizer: Any | None = None) -> None:
        self._provider = provider
        self._error_recognizer = error_recognizer

    @property
    def provider(self) -> Any:
        """The connection provider."""
        return self._provider

    @property
    def adapter(self) -> Any:
        return self._provider.adapter

    @property
    def error_recognizer(self) -> Any:
        """The injected recognizer, or the adapter's own."""
        if self._error_recognizer is not None:
            return self._error_recognizer
        return self._provider.adapter

    def recognize_error(self, error: BaseException) -> TranslatedDatabaseError | None:
        """Delegate driver error recognition to the vendor recognizer."""
        return self.error_recognizer.recognize_error(error)


class Database(_DatabaseBase):
    """Synchronous database.

    Args:
        provider: Connection provider, usually a ConnectionManager.
        error_recognizer: Overrides the adapter's error recognition.
    """

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        *,
        error_recognizer: Any | None = None,
    ) -> Database:
        """Create a Database from a ConnectionConfig."""
        return cls(ConnectionManager(config), error_recognizer)

    def command(
        self, kind: CommandKind, text: str, parameters: Parameters = None
    ) -> DatabaseCommand:
        return DatabaseCommand(self, Command(kind, text, parameters))

    def sql_statement(self, sql: str, parameters: Parameters = None) -> DatabaseCommand:
        """Create a command for SQL text with ``:name`` placeholders.

        Args:
            sql: The SQL text.
            parameters: A binder ``callable(ParameterCollection)`` or a
                mapping of input parameter values.
        """
        return self.command(CommandKind.TEXT, sql, parameters)

    def stored_procedure(self, name: str, parameters: Parameters = None) -> DatabaseCommand:
        """Create a command calling the stored procedure *name*."""
        return self.command(CommandKind.STORED_PROCEDURE, name, parameters)

    def close(self) -> None:
        """Close the provider's connection pool."""
        self._provider.close_pool()


class AsyncDatabase(_DatabaseBase):
    """Asynchronous database."""

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        *,
        error_recognizer: Any | None = None,
    ) -> AsyncDatabase:
        """Create an AsyncDatabase from a ConnectionConfig."""
        return cls(AsyncConnectionManager(config), error_recognizer)

    def command(
        self, kind: CommandKind, text: str, parameters: Parameters = None
    ) -> AsyncDatabaseCommand:
        return AsyncDatabaseCommand(self, Command(kind, text, parameters))

    def sql_statement(self, sql: str, parameters: Parameters = None) -> AsyncDatabaseCommand:
        """Create a command for SQL text with ``:name`` placeholders."""
        return self.command(CommandKind.TEXT, sql, parameters)

    def stored_procedure(self, name: str, parameters: Parameters = None) -> AsyncDatabaseCommand:
        """Create a command calling the stored procedure *name*."""
        return self.command(CommandKind.STORED_PROCEDURE, name, parameters)

    async def close(self) -> None:
        """Close the provider's connection pool."""
        await self._provider.close_pool()
