"""Cursor wrappers for drivers that return result sets as child cursors.

oracledb (implicit results) and mysql-connector (``stored_results()``)
hand back one cursor per result set instead of supporting ``nextset()``.
ChainedCursor presents such a list as a single DB-API cursor.
"""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from typing import Any


class ChainedCursor:
    """Walks a sequence of child cursors as consecutive result sets.

    Args:
        cursors: Child cursors, one per result set.
        owner: The cursor the children came from; closed with the chain.
        rowcount: Value reported as ``rowcount``.
    """

    def __init__(self, cursors: Sequence[Any], owner: Any = None, rowcount: int = -1) -> None:
        self._cursors = list(cursors)
        self._owner = owner
        self._position = 0
        self.rowcount = rowcount

    @property
    def _current(self) -> Any:
        if self._position < len(self._cursors):
            return self._cursors[self._position]
        return None

    @property
    def description(self) -> Any:
        current = self._current
        return None if current is None else current.description

    def fetchone(self) -> Any:
        current = self._current
        return None if current is None else current.fetchone()

    def nextset(self) -> bool | None:
        if self._position >= len(self._cursors):
            return None
        self._position += 1
        return True if self._position < len(self._cursors) else None

    def close(self) -> None:
        for cursor in self._cursors:
            cursor.close()
        if self._owner is not None:
            self._owner.close()


class AsyncChainedCursor(ChainedCursor):
    """Async flavour of ChainedCursor for async driver cursors."""

    async def fetchone(self) -> Any:  # type: ignore[override]
        current = self._current
        if current is None:
            return None
        return await current.fetchone()

    async def close(self) -> None:  # type: ignore[override]
        for cursor in [*self._cursors, self._owner]:
            if cursor is None:
                continue
            result = cursor.close()
            if inspect.isawaitable(result):
                await result
