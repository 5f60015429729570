"""Read-only view over the current row of a result set.

A Record is bound to one row only. The reader that produced it invalidates
it as soon as the cursor moves to the next row or result set, after which
every access raises RecordStateError.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, TypeVar

from rowset.core.enums import ColumnState
from rowset.core.exceptions import ColumnNotFoundError, MappingError, RecordStateError

T = TypeVar("T")


def _coerce(value: Any, target: type[T]) -> T:
    """Convert a non-null column value to *target*."""
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        return value
    if target is Decimal and isinstance(value, float):
        return Decimal(str(value))  # type: ignore[return-value]
    if target is uuid.UUID:
        if isinstance(value, bytes):
            return uuid.UUID(bytes=value)  # type: ignore[return-value]
        return uuid.UUID(str(value))  # type: ignore[return-value]
    if target is bytes and isinstance(value, (bytearray, memoryview)):
        return bytes(value)  # type: ignore[return-value]
    return target(value)  # type: ignore[call-arg]


class Record:
    """Typed, null-aware column access for the current row.

    Columns are addressed by name or by zero-based ordinal. Name lookup is
    exact first, then case-insensitive.
    """

    __slots__ = ("_columns", "_values", "_names", "_folded", "_valid")

    def __init__(self, columns: Sequence[str], values: Sequence[Any]) -> None:
        self._columns = tuple(columns)
        self._values = tuple(values)
        self._names: dict[str, int] | None = None
        self._folded: dict[str, int] = {}
        self._valid = True

    @classmethod
    def from_row(cls, row: Any, columns: Sequence[str]) -> Record:
        """Build a record from a driver row and the cursor's column names.

        Values are matched to *columns* by position, so repeated names keep
        their ordinals. A dict-like row supplies its own names only when
        the cursor reports none.

        Raises:
            MappingError: If the row and the column list differ in length.
        """
        if isinstance(row, Mapping):
            if not columns:
                return cls(tuple(row.keys()), tuple(row.values()))
            values = tuple(row.values())
        else:
            values = tuple(row)
        if len(values) != len(columns):
            raise MappingError(f"Row has {len(values)} values for {len(columns)} columns")
        return cls(columns, values)

    def invalidate(self) -> None:
        """Detach the record from its row."""
        self._valid = False

    @property
    def is_valid(self) -> bool:
        return self._valid

    @property
    def columns(self) -> tuple[str, ...]:
        self._check_valid()
        return self._columns

    def __len__(self) -> int:
        self._check_valid()
        return len(self._columns)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, (str, int)) and self.has_column(key)

    def __getitem__(self, key: str | int) -> Any:
        return self.get_value(key)

    def __repr__(self) -> str:
        if not self._valid:
            return "<Record (invalidated)>"
        return f"<Record {dict(zip(self._columns, self._values, strict=True))!r}>"

    def has_column(self, key: str | int) -> bool:
        """Return True if the record has the named or numbered column."""
        return self._find(key) is not None

    def ordinal(self, name: str) -> int:
        """Return the ordinal of a column name.

        Raises:
            ColumnNotFoundError: If no column has that name.
        """
        i = self._find(name)
        if i is None:
            raise ColumnNotFoundError(name)
        return i

    def state(self, key: str | int) -> ColumnState:
        """Classify a column as holding a value, a database null, or absent."""
        i = self._find(key)
        if i is None:
            return ColumnState.ABSENT
        return ColumnState.NULL if self._values[i] is None else ColumnState.VALUE

    def is_null(self, key: str | int) -> bool:
        """Return True if the column holds a database null.

        Raises:
            ColumnNotFoundError: If the column does not exist.
        """
        return self._values[self._require(key)] is None

    def get_value(self, key: str | int, target: type[T] | None = None) -> Any:
        """Return a column value, ``None`` for a database null.

        Args:
            key: Column name or ordinal.
            target: Optional type to coerce a non-null value to.

        Raises:
            ColumnNotFoundError: If the column does not exist.
            MappingError: If the value cannot be coerced to *target*.
        """
        value = self._values[self._require(key)]
        if value is None or target is None:
            return value
        try:
            return _coerce(value, target)
        except (TypeError, ValueError) as e:
            raise MappingError(
                f"Cannot convert column {key!r} value {value!r} to {target.__name__}: {e}"
            ) from e

    def get(self, key: str | int, default: Any = None) -> Any:
        """Return a column value, or *default* when it is null or absent."""
        i = self._find(key)
        if i is None or self._values[i] is None:
            return default
        return self._values[i]

    def to_dict(self) -> dict[str, Any]:
        """Return the row as a column-name to value dict."""
        self._check_valid()
        return dict(zip(self._columns, self._values, strict=True))

    def _check_valid(self) -> None:
        if not self._valid:
            raise RecordStateError()

    def _require(self, key: str | int) -> int:
        i = self._find(key)
        if i is None:
            raise ColumnNotFoundError(key)
        return i

    def _find(self, key: str | int) -> int | None:
        self._check_valid()
        if isinstance(key, int):
            return key if 0 <= key < len(self._values) else None
        if self._names is None:
            self._names = {}
            for i, name in enumerate(self._columns):
                self._names.setdefault(name, i)
                self._folded.setdefault(name.casefold(), i)
        found = self._names.get(key)
        if found is None:
            found = self._folded.get(key.casefold())
        return found
