"""Native column type classification.

Maps database type names (``"NVARCHAR(255)"``, ``"decimal(18,2)"``,
``"ROWVERSION"``) to a ``TypeCategory``, a canonical type name and the
Python type used to hold values of that column. Names are case-insensitive
and a trailing parenthesized length/precision suffix is ignored.

All functions are pure: the lookup tables are immutable module constants.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from rowset.core.exceptions import ArgumentError, UnsupportedTypeError


class TypeCategory(Enum):
    """Canonical category of a native column type."""

    TEXT = "text"
    DECIMAL = "decimal"
    DATETIME = "datetime"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    BYTES = "bytes"
    FLOAT = "float"
    DURATION = "duration"
    UUID = "uuid"


_TEXT_TYPES = frozenset({"NCHAR", "CHAR", "NVARCHAR", "VARCHAR", "TEXT", "NTEXT"})
_DECIMAL_TYPES = frozenset({"DECIMAL", "MONEY", "NUMERIC", "SMALLMONEY"})
_DATETIME_TYPES = frozenset({"DATE", "DATETIME", "DATETIME2"})

# Integer names map straight to their canonical width.
_INTEGER_TYPES = MappingProxyType({"INT": "int32", "BIGINT": "int64", "SMALLINT": "int16"})

# Remaining vocabulary: native name -> (canonical name, category)
_OTHER_TYPES = MappingProxyType(
    {
        "ROWVERSION": ("bytes", TypeCategory.BYTES),
        "TIMESTAMP": ("bytes", TypeCategory.BYTES),
        "BINARY": ("bytes", TypeCategory.BYTES),
        "VARBINARY": ("bytes", TypeCategory.BYTES),
        "BIT": ("bool", TypeCategory.BOOLEAN),
        "DATETIMEOFFSET": ("datetimeoffset", TypeCategory.DATETIME),
        "FLOAT": ("float64", TypeCategory.FLOAT),
        "TINYINT": ("uint8", TypeCategory.INTEGER),
        "REAL": ("float32", TypeCategory.FLOAT),
        "TIME": ("timedelta", TypeCategory.DURATION),
        "UNIQUEIDENTIFIER": ("uuid", TypeCategory.UUID),
    }
)

_HOST_TYPES: MappingProxyType[str, type] = MappingProxyType(
    {
        "text": str,
        "decimal": Decimal,
        "datetime": datetime.datetime,
        "bytes": bytes,
        "bool": bool,
        # Python has one datetime type; offset values are timezone-aware.
        "datetimeoffset": datetime.datetime,
        "float64": float,
        "float32": float,
        "int64": int,
        "int32": int,
        "int16": int,
        "uint8": int,
        "timedelta": datetime.timedelta,
        "uuid": uuid.UUID,
    }
)

# Value used for a host type when the database returns null.
_ZERO_VALUES: MappingProxyType[type, object] = MappingProxyType(
    {
        datetime.datetime: datetime.datetime.min,
        datetime.date: datetime.date.min,
        datetime.time: datetime.time(),
        datetime.timedelta: datetime.timedelta(),
        uuid.UUID: uuid.UUID(int=0),
        Decimal: Decimal(),
        bytes: b"",
    }
)


def _base_name(db_type: str | None) -> str:
    """Uppercase *db_type* and drop a trailing ``(...)`` suffix."""
    if not db_type:
        return ""
    name = db_type.strip()
    if name.endswith(")"):
        i = name.rfind("(")
        if i > 0:
            name = name[:i].rstrip()
    return name.upper()


def is_text(db_type: str | None) -> bool:
    """Return True if the database type holds character data."""
    return _base_name(db_type) in _TEXT_TYPES


def is_decimal(db_type: str | None) -> bool:
    """Return True if the database type is an exact decimal type."""
    return _base_name(db_type) in _DECIMAL_TYPES


def is_datetime(db_type: str | None) -> bool:
    """Return True if the database type is a date or date/time type."""
    return _base_name(db_type) in _DATETIME_TYPES


def is_integer(db_type: str | None) -> bool:
    """Return True if the database type is one of the core integer types."""
    return _base_name(db_type) in _INTEGER_TYPES


def classify(db_type: str | None) -> TypeCategory:
    """Classify a native type name into its ``TypeCategory``.

    Raises:
        UnsupportedTypeError: If the name is outside the known vocabulary.
    """
    name = _base_name(db_type)
    if name in _TEXT_TYPES:
        return TypeCategory.TEXT
    if name in _DECIMAL_TYPES:
        return TypeCategory.DECIMAL
    if name in _DATETIME_TYPES:
        return TypeCategory.DATETIME
    if name in _INTEGER_TYPES:
        return TypeCategory.INTEGER
    try:
        return _OTHER_TYPES[name][1]
    except KeyError:
        raise UnsupportedTypeError(db_type) from None


def canonical_type_name(db_type: str | None) -> str:
    """Return the canonical type name for a native type name.

    The text, decimal, datetime and integer categories are tried in that
    order before the remaining fixed vocabulary.

    Raises:
        UnsupportedTypeError: If the name is outside the known vocabulary.
    """
    name = _base_name(db_type)
    if name in _TEXT_TYPES:
        return "text"
    if name in _DECIMAL_TYPES:
        return "decimal"
    if name in _DATETIME_TYPES:
        return "datetime"
    if name in _INTEGER_TYPES:
        return _INTEGER_TYPES[name]
    try:
        return _OTHER_TYPES[name][0]
    except KeyError:
        raise UnsupportedTypeError(db_type) from None


def canonical_type(db_type: str | None) -> type:
    """Return the Python type used to hold values of a native type.

    Raises:
        UnsupportedTypeError: If the name is outside the known vocabulary.
    """
    return _HOST_TYPES[canonical_type_name(db_type)]


def zero_value(host_type: type) -> object:
    """Return the zero value of *host_type* (``0``, ``""``, ``datetime.min``, ...).

    Raises:
        ArgumentError: If the type has no zero value.
    """
    if host_type in _ZERO_VALUES:
        return _ZERO_VALUES[host_type]
    try:
        return host_type()
    except (TypeError, ValueError) as e:
        raise ArgumentError(f"{host_type.__name__} has no zero value: {e}") from e
