"""rowset exception hierarchy.

Driver exceptions recognized by the vendor adapter are re-raised as
TranslatedDatabaseError subclasses. Unrecognized driver exceptions are
never wrapped: they reach the caller as the original object.
"""

from __future__ import annotations


class RowSetError(Exception):
    """Base exception for all rowset errors."""


class ArgumentError(RowSetError, ValueError):
    """Raised when an operation is called with invalid arguments."""


# --- Execution ---


class ExecutionError(RowSetError):
    """Base for command execution errors."""


class CardinalityError(ExecutionError):
    """Raised when rows or result sets fall outside the declared bounds."""


class NoRowsError(CardinalityError):
    """Raised when a single-row selection returns no row."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} request has not returned a row")


class MultipleRowsError(CardinalityError):
    """Raised when a strict single-row selection returns more than one row."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} request has returned more than one row")


class ParameterBindingError(ExecutionError):
    """Raised when command parameters cannot be bound."""

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        super().__init__(f"Parameter binding error for '{name}': {detail}")


# --- Mapping ---


class MappingError(RowSetError):
    """Base for record access and mapping errors."""


class ColumnNotFoundError(MappingError):
    """Raised when a record has no column with the given name or ordinal."""

    def __init__(self, column: str | int) -> None:
        self.column = column
        super().__init__(f"Column not found: {column!r}")


class ColumnMismatchError(MappingError):
    """Raised when required fields cannot be mapped from record columns."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: missing fields {missing_fields}")


class RecordStateError(MappingError):
    """Raised when a record is used after its cursor has moved on."""

    def __init__(self) -> None:
        super().__init__("Record is no longer valid: the cursor has advanced")


# --- Translated database errors ---


class TranslatedDatabaseError(RowSetError):
    """Base for driver errors recognized by a vendor error recognizer.

    Args:
        message: Human readable error text.
        code: Vendor error code or name that was recognized.
    """

    def __init__(self, message: str, *, code: str | int | None = None) -> None:
        self.code = code
        super().__init__(message)


class ConstraintViolationError(TranslatedDatabaseError):
    """Raised on NOT NULL / CHECK and other integrity constraint violations."""


class DuplicateKeyError(ConstraintViolationError):
    """Raised on unique or primary key violations."""


class ReferentialIntegrityError(ConstraintViolationError):
    """Raised on foreign key violations."""


class ConcurrencyError(TranslatedDatabaseError):
    """Raised on serialization failures, deadlocks and lock timeouts."""


class NotFoundError(TranslatedDatabaseError):
    """Raised when the database reports that the target does not exist."""


class ConflictError(TranslatedDatabaseError):
    """Raised when the database reports a state conflict."""


class ValidationError(TranslatedDatabaseError):
    """Raised when the database rejects input as invalid."""


class BusinessRuleError(TranslatedDatabaseError):
    """Raised when the database reports a business rule violation."""


class AuthorizationError(TranslatedDatabaseError):
    """Raised when the database denies the operation."""


# --- Schema ---


class UnsupportedTypeError(RowSetError):
    """Raised when a native type name has no canonical mapping."""

    def __init__(self, type_name: str | None) -> None:
        self.type_name = type_name
        super().__init__(
            f"Database data type '{type_name}' does not have a corresponding Python type mapping"
        )


# --- Adapter ---


class AdapterError(RowSetError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
