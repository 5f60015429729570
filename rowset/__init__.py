"""rowset - multi-result-set command execution for DB-API drivers."""

from __future__ import annotations

from rowset.core.command import AsyncDatabaseCommand, Command, DatabaseCommand
from rowset.core.connection import (
    AsyncConnectionManager,
    ConnectionConfig,
    ConnectionManager,
)
from rowset.core.database import AsyncDatabase, Database
from rowset.core.enums import ColumnState, CommandKind, DatabaseBackend, ParameterDirection
from rowset.core.exceptions import (
    AdapterError,
    ArgumentError,
    AuthorizationError,
    BusinessRuleError,
    CardinalityError,
    ColumnMismatchError,
    ColumnNotFoundError,
    ConcurrencyError,
    ConflictError,
    ConnectionError,  # noqa: A004
    ConstraintViolationError,
    DuplicateKeyError,
    ExecutionError,
    MappingError,
    MultipleRowsError,
    NoRowsError,
    NotFoundError,
    ParameterBindingError,
    PoolError,
    RecordStateError,
    ReferentialIntegrityError,
    RowSetError,
    TranslatedDatabaseError,
    UnsupportedTypeError,
    ValidationError,
)
from rowset.core.multiset import CollectionSet, ResultSetSpec, SingleSet
from rowset.core.params import Parameter, ParameterCollection
from rowset.core.record import Record
from rowset.mapping.model import ModelMapper
from rowset.mapping.protocol import FunctionMapper, Mapper
from rowset.schema.classifier import (
    TypeCategory,
    canonical_type,
    canonical_type_name,
    classify,
    zero_value,
)

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    "AsyncConnectionManager",
    # Database / commands
    "Database",
    "AsyncDatabase",
    "Command",
    "DatabaseCommand",
    "AsyncDatabaseCommand",
    "Parameter",
    "ParameterCollection",
    # Result sets
    "ResultSetSpec",
    "CollectionSet",
    "SingleSet",
    "Record",
    # Mapping
    "Mapper",
    "FunctionMapper",
    "ModelMapper",
    # Types
    "TypeCategory",
    "classify",
    "canonical_type",
    "canonical_type_name",
    "zero_value",
    # Enums
    "CommandKind",
    "ColumnState",
    "DatabaseBackend",
    "ParameterDirection",
    # Exceptions
    "RowSetError",
    "ArgumentError",
    "ExecutionError",
    "CardinalityError",
    "NoRowsError",
    "MultipleRowsError",
    "ParameterBindingError",
    "MappingError",
    "ColumnNotFoundError",
    "ColumnMismatchError",
    "RecordStateError",
    "TranslatedDatabaseError",
    "ConstraintViolationError",
    "DuplicateKeyError",
    "ReferentialIntegrityError",
    "ConcurrencyError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "BusinessRuleError",
    "AuthorizationError",
    "UnsupportedTypeError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
