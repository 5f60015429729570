"""Record-to-model mapper.

Supports dataclasses, Pydantic models, and plain classes.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from rowset.core.exceptions import ColumnMismatchError
from rowset.core.record import Record

T = TypeVar("T")


class ModelMapper(Generic[T]):
    """Record-to-model mapper.

    Detection order:
    1. Pydantic BaseModel -> model_validate(row)
    2. dataclass -> target_class(**row), unknown columns dropped
    3. Plain class -> target_class(**row)

    Args:
        target_class: The class to construct from record data.
        aliases: Optional column-name to field-name mapping.
    """

    def __init__(
        self,
        target_class: type[T],
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._target_class = target_class
        self._aliases = aliases
        self._is_pydantic = isinstance(target_class, type) and issubclass(target_class, BaseModel)
        self._fields: frozenset[str] | None = None
        if dataclasses.is_dataclass(target_class):
            self._fields = frozenset(
                f.name for f in dataclasses.fields(target_class) if f.init
            )

    def _apply_aliases(self, row: dict[str, Any]) -> dict[str, Any]:
        if not self._aliases:
            return row
        return {self._aliases.get(key, key): value for key, value in row.items()}

    def map_record(self, record: Record) -> T:
        """Map the current record to a target_class instance."""
        return self.map_one(record.to_dict())

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single column dict to a target_class instance."""
        row = self._apply_aliases(row)

        if self._is_pydantic:
            try:
                return self._target_class.model_validate(row)  # type: ignore[attr-defined, no-any-return]
            except PydanticValidationError as e:
                raise ColumnMismatchError(
                    self._target_class.__name__,
                    [".".join(str(p) for p in err["loc"]) for err in e.errors()],
                ) from e

        if self._fields is not None:
            row = {key: value for key, value in row.items() if key in self._fields}

        try:
            return self._target_class(**row)
        except TypeError as e:
            raise ColumnMismatchError(self._target_class.__name__, [str(e)]) from e
