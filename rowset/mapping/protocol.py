"""Mapper protocol.

All mappers implement this interface. The command executor calls
map_record once per row, in arrival order, while the record is valid.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from rowset.core.exceptions import ArgumentError
from rowset.core.record import Record

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Mapper(Protocol[T_co]):
    """Base mapper protocol."""

    def map_record(self, record: Record) -> T_co:
        """Map the current record to a target object."""
        ...


class FunctionMapper(Generic[T]):
    """Adapts a plain ``record -> value`` callable to the Mapper protocol."""

    def __init__(self, func: Callable[[Record], T]) -> None:
        self._func = func

    def map_record(self, record: Record) -> T:
        return self._func(record)


def as_mapper(mapper: Any) -> Mapper[Any]:
    """Return *mapper* as a Mapper, wrapping plain callables.

    Raises:
        ArgumentError: If *mapper* is None or neither a Mapper nor callable.
    """
    if mapper is None:
        raise ArgumentError("A mapper must be supplied")
    if isinstance(mapper, Mapper):
        return mapper
    if callable(mapper):
        return FunctionMapper(mapper)
    raise ArgumentError(f"Not a mapper: {mapper!r}")
