"""Mapping layer - transform records into typed objects."""

from __future__ import annotations

from rowset.mapping.model import ModelMapper
from rowset.mapping.protocol import FunctionMapper, Mapper, as_mapper

__all__ = [
    "Mapper",
    "FunctionMapper",
    "ModelMapper",
    "as_mapper",
]
