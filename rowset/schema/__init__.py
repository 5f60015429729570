"""Schema helpers - native column type classification."""

from __future__ import annotations

from rowset.schema.classifier import (
    TypeCategory,
    canonical_type,
    canonical_type_name,
    classify,
    is_datetime,
    is_decimal,
    is_integer,
    is_text,
    zero_value,
)

__all__ = [
    "TypeCategory",
    "classify",
    "canonical_type",
    "canonical_type_name",
    "is_text",
    "is_decimal",
    "is_datetime",
    "is_integer",
    "zero_value",
]
