"""
Mapping - turns raw form payloads into typed CRM column values.

This package contains:
- classify: field name -> semantic column type
- format_value: (raw value, column type) -> wire-ready value
- apply_field_mappings: correlation rules augmenting the raw payload
- build_columns: the parent column set, with relation columns withheld
"""

from __future__ import annotations

from .classifier import PATTERN_TABLE, classify
from .column_builder import ColumnSet, build_columns, split_relation_columns
from .field_mappings import DEFAULT_FIELD_MAPPINGS, FieldMappingRule, MappingFormat, apply_field_mappings
from .formatter import format_value, parse_date, to_display_date, to_yyyymmdd
from .payload import get_value_by_path, normalize_to_string_array

__all__ = [
    "PATTERN_TABLE",
    "classify",
    "format_value",
    "parse_date",
    "to_display_date",
    "to_yyyymmdd",
    "get_value_by_path",
    "normalize_to_string_array",
    # Payload augmentation
    "DEFAULT_FIELD_MAPPINGS",
    "FieldMappingRule",
    "MappingFormat",
    "apply_field_mappings",
    # Column building
    "ColumnSet",
    "build_columns",
    "split_relation_columns",
]
