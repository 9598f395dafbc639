"""Helpers for reading PocketBase records.

The PocketBase SDK returns Record objects with attribute access, tests and
some call sites pass plain dicts; both are accepted here."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Record object or a dict"""
    if isinstance(record, dict):
        return record.get(name, default)
    if hasattr(record, name):
        value = getattr(record, name)
        return default if value is None else value
    return default


def escape_filter_value(value: str) -> str:
    """Escape a string value for use in PocketBase filter queries.

    Single quotes in values must be escaped by doubling them to prevent
    filter injection (e.g., D'Ávila -> D''Ávila).
    """
    return value.replace("'", "''")


def parse_json_list(value: Any) -> list[str]:
    """Parse a JSON list field; PocketBase may return it decoded or as a string"""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON list field value: {value!r}")
            return []
        if isinstance(decoded, list):
            return [str(v) for v in decoded if v is not None]
    return []
