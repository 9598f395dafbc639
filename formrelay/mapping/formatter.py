"""Value formatter: (raw value, column type) -> wire-ready column value.

`format_value` returns None to signal "omit this column", either because the
raw value is absent or because the type-specific parse failed. It never raises
for malformed input.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from ..core.models import ColumnType
from .payload import (
    is_blank,
    normalize_to_string_array,
    normalize_value,
    parse_int,
    parse_number,
    stringify,
)

logger = logging.getLogger(__name__)

_DMY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")
_COMPACT_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")

_TRUTHY = {"true", "1", "yes", "sim", "on", "checked", "v"}


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def parse_date(value: Any) -> date | None:
    """Parse DD/MM/YYYY, YYYY-MM-DD (optionally with a time part), YYYYMMDD or {date: ...}.

    Returns None for anything else, including impossible calendar dates.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, dict):
        return parse_date(value.get("date"))
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        if match := _DMY_RE.match(text):
            day, month, year = (int(g) for g in match.groups())
            return date(year, month, day)
        if match := _ISO_RE.match(text):
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)
        if match := _COMPACT_RE.match(text):
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)
    except ValueError:
        return None
    return None


def to_yyyymmdd(value: Any) -> str:
    """Compact YYYYMMDD form of a date value, "" when it cannot be parsed"""
    parsed = parse_date(value)
    return parsed.strftime("%Y%m%d") if parsed else ""


def to_display_date(value: Any) -> str:
    """DD/MM/YYYY form of a date value, "" when it cannot be parsed"""
    parsed = parse_date(value)
    return parsed.strftime("%d/%m/%Y") if parsed else ""


# ---------------------------------------------------------------------------
# Per-type formatters
# ---------------------------------------------------------------------------


def _format_text(raw: Any) -> Any:
    if isinstance(raw, dict):
        logger.warning("Text column received an object value, omitting it")
        return None
    if isinstance(raw, list):
        logger.warning(f"Text column received a list of {len(raw)} values, joining them")
        return ", ".join(stringify(v) for v in raw)
    return stringify(raw)


def _format_number(raw: Any) -> Any:
    return parse_number(raw)


def _format_checkbox(raw: Any) -> Any:
    if isinstance(raw, dict) and "checked" in raw:
        raw = raw["checked"]
    if isinstance(raw, bool):
        checked = raw
    elif isinstance(raw, (int, float)):
        checked = raw != 0
    else:
        checked = stringify(raw).strip().lower() in _TRUTHY
    return {"checked": checked}


def _format_date(raw: Any) -> Any:
    if isinstance(raw, dict):
        raw = raw.get("date")
        if is_blank(raw):
            return None
    parsed = parse_date(raw)
    if parsed is not None:
        return {"date": parsed.isoformat()}
    # unrecognized formats are forwarded untouched
    return {"date": stringify(raw).strip()}


def _format_status(raw: Any) -> Any:
    if isinstance(raw, dict):
        if "index" in raw or "label" in raw:
            return raw
        return None
    text = stringify(raw).strip()
    if not text:
        return None
    index = parse_int(text)
    if index is not None and index >= 0:
        return {"index": index}
    return {"label": text}


def _format_dropdown(raw: Any) -> Any:
    entries = [e.strip() for e in normalize_to_string_array(raw) if e.strip()]
    if not entries:
        return None
    ids = [parse_int(e) for e in entries]
    if all(i is not None for i in ids):
        return {"ids": ids}
    labels = [e for e, i in zip(entries, ids) if i is None]
    numeric = [e for e, i in zip(entries, ids) if i is not None]
    return {"labels": labels + numeric}


def _format_tags(raw: Any) -> Any:
    entries = [e.strip() for e in normalize_to_string_array(raw) if e.strip()]
    if not entries:
        return None
    return {"tag_ids": [parse_int(e) if parse_int(e) is not None else e for e in entries]}


def _format_file(raw: Any) -> Any:
    if not raw:
        return None
    if isinstance(raw, dict) and "file_ids" in raw:
        raw = raw["file_ids"]
    entries = [e.strip() for e in normalize_to_string_array(raw) if e.strip()]
    if not entries:
        return None
    return {"file_ids": entries}


def _format_board_relation(raw: Any) -> Any:
    if isinstance(raw, dict) and "item_ids" in raw:
        raw = raw["item_ids"]
    item_ids: list[int] = []
    for entry in normalize_to_string_array(raw):
        parsed = parse_int(entry.strip())
        if parsed is not None:
            item_ids.append(parsed)
    if not item_ids:
        return None
    return {"item_ids": item_ids}


def _format_timeline(raw: Any) -> Any:
    if isinstance(raw, dict):
        start, end = raw.get("from"), raw.get("to")
    elif isinstance(raw, str) and "," in raw:
        start, end = (part.strip() for part in raw.split(",", 1))
    elif isinstance(raw, list) and len(raw) == 2:
        start, end = raw
    else:
        return None
    start_date, end_date = parse_date(start), parse_date(end)
    if start_date is None or end_date is None:
        return None
    return {"from": start_date.isoformat(), "to": end_date.isoformat()}


def _person_entry(entry: Any) -> dict[str, Any] | None:
    if isinstance(entry, dict):
        person_id = parse_int(entry.get("id"))
        if person_id is None:
            return None
        return {"id": person_id, "kind": entry.get("kind") or "person"}
    person_id = parse_int(entry)
    if person_id is None:
        return None
    return {"id": person_id, "kind": "person"}


def _format_people(raw: Any) -> Any:
    if isinstance(raw, dict):
        entries = raw.get("personsAndTeams")
        if not isinstance(entries, list):
            return None
    elif isinstance(raw, list):
        entries = raw
    else:
        entries = [e.strip() for e in stringify(raw).split(",")]

    people = [p for p in (_person_entry(e) for e in entries) if p is not None]
    if not people:
        return None
    return {"personsAndTeams": people}


_FORMATTERS: dict[ColumnType, Callable[[Any], Any]] = {
    ColumnType.TEXT: _format_text,
    ColumnType.NUMBER: _format_number,
    ColumnType.CHECKBOX: _format_checkbox,
    ColumnType.DATE: _format_date,
    ColumnType.STATUS: _format_status,
    ColumnType.DROPDOWN: _format_dropdown,
    ColumnType.TAGS: _format_tags,
    ColumnType.FILE: _format_file,
    ColumnType.BOARD_RELATION: _format_board_relation,
    ColumnType.TIMELINE: _format_timeline,
    ColumnType.PEOPLE: _format_people,
}


def format_value(raw: Any, column_type: ColumnType) -> Any:
    """Format a raw value for a column of the given type.

    Args:
        raw: Raw submission value
        column_type: Semantic type of the target column

    Returns:
        The wire-ready value, or None when the column should be omitted
    """
    raw = normalize_value(raw)
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip() and column_type is not ColumnType.TEXT:
        return None
    try:
        return _FORMATTERS[column_type](raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not format {raw!r} as {column_type.value}, omitting it: {e}")
        return None
