"""Builds the parent item's column set from a submission.

Every non-excluded payload key is classified and formatted, then the optional
declarative mapping rules are applied on top. Columns linking to other boards
are withheld from the create call: they still hold raw names and are resolved
into item ids by the orchestrator afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.constants import (
    CAMPAIGN_DATE_FIELD,
    CAMPAIGN_DATE_ISO_FIELD,
    CAMPAIGN_DATE_TEXT_FIELD,
    ENTRY_DATE_FIELD,
    EXCLUDED_FIELDS,
    RELATION_PREFIX,
    SEND_DATE_FIELD,
)
from ..core.models import ColumnType, FormMapping, Submission
from .classifier import classify
from .field_mappings import get_demand_records
from .formatter import format_value, parse_date, to_yyyymmdd
from .payload import get_value_by_path

logger = logging.getLogger(__name__)


@dataclass
class ColumnSet:
    """Parent columns split into what is sent on create and what is patched later"""

    base: dict[str, Any] = field(default_factory=dict)
    relations: dict[str, Any] = field(default_factory=dict)

    @property
    def campaign_date_text(self) -> str:
        """YYYYMMDD token of the campaign date, "" when absent"""
        return str(self.base.get(CAMPAIGN_DATE_TEXT_FIELD) or "")

    def all_columns(self) -> dict[str, Any]:
        return {**self.base, **self.relations}


def is_relation_column(column_id: str) -> bool:
    return column_id.startswith(RELATION_PREFIX) or column_id == "link_to_itens_filhos__1"


def split_relation_columns(columns: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a column mapping into (base, relations)"""
    base: dict[str, Any] = {}
    relations: dict[str, Any] = {}
    for column_id, value in columns.items():
        if is_relation_column(column_id):
            relations[column_id] = value
        else:
            base[column_id] = value
    return base, relations


def closest_demand_date(records: list[dict[str, Any]], today: date) -> str | None:
    """Raw date string of the demand record whose date is closest to `today`.

    Ties keep the first record.
    """
    closest: str | None = None
    closest_diff: int | None = None
    for record in records:
        raw = record.get(ENTRY_DATE_FIELD)
        if not raw:
            continue
        parsed = parse_date(str(raw))
        if parsed is None:
            continue
        diff = abs((parsed - today).days)
        if closest_diff is None or diff < closest_diff:
            closest, closest_diff = str(raw), diff
    return closest


def _put(columns: dict[str, Any], column_id: str, raw: Any, column_type: ColumnType) -> None:
    formatted = format_value(raw, column_type)
    if formatted is not None:
        columns[column_id] = formatted


def build_columns(
    submission: Submission,
    mapping: FormMapping | None = None,
    excluded: Collection[str] = EXCLUDED_FIELDS,
    today: date | None = None,
) -> ColumnSet:
    """Classify and format a submission's payload into parent columns.

    Args:
        submission: Submission whose data was already augmented by the field mappings
        mapping: Optional declarative rules applied after the raw keys
        excluded: Keys never copied verbatim
        today: Reference date for picking the send date among demand entries

    Returns:
        ColumnSet with board-relation columns withheld in `relations`
    """
    today = today or date.today()
    data = submission.data
    columns: dict[str, Any] = {}

    records = get_demand_records(data) or []
    send_date = closest_demand_date(records, today) if records else None
    if send_date:
        logger.debug(f"Using demand date closest to {today.isoformat()} for {SEND_DATE_FIELD}: {send_date}")

    for key, value in data.items():
        if key in excluded or value is None:
            continue
        if is_relation_column(key):
            # names are resolved later, keep them raw
            columns[key] = value
            continue
        if key == SEND_DATE_FIELD and send_date:
            value = send_date
        _put(columns, key, value, classify(key))

    if SEND_DATE_FIELD not in columns and send_date:
        _put(columns, SEND_DATE_FIELD, send_date, ColumnType.DATE)

    if mapping is not None:
        envelope = submission.to_dict()
        for rule in mapping.rules:
            if rule.column_id in excluded:
                continue
            value = get_value_by_path(envelope, rule.path)
            if rule.column_id == SEND_DATE_FIELD and send_date:
                value = send_date
            if rule.transform is not None and value is not None:
                try:
                    value = rule.transform(value)
                except Exception as e:
                    logger.warning(f"Transform for column {rule.column_id} failed, skipping it: {e}")
                    continue
            if value is None:
                value = rule.default
            if value is None:
                continue
            if is_relation_column(rule.column_id):
                columns[rule.column_id] = value
            else:
                _put(columns, rule.column_id, value, rule.column_type)

    _derive_campaign_dates(columns, data)

    base, relations = split_relation_columns(columns)
    logger.debug(f"Built {len(base)} base columns and {len(relations)} relation columns")
    return ColumnSet(base=base, relations=relations)


def _derive_campaign_dates(columns: dict[str, Any], data: dict[str, Any]) -> None:
    """Fill the ISO date and YYYYMMDD text columns from the campaign date when missing"""
    normalized = columns.get(CAMPAIGN_DATE_FIELD)
    date_str: Any = None
    if isinstance(normalized, dict):
        date_str = normalized.get("date")
    if not date_str:
        date_str = data.get(CAMPAIGN_DATE_FIELD)
    parsed = parse_date(date_str)
    if parsed is None:
        return
    columns.setdefault(CAMPAIGN_DATE_ISO_FIELD, {"date": parsed.isoformat()})
    columns.setdefault(CAMPAIGN_DATE_TEXT_FIELD, to_yyyymmdd(parsed))
