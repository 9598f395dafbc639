"""Extraction of demand entries from a submission's sub-records."""

from __future__ import annotations

import logging
from typing import Any

from ..core.constants import (
    ENTRY_CHANNEL_FALLBACK_FIELD,
    ENTRY_CHANNEL_FIELD,
    ENTRY_CHANNEL_ID_ALIASES,
    ENTRY_DATE_FALLBACK_FIELD,
    ENTRY_DATE_FIELD,
    ENTRY_ITEM_ID_FIELD,
    ENTRY_QUANTITY_FIELD,
    ENTRY_TIMESLOT_FIELD,
)
from ..core.errors import ValidationSkip
from ..core.models import DemandEntry
from ..mapping.formatter import parse_date
from ..mapping.payload import first_present, normalize_to_string_array, parse_number, stringify

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    values = normalize_to_string_array(value)
    return values[0].strip() if values else ""


def parse_demand_entry(record: dict[str, Any], requester_id: str | None = None) -> DemandEntry:
    """Build a DemandEntry from one sub-record.

    Raises:
        ValidationSkip: when channel, date, slot or a positive quantity is missing
    """
    channel_name = _text(first_present(record, (ENTRY_CHANNEL_FIELD, ENTRY_CHANNEL_FALLBACK_FIELD)))
    raw_date = first_present(record, (ENTRY_DATE_FIELD, ENTRY_DATE_FALLBACK_FIELD))
    timeslot = _text(record.get(ENTRY_TIMESLOT_FIELD))
    quantity = parse_number(record.get(ENTRY_QUANTITY_FIELD))
    channel_id = _text(first_present(record, ENTRY_CHANNEL_ID_ALIASES)) or None

    if not channel_name and not channel_id:
        raise ValidationSkip(ENTRY_CHANNEL_FIELD, "demand entry has no channel")
    on = parse_date(_text(raw_date))
    if on is None:
        raise ValidationSkip(ENTRY_DATE_FIELD, f"demand entry has no valid date ({raw_date!r})")
    if not timeslot:
        raise ValidationSkip(ENTRY_TIMESLOT_FIELD, "demand entry has no time slot")
    if quantity is None or quantity <= 0:
        raw_quantity = record.get(ENTRY_QUANTITY_FIELD)
        raise ValidationSkip(ENTRY_QUANTITY_FIELD, f"demand entry has no positive quantity ({raw_quantity!r})")

    entry_id = record.get(ENTRY_ITEM_ID_FIELD)
    return DemandEntry(
        channel_name=channel_name or str(channel_id),
        date=on,
        timeslot=timeslot,
        quantity=quantity,
        requester_id=requester_id,
        channel_id=channel_id,
        entry_id=stringify(entry_id) if entry_id not in (None, "") else None,
        raw=dict(record),
    )


def extract_demand_entries(
    records: list[dict[str, Any]],
    requester_id: str | None = None,
    skips: list[ValidationSkip] | None = None,
) -> list[DemandEntry]:
    """Parse every valid sub-record, in order; invalid ones are logged and dropped"""
    entries = []
    for index, record in enumerate(records):
        try:
            entries.append(parse_demand_entry(record, requester_id))
        except ValidationSkip as skip:
            logger.warning(f"Demand entry {index}: {skip}")
            if skips is not None:
                skips.append(skip)
    return entries
