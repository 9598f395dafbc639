"""Child item payload for one allocated demand line.

Each line of an allocation plan becomes one item on the child board. The
payload copies the reference categories as display name and code pairs,
links back to the parent item and carries the extended descriptor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..config.relay_config import RelayConfig
from ..core.constants import (
    DESCRIPTOR_SEPARATOR,
    ENTRY_DATE_FIELD,
    ENTRY_DESCRIPTION_FIELD,
    ENTRY_QUANTITY_FIELD,
    ENTRY_SEQUENCE_FIELD,
    PEOPLE_TARGET_FIELD,
    SEASONALITY_FIELD,
    UNRESOLVED_CODE,
)
from ..core.models import AllocationLine, DemandEntry, ReferenceEntity
from ..mapping.classifier import classify
from ..mapping.column_builder import split_relation_columns
from ..mapping.formatter import format_value
from ..mapping.payload import parse_number, stringify
from ..resolution.descriptor import CategoryRef

logger = logging.getLogger(__name__)

# (display name column, code column) per reference category
CATEGORY_COLUMNS: dict[str, tuple[str, str]] = {
    "client": ("text_mkrrg2hp", "text_mkrrna7e"),
    "format": ("text_mkrra7df", "text_mkrrcnpx"),
    "objective": ("text_mkrr9edr", "text_mkrrmjcy"),
    "appeal": ("text_mkrrxf48", "text_mkrrxpjd"),
    "persona": ("text_mkrrxqng", "text_mkrrmmvv"),
    "area": ("text_mkrrhdh6", "text_mkrrraz2"),
    "product": ("text_mkrrfqft", "text_mkrrjrnw"),
    "segment": ("text_mkrrt32q", "text_mkrrhdf8"),
}
SUBPRODUCT_NAME_COLUMN = "text_mkw8et4w"
SUBPRODUCT_CODE_COLUMN = "text_mkw8jfw0"

TODAY_COLUMN = "date_mkrk5v4c"
DEMAND_DATE_TEXT_COLUMN = "text_mkr3v9k3"
PARENT_PEOPLE_COLUMN = "pessoas5__1"
PARENT_ID_COLUMN = "text_mkrr6jkh"
PARENT_RELATION_COLUMN = "conectar_quadros8__1"
CHANNEL_NAME_COLUMN = "text_mkrrqsk6"
CHANNEL_CODE_COLUMN = "text_mkrr8dta"
TAXONOMY_COLUMN = "texto6__1"
TIMESLOT_TEXT_COLUMN = "text_mkvgjh0w"
DESCRIPTOR_COLUMNS = ("text_mkr5kh2r", "text_mkr3jr1s")

DEFAULT_DESCRIPTION = "Touchpoint sem descrição"


@dataclass
class ChildPayload:
    """Item name plus columns, split into create-time and patch-time sets"""

    item_name: str
    columns: dict[str, Any] = field(default_factory=dict)
    relations: dict[str, Any] = field(default_factory=dict)


def channel_code(channel_name: str, channel: ReferenceEntity | None) -> str:
    """Resolved channel code, else the lower-cased channel name"""
    if channel is not None and channel.code:
        return channel.code
    return channel_name.strip().lower()


def _as_number(quantity: float) -> int | float:
    return int(quantity) if float(quantity).is_integer() else quantity


def build_child_payload(
    entry: DemandEntry,
    line: AllocationLine,
    sequence: int,
    *,
    submission_data: dict[str, Any],
    parent_columns: dict[str, Any],
    parent_item_id: str,
    refs: dict[str, CategoryRef],
    channel: ReferenceEntity | None,
    descriptor: str,
    config: RelayConfig,
    today: date,
) -> ChildPayload:
    """Build the child item for one allocation line.

    Args:
        entry: Demand entry the line belongs to
        line: Allocated slot and quantity
        sequence: 1-based position of the line among all child items
        submission_data: Augmented submission payload
        parent_columns: Columns sent for the parent item
        parent_item_id: Id of the created parent item
        refs: Reference categories (display name and code)
        channel: Channel reference entity, when found
        descriptor: Parent descriptor string
        config: Relay configuration (correlations and defaults)
        today: Creation date
    """
    record = entry.raw
    cv: dict[str, Any] = {}

    for source, target in config.child_from_submission:
        value = record.get(source, submission_data.get(source))
        if value is not None:
            cv[target] = value
    for source, target in config.child_from_parent:
        if parent_columns.get(source) is not None:
            cv[target] = parent_columns[source]

    cv.setdefault(TODAY_COLUMN, {"date": today.isoformat()})
    if record.get(ENTRY_DATE_FIELD) is not None:
        cv.setdefault(DEMAND_DATE_TEXT_COLUMN, stringify(record[ENTRY_DATE_FIELD]))
    if parent_columns.get(PEOPLE_TARGET_FIELD):
        cv[PARENT_PEOPLE_COLUMN] = parent_columns[PEOPLE_TARGET_FIELD]
    cv[PARENT_ID_COLUMN] = str(parent_item_id)

    channel_name = entry.channel_name or str(submission_data.get(SEASONALITY_FIELD) or "").strip()
    code = channel_code(channel_name, channel)
    cv[CHANNEL_NAME_COLUMN] = channel.name if channel is not None and channel.name else channel_name
    cv[CHANNEL_CODE_COLUMN] = code
    cv[TAXONOMY_COLUMN] = code

    for category, (name_column, code_column) in CATEGORY_COLUMNS.items():
        ref = refs.get(category) or CategoryRef()
        cv[name_column] = ref.name
        cv[code_column] = ref.code or UNRESOLVED_CODE

    product = refs.get("product") or CategoryRef()
    cv[SUBPRODUCT_NAME_COLUMN] = product.subproduct_name or ""
    cv[SUBPRODUCT_CODE_COLUMN] = product.subproduct_code or ""

    cv.setdefault(ENTRY_DATE_FIELD, record.get(ENTRY_DATE_FIELD) or "")
    seq = parse_number(record.get(ENTRY_SEQUENCE_FIELD))
    cv.setdefault(ENTRY_SEQUENCE_FIELD, _as_number(seq) if seq is not None else sequence)

    description = str(cv.get(ENTRY_DESCRIPTION_FIELD) or record.get(ENTRY_DESCRIPTION_FIELD) or "").strip()
    cv[ENTRY_DESCRIPTION_FIELD] = description or DEFAULT_DESCRIPTION
    for column_id, value in config.child_defaults:
        cv.setdefault(column_id, value)

    cv[ENTRY_QUANTITY_FIELD] = _as_number(line.quantity)
    cv[TIMESLOT_TEXT_COLUMN] = line.slot.timeslot
    cv[PARENT_RELATION_COLUMN] = str(parent_item_id)

    if descriptor:
        extended = DESCRIPTOR_SEPARATOR.join([descriptor, stringify(cv[ENTRY_SEQUENCE_FIELD]), code])
        for column_id in DESCRIPTOR_COLUMNS:
            cv[column_id] = extended

    if description:
        item_name = description
    else:
        item_name = f"Touchpoint - {code}" if code else "Touchpoint"

    base, relations = split_relation_columns(cv)
    allowed = set(config.child_relation_columns)
    relations = {k: v for k, v in relations.items() if k in allowed}

    columns: dict[str, Any] = {}
    for column_id, value in base.items():
        formatted = format_value(value, classify(column_id))
        if formatted is not None:
            columns[column_id] = formatted
    return ChildPayload(item_name=item_name, columns=columns, relations=relations)
