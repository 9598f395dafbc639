"""Correlation rules that augment the raw payload before columns are built.

Each rule copies one incoming form key into one or more additional keys. The
original keys are kept, so later stages can still read them. After the rules
run, the demand-entry count and the earliest demand date are derived from the
demand sub-records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.constants import (
    APPEAL_FIELD,
    AREA_FIELD,
    CAMPAIGN_DATE_FIELD,
    CLIENT_FIELD,
    DEMAND_COUNT_FIELD,
    ENTRY_DATE_FIELD,
    FORMAT_FIELD,
    OBJECTIVE_FIELD,
    PEOPLE_SOURCE_FIELD,
    PEOPLE_TARGET_FIELD,
    PERSONA_FIELD,
    PRODUCT_FIELD,
    SEASONALITY_FIELD,
    SEGMENT_FIELD,
    SUBITEMS_ALIASES,
    SUBITEMS_FIELD,
)
from .formatter import parse_date
from .payload import parse_number

logger = logging.getLogger(__name__)


class MappingFormat(Enum):
    """Coercion applied when a rule copies a value"""

    IDENTITY = "identity"
    LABEL = "label"
    DATE = "date"
    NUMBER = "number"


@dataclass(frozen=True)
class FieldMappingRule:
    """Copy `source` into every key of `targets`, one format per target (or one for all)"""

    source: str
    targets: tuple[str, ...]
    formats: tuple[MappingFormat, ...] = (MappingFormat.IDENTITY,)

    def format_for(self, index: int) -> MappingFormat:
        if index < len(self.formats):
            return self.formats[index]
        return self.formats[0] if self.formats else MappingFormat.IDENTITY


DEFAULT_FIELD_MAPPINGS: tuple[FieldMappingRule, ...] = (
    FieldMappingRule("label__1", ("label__1",), (MappingFormat.LABEL,)),
    FieldMappingRule("name", ("name",)),
    FieldMappingRule(PEOPLE_SOURCE_FIELD, (PEOPLE_TARGET_FIELD,)),
    # Reference lookups are mirrored into plain text columns
    FieldMappingRule(PERSONA_FIELD, ("text_mkvhvcw4",)),
    FieldMappingRule(FORMAT_FIELD, ("text_mkvhedf5",)),
    FieldMappingRule(CLIENT_FIELD, ("text_mkvhz8g3",)),
    FieldMappingRule(SEASONALITY_FIELD, ("text_mkvhgbp8",)),
    FieldMappingRule(APPEAL_FIELD, ("text_mkvhv5ma",)),
    FieldMappingRule(PRODUCT_FIELD, ("text_mkvhwyzr",)),
    FieldMappingRule(OBJECTIVE_FIELD, ("text_mkvhqgvn",)),
    FieldMappingRule(AREA_FIELD, ("text_mkvh2z7j",)),
    FieldMappingRule(SEGMENT_FIELD, ("text_mkvhammc",)),
    FieldMappingRule("briefing_type", ("sele__o_individual9__1",)),
    FieldMappingRule("briefing_objective", ("sele__o_m_ltipla__1",)),
    FieldMappingRule("briefing_target_audience", ("sele__o_m_ltipla1__1",)),
    FieldMappingRule("briefing_observations", ("texto_curto23__1",)),
    FieldMappingRule("texto_curto_links_validacao", ("long_text_mkrd6mnt",)),
    FieldMappingRule(DEMAND_COUNT_FIELD, (DEMAND_COUNT_FIELD,), (MappingFormat.NUMBER,)),
    FieldMappingRule(ENTRY_DATE_FIELD, (CAMPAIGN_DATE_FIELD,), (MappingFormat.DATE,)),
    FieldMappingRule("dup__of_c_digo_canal____1", ("texto2__1",)),
)


def _apply_format(value: Any, fmt: MappingFormat) -> Any:
    if value is None:
        return value
    if fmt is MappingFormat.NUMBER:
        number = parse_number(value)
        return value if number is None else number
    # Dates stay as strings here, the formatter normalizes them
    return value


def get_demand_records(data: dict[str, Any]) -> list[dict[str, Any]] | None:
    """The demand sub-record array under any of its aliases, None when absent"""
    for key in SUBITEMS_ALIASES:
        records = data.get(key)
        if isinstance(records, list):
            return [r for r in records if isinstance(r, dict)]
    return None


def earliest_demand_date(records: list[dict[str, Any]]) -> str | None:
    """Original string of the earliest parseable demand date"""
    dated = []
    for record in records:
        raw = record.get(ENTRY_DATE_FIELD)
        if isinstance(raw, str) and raw.strip():
            parsed = parse_date(raw)
            if parsed is not None:
                dated.append((parsed, raw))
    if not dated:
        return None
    return min(dated, key=lambda pair: pair[0])[1]


def apply_field_mappings(
    data: dict[str, Any],
    rules: tuple[FieldMappingRule, ...] = DEFAULT_FIELD_MAPPINGS,
) -> dict[str, Any]:
    """Return a new payload with every correlation rule applied.

    The input mapping is not modified.
    """
    output = dict(data)

    for rule in rules:
        if rule.source not in data:
            continue
        original = data[rule.source]
        for index, target in enumerate(rule.targets):
            output[target] = _apply_format(original, rule.format_for(index))

    records = get_demand_records(data)
    if records is not None:
        output[SUBITEMS_FIELD] = records
        output[DEMAND_COUNT_FIELD] = len(records)
        earliest = earliest_demand_date(records)
        if earliest is not None:
            output[CAMPAIGN_DATE_FIELD] = earliest
    else:
        output[DEMAND_COUNT_FIELD] = 0

    logger.debug(f"Applied {len(rules)} field mapping rules, {len(output) - len(data)} keys added")
    return output
