"""Tests for demand entry extraction"""

from __future__ import annotations

from datetime import date

import pytest

from formrelay.core.errors import ValidationSkip
from formrelay.orchestrator.demand import extract_demand_entries, parse_demand_entry


def record(**overrides):
    base = {
        "id": "555",
        "conectar_quadros87__1": "Email",
        "data__1": "10/08/2025",
        "conectar_quadros_mkkcnyr3": "10:00",
        "n_meros_mkkchcmk": 50,
    }
    base.update(overrides)
    return {k: v for k, v in base.items() if v is not None}


class TestParseDemandEntry:
    def test_valid_record(self):
        entry = parse_demand_entry(record(), requester_id="mkt")

        assert entry.channel_name == "Email"
        assert entry.channel_id == "555"
        assert entry.date == date(2025, 8, 10)
        assert entry.timeslot == "10:00"
        assert entry.quantity == 50
        assert entry.requester_id == "mkt"
        assert entry.entry_id is None
        assert entry.raw["conectar_quadros87__1"] == "Email"

    def test_list_values_and_fallback_keys(self):
        raw = record(
            conectar_quadros87__1=None,
            data__1=None,
            conectar_quadros_mkkcjhuc=["SMS"],
            conectar_quadros_mkkbt3fq="2025-08-11",
            conectar_quadros_mkkcnyr3=["08:30"],
            n_meros_mkkchcmk="12,5",
        )

        entry = parse_demand_entry(raw)

        assert entry.channel_name == "SMS"
        assert entry.date == date(2025, 8, 11)
        assert entry.timeslot == "08:30"
        assert entry.quantity == 12.5

    def test_channel_id_alone_is_enough(self):
        entry = parse_demand_entry(record(conectar_quadros87__1=None, id=None, channel_id="555"))

        assert entry.channel_name == "555"
        assert entry.slot.channel_id == "555"

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"conectar_quadros87__1": None, "id": None}, "conectar_quadros87__1"),
            ({"data__1": "32/13/2025"}, "data__1"),
            ({"conectar_quadros_mkkcnyr3": " "}, "conectar_quadros_mkkcnyr3"),
            ({"n_meros_mkkchcmk": 0}, "n_meros_mkkchcmk"),
            ({"n_meros_mkkchcmk": "muitos"}, "n_meros_mkkchcmk"),
        ],
    )
    def test_invalid_records_are_skipped(self, overrides, field):
        with pytest.raises(ValidationSkip) as exc_info:
            parse_demand_entry(record(**overrides))

        assert exc_info.value.field == field

    def test_existing_item_id(self):
        entry = parse_demand_entry(record(item_id=98765))

        assert entry.entry_id == "98765"
        assert entry.has_existing_id

    def test_non_numeric_item_id_is_not_existing(self):
        assert not parse_demand_entry(record(item_id="draft")).has_existing_id


class TestExtractDemandEntries:
    def test_keeps_order_and_collects_skips(self):
        skips: list[ValidationSkip] = []
        records = [record(n_meros_mkkchcmk=10), record(data__1="ontem"), record(n_meros_mkkchcmk=30)]

        entries = extract_demand_entries(records, "mkt", skips)

        assert [e.quantity for e in entries] == [10, 30]
        assert [s.field for s in skips] == ["data__1"]

    def test_empty(self):
        assert extract_demand_entries([]) == []
        assert not parse_demand_entry(record(item_id="²")).has_existing_id
