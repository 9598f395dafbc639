"""Tests for the slot policy rules."""

from __future__ import annotations

import math

import pytest

from formrelay.capacity.policy import DEFAULT_SLOT_POLICY, SlotPolicy

SLOTS = ["07:30", "08:00", "08:30", "09:00", "10:00"]


class TestEffectiveCeiling:
    def test_regular_slot_uses_channel_ceiling(self):
        assert DEFAULT_SLOT_POLICY.effective_ceiling("10:00", 100) == 100

    @pytest.mark.parametrize("slot", ["08:00", "08:30"])
    def test_shared_slots_get_half(self, slot):
        assert DEFAULT_SLOT_POLICY.effective_ceiling(slot, 100) == 50

    @pytest.mark.parametrize("ceiling", [None, math.nan])
    def test_missing_ceiling_is_unlimited(self, ceiling):
        assert DEFAULT_SLOT_POLICY.effective_ceiling("10:00", ceiling) is None


class TestCandidateSlots:
    def test_forward_only_without_wraparound(self):
        assert DEFAULT_SLOT_POLICY.candidate_slots("09:00", SLOTS) == ["10:00"]

    def test_last_slot_has_no_candidates(self):
        assert DEFAULT_SLOT_POLICY.candidate_slots("10:00", SLOTS) == []

    def test_paired_partner_comes_first(self):
        slots = ["08:00", "07:45", "08:30", "09:00"]
        assert DEFAULT_SLOT_POLICY.candidate_slots("08:00", slots) == ["08:30", "07:45", "09:00"]

    def test_backward_partner_is_not_used(self):
        assert DEFAULT_SLOT_POLICY.candidate_slots("08:30", SLOTS) == ["09:00", "10:00"]

    def test_wraparound(self):
        policy = SlotPolicy(wrap_around=True)
        assert policy.candidate_slots("09:00", SLOTS) == ["10:00", "07:30", "08:00", "08:30"]

    def test_unknown_origin_walks_later_slots_only(self):
        slots = ["09:00", "10:00", "11:00"]
        assert DEFAULT_SLOT_POLICY.candidate_slots("09:30", slots) == ["10:00", "11:00"]
        assert DEFAULT_SLOT_POLICY.candidate_slots("12:00", slots) == []

    def test_unknown_origin_with_wraparound(self):
        policy = SlotPolicy(wrap_around=True)
        assert policy.candidate_slots("09:30", ["09:00", "10:00", "11:00"]) == ["10:00", "11:00", "09:00"]

    def test_origin_that_is_not_a_time_has_no_candidates(self):
        assert DEFAULT_SLOT_POLICY.candidate_slots("manh\u00e3", ["09:00", "10:00"]) == []

    def test_partner_lookup(self):
        assert DEFAULT_SLOT_POLICY.partner_of("08:30") == "08:00"
        assert DEFAULT_SLOT_POLICY.partner_of("10:00") is None
