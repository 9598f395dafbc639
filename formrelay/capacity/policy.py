"""Business rules applied by the capacity allocator.

Kept separate from the allocation walk so they can be configured per
deployment instead of being hard-coded in the algorithm."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SlotPolicy:
    """Slot walking and ceiling rules

    Attributes:
        shared_slots: Slot labels that split one channel ceiling between them
        shared_divisor: Share of the ceiling each shared slot receives (1/n)
        paired_slots: Pairs of labels treated as directly adjacent, so an
            overflow from one lands on its partner before any other later slot
        wrap_around: Whether the walk may continue at the first slot of the day
        stage_within_submission: Whether earlier entries of the same
            submission count against later ones
    """

    shared_slots: frozenset[str] = frozenset({"08:00", "08:30"})
    shared_divisor: int = 2
    paired_slots: tuple[tuple[str, str], ...] = (("08:00", "08:30"),)
    wrap_around: bool = False
    stage_within_submission: bool = True

    def effective_ceiling(self, timeslot: str, ceiling: float | None) -> float | None:
        """Ceiling of one slot; None means unlimited"""
        if ceiling is None or (isinstance(ceiling, float) and math.isnan(ceiling)):
            return None
        if timeslot in self.shared_slots and self.shared_divisor > 0:
            return ceiling / self.shared_divisor
        return ceiling

    def partner_of(self, timeslot: str) -> str | None:
        for first, second in self.paired_slots:
            if timeslot == first:
                return second
            if timeslot == second:
                return first
        return None

    def candidate_slots(self, origin: str, time_slots: Sequence[str]) -> list[str]:
        """Slots to try after `origin`, in order.

        Only slots after the origin are returned unless wrap_around is set. An
        origin missing from the list walks the slots whose time is later than
        it, and nothing when the origin is not a time. A forward paired partner
        is moved to the front.
        """
        slots = [s for s in time_slots if s]
        if origin in slots:
            index = slots.index(origin)
            forward = slots[index + 1 :]
            if self.wrap_around:
                forward += slots[:index]
        else:
            forward = _later_slots(origin, slots)
            if self.wrap_around:
                forward += [s for s in slots if s not in forward]

        partner = self.partner_of(origin)
        if partner is not None and partner in forward:
            forward.remove(partner)
            forward.insert(0, partner)
        return [s for s in forward if s != origin]


def _minutes(label: str) -> int | None:
    hours, _, minutes = label.strip().partition(":")
    try:
        return int(hours) * 60 + int(minutes or 0)
    except ValueError:
        return None


def _later_slots(origin: str, slots: Sequence[str]) -> list[str]:
    start = _minutes(origin)
    if start is None:
        return []
    later = []
    for slot in slots:
        minutes = _minutes(slot)
        if minutes is not None and minutes > start:
            later.append(slot)
    return later


DEFAULT_SLOT_POLICY = SlotPolicy()
