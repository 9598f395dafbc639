"""Capacity allocator.

Places each demand entry's quantity into its requested (channel, date, slot)
and spills what does not fit into the following slots of the same day. A
slot never receives more than its ceiling minus what is already reserved;
whatever cannot be placed anywhere is reported as a CapacityDeficit.

The allocator only reads: persisting reservations for the resulting plans is
the orchestrator's job.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from datetime import date

from ..core.errors import CapacityDeficit
from ..core.models import (
    AllocationLine,
    AllocationPlan,
    DemandEntry,
    Reservation,
    ReservationKind,
    SlotKey,
)
from .policy import DEFAULT_SLOT_POLICY, SlotPolicy

logger = logging.getLogger(__name__)

CeilingLookup = Callable[[str], "float | None"]
ReservationsLookup = Callable[[str, date], "list[Reservation]"]
TimeSlotsLookup = Callable[[str], "Sequence[str]"]

# Quantities below this are treated as zero
_EPSILON = 1e-9


def _quantity(value: float | None) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def counts_against(reservation: Reservation, requester_id: str | None) -> bool:
    """Whether a reservation consumes capacity for the given requester.

    Scheduled rows always count. Reservation rows count unless they belong to
    the same requester; with an unknown requester every row counts.
    """
    if reservation.kind is ReservationKind.SCHEDULED:
        return True
    return requester_id is None or reservation.requester_id != requester_id


def reserved_quantity(reservations: Sequence[Reservation], timeslot: str, requester_id: str | None) -> float:
    """Sum of the rows at `timeslot` that consume capacity for `requester_id`"""
    return sum(
        _quantity(r.quantity) for r in reservations if r.timeslot == timeslot and counts_against(r, requester_id)
    )


class CapacityAllocator:
    """Greedy, deterministic allocator of demand entries across time slots"""

    def __init__(
        self,
        get_ceiling: CeilingLookup,
        get_reservations: ReservationsLookup,
        time_slots: Sequence[str] | TimeSlotsLookup,
        policy: SlotPolicy = DEFAULT_SLOT_POLICY,
    ) -> None:
        """Initialize the allocator.

        Args:
            get_ceiling: channel id -> maximum quantity per slot, None for unlimited
            get_reservations: (channel id, date) -> existing reservation rows
            time_slots: Ordered slot labels, or a channel id -> labels function
            policy: Slot walking and ceiling rules
        """
        self.get_ceiling = get_ceiling
        self.get_reservations = get_reservations
        self.time_slots = time_slots
        self.policy = policy

    def allocate(self, entries: Sequence[DemandEntry]) -> list[AllocationPlan]:
        """Produce one allocation plan per entry, in input order"""
        staged: dict[SlotKey, float] = {}
        ceilings: dict[str, float | None] = {}
        reservations: dict[tuple[str, date], list[Reservation]] = {}

        plans = []
        for entry in entries:
            ledger = staged if self.policy.stage_within_submission else {}
            plan = self._allocate_entry(entry, ledger, ceilings, reservations)
            plans.append(plan)
            if plan.deficit is not None:
                logger.warning(f"Capacity deficit: {plan.deficit}")
        return plans

    def _slots_for(self, channel_id: str) -> Sequence[str]:
        if callable(self.time_slots):
            return self.time_slots(channel_id)
        return self.time_slots

    def _allocate_entry(
        self,
        entry: DemandEntry,
        staged: dict[SlotKey, float],
        ceilings: dict[str, float | None],
        reservations: dict[tuple[str, date], list[Reservation]],
    ) -> AllocationPlan:
        origin = entry.slot
        requested = _quantity(entry.quantity)
        plan = AllocationPlan(entry=entry)
        if requested <= _EPSILON:
            return plan

        channel_id = origin.channel_id
        if channel_id not in ceilings:
            ceilings[channel_id] = self.get_ceiling(channel_id)
        ceiling = ceilings[channel_id]

        key = (channel_id, origin.date)
        if key not in reservations:
            reservations[key] = list(self.get_reservations(channel_id, origin.date))
        rows = reservations[key]

        remaining = requested
        labels = [origin.timeslot, *self.policy.candidate_slots(origin.timeslot, self._slots_for(channel_id))]
        for label in labels:
            slot = SlotKey(channel_id, origin.date, label)
            available = self._available(slot, ceiling, rows, staged, entry.requester_id)
            take = min(remaining, available)
            if take > _EPSILON:
                plan.lines.append(AllocationLine(slot=slot, quantity=take))
                staged[slot] = staged.get(slot, 0.0) + take
                remaining -= take
            if remaining <= _EPSILON:
                break

        if remaining > _EPSILON:
            plan.deficit = CapacityDeficit(origin=origin, requested=requested, allocated=requested - remaining)
        elif plan.is_split:
            logger.info(f"Split demand for {origin} across {len(plan.lines)} slots")
        return plan

    def _available(
        self,
        slot: SlotKey,
        ceiling: float | None,
        rows: list[Reservation],
        staged: dict[SlotKey, float],
        requester_id: str | None,
    ) -> float:
        effective = self.policy.effective_ceiling(slot.timeslot, ceiling)
        if effective is None:
            logger.debug(f"{slot}: no ceiling, unlimited")
            return math.inf
        reserved = reserved_quantity(rows, slot.timeslot, requester_id)
        in_flight = staged.get(slot, 0.0)
        available = max(0.0, effective - reserved - in_flight)
        logger.debug(
            f"{slot}: ceiling {effective:g}, reserved {reserved:g}, staged {in_flight:g}, available {available:g}"
        )
        return available


def allocate(
    entries: Sequence[DemandEntry],
    get_ceiling: CeilingLookup,
    get_reservations: ReservationsLookup,
    time_slots: Sequence[str] | TimeSlotsLookup,
    policy: SlotPolicy = DEFAULT_SLOT_POLICY,
) -> list[AllocationPlan]:
    """Allocate demand entries; see CapacityAllocator"""
    return CapacityAllocator(get_ceiling, get_reservations, time_slots, policy).allocate(entries)
