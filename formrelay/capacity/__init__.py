"""Capacity allocation across (channel, date, time slot) keys."""

from __future__ import annotations

from .allocator import CapacityAllocator, allocate, counts_against, reserved_quantity
from .policy import DEFAULT_SLOT_POLICY, SlotPolicy

__all__ = [
    "DEFAULT_SLOT_POLICY",
    "CapacityAllocator",
    "SlotPolicy",
    "allocate",
    "counts_against",
    "reserved_quantity",
]
