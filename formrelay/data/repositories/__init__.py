"""Data repositories for the form relay engine.

PocketBase-backed implementations of the lookup and persistence collaborators."""

from __future__ import annotations

from .reference_repository import ReferenceRepository
from .reservation_repository import ReservationRepository
from .subscriber_repository import SubscriberRepository

__all__ = [
    "ReferenceRepository",
    "ReservationRepository",
    "SubscriberRepository",
]
