"""Data access layer backed by PocketBase."""

from __future__ import annotations

from .repositories import ReferenceRepository, ReservationRepository, SubscriberRepository

__all__ = ["ReferenceRepository", "ReservationRepository", "SubscriberRepository"]
