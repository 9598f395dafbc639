"""Error taxonomy for submission processing.

Only RemoteCreateError is fatal to a submission. Every other error is caught
by the orchestrator, logged, and processing continues.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import SlotKey


class RelayError(Exception):
    """Base exception for the form relay engine."""

    pass


class ValidationSkip(RelayError):
    """A single field or relation could not be resolved and is omitted."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Skipping '{field}': {reason}")


class RemoteError(RelayError):
    """Base class for failures reported by the remote CRM."""

    pass


class RemoteCreateError(RemoteError):
    """The parent item could not be created. Aborts the submission."""

    pass


class RemoteUpdateError(RemoteError):
    """A column patch on an existing item failed."""

    pass


class RemoteChildCreateError(RemoteError):
    """A child item for one demand line could not be created."""

    pass


class RemoteUploadError(RemoteError):
    """A file could not be attached to an item."""

    pass


class PersistenceError(RelayError):
    """A reservation or audit write failed. Already-created remote items stay."""

    pass


@dataclass(frozen=True)
class CapacityDeficit:
    """Shortfall of one demand entry after every eligible slot was tried.

    Reported in the allocation result rather than raised.
    """

    origin: SlotKey
    requested: float
    allocated: float

    @property
    def missing(self) -> float:
        return self.requested - self.allocated

    def __str__(self) -> str:
        return f"{self.origin}: requested {self.requested:g}, allocated {self.allocated:g}, missing {self.missing:g}"
