"""Core domain models, errors and collaborator interfaces."""

from __future__ import annotations

from .errors import (
    CapacityDeficit,
    PersistenceError,
    RelayError,
    RemoteChildCreateError,
    RemoteCreateError,
    RemoteError,
    RemoteUpdateError,
    RemoteUploadError,
    ValidationSkip,
)
from .models import (
    AllocationLine,
    AllocationPlan,
    ColumnMappingRule,
    ColumnType,
    DemandEntry,
    FormMapping,
    ReferenceEntity,
    Reservation,
    ReservationKind,
    SlotKey,
    Submission,
    SubmissionResult,
    SubmissionStage,
    Subscriber,
)

__all__ = [
    # Models
    "AllocationLine",
    "AllocationPlan",
    "ColumnMappingRule",
    "ColumnType",
    "DemandEntry",
    "FormMapping",
    "ReferenceEntity",
    "Reservation",
    "ReservationKind",
    "SlotKey",
    "Submission",
    "SubmissionResult",
    "SubmissionStage",
    "Subscriber",
    # Errors
    "CapacityDeficit",
    "PersistenceError",
    "RelayError",
    "RemoteChildCreateError",
    "RemoteCreateError",
    "RemoteError",
    "RemoteUpdateError",
    "RemoteUploadError",
    "ValidationSkip",
]
