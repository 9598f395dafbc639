"""Core domain models for the form relay engine.

These models represent submissions, target columns, reference entities and
capacity bookkeeping. They are independent of PocketBase and of the remote CRM."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class ColumnType(Enum):
    """Semantic column types of the target CRM"""

    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    STATUS = "status"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    PEOPLE = "people"
    TIMELINE = "timeline"
    TAGS = "tags"
    FILE = "file"
    BOARD_RELATION = "board_relation"


class ReservationKind(Enum):
    """Kinds of capacity reservation rows

    SCHEDULED: created by a form submission, always consumes capacity
    RESERVATION: created by an administrator as a hold for a requesting area
    """

    SCHEDULED = "scheduled"
    RESERVATION = "reservation"


class SubmissionStage(Enum):
    """Lifecycle of one submission inside the orchestrator"""

    RECEIVED = "received"
    COLUMNS_BUILT = "columns_built"
    RELATIONS_RESOLVED = "relations_resolved"
    CAPACITY_ADJUSTED = "capacity_adjusted"
    PARENT_CREATED = "parent_created"
    CHILDREN_CREATED = "children_created"
    CROSS_REFERENCED = "cross_referenced"
    RESERVATIONS_PERSISTED = "reservations_persisted"
    DONE = "done"


@dataclass(frozen=True)
class Submission:
    """A form submission as received from the HTTP layer.

    `data` maps field names to raw values; it may hold the reserved
    demand-entry array. Instances are never mutated, `with_data` returns a copy.
    """

    id: str
    timestamp: str
    form_title: str
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Submission:
        """Build a submission from the wire envelope ({id, timestamp, formTitle, data})"""
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise ValueError("Submission 'data' must be an object")
        return cls(
            id=str(payload.get("id") or ""),
            timestamp=str(payload.get("timestamp") or ""),
            form_title=str(payload.get("formTitle") or payload.get("form_title") or ""),
            data=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "timestamp": self.timestamp, "formTitle": self.form_title, "data": self.data}

    def with_data(self, data: dict[str, Any]) -> Submission:
        return Submission(id=self.id, timestamp=self.timestamp, form_title=self.form_title, data=data)


@dataclass(frozen=True)
class ColumnMappingRule:
    """Declarative rule writing one target column from a dotted submission path"""

    column_id: str
    path: str
    column_type: ColumnType
    default: Any = None
    transform: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class FormMapping:
    """Target board plus the column rules for one form"""

    board_id: str
    group_id: str
    rules: tuple[ColumnMappingRule, ...] = ()
    item_name_path: str | None = None
    default_item_name: str = "New Campaign"

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.column_id in seen:
                raise ValueError(f"Column '{rule.column_id}' is written by more than one mapping rule")
            seen.add(rule.column_id)


@dataclass
class ReferenceEntity:
    """Canonical record mirrored from a CRM board (channel, client, product...)"""

    item_id: str
    name: str
    code: str | None = None
    board_id: str | None = None
    status: str | None = None
    team: list[str] = field(default_factory=list)
    product: str | None = None
    max_value: float | None = None
    record_id: str | None = None


@dataclass
class Subscriber:
    """Directory entry for a CRM user"""

    id: str
    email: str
    name: str | None = None


@dataclass(frozen=True)
class SlotKey:
    """Smallest unit of allocatable capacity"""

    channel_id: str
    date: date
    timeslot: str

    def __str__(self) -> str:
        return f"{self.channel_id}|{self.date.isoformat()}|{self.timeslot}"


@dataclass
class Reservation:
    """Durable row consuming part of a slot's ceiling"""

    channel_id: str
    date: date
    timeslot: str
    quantity: float
    kind: ReservationKind = ReservationKind.SCHEDULED
    requester_id: str | None = None
    user_id: str | None = None
    id: str | None = None

    @property
    def slot(self) -> SlotKey:
        return SlotKey(self.channel_id, self.date, self.timeslot)


@dataclass
class DemandEntry:
    """One requested send extracted from a submission's sub-records"""

    channel_name: str
    date: date
    timeslot: str
    quantity: float
    requester_id: str | None = None
    channel_id: str | None = None
    entry_id: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def slot(self) -> SlotKey:
        return SlotKey(self.channel_id or self.channel_name, self.date, self.timeslot)

    @property
    def has_existing_id(self) -> bool:
        """True when the entry already carries a numeric CRM id (duplication/edit mode)"""
        text = str(self.entry_id or "").strip()
        return text.isascii() and text.isdigit()


@dataclass(frozen=True)
class AllocationLine:
    """Quantity placed in one slot"""

    slot: SlotKey
    quantity: float


@dataclass
class AllocationPlan:
    """Ordered allocation of one demand entry across time slots"""

    entry: DemandEntry
    lines: list[AllocationLine] = field(default_factory=list)
    deficit: Any = None  # CapacityDeficit | None

    @property
    def requested(self) -> float:
        return self.entry.quantity

    @property
    def allocated(self) -> float:
        return sum(line.quantity for line in self.lines)

    @property
    def shortfall(self) -> float:
        return self.deficit.missing if self.deficit is not None else 0

    @property
    def is_complete(self) -> bool:
        return self.deficit is None

    @property
    def is_split(self) -> bool:
        return len(self.lines) > 1


@dataclass
class SubmissionResult:
    """Outcome of one processing run"""

    submission_id: str
    item_id: str | None = None
    stage: SubmissionStage = SubmissionStage.RECEIVED
    child_item_ids: list[str] = field(default_factory=list)
    plans: list[AllocationPlan] = field(default_factory=list)
    deficits: list[Any] = field(default_factory=list)
    reservations_saved: int = 0
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
