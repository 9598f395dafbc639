"""Abstract interfaces (protocols) for the collaborators injected into the engine.

The PocketBase repositories and the CRM client implement these; tests pass
mocks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Protocol

from .models import ReferenceEntity, Reservation, Subscriber


class ReferenceLookup(Protocol):
    """Read access to mirrored CRM items"""

    def find_by_name(self, name: str, board_id: str | None = None) -> ReferenceEntity | None:
        """Exact name match, optionally restricted to one board"""
        ...

    def find_by_id(self, item_id: str, board_id: str | None = None) -> ReferenceEntity | None:
        """Lookup by CRM item id"""
        ...

    def search(self, term: str, limit: int = 1) -> list[ReferenceEntity]:
        """Case-insensitive contains-match on name, code or team"""
        ...

    def find_subproduct(self, product_name: str, board_id: str | None = None) -> ReferenceEntity | None:
        """Active subproduct whose product column equals product_name"""
        ...

    def find_board_id(self, board_name: str) -> str | None:
        """Local board id for a board name"""
        ...

    def list_time_slots(self, board_id: str) -> list[str]:
        """Active time slot labels of a board, ascending"""
        ...


class SubscriberDirectory(Protocol):
    """Directory of CRM users"""

    def find_by_email(self, email: str) -> Subscriber | None: ...


class ReservationStore(Protocol):
    """Durable capacity reservations"""

    def list_reservations(self, channel_id: str, on: date, timeslot: str | None = None) -> list[Reservation]: ...

    def save(self, reservation: Reservation) -> Reservation: ...


class CRMClient(Protocol):
    """Remote item-tracking service"""

    async def create_item(self, board_id: str, group_id: str, name: str, columns: dict[str, Any]) -> str: ...

    async def update_columns(self, item_id: str, board_id: str, columns: dict[str, Any]) -> None: ...

    async def upload_file(self, item_id: str, column_id: str, file_path: str) -> str: ...


class AuditSink(ABC):
    """Best-effort destination for payload snapshots"""

    @abstractmethod
    def dump(self, obj: dict[str, Any], filename_prefix: str) -> None:
        """Persist a snapshot; must never raise"""
        pass
