"""Reservation repository for data access.

Durable capacity rows per (channel, date, time slot). Rows are written by
form submissions (kind `scheduled`) and by administrators (kind `reservation`)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pocketbase import PocketBase

from ...core.errors import PersistenceError
from ...core.models import Reservation, ReservationKind
from ...mapping.formatter import parse_date
from ..records import escape_filter_value, get_field

logger = logging.getLogger(__name__)

RESERVATIONS_COLLECTION = "reservations"


class ReservationRepository:
    """Repository for capacity reservations"""

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    def list_reservations(self, channel_id: str, on: date, timeslot: str | None = None) -> list[Reservation]:
        """All reservation rows of a channel on one date, optionally for one slot"""
        filter_str = f"channel_id = '{escape_filter_value(channel_id)}' && date = '{on.isoformat()}'"
        if timeslot is not None:
            filter_str += f" && timeslot = '{escape_filter_value(timeslot)}'"
        try:
            records = self.pb.collection(RESERVATIONS_COLLECTION).get_full_list(query_params={"filter": filter_str})
        except Exception as e:
            logger.error(f"Error listing reservations for {channel_id} on {on}: {e}")
            return []
        return [r for r in (self._map_to_reservation(record) for record in records) if r is not None]

    def save(self, reservation: Reservation) -> Reservation:
        """Create a reservation row.

        Raises:
            PersistenceError: if the write fails
        """
        try:
            record = self.pb.collection(RESERVATIONS_COLLECTION).create(self._map_to_db(reservation))
        except Exception as e:
            raise PersistenceError(f"Could not save reservation for {reservation.slot}: {e}") from e
        reservation.id = get_field(record, "id")
        return reservation

    def _map_to_db(self, reservation: Reservation) -> dict[str, Any]:
        return {
            "channel_id": reservation.channel_id,
            "date": reservation.date.isoformat(),
            "timeslot": reservation.timeslot,
            "quantity": reservation.quantity,
            "kind": reservation.kind.value,
            "requester": reservation.requester_id or "",
            "user_id": reservation.user_id or "",
        }

    def _map_to_reservation(self, db_record: Any) -> Reservation | None:
        """Map database record to Reservation model"""
        on = parse_date(str(get_field(db_record, "date", "")))
        if on is None:
            logger.warning(f"Skipping reservation {get_field(db_record, 'id')} with invalid date")
            return None
        try:
            quantity = float(get_field(db_record, "quantity", 0))
        except (TypeError, ValueError):
            logger.warning(f"Skipping reservation {get_field(db_record, 'id')} with invalid quantity")
            return None
        try:
            kind = ReservationKind(get_field(db_record, "kind") or ReservationKind.SCHEDULED.value)
        except ValueError:
            kind = ReservationKind.SCHEDULED
        return Reservation(
            channel_id=str(get_field(db_record, "channel_id", "")),
            date=on,
            timeslot=str(get_field(db_record, "timeslot", "")),
            quantity=quantity,
            kind=kind,
            requester_id=get_field(db_record, "requester") or None,
            user_id=get_field(db_record, "user_id") or None,
            id=get_field(db_record, "id"),
        )
