"""Reference repository for data access.

Reads the CRM items mirrored into PocketBase (channels, clients, products,
time slots...) and the boards they belong to."""

from __future__ import annotations

import logging
from typing import Any

from pocketbase import PocketBase

from ...core.models import ReferenceEntity
from ..records import escape_filter_value, get_field, parse_json_list

logger = logging.getLogger(__name__)

ITEMS_COLLECTION = "reference_items"
BOARDS_COLLECTION = "boards"
ACTIVE_STATUS = "Ativo"


class ReferenceRepository:
    """Repository for mirrored CRM items"""

    def __init__(self, pb_client: PocketBase) -> None:
        """Initialize repository with PocketBase client.

        Args:
            pb_client: PocketBase client instance
        """
        self.pb = pb_client

    def find_by_name(self, name: str, board_id: str | None = None) -> ReferenceEntity | None:
        """Find an item by exact name, optionally restricted to one board"""
        name = name.strip()
        if not name:
            return None
        filter_str = f"name = '{escape_filter_value(name)}'"
        if board_id:
            filter_str += f" && board_id = '{escape_filter_value(board_id)}'"
        return self._first(filter_str)

    def find_by_id(self, item_id: str, board_id: str | None = None) -> ReferenceEntity | None:
        """Find an item by its CRM item id"""
        filter_str = f"item_id = '{escape_filter_value(str(item_id))}'"
        if board_id:
            filter_str += f" && board_id = '{escape_filter_value(board_id)}'"
        return self._first(filter_str)

    def search(self, term: str, limit: int = 1) -> list[ReferenceEntity]:
        """Case-insensitive contains-match on name, code or team members"""
        term = term.strip()
        if not term:
            return []
        escaped = escape_filter_value(term)
        filter_str = f"(name ~ '{escaped}' || code ~ '{escaped}' || team ~ '{escaped}')"
        try:
            result = self.pb.collection(ITEMS_COLLECTION).get_list(
                query_params={"filter": filter_str, "perPage": limit, "sort": "name"}
            )
            return [e for e in (self._map_to_entity(item) for item in result.items) if e is not None]
        except Exception as e:
            logger.error(f"Error searching reference items for {term}: {e}")
            return []

    def find_subproduct(self, product_name: str, board_id: str | None = None) -> ReferenceEntity | None:
        """Find the active subproduct whose product column equals product_name"""
        product_name = product_name.strip()
        if not product_name:
            return None
        filter_str = f"product = '{escape_filter_value(product_name)}' && status = '{ACTIVE_STATUS}'"
        if board_id:
            filter_str += f" && board_id = '{escape_filter_value(board_id)}'"
        return self._first(filter_str)

    def find_board_id(self, board_name: str) -> str | None:
        """Return the CRM board id for a board name"""
        try:
            result = self.pb.collection(BOARDS_COLLECTION).get_list(
                query_params={"filter": f"name = '{escape_filter_value(board_name)}'", "perPage": 1}
            )
            if result.items:
                board_id = get_field(result.items[0], "board_id")
                return str(board_id) if board_id else None
        except Exception as e:
            logger.error(f"Error finding board {board_name}: {e}")
        return None

    def list_time_slots(self, board_id: str) -> list[str]:
        """Active time slot labels of a board, sorted ascending"""
        try:
            records = self.pb.collection(ITEMS_COLLECTION).get_full_list(
                query_params={
                    "filter": f"board_id = '{escape_filter_value(board_id)}' && status = '{ACTIVE_STATUS}'",
                    "sort": "name",
                }
            )
        except Exception as e:
            logger.error(f"Error listing time slots for board {board_id}: {e}")
            return []

        labels = [str(get_field(r, "name", "")).strip() for r in records]
        return sorted(label for label in labels if label)

    def _first(self, filter_str: str) -> ReferenceEntity | None:
        try:
            result = self.pb.collection(ITEMS_COLLECTION).get_list(query_params={"filter": filter_str, "perPage": 1})
            if result.items:
                return self._map_to_entity(result.items[0])
        except Exception as e:
            logger.error(f"Error querying reference items ({filter_str}): {e}")
        return None

    def _map_to_entity(self, db_record: Any) -> ReferenceEntity | None:
        """Map database record to ReferenceEntity model"""
        item_id = get_field(db_record, "item_id")
        if not item_id:
            return None

        max_value = get_field(db_record, "max_value")
        try:
            max_value = float(max_value) if max_value not in (None, "") else None
        except (TypeError, ValueError):
            logger.warning(f"Invalid max_value on reference item {item_id}: {max_value!r}")
            max_value = None

        return ReferenceEntity(
            item_id=str(item_id),
            name=str(get_field(db_record, "name", "")),
            code=get_field(db_record, "code") or None,
            board_id=get_field(db_record, "board_id") or None,
            status=get_field(db_record, "status") or None,
            team=parse_json_list(get_field(db_record, "team")),
            product=get_field(db_record, "product") or None,
            max_value=max_value,
            record_id=get_field(db_record, "id"),
        )
