"""Subscriber repository for data access.

Looks up CRM users by email to fill people columns."""

from __future__ import annotations

import logging
from typing import Any

from pocketbase import PocketBase

from ...core.models import Subscriber
from ..records import escape_filter_value, get_field

logger = logging.getLogger(__name__)

SUBSCRIBERS_COLLECTION = "subscribers"


class SubscriberRepository:
    """Repository for Subscriber data access"""

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    def find_by_email(self, email: str) -> Subscriber | None:
        """Find a subscriber by email, case-insensitive"""
        email = email.strip()
        if not email:
            return None
        try:
            result = self.pb.collection(SUBSCRIBERS_COLLECTION).get_list(
                query_params={"filter": f"email ~ '{escape_filter_value(email.lower())}'", "perPage": 10}
            )
            for item in result.items:
                subscriber = self._map_to_subscriber(item)
                # `~` is a contains-match, keep only the exact address
                if subscriber is not None and subscriber.email.lower() == email.lower():
                    return subscriber
        except Exception as e:
            logger.error(f"Error finding subscriber by email {email}: {e}")
        return None

    def _map_to_subscriber(self, db_record: Any) -> Subscriber | None:
        subscriber_id = get_field(db_record, "subscriber_id")
        if not subscriber_id:
            return None
        return Subscriber(
            id=str(subscriber_id),
            email=str(get_field(db_record, "email", "")),
            name=get_field(db_record, "name") or None,
        )
