"""
Root test configuration and fixtures for the form relay.

This conftest.py provides common fixtures for all test modules:
- A mock PocketBase client with chaining support
- Sample submissions with and without demand entries
- In-memory collaborators for the orchestrator

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Never authenticate against a real PocketBase while testing
os.environ.setdefault("SKIP_PB_AUTH", "true")

from formrelay.core.models import ReferenceEntity, Reservation, Submission, Subscriber  # noqa: E402


def create_mock_pocketbase() -> Mock:
    """Create a mock PocketBase instance."""
    mock_pb = Mock()

    # Collection mock with chaining support
    mock_collection = Mock()
    mock_collection.auth_with_password = Mock(return_value=True)

    mock_list_response = Mock()
    mock_list_response.items = []
    mock_list_response.total_items = 0

    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_list = Mock(return_value=mock_list_response)
    mock_collection.create = Mock(return_value={"id": "mock-id"})

    mock_pb.collection = Mock(return_value=mock_collection)
    return mock_pb


@pytest.fixture
def mock_pocketbase() -> Mock:
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


# =============================================================================
# In-memory collaborators
# =============================================================================


class FakeReferences:
    """Reference lookup over a fixed list of entities"""

    def __init__(self, entities: list[ReferenceEntity], time_slots: list[str] | None = None) -> None:
        self.entities = entities
        self.time_slots = time_slots or []
        self.boards: dict[str, str] = {}

    def find_by_name(self, name: str, board_id: str | None = None) -> ReferenceEntity | None:
        for entity in self.entities:
            if entity.name == name and (board_id is None or entity.board_id == board_id):
                return entity
        return None

    def find_by_id(self, item_id: str, board_id: str | None = None) -> ReferenceEntity | None:
        for entity in self.entities:
            if entity.item_id == str(item_id):
                return entity
        return None

    def search(self, term: str, limit: int = 1) -> list[ReferenceEntity]:
        matches = [e for e in self.entities if term.lower() in e.name.lower()]
        return matches[:limit]

    def find_subproduct(self, product_name: str, board_id: str | None = None) -> ReferenceEntity | None:
        for entity in self.entities:
            if entity.product == product_name:
                return entity
        return None

    def find_board_id(self, board_name: str) -> str | None:
        return self.boards.get(board_name)

    def list_time_slots(self, board_id: str) -> list[str]:
        return list(self.time_slots)


class FakeSubscribers:
    def __init__(self, subscribers: list[Subscriber] | None = None) -> None:
        self.subscribers = subscribers or []

    def find_by_email(self, email: str) -> Subscriber | None:
        for subscriber in self.subscribers:
            if subscriber.email.lower() == email.lower():
                return subscriber
        return None


class FakeReservations:
    """Reservation store keeping rows in a list"""

    def __init__(self, rows: list[Reservation] | None = None) -> None:
        self.rows = rows or []
        self.saved: list[Reservation] = []

    def list_reservations(self, channel_id: str, on: date, timeslot: str | None = None) -> list[Reservation]:
        return [
            r
            for r in self.rows
            if r.channel_id == channel_id and r.date == on and (timeslot is None or r.timeslot == timeslot)
        ]

    def save(self, reservation: Reservation) -> Reservation:
        reservation.id = f"res-{len(self.saved) + 1}"
        self.saved.append(reservation)
        self.rows.append(reservation)
        return reservation


def create_mock_crm(parent_id: str = "1001") -> Mock:
    """CRM client whose create_item returns the parent id first, then 2001, 2002..."""
    crm = Mock()
    counter = {"n": 0}

    async def create_item(board_id: str, group_id: str, name: str, columns: dict[str, Any]) -> str:
        counter["n"] += 1
        return parent_id if counter["n"] == 1 else str(2000 + counter["n"] - 1)

    crm.create_item = AsyncMock(side_effect=create_item)
    crm.update_columns = AsyncMock(return_value=None)
    crm.upload_file = AsyncMock(return_value="asset-1")
    return crm


@pytest.fixture
def email_channel() -> ReferenceEntity:
    return ReferenceEntity(item_id="555", name="Email", code="eml", max_value=100.0)


@pytest.fixture
def fake_references(email_channel: ReferenceEntity) -> FakeReferences:
    return FakeReferences(
        [
            email_channel,
            ReferenceEntity(item_id="10", name="Banco XP", code="bxp"),
            ReferenceEntity(item_id="20", name="Cartões", code="crt", team=["77"]),
            ReferenceEntity(item_id="30", name="Conta Digital", code="cdg"),
        ],
        time_slots=["09:00", "10:00", "11:00"],
    )


@pytest.fixture
def fake_subscribers() -> FakeSubscribers:
    return FakeSubscribers([Subscriber(id="42", email="ana@example.com", name="Ana")])


@pytest.fixture
def fake_reservations() -> FakeReservations:
    return FakeReservations()


@pytest.fixture
def mock_crm() -> Mock:
    return create_mock_crm()


# =============================================================================
# Sample submissions
# =============================================================================


@pytest.fixture
def sample_submission_data() -> dict[str, Any]:
    """Campaign form payload without demand entries."""
    return {
        "name": "Campanha de Natal",
        "lookup_mkrtaebd": "Banco XP",
        "lookup_mkrtvsdj": "Conta Digital",
        "lookup_mkrt36cj": "Cartões",
        "pessoas5__1": "ana@example.com",
        "data__1": "25/12/2025",
        "n_meros_mkkchcmk": "1500",
        "texto_curto23__1": "Observações",
    }


@pytest.fixture
def sample_submission(sample_submission_data: dict[str, Any]) -> Submission:
    return Submission(
        id="sub-1",
        timestamp="2025-08-01T12:00:00Z",
        form_title="Campanha",
        data=sample_submission_data,
    )


@pytest.fixture
def demand_submission(sample_submission_data: dict[str, Any]) -> Submission:
    """Submission requesting 50 Email sends at 10:00 on 2025-08-10."""
    data = dict(sample_submission_data)
    data["__SUBITEMS__"] = [
        {
            "id": "555",
            "conectar_quadros87__1": "Email",
            "data__1": "10/08/2025",
            "conectar_quadros_mkkcnyr3": "10:00",
            "n_meros_mkkchcmk": 50,
            "texto__1": "Disparo de lançamento",
        }
    ]
    return Submission(id="sub-2", timestamp="2025-08-01T12:00:00Z", form_title="Campanha", data=data)
