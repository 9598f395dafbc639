"""Per-call configuration of the submission orchestrator.

Passed explicitly to every `process_submission` call; there is no
module-level mutable state."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any

from ..capacity.policy import DEFAULT_SLOT_POLICY, SlotPolicy
from ..core.constants import EXCLUDED_FIELDS, REQUESTER_FIELDS
from ..mapping.field_mappings import DEFAULT_FIELD_MAPPINGS, FieldMappingRule
from .errors import ValidationError


@dataclass(frozen=True)
class BoardTarget:
    """Board and group where items are created"""

    board_id: str
    group_id: str = "topics"

    def __post_init__(self) -> None:
        if not self.board_id:
            raise ValidationError("BoardTarget requires a board_id")


@dataclass(frozen=True)
class RelayConfig:
    """Immutable configuration for one submission run

    Attributes:
        parent: Board receiving the campaign item
        child: Board receiving one item per allocated demand line
        child_relation_columns: Relation columns patched onto child items
        time_slot_board_id: Board listing the active time slot labels
        product_board_name: Board name whose codes are used for products
        subproduct_board_name: Board name holding subproducts
        slot_policy: Capacity allocation rules
        field_mappings: Payload augmentation rules
        child_from_submission: (submission key, child column) correlations
        child_from_parent: (parent column, child column) correlations
        child_defaults: Columns set on children when nothing else set them
        requester_fields: Candidate keys naming the requesting area
        excluded_fields: Keys never copied verbatim into parent columns
        create_children: Whether child items are created at all
    """

    parent: BoardTarget = field(default_factory=lambda: BoardTarget("7410140027", "topics"))
    child: BoardTarget = field(default_factory=lambda: BoardTarget("7463706726", "topics"))
    child_relation_columns: tuple[str, ...] = ("text_mkvgjh0w", "conectar_quadros8__1")
    time_slot_board_id: str = "9965fb6d-34c3-4df6-b1fd-a67013fbe950"
    product_board_name: str = "Produto"
    subproduct_board_name: str = "Subproduto"
    slot_policy: SlotPolicy = DEFAULT_SLOT_POLICY
    field_mappings: tuple[FieldMappingRule, ...] = DEFAULT_FIELD_MAPPINGS
    child_from_submission: tuple[tuple[str, str], ...] = ()
    child_from_parent: tuple[tuple[str, str], ...] = ()
    child_defaults: tuple[tuple[str, Any], ...] = (
        ("lista_suspensa5__1", "Emocional"),
        ("lista_suspensa53__1", {"labels": ["Autoridade", "Exclusividade"]}),
    )
    requester_fields: tuple[str, ...] = REQUESTER_FIELDS
    excluded_fields: Collection[str] = EXCLUDED_FIELDS
    create_children: bool = True

    def __post_init__(self) -> None:
        for source, target in (*self.child_from_submission, *self.child_from_parent):
            if not source or not target:
                raise ValidationError(f"Incomplete child correlation: ({source!r}, {target!r})")


DEFAULT_RELAY_CONFIG = RelayConfig()
