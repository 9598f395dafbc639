"""Interfaces for the relation resolution system.

Defines the result of resolving one human-entered reference."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..core.models import ReferenceEntity


@dataclass
class ResolutionResult:
    """Result of a reference resolution attempt"""

    term: str
    entity: ReferenceEntity | None = None
    method: str = "unresolved"
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_resolved(self) -> bool:
        """Check if resolution was successful"""
        return self.entity is not None

    @property
    def external_id(self) -> str | None:
        return self.entity.item_id if self.entity else None

    @property
    def code(self) -> str | None:
        return self.entity.code if self.entity else None
