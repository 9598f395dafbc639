"""Composite descriptor builder.

The descriptor is a deterministic, human readable tag identifying a campaign
item: a YYYYMMDD date token, an `id-<id>` token, then one segment per
reference category in fixed order. It is used as a title fallback and for
traceability; it is not unique and must not be used as a key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..core.constants import (
    CAMPAIGN_DATE_TEXT_FIELD,
    DESCRIPTOR_CATEGORIES,
    DESCRIPTOR_SEPARATOR,
    PRODUCT_FIELD,
    SEND_DATE_FIELD,
)
from ..core.models import Submission
from ..mapping.formatter import to_yyyymmdd
from .resolver import RelationResolver

logger = logging.getLogger(__name__)


@dataclass
class CategoryRef:
    """Display name and resolved short code of one reference category"""

    name: str = ""
    code: str | None = None
    subproduct_name: str | None = None
    subproduct_code: str | None = None

    @property
    def segment(self) -> str:
        """Code when resolved, else the display name, else empty"""
        if self.code:
            if self.subproduct_code:
                return f"{self.code}_{self.subproduct_code}"
            return self.code
        return self.name


def collect_category_refs(
    data: dict[str, Any],
    resolver: RelationResolver,
    product_board_id: str | None = None,
    subproduct_board_id: str | None = None,
    categories: tuple[tuple[str, str], ...] = DESCRIPTOR_CATEGORIES,
) -> dict[str, CategoryRef]:
    """Look up the code of every descriptor category present in the payload.

    Failed lookups degrade to the display name; this never raises.
    """
    refs: dict[str, CategoryRef] = {}
    for category, field in categories:
        raw = str(data.get(field) or "").strip()
        ref = CategoryRef(name=raw)
        refs[category] = ref
        if not raw:
            continue

        board_id = product_board_id if field == PRODUCT_FIELD else None
        entity = resolver.find_entity(raw, board_id)
        if entity is None:
            logger.debug(f"No code for {category} '{raw}', using its display name")
            continue
        # numeric ids are shown by name
        ref.name = entity.name or raw
        ref.code = entity.code or None

        if field == PRODUCT_FIELD:
            try:
                subproduct = resolver.references.find_subproduct(ref.name, subproduct_board_id)
            except Exception as e:
                logger.warning(f"Subproduct lookup for '{ref.name}' failed: {e}")
                subproduct = None
            if subproduct is not None:
                ref.subproduct_name = subproduct.name
                ref.subproduct_code = subproduct.code or None
    return refs


def descriptor_date_token(data: dict[str, Any]) -> str:
    """YYYYMMDD token: the derived text column if present, else the send date"""
    text = str(data.get(CAMPAIGN_DATE_TEXT_FIELD) or "").strip()
    return text or to_yyyymmdd(data.get(SEND_DATE_FIELD))


def build_descriptor(
    submission: Submission,
    refs: dict[str, CategoryRef],
    item_id: str | None = None,
) -> str:
    """Join the date token, the id token and every category segment.

    Empty categories keep their position as empty segments.

    Args:
        submission: Submission (with augmented data)
        refs: Category references from collect_category_refs
        item_id: Identifier for the `id-` token; the submission id when omitted
    """
    identifier = item_id or submission.id
    parts = [
        descriptor_date_token(submission.data),
        f"id-{identifier}" if identifier else "",
    ]
    for category, _field in DESCRIPTOR_CATEGORIES:
        ref = refs.get(category)
        parts.append(ref.segment if ref else "")
    return DESCRIPTOR_SEPARATOR.join(parts)
