"""Relation resolver: human-entered references -> canonical CRM ids.

Lookups always hit the injected collaborators, nothing is cached between
calls. A reference that cannot be resolved is logged and omitted, it never
aborts the submission.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.errors import ValidationSkip
from ..core.interfaces import ReferenceLookup, SubscriberDirectory
from ..core.models import ReferenceEntity
from ..mapping.payload import normalize_to_string_array, parse_int
from .interfaces import ResolutionResult

logger = logging.getLogger(__name__)

ExactLookup = Callable[[str], "ReferenceEntity | None"]
FuzzyLookup = Callable[[str], "list[ReferenceEntity]"]


def resolve_reference(term: str, lookup_exact: ExactLookup, lookup_fuzzy: FuzzyLookup) -> ResolutionResult:
    """Resolve one term: exact name first, then the first contains-match.

    The fuzzy lookup is only called when the exact lookup misses.
    """
    term = term.strip()
    if not term:
        return ResolutionResult(term=term, metadata={"reason": "blank"})

    entity = lookup_exact(term)
    if entity is not None:
        return ResolutionResult(term=term, entity=entity, method="exact")

    candidates = lookup_fuzzy(term)
    if candidates:
        return ResolutionResult(term=term, entity=candidates[0], method="fuzzy")

    return ResolutionResult(term=term, metadata={"reason": "no_match"})


def resolve_many(
    raw: Any,
    lookup_exact: ExactLookup,
    lookup_fuzzy: FuzzyLookup,
    field: str = "",
    skips: list[ValidationSkip] | None = None,
) -> list[str]:
    """Resolve a batch of raw tokens into item ids, preserving input order.

    Blank tokens are dropped, numeric tokens are taken as already resolved ids.
    Misses are logged and recorded in `skips` when given.
    """
    if isinstance(raw, dict) and isinstance(raw.get("item_ids"), list):
        raw = raw["item_ids"]

    item_ids: list[str] = []
    for token in normalize_to_string_array(raw):
        token = token.strip()
        if not token:
            continue
        numeric = parse_int(token)
        if numeric is not None and numeric >= 0:
            item_ids.append(str(numeric))
            continue
        result = resolve_reference(token, lookup_exact, lookup_fuzzy)
        if result.is_resolved and result.external_id:
            item_ids.append(result.external_id)
        else:
            skip = ValidationSkip(field or token, f"no reference item matches '{token}'")
            logger.warning(str(skip))
            if skips is not None:
                skips.append(skip)
    return item_ids


def resolve_people(
    raw: Any,
    find_by_email: Callable[[str], Any],
    skips: list[ValidationSkip] | None = None,
) -> dict[str, Any] | None:
    """Resolve email-like values into a people column value.

    An already shaped {personsAndTeams: [...]} passes through. Returns None when
    nothing resolved, meaning the column is omitted.
    """
    if isinstance(raw, dict):
        entries = raw.get("personsAndTeams")
        if isinstance(entries, list) and entries:
            return {"personsAndTeams": entries}
        return None

    people: list[dict[str, Any]] = []
    for value in normalize_to_string_array(raw):
        for email in (part.strip() for part in value.split(",")):
            if not email:
                continue
            subscriber = find_by_email(email)
            if subscriber is not None and subscriber.id:
                people.append({"id": _person_id(subscriber.id), "kind": "person"})
            else:
                skip = ValidationSkip(email, "no subscriber with this email")
                logger.warning(str(skip))
                if skips is not None:
                    skips.append(skip)

    if not people:
        return None
    return {"personsAndTeams": people}


def team_people(entity: ReferenceEntity | None) -> dict[str, Any] | None:
    """People column value listing the teams attached to a reference"""
    if entity is None:
        return None
    ids = [t.strip() for t in entity.team if t and t.strip()]
    if not ids:
        return None
    return {"personsAndTeams": [{"id": _person_id(t), "kind": "team"} for t in ids]}


def _person_id(value: Any) -> Any:
    parsed = parse_int(value)
    return parsed if parsed is not None else str(value)


class RelationResolver:
    """Resolves references against a reference lookup and a subscriber directory"""

    def __init__(self, references: ReferenceLookup, subscribers: SubscriberDirectory) -> None:
        self.references = references
        self.subscribers = subscribers

    def resolve_reference(self, term: str, board_id: str | None = None) -> ResolutionResult:
        return resolve_reference(
            term,
            lambda t: self.references.find_by_name(t, board_id),
            lambda t: self.references.search(t, limit=1),
        )

    def find_entity(self, term: Any, board_id: str | None = None) -> ReferenceEntity | None:
        """Entity for a display name or a numeric item id, None when unknown or blank"""
        text = str(term or "").strip()
        if not text:
            return None
        try:
            if parse_int(text) is not None:
                entity = self.references.find_by_id(text, board_id)
                if entity is not None:
                    return entity
            return self.references.find_by_name(text, board_id)
        except Exception as e:
            logger.warning(f"Reference lookup for '{text}' failed: {e}")
            return None

    def resolve_many(
        self,
        raw: Any,
        field: str = "",
        board_id: str | None = None,
        skips: list[ValidationSkip] | None = None,
    ) -> list[str]:
        return resolve_many(
            raw,
            lambda t: self.references.find_by_name(t, board_id),
            lambda t: self.references.search(t, limit=1),
            field=field,
            skips=skips,
        )

    def resolve_relation_columns(
        self,
        relations: dict[str, Any],
        skips: list[ValidationSkip] | None = None,
    ) -> dict[str, Any]:
        """Turn raw relation column values into {item_ids: [...]}; empty results are omitted"""
        columns: dict[str, Any] = {}
        for column_id, raw in relations.items():
            try:
                item_ids = self.resolve_many(raw, field=column_id, skips=skips)
            except Exception as e:
                logger.warning(f"Could not resolve relation column {column_id}: {e}")
                continue
            ids = [parse_int(i) for i in item_ids]
            if None in ids:
                skip = ValidationSkip(column_id, "reference items without a numeric id were dropped")
                logger.warning(str(skip))
                if skips is not None:
                    skips.append(skip)
            ids = [i for i in ids if i is not None]
            if ids:
                columns[column_id] = {"item_ids": ids}
        return columns

    def resolve_people(self, raw: Any, skips: list[ValidationSkip] | None = None) -> dict[str, Any] | None:
        return resolve_people(raw, self.subscribers.find_by_email, skips=skips)

    def resolve_team_people(self, term: Any) -> dict[str, Any] | None:
        """Teams of the reference named by `term` as a people column value"""
        return team_people(self.find_entity(term))
