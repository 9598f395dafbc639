"""Relation resolution and descriptor building."""

from __future__ import annotations

from .descriptor import CategoryRef, build_descriptor, collect_category_refs
from .interfaces import ResolutionResult
from .resolver import RelationResolver, resolve_many, resolve_people, resolve_reference, team_people

__all__ = [
    "CategoryRef",
    "RelationResolver",
    "ResolutionResult",
    "build_descriptor",
    "collect_category_refs",
    "resolve_many",
    "resolve_people",
    "resolve_reference",
    "team_people",
]
