"""Submission orchestration: demand extraction, child payloads and the pipeline itself."""

from __future__ import annotations

from .child_payload import ChildPayload, build_child_payload
from .demand import extract_demand_entries, parse_demand_entry
from .orchestrator import PreparedSubmission, SubmissionOrchestrator

__all__ = [
    "ChildPayload",
    "PreparedSubmission",
    "SubmissionOrchestrator",
    "build_child_payload",
    "extract_demand_entries",
    "parse_demand_entry",
]
