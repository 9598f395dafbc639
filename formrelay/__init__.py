"""Form Relay - form submissions to CRM items with capacity allocation

Maps raw form payloads onto typed CRM columns, resolves references to
canonical ids and spreads requested sends across channel time slots."""

from __future__ import annotations

from .core.models import Submission, SubmissionResult
from .orchestrator import SubmissionOrchestrator

__all__ = ["Submission", "SubmissionOrchestrator", "SubmissionResult"]
