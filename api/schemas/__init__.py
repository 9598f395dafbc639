"""
Pydantic schemas for the Form Relay API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .submissions import FormSubmission, SubmissionResponse

__all__ = ["FormSubmission", "SubmissionResponse"]
