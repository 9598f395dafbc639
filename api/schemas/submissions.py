"""
Pydantic schemas for form submission endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from formrelay.core.models import Submission


class FormSubmission(BaseModel):
    """Wire envelope of a form submission."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Submission identifier")
    timestamp: str = Field(default="", description="Submission time as sent by the form")
    form_title: str = Field(default="", alias="formTitle", description="Title of the submitted form")
    data: dict[str, Any] = Field(default_factory=dict, description="Field name to raw value")

    def to_submission(self) -> Submission:
        return Submission(id=self.id, timestamp=self.timestamp, form_title=self.form_title, data=dict(self.data))


class SubmissionResponse(BaseModel):
    """Outcome of a processed submission."""

    item_id: str
    child_item_ids: list[str] = Field(default_factory=list)
    reservations_saved: int = 0
    warnings: list[str] = Field(default_factory=list)
