"""
Submissions Router - Form submission intake.

Each submission becomes one parent item in the CRM plus one child item per
allocated demand line. Only a failed parent creation is reported as an
error; every other problem comes back in `warnings`.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from formrelay.core.errors import RemoteCreateError
from formrelay.orchestrator import SubmissionOrchestrator

from ..dependencies import get_orchestrator
from ..schemas import FormSubmission, SubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["submissions"])


@router.post("/form-submissions", status_code=201, response_model=SubmissionResponse)
async def create_submission(
    body: FormSubmission,
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
) -> SubmissionResponse:
    """Process a form submission.

    Returns:
        SubmissionResponse with the parent item id

    Raises:
        HTTPException 502: the CRM refused to create the parent item
    """
    try:
        result = await orchestrator.run(body.to_submission())
    except RemoteCreateError as e:
        logger.error(f"Submission {body.id} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Could not create CRM item: {e}") from e

    return SubmissionResponse(
        item_id=str(result.item_id),
        child_item_ids=result.child_item_ids,
        reservations_saved=result.reservations_saved,
        warnings=result.warnings,
    )
