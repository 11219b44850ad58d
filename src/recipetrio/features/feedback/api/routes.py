from __future__ import annotations

from fastapi import APIRouter, Request

from recipetrio.features.feedback.app.use_cases import submit_feedback
from recipetrio.features.feedback.domain.models import FeedbackInput
from recipetrio.shared.api.envelope import success

router = APIRouter(tags=["feedback"])


@router.post("/feedback", status_code=201)
async def create_feedback(payload: FeedbackInput, request: Request):
    feedback_id = await submit_feedback(
        payload,
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )
    return success({"id": feedback_id})
