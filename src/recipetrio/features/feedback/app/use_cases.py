from __future__ import annotations

import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from recipetrio.features.feedback.domain.models import FeedbackInput
from recipetrio.features.feedback.infra import feedback_repo

log = logging.getLogger("feedback")


async def submit_feedback(
    feedback: FeedbackInput,
    *,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> str:
    log.info(
        "Feedback submission received recipe_id=%s reasons=%s future_interest=%s",
        feedback.recipe_id,
        feedback.reasons,
        feedback.future_interest,
    )
    feedback_id = await run_in_threadpool(
        feedback_repo.insert_feedback, feedback, user_agent=user_agent, ip_address=ip_address
    )
    log.info("Feedback saved successfully id=%s recipe_id=%s", feedback_id, feedback.recipe_id)
    return feedback_id
