from __future__ import annotations

import time
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from recipetrio.features.feedback.domain.models import FeedbackInput
from recipetrio.shared.errors import PersistenceWriteError
from recipetrio.shared.persistence.mongo import get_db


def _coll():
    return get_db().get_collection("feedback")


def insert_feedback(
    feedback: FeedbackInput,
    *,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> str:
    """
    Store one feedback submission and return its document ID.
    """
    doc: Dict[str, Any] = feedback.model_dump()
    doc.update({"user_agent": user_agent, "ip_address": ip_address, "created_at": time.time()})
    try:
        res = _coll().insert_one(doc)
    except PyMongoError as e:
        raise PersistenceWriteError("insert_feedback", str(e)) from e
    return str(res.inserted_id)

