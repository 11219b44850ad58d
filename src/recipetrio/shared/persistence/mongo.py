from __future__ import annotations

import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import OperationFailure

from recipetrio.shared.config.settings import settings

log = logging.getLogger("persistence")

_client: Optional[MongoClient] = None
_db = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(settings.MONGODB_URI)
    return _client


def get_db():
    global _db
    if _db is None:
        _db = get_client()[settings.MONGODB_DB]
    return _db


def ensure_indexes() -> None:
    """Create indexes for collections if they do not exist."""
    db = get_db()
    recipes = db.get_collection("recipes")
    feedback = db.get_collection("feedback")
    try:
        if "persona" not in recipes.index_information():
            recipes.create_index([("persona", ASCENDING)], name="persona")
        if "recipe_created" not in feedback.index_information():
            feedback.create_index(
                [("recipe_id", ASCENDING), ("created_at", DESCENDING)],
                name="recipe_created",
            )
    except OperationFailure as e:
        log.warning("ensure_indexes failed: %s", e)
