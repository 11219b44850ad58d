from __future__ import annotations

from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from recipetrio.features.recipes.domain.models import RecipeDetail
from recipetrio.shared.errors import PersistenceWriteError
from recipetrio.shared.persistence.mongo import get_db


def _coll():
    return get_db().get_collection("recipes")


def to_document(detail: RecipeDetail) -> Dict[str, Any]:
    doc = detail.model_dump(mode="json")
    doc["_id"] = doc.pop("id")
    return doc


def from_document(doc: Dict[str, Any]) -> RecipeDetail:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return RecipeDetail.model_validate(data)


def upsert_recipe_detail(detail: RecipeDetail) -> None:
    """
    Write the detailed recipe keyed by its ID, replacing any earlier version.
    """
    try:
        _coll().replace_one({"_id": detail.id}, to_document(detail), upsert=True)
    except PyMongoError as e:
        raise PersistenceWriteError("upsert_recipe_detail", str(e)) from e


def get_recipe_detail(recipe_id: str) -> Optional[RecipeDetail]:
    doc = _coll().find_one({"_id": recipe_id})
    if not doc:
        return None
    return from_document(doc)
