import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure

from recipetrio.features.feedback.domain.models import FeedbackInput
from recipetrio.features.feedback.infra import feedback_repo
from recipetrio.features.recipes.app.sanitizer import sanitize_detail
from recipetrio.features.recipes.domain.models import Persona
from recipetrio.features.recipes.infra import recipes_repo
from recipetrio.shared.errors import PersistenceWriteError
from recipetrio.shared.persistence import mongo


def _detail(recipe_id="recipe-1", title="Ramen"):
    return sanitize_detail(
        {"ingredients": [{"name": "noodles", "amount": "200", "unit": "g"}], "tips": ["Slurp."]},
        recipe_id=recipe_id,
        persona=Persona.FUSION,
        title=title,
    )


def test_detail_is_stored_under_its_recipe_id(mongo_db):
    detail = _detail()
    recipes_repo.upsert_recipe_detail(detail)

    doc = mongo_db["recipes"].find_one({"_id": "recipe-1"})
    assert doc["persona"] == "fusion"
    assert "id" not in doc
    assert recipes_repo.get_recipe_detail("recipe-1") == detail


def test_upsert_replaces_previous_version(mongo_db):
    recipes_repo.upsert_recipe_detail(_detail(title="Ramen"))
    recipes_repo.upsert_recipe_detail(_detail(title="Spicy Ramen"))

    assert mongo_db["recipes"].count_documents({}) == 1
    assert recipes_repo.get_recipe_detail("recipe-1").title == "Spicy Ramen"


def test_missing_recipe_is_none():
    assert recipes_repo.get_recipe_detail("nope") is None


def test_write_failures_are_wrapped(monkeypatch):
    class BrokenCollection:
        def replace_one(self, *args, **kwargs):
            raise OperationFailure("disk full")

    monkeypatch.setattr(recipes_repo, "_coll", lambda: BrokenCollection())
    with pytest.raises(PersistenceWriteError, match="disk full"):
        recipes_repo.upsert_recipe_detail(_detail())


def test_feedback_insert(mongo_db, monkeypatch):
    monkeypatch.setattr(feedback_repo.time, "time", lambda: 1_700_000_000.0)
    first = FeedbackInput(recipe_id="recipe-1", reasons=["tasty"], future_interest="interested", rating=5)
    second = FeedbackInput(recipe_id="recipe-1", reasons=["too salty"], future_interest="requestChange")
    first_id = feedback_repo.insert_feedback(first, user_agent="pytest")
    feedback_repo.insert_feedback(second)

    assert isinstance(first_id, str) and first_id
    doc = mongo_db["feedback"].find_one({"_id": ObjectId(first_id)})
    assert doc["reasons"] == ["tasty"]
    assert doc["user_agent"] == "pytest"
    assert doc["created_at"] == 1_700_000_000.0
    assert mongo_db["feedback"].count_documents({"recipe_id": "recipe-1"}) == 2


def test_ensure_indexes_is_idempotent(mongo_db):
    mongo.ensure_indexes()
    mongo.ensure_indexes()

    assert "persona" in mongo_db["recipes"].index_information()
    assert "recipe_created" in mongo_db["feedback"].index_information()
