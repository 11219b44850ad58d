import mongomock
import pytest

from recipetrio.features.recipes.domain.models import RecipeInput
from recipetrio.shared.persistence import mongo

from fakes import FakeWriter


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch):
    """In-memory Mongo for every test; nothing reaches a real server."""
    db = mongomock.MongoClient()["recipe-generator-test"]
    monkeypatch.setattr(mongo, "_db", db)
    return db


@pytest.fixture
def recipe_input():
    return RecipeInput(
        theme="sushi",
        cooking_time="60min",
        difficulty="beginner",
        special_requests=[],
        avoid_ingredients="",
        priority="appearance",
    )


@pytest.fixture
def writer():
    return FakeWriter()
