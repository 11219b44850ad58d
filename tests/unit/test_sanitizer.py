import pytest

from recipetrio.features.recipes.app.parser import DEFAULT_NUTRITION, parse_recipe_response
from recipetrio.features.recipes.app.sanitizer import (
    DETAIL_TIPS,
    build_summary,
    fallback_summary,
    sanitize_detail,
    sanitize_summary,
    validate_summary,
)
from recipetrio.features.recipes.domain.models import Persona
from recipetrio.features.recipes.domain.personas import (
    FALLBACK_MAIN_INGREDIENTS,
    PLACEHOLDER_FEATURES,
    PLACEHOLDER_MAIN_INGREDIENTS,
)
from recipetrio.shared.errors import SanitizeRejectedError


def test_summary_gaps_are_filled():
    fields = sanitize_summary({"title": "Paella", "cooking_time": "soon", "features": []})
    assert fields["description"] == "Paella's recipe"
    assert fields["cooking_time"] == 30
    assert fields["main_ingredients"] == list(PLACEHOLDER_MAIN_INGREDIENTS)
    assert fields["features"] == list(PLACEHOLDER_FEATURES)


@pytest.mark.parametrize("raw, expected", [(0, 30), (-5, 30), (True, 30), (None, 30), (42, 42), (25.4, 25)])
def test_cooking_time_must_be_positive(raw, expected):
    assert sanitize_summary({"title": "X", "cooking_time": raw})["cooking_time"] == expected


def test_summary_sanitation_is_idempotent():
    draft = {"title": " Tacos ", "description": "", "main_ingredients": ["corn", "", 3], "image_url": "http://x/y.png"}
    once = sanitize_summary(draft)
    assert sanitize_summary(once) == once
    assert once["main_ingredients"] == ["corn", "3"]
    assert once["image_url"] == "http://x/y.png"


def test_missing_title_is_rejected():
    fields = sanitize_summary({"description": "No name", "cooking_time": 10})
    assert fields["title"] == ""
    assert validate_summary(fields) is False
    with pytest.raises(SanitizeRejectedError):
        build_summary({"description": "No name"}, recipe_id="r1", persona=Persona.CLASSIC)


def test_build_summary_returns_valid_recipe():
    recipe = build_summary({"title": "Bibimbap"}, recipe_id="r1", persona=Persona.FUSION)
    assert recipe.id == "r1"
    assert recipe.persona is Persona.FUSION
    assert recipe.title == "Bibimbap"
    assert recipe.image_url is None


@pytest.mark.parametrize("persona", list(Persona))
def test_fallback_summary_uses_persona_placeholders(persona):
    recipe = fallback_summary(persona, recipe_id="r9")
    assert recipe.title == f"{persona.value} special recipe"
    assert recipe.main_ingredients == list(FALLBACK_MAIN_INGREDIENTS)
    assert recipe.cooking_time == 30


def test_empty_detail_draft_gets_placeholders():
    detail = sanitize_detail({}, recipe_id="r1", persona=Persona.HEALTHY, title="Poke Bowl")
    assert detail.title == "Poke Bowl"
    assert detail.description == "Detailed recipe for Poke Bowl."
    assert [i.name for i in detail.ingredients] == ["basic ingredients"]
    assert [s.step_number for s in detail.steps] == [1, 2]
    assert detail.nutrition_info.model_dump() == DEFAULT_NUTRITION
    assert detail.tips == DETAIL_TIPS
    assert (detail.servings, detail.prep_time, detail.total_time) == (4, 15, 30)
    assert detail.main_ingredients == ["basic ingredients"]


def test_detail_keeps_source_step_numbers_and_drops_empty_steps():
    draft = {
        "steps": [
            {"stepNumber": 1, "instruction": "Chop"},
            {"instruction": "   "},
            {"instruction": "Fry", "duration": "long"},
            "not a step",
        ]
    }
    detail = sanitize_detail(draft, recipe_id="r1", persona=Persona.CLASSIC, title="Stir fry")
    assert [(s.step_number, s.instruction) for s in detail.steps] == [(1, "Chop"), (3, "Fry")]
    assert detail.steps[1].duration is None


def test_detail_ingredient_defaults_and_main_ingredients():
    draft = {"ingredients": [{"name": "egg"}, {"name": "milk", "amount": "1", "unit": "cup"}, 5]}
    detail = sanitize_detail(draft, recipe_id="r1", persona=Persona.CLASSIC, title="Custard")
    assert detail.ingredients[0].amount == "to taste"
    assert detail.ingredients[1].unit == "cup"
    assert detail.main_ingredients == ["egg", "milk"]


def test_explicit_empty_tips_stay_empty():
    detail = sanitize_detail({"tips": []}, recipe_id="r1", persona=Persona.CLASSIC, title="Toast")
    assert detail.tips == []


def test_complete_nutrition_record_is_kept_with_coercion():
    nutrition = {"calories": "450", "protein": 20, "carbs": 50, "fat": 12, "fiber": 4, "sodium": 700}
    detail = sanitize_detail({"nutrition_info": nutrition}, recipe_id="r1", persona=Persona.HEALTHY, title="Salad")
    assert detail.nutrition_info.calories == 450.0
    assert detail.nutrition_info.sodium == 700.0


def test_partial_nutrition_record_is_replaced_whole():
    detail = sanitize_detail(
        {"nutrition_info": {"calories": 999, "protein": "lots"}},
        recipe_id="r1",
        persona=Persona.HEALTHY,
        title="Salad",
    )
    assert detail.nutrition_info.model_dump() == DEFAULT_NUTRITION


def test_detail_times_prefer_total_time():
    detail = sanitize_detail(
        {"cooking_time": 20, "total_time": 45, "prep_time": 10, "servings": 2},
        recipe_id="r1",
        persona=Persona.FUSION,
        title="Curry",
    )
    assert (detail.cooking_time, detail.total_time, detail.prep_time, detail.servings) == (20, 45, 10, 2)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_fall_back_to_defaults(bad):
    fields = sanitize_summary({"title": "Soup", "cooking_time": bad, "main_ingredients": [bad, "leek"]})
    assert fields["cooking_time"] == 30
    assert fields["main_ingredients"] == ["leek"]

    detail = sanitize_detail(
        {
            "servings": bad,
            "prep_time": bad,
            "total_time": bad,
            "ingredients": [{"name": bad, "amount": bad, "unit": "g"}],
            "steps": [{"stepNumber": 1, "instruction": "Simmer", "duration": bad}],
        },
        recipe_id="r1",
        persona=Persona.CLASSIC,
        title="Soup",
    )
    assert (detail.servings, detail.prep_time, detail.total_time) == (4, 15, 30)
    assert detail.steps[0].duration is None
    assert detail.ingredients[0].name == "ingredient"
    assert detail.ingredients[0].amount == "to taste"


def test_non_finite_values_from_model_json_are_sanitized():
    draft = parse_recipe_response('{"title": "Soup", "cookingTime": NaN, "servings": Infinity, "totalTime": 1e999}')
    assert build_summary(draft, recipe_id="r1", persona=Persona.CLASSIC).cooking_time == 30
    detail = sanitize_detail(draft, recipe_id="r1", persona=Persona.CLASSIC, title="Soup")
    assert detail.servings == 4
    assert detail.total_time == 30


def test_non_finite_nutrition_is_replaced_whole():
    nutrition = {"calories": float("nan"), "protein": 20, "carbs": 50, "fat": 12, "fiber": 4, "sodium": 700}
    detail = sanitize_detail({"nutrition_info": nutrition}, recipe_id="r1", persona=Persona.HEALTHY, title="Salad")
    assert detail.nutrition_info.model_dump() == DEFAULT_NUTRITION


def test_huge_integers_are_kept():
    assert sanitize_summary({"title": "Stew", "cooking_time": 10 ** 30})["cooking_time"] == 10 ** 30
