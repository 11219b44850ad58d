import pytest

from recipetrio.features.recipes.domain.models import Persona, RecipeInput
from recipetrio.features.recipes.domain.personas import get_profile
from recipetrio.features.recipes.domain.prompts import build_detail_prompt, build_prompt


def test_prompt_embeds_every_input_field():
    recipe_input = RecipeInput(
        theme="autumn squash",
        cooking_time="30min",
        difficulty="advanced",
        special_requests=["vegan", "gluten free"],
        avoid_ingredients="cashews",
        priority="nutrition",
    )
    prompt = build_prompt(Persona.HEALTHY, recipe_input)
    assert "autumn squash" in prompt
    assert "within 30 minutes" in prompt
    assert "for advanced cooks" in prompt
    assert "vegan, gluten free" in prompt
    assert "cashews" in prompt
    assert "nutritional balance" in prompt
    assert get_profile(Persona.HEALTHY).role in prompt
    assert '"mainIngredients"' in prompt


def test_empty_requests_and_exclusions_read_as_none(recipe_input):
    prompt = build_prompt("classic", recipe_input)
    assert "Special requests: none" in prompt
    assert "Ingredients to avoid: none" in prompt


def test_personas_get_distinct_prompts(recipe_input):
    prompts = {build_prompt(p, recipe_input) for p in Persona}
    assert len(prompts) == 3


def test_unknown_persona_is_rejected(recipe_input):
    with pytest.raises(ValueError, match="Unknown persona"):
        build_prompt("spicy", recipe_input)
    with pytest.raises(ValueError):
        build_detail_prompt("Soup", "spicy")


def test_detail_prompt_names_the_dish():
    prompt = build_detail_prompt("Hand Rolls", Persona.FUSION)
    assert '"Hand Rolls"' in prompt
    assert get_profile(Persona.FUSION).detail_context in prompt
    assert '"nutritionInfo"' in prompt


def test_recipe_input_rejects_blank_theme():
    with pytest.raises(ValueError):
        RecipeInput(
            theme="   ",
            cooking_time="30min",
            difficulty="beginner",
            special_requests=[],
            avoid_ingredients="",
            priority="quick",
        )
