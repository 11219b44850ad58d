# src/recipetrio/features/recipes/domain/prompts.py
from __future__ import annotations

from recipetrio.features.recipes.domain.models import Persona, RecipeInput
from recipetrio.features.recipes.domain.personas import get_profile

COOKING_TIME_TEXT = {
    "30min": "within 30 minutes",
    "60min": "within 1 hour",
    "unlimited": "no time limit",
}

DIFFICULTY_TEXT = {
    "beginner": "suitable for beginners",
    "intermediate": "for intermediate cooks",
    "advanced": "for advanced cooks",
}

PRIORITY_TEXT = {
    "appearance": "beautiful presentation",
    "nutrition": "nutritional balance",
    "quick": "convenience and speed",
    "unique": "originality",
}

SUMMARY_PROMPT = """{role}

{framing}

CONDITIONS:
- Theme: {theme}
- Cooking time: {cooking_time}
- Difficulty: {difficulty}
- Special requests: {special_requests}
- Ingredients to avoid: {avoid_ingredients}
- Priority: {priority}

Respond strictly with ONE JSON object in this format:
{{
  "title": "Dish name",
  "description": "{description_hint}",
  "cookingTime": 30,
  "mainIngredients": ["main ingredient 1", "main ingredient 2", "main ingredient 3"],
  "features": ["feature 1", "feature 2", "feature 3"]
}}

IMPORTANT:
1. "description" is required. Never leave it empty.
2. "cookingTime" must be a number of minutes (e.g. 30).
3. Each array must contain at least 3 elements.
4. Do not write ANY text outside the JSON object.
"""

DETAIL_PROMPT = """Write a detailed recipe for "{title}", {detail_context}, explained carefully so anyone can make it.

Respond strictly with ONE JSON object in this format:
{{
  "ingredients": [
    {{"name": "ingredient name", "amount": "quantity", "unit": "unit", "notes": "notes (optional)"}}
  ],
  "steps": [
    {{"stepNumber": 1, "instruction": "concrete instruction", "duration": 5, "temperature": "temperature (optional)", "tips": "tip (optional)"}}
  ],
  "nutritionInfo": {{
    "calories": 0,
    "protein": 0,
    "carbs": 0,
    "fat": 0,
    "fiber": 0,
    "sodium": 0
  }},
  "tips": ["cooking tip 1", "cooking tip 2"],
  "servings": 4,
  "prepTime": 15,
  "totalTime": 45
}}

IMPORTANT:
1. "ingredients" must contain at least 3 entries and "steps" at least 3 entries.
2. "duration", "prepTime" and "totalTime" are minutes; protein, carbs, fat and fiber are grams; sodium is milligrams.
3. Respond with valid JSON only. No explanations and no characters outside the JSON object.
"""


def build_prompt(persona: Persona | str, recipe_input: RecipeInput) -> str:
    """
    Build the summary-generation prompt for one persona.
    Raises ValueError for a persona outside the fixed set.
    """
    profile = get_profile(persona)
    return SUMMARY_PROMPT.format(
        role=profile.role,
        framing=profile.framing,
        theme=recipe_input.theme,
        cooking_time=COOKING_TIME_TEXT.get(recipe_input.cooking_time, recipe_input.cooking_time),
        difficulty=DIFFICULTY_TEXT.get(recipe_input.difficulty, recipe_input.difficulty),
        special_requests=", ".join(recipe_input.special_requests) or "none",
        avoid_ingredients=recipe_input.avoid_ingredients or "none",
        priority=PRIORITY_TEXT.get(recipe_input.priority, recipe_input.priority),
        description_hint=profile.description_hint,
    )


def build_detail_prompt(title: str, persona: Persona | str) -> str:
    profile = get_profile(persona)
    return DETAIL_PROMPT.format(title=title, detail_context=profile.detail_context)
