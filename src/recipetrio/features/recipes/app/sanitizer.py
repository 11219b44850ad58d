from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from recipetrio.features.recipes.app.parser import DEFAULT_NUTRITION
from recipetrio.features.recipes.domain.models import (
    CookingStep,
    Ingredient,
    NutritionInfo,
    Persona,
    Recipe,
    RecipeDetail,
    RecipeDraft,
)
from recipetrio.features.recipes.domain.personas import (
    FALLBACK_COOKING_TIME,
    FALLBACK_FEATURES,
    FALLBACK_MAIN_INGREDIENTS,
    PLACEHOLDER_FEATURES,
    PLACEHOLDER_MAIN_INGREDIENTS,
    get_profile,
)
from recipetrio.shared.errors import SanitizeRejectedError

log = logging.getLogger("recipes.sanitizer")

DEFAULT_COOKING_TIME = 30
DEFAULT_SERVINGS = 4
DEFAULT_PREP_TIME = 15

DETAIL_FEATURES = ["Homemade", "Nutritious", "Delicious"]
DETAIL_TIPS = ["Adjust the seasoning to taste."]
PLACEHOLDER_INGREDIENT = Ingredient(
    name="basic ingredients", amount="to taste", unit="to taste", notes="Prepare according to the recipe"
)
PLACEHOLDER_STEPS = [
    CookingStep(step_number=1, instruction="Prepare the ingredients.", duration=5),
    CookingStep(step_number=2, instruction="Start cooking.", duration=25),
]


def _finite(value: Real) -> bool:
    return isinstance(value, int) or math.isfinite(value)


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Real) and not isinstance(value, bool):
        return str(value) if _finite(value) else ""
    return ""


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not _finite(value) or value <= 0:
        return None
    return max(1, round(value))


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [t for t in (_text(v) for v in value) if t]


def sanitize_summary(draft: Mapping[str, Any]) -> RecipeDraft:
    """
    Fill every summary gap except the title. Idempotent.
    """
    title = _text(draft.get("title"))
    description = _text(draft.get("description"))
    if not description and title:
        log.warning("Missing or empty description field, auto-filling")
        description = f"{title}'s recipe"

    cooking_time = _positive_int(draft.get("cooking_time"))
    if cooking_time is None:
        log.warning("Invalid cooking_time value, using default: %d", DEFAULT_COOKING_TIME)
        cooking_time = DEFAULT_COOKING_TIME

    main_ingredients = _string_list(draft.get("main_ingredients"))
    if not main_ingredients:
        log.warning("Empty main_ingredients, adding default")
        main_ingredients = list(PLACEHOLDER_MAIN_INGREDIENTS)

    features = _string_list(draft.get("features"))
    if not features:
        log.warning("Empty features, adding default")
        features = list(PLACEHOLDER_FEATURES)

    out = RecipeDraft(
        title=title,
        description=description,
        cooking_time=cooking_time,
        main_ingredients=main_ingredients,
        features=features,
    )
    image_url = _text(draft.get("image_url"))
    if image_url:
        out["image_url"] = image_url
    return out


def validate_summary(draft: Mapping[str, Any]) -> bool:
    """
    Acceptance signal for a sanitized summary draft.
    """
    if not _text(draft.get("title")):
        log.warning("Missing or empty title field")
        return False
    return (
        bool(_text(draft.get("description")))
        and _positive_int(draft.get("cooking_time")) is not None
        and bool(_string_list(draft.get("main_ingredients")))
        and bool(_string_list(draft.get("features")))
    )


def build_summary(draft: Mapping[str, Any], *, recipe_id: str, persona: Persona) -> Recipe:
    """
    Sanitize, validate and materialize a summary recipe.
    Raises SanitizeRejectedError when the draft is not acceptable.
    """
    fields = sanitize_summary(draft)
    if not validate_summary(fields):
        raise SanitizeRejectedError("missing title")
    return Recipe(id=recipe_id, persona=persona, **fields)


def fallback_summary(persona: Persona, *, recipe_id: str) -> Recipe:
    profile = get_profile(persona)
    return Recipe(
        id=recipe_id,
        persona=profile.persona,
        title=profile.fallback_title,
        description=profile.fallback_description,
        cooking_time=FALLBACK_COOKING_TIME,
        main_ingredients=list(FALLBACK_MAIN_INGREDIENTS),
        features=list(FALLBACK_FEATURES),
    )


def _sanitize_ingredients(value: Any) -> List[Ingredient]:
    if not isinstance(value, list):
        return []
    out = []
    for ing in value:
        if not isinstance(ing, Mapping):
            continue
        notes = _text(ing.get("notes") or ing.get("note"))
        out.append(Ingredient(
            name=_text(ing.get("name")) or "ingredient",
            amount=_text(ing.get("amount")) or "to taste",
            unit=_text(ing.get("unit")) or "to taste",
            notes=notes or None,
        ))
    return out


def _sanitize_steps(value: Any) -> List[CookingStep]:
    if not isinstance(value, list):
        return []
    out = []
    for position, step in enumerate(value, 1):
        if not isinstance(step, Mapping):
            continue
        instruction = _text(step.get("instruction"))
        if not instruction:
            continue
        # Source numbering is kept as-is; position only fills a missing index.
        number = step.get("stepNumber", step.get("step_number"))
        if isinstance(number, bool) or not isinstance(number, int):
            number = position
        tips = _text(step.get("tips") or step.get("tip"))
        temperature = _text(step.get("temperature"))
        out.append(CookingStep(
            step_number=number,
            instruction=instruction,
            duration=_positive_int(step.get("duration")),
            temperature=temperature or None,
            tips=tips or None,
        ))
    return out


def _sanitize_nutrition(value: Any) -> NutritionInfo:
    # A present record is taken whole or replaced whole, never field-merged.
    if isinstance(value, Mapping):
        try:
            return NutritionInfo.model_validate(dict(value))
        except ValidationError:
            log.warning("Unusable nutrition record, using default")
    return NutritionInfo(**DEFAULT_NUTRITION)


def sanitize_detail(
    draft: Mapping[str, Any],
    *,
    recipe_id: str,
    persona: Persona,
    title: str,
) -> RecipeDetail:
    """
    Default every missing detail field. Never rejects.
    """
    ingredients = _sanitize_ingredients(draft.get("ingredients")) or [PLACEHOLDER_INGREDIENT.model_copy()]
    steps = _sanitize_steps(draft.get("steps")) or [s.model_copy() for s in PLACEHOLDER_STEPS]

    total_time = (
        _positive_int(draft.get("total_time"))
        or _positive_int(draft.get("cooking_time"))
        or DEFAULT_COOKING_TIME
    )
    cooking_time = _positive_int(draft.get("cooking_time")) or total_time
    main_ingredients = _string_list(draft.get("main_ingredients")) or [i.name for i in ingredients[:3]]
    tips = draft.get("tips")
    image_url = _text(draft.get("image_url"))

    return RecipeDetail(
        id=recipe_id,
        persona=persona,
        title=_text(title) or _text(draft.get("title")) or get_profile(persona).fallback_title,
        description=_text(draft.get("description")) or f"Detailed recipe for {title}.",
        cooking_time=cooking_time,
        main_ingredients=main_ingredients,
        features=_string_list(draft.get("features")) or list(DETAIL_FEATURES),
        image_url=image_url or None,
        ingredients=ingredients,
        steps=steps,
        nutrition_info=_sanitize_nutrition(draft.get("nutrition_info")),
        tips=_string_list(tips) if isinstance(tips, list) else list(DETAIL_TIPS),
        servings=_positive_int(draft.get("servings")) or DEFAULT_SERVINGS,
        prep_time=_positive_int(draft.get("prep_time")) or DEFAULT_PREP_TIME,
        total_time=total_time,
    )
