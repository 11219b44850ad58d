from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional

from recipetrio.features.recipes.domain.models import RecipeDraft
from recipetrio.shared.errors import ParseRepairExhaustedError

log = logging.getLogger("recipes.parser")

_RE_JSON_BLOCK = re.compile(r"```json\s*\n([\s\S]*?)\n\s*```", re.IGNORECASE)
_RE_CONTROL = re.compile(r"[\u0000-\u001F\u007F-\u009F]")
_RE_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_RE_DOUBLE_CLOSE = re.compile(r"([}\]]),(\s*[}\]])")

_RE_TITLE = re.compile(r"^[\W_]*(?:title|recipe name|dish name)\s*[\"']?\s*[:：][\s*_]*(.+)$", re.IGNORECASE)
_RE_NAME = re.compile(r"^[\W_]*name\s*[\"']?\s*[:：][\s*_]*(.+)$", re.IGNORECASE)
_RE_DESCRIPTION = re.compile(r"^[\W_]*description\s*[\"']?\s*[:：][\s*_]*(.+)$", re.IGNORECASE)
_RE_TIME = re.compile(r"^[\W_]*(?:cookingTime|cooking time|total time|time)\b[^:：]*[:：]\D*(\d+)", re.IGNORECASE)

# Model key spellings accepted for each draft field
_KEY_ALIASES: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "cookingTime": "cooking_time",
    "cooking_time": "cooking_time",
    "mainIngredients": "main_ingredients",
    "main_ingredients": "main_ingredients",
    "features": "features",
    "imageUrl": "image_url",
    "image_url": "image_url",
    "ingredients": "ingredients",
    "steps": "steps",
    "nutritionInfo": "nutrition_info",
    "nutrition_info": "nutrition_info",
    "nutrition": "nutrition_info",
    "tips": "tips",
    "servings": "servings",
    "prepTime": "prep_time",
    "prep_time": "prep_time",
    "totalTime": "total_time",
    "total_time": "total_time",
}

DEFAULT_NUTRITION: Dict[str, float] = {
    "calories": 300,
    "protein": 15,
    "carbs": 30,
    "fat": 10,
    "fiber": 5,
    "sodium": 800,
}


def default_draft() -> RecipeDraft:
    """
    Fully populated draft used when nothing could be extracted.
    """
    return RecipeDraft(
        title="AI recipe",
        description="A recipe generated with AI.",
        cooking_time=30,
        main_ingredients=["Ingredient 1", "Ingredient 2", "Ingredient 3"],
        features=["Easy", "Tasty", "Nutritious"],
        ingredients=[{"name": "basic ingredients", "amount": "to taste", "unit": "to taste", "notes": "Adjust to your liking"}],
        steps=[
            {"step_number": 1, "instruction": "Prepare the ingredients.", "duration": 5},
            {"step_number": 2, "instruction": "Start cooking.", "duration": 25},
        ],
        nutrition_info=dict(DEFAULT_NUTRITION),
        tips=["Adjust the seasoning to taste."],
        servings=4,
        prep_time=10,
        total_time=30,
    )


def clean_json_string(raw: str) -> str:
    return _RE_DOUBLE_CLOSE.sub(r"\1\2", _RE_TRAILING_COMMA.sub(r"\1", _RE_CONTROL.sub("", raw))).strip()


def _loads_object(raw: str) -> Dict[str, Any]:
    obj = json.loads(clean_json_string(raw))
    if not isinstance(obj, dict):
        raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
    return obj


def to_draft(obj: Mapping[str, Any]) -> RecipeDraft:
    draft: Dict[str, Any] = {}
    for key, value in obj.items():
        field = _KEY_ALIASES.get(key)
        if field is not None and field not in draft:
            draft[field] = value
    return RecipeDraft(**draft)


def _parse_structured(text: str) -> Dict[str, Any]:
    """
    Try each structural strategy in turn: fenced json block, whole text,
    outermost braces.
    """
    candidates = []
    m = _RE_JSON_BLOCK.search(text)
    if m:
        candidates.append(("json-block", m.group(1)))

    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        candidates.append(("whole-text", stripped))

    start, end = stripped.find("{"), stripped.rfind("}")
    if start != -1 and end > start:
        candidates.append(("braces", stripped[start:end + 1]))

    errors = []
    for strategy, candidate in candidates:
        try:
            obj = _loads_object(candidate)
            log.debug("Parsed LLM response via %s", strategy)
            return obj
        except ValueError as e:
            errors.append(f"{strategy}: {e}")
    raise ParseRepairExhaustedError("; ".join(errors) or "no JSON object found")


def _strip_quotes(value: str) -> str:
    value = value.strip()
    # A quoted value ends at its closing quote, whatever follows on the line.
    if value[:1] in ("\"", "'", "“"):
        closing = "”" if value[0] == "“" else value[0]
        end = value.find(closing, 1)
        if end > 1:
            return value[1:end].strip()
    return value.strip("\"'“”,").strip()


def extract_from_text(text: str) -> RecipeDraft:
    """
    Line-oriented fallback: pick up labelled title, description and time.
    """
    draft = default_draft()
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    title: Optional[str] = None
    description: Optional[str] = None
    cooking_time: Optional[int] = None
    for line in lines:
        if title is None:
            m = _RE_TITLE.match(line)
            if m and _strip_quotes(m.group(1)):
                title = _strip_quotes(m.group(1))
                continue
        if description is None:
            m = _RE_DESCRIPTION.match(line)
            if m and _strip_quotes(m.group(1)):
                description = _strip_quotes(m.group(1))
                continue
        if cooking_time is None:
            m = _RE_TIME.match(line)
            if m:
                cooking_time = int(m.group(1))

    # A bare "name:" label is only a title when no explicit title exists anywhere.
    if title is None:
        for line in lines:
            m = _RE_NAME.match(line)
            if m and _strip_quotes(m.group(1)):
                title = _strip_quotes(m.group(1))
                break

    if cooking_time is not None:
        draft["cooking_time"] = cooking_time
    if title:
        draft["title"] = title
    if description:
        draft["description"] = description
    return draft


def parse_recipe_response(text: Optional[str]) -> RecipeDraft:
    """
    Turn raw model output into a draft. Never raises.
    """
    text = text or ""
    log.debug("Attempting to parse LLM response len=%d", len(text))
    try:
        return to_draft(_parse_structured(text))
    except ParseRepairExhaustedError as e:
        log.warning("Could not extract JSON from LLM response (%s), attempting text extraction", e)
        log.debug("Original response: %s...", text[:500])

    try:
        return extract_from_text(text)
    except Exception:
        log.exception("Fallback text extraction also failed")
        return default_draft()
