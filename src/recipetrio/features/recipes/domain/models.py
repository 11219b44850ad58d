from __future__ import annotations

from enum import Enum
from typing import Any, List, Literal, Optional, TypedDict

from pydantic import BaseModel, Field, ValidationError, field_validator

from recipetrio.shared.errors import InputValidationError


class Persona(str, Enum):
    CLASSIC = "classic"
    FUSION = "fusion"
    HEALTHY = "healthy"


PERSONAS: List[Persona] = [Persona.CLASSIC, Persona.FUSION, Persona.HEALTHY]

CookingTime = Literal["30min", "60min", "unlimited"]
Difficulty = Literal["beginner", "intermediate", "advanced"]
Priority = Literal["appearance", "nutrition", "quick", "unique"]


class RecipeInput(BaseModel):
    """
    A validated meal request. Immutable once accepted.
    """
    model_config = {"frozen": True}

    theme: str = Field(min_length=1)
    cooking_time: CookingTime
    difficulty: Difficulty
    special_requests: List[str]
    avoid_ingredients: str
    priority: Priority

    @field_validator("theme")
    @classmethod
    def _theme_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("theme must not be blank")
        return v.strip()


def parse_recipe_input(data: Any) -> RecipeInput:
    """
    Validate an untrusted payload. Raises InputValidationError.
    """
    try:
        return RecipeInput.model_validate(data)
    except ValidationError as e:
        raise InputValidationError(details=e.errors(include_url=False)) from e


class Recipe(BaseModel):
    id: str
    persona: Persona
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    cooking_time: int = Field(gt=0)
    main_ingredients: List[str] = Field(min_length=1)
    features: List[str] = Field(min_length=1)
    image_url: Optional[str] = None


class Ingredient(BaseModel):
    name: str
    amount: str
    unit: str
    notes: Optional[str] = None


class CookingStep(BaseModel):
    step_number: int
    instruction: str
    duration: Optional[int] = None
    temperature: Optional[str] = None
    tips: Optional[str] = None


class NutritionInfo(BaseModel):
    model_config = {"allow_inf_nan": False}

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    sodium: float


class RecipeDetail(Recipe):
    ingredients: List[Ingredient] = Field(min_length=1)
    steps: List[CookingStep]
    nutrition_info: NutritionInfo
    tips: List[str]
    servings: int = Field(gt=0)
    prep_time: int
    total_time: int


class RecipeDraft(TypedDict, total=False):
    """
    Loosely-typed parse result. Every key is optional and every value is
    untrusted until the sanitizer has looked at it.
    """
    title: Any
    description: Any
    cooking_time: Any
    main_ingredients: Any
    features: Any
    image_url: Any
    ingredients: Any
    steps: Any
    nutrition_info: Any
    tips: Any
    servings: Any
    prep_time: Any
    total_time: Any


StreamStatus = Literal["started", "progress", "completed", "error"]


class RecipeStreamChunk(BaseModel):
    persona: Persona
    status: StreamStatus
    content: Optional[str] = None
    recipe: Optional[Recipe] = None
    progress: float = 0
