from pydantic import BaseModel, Field

from recipetrio.features.recipes.domain.models import Persona


class RecipeDetailPayload(BaseModel):
    recipe_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    persona: Persona
