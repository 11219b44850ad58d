from __future__ import annotations

from recipetrio.features.recipes.app.use_cases import RecipeGenerationService
from recipetrio.shared.llm.ollama_client import get_llm_client
from recipetrio.shared.persistence.write_queue import get_write_queue


def get_recipe_service() -> RecipeGenerationService:
    return RecipeGenerationService(get_llm_client(), writer=get_write_queue())
