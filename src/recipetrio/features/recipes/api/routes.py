from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from recipetrio.features.recipes.api.deps import get_recipe_service
from recipetrio.features.recipes.api.schemas import RecipeDetailPayload
from recipetrio.features.recipes.app.use_cases import RecipeGenerationService
from recipetrio.features.recipes.domain.models import RecipeInput
from recipetrio.shared.api.envelope import success

router = APIRouter(tags=["recipes"])
log = logging.getLogger("recipes")


@router.post("/recipes/generate")
async def generate_recipes(payload: RecipeInput, service: RecipeGenerationService = Depends(get_recipe_service)):
    log.info("Recipe generation request received theme=%r", payload.theme)
    recipes = await service.generate_recipes(payload)
    log.info(
        "Recipe generation completed count=%d recipes=%s",
        len(recipes),
        [(r.id, r.persona.value, r.title) for r in recipes],
    )
    return success([r.model_dump(mode="json") for r in recipes])


@router.post("/recipes/detail")
async def generate_recipe_detail(
    payload: RecipeDetailPayload, service: RecipeGenerationService = Depends(get_recipe_service)
):
    detail = await service.generate_recipe_detail(payload.recipe_id, payload.title, payload.persona)
    return success(detail.model_dump(mode="json"))


@router.get("/recipes/{recipe_id}")
async def get_recipe_detail(recipe_id: str, service: RecipeGenerationService = Depends(get_recipe_service)):
    log.info("Recipe detail request received id=%s", recipe_id)
    detail = await service.get_recipe_by_id(recipe_id)
    return success(detail.model_dump(mode="json"))
