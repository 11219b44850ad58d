from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, List, Optional, Protocol, TypeVar

from starlette.concurrency import run_in_threadpool

from recipetrio.features.recipes.app.parser import parse_recipe_response
from recipetrio.features.recipes.app.sanitizer import build_summary, fallback_summary, sanitize_detail
from recipetrio.features.recipes.domain.models import PERSONAS, Persona, Recipe, RecipeDetail, RecipeInput
from recipetrio.features.recipes.domain.prompts import build_detail_prompt, build_prompt
from recipetrio.features.recipes.infra import recipes_repo
from recipetrio.shared.config.settings import settings
from recipetrio.shared.errors import (
    AllGenerationsFailedError,
    GenerationTimeoutError,
    RecipeNotFoundError,
    SanitizeRejectedError,
    UpstreamGenerationError,
)
from recipetrio.shared.llm.ollama_client import DETAIL_OPTIONS, SUMMARY_OPTIONS, FragmentCallback, GenerationOptions
from recipetrio.shared.persistence.write_queue import WriteQueue, get_write_queue
from recipetrio.shared.utils.id_utils import make_recipe_id

log = logging.getLogger("recipes")

T = TypeVar("T")


class TextGenerator(Protocol):
    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str: ...

    async def generate_streaming(
        self, prompt: str, options: Optional[GenerationOptions], on_fragment: FragmentCallback
    ) -> None: ...


async def with_deadline(aw: Awaitable[T], seconds: Optional[float], persona: Optional[str] = None) -> T:
    """
    Await `aw`, cancelling it and raising GenerationTimeoutError after `seconds`.
    A falsy deadline waits indefinitely.
    """
    if not seconds:
        return await aw
    try:
        return await asyncio.wait_for(aw, timeout=seconds)
    except asyncio.TimeoutError:
        raise GenerationTimeoutError(seconds, persona=persona) from None


def persist_detail(writer: WriteQueue, detail: RecipeDetail) -> None:
    writer.submit(f"recipe:{detail.id}", recipes_repo.upsert_recipe_detail, detail)


class RecipeGenerationService:
    def __init__(
        self,
        llm: TextGenerator,
        *,
        writer: Optional[WriteQueue] = None,
        deadline_seconds: Optional[float] = None,
    ) -> None:
        self.llm = llm
        self.writer = writer or get_write_queue()
        self.deadline_seconds = settings.PERSONA_DEADLINE_SECONDS if deadline_seconds is None else deadline_seconds

    async def _generate_for_persona(self, persona: Persona, index: int, recipe_input: RecipeInput) -> Recipe:
        prompt = build_prompt(persona, recipe_input)
        text = await with_deadline(
            self.llm.generate(prompt, SUMMARY_OPTIONS), self.deadline_seconds, persona=persona.value
        )
        recipe_id = make_recipe_id(index)
        draft = parse_recipe_response(text)
        try:
            recipe = build_summary(draft, recipe_id=recipe_id, persona=persona)
        except SanitizeRejectedError as e:
            log.warning("Invalid recipe data from %s persona (%s), using fallback", persona.value, e.reason)
            return fallback_summary(persona, recipe_id=recipe_id)
        log.info("Successfully generated %s recipe: %s", persona.value, recipe.title)
        return recipe

    async def generate_recipes(self, recipe_input: RecipeInput) -> List[Recipe]:
        """
        Run the three persona pipelines concurrently and always return one
        schema-valid summary per persona, unless every model call failed.
        """
        log.info("Starting recipe generation theme=%r", recipe_input.theme)
        results = await asyncio.gather(
            *(self._generate_for_persona(p, i, recipe_input) for i, p in enumerate(PERSONAS)),
            return_exceptions=True,
        )

        recipes: List[Recipe] = []
        upstream_errors: List[str] = []
        for index, (persona, result) in enumerate(zip(PERSONAS, results)):
            if isinstance(result, Recipe):
                recipes.append(result)
                continue
            if isinstance(result, UpstreamGenerationError):
                log.error("Failed to generate %s recipe: %s", persona.value, result)
                upstream_errors.append(f"{persona.value}: {result}")
            else:
                log.error("Unexpected failure in %s pipeline", persona.value, exc_info=result)
            recipes.append(fallback_summary(persona, recipe_id=make_recipe_id(index)))

        if len(upstream_errors) == len(PERSONAS):
            raise AllGenerationsFailedError(upstream_errors)

        log.info("Successfully generated %d recipes (%d fallbacks)", len(recipes), len(upstream_errors))
        return recipes

    async def generate_recipe_detail(self, recipe_id: str, title: str, persona: Persona) -> RecipeDetail:
        """
        Single-pipeline detail generation. Upstream errors propagate.
        """
        log.info("Generating detailed recipe id=%s title=%r persona=%s", recipe_id, title, persona.value)
        prompt = build_detail_prompt(title, persona)
        text = await with_deadline(
            self.llm.generate(prompt, DETAIL_OPTIONS), self.deadline_seconds, persona=persona.value
        )
        detail = sanitize_detail(parse_recipe_response(text), recipe_id=recipe_id, persona=persona, title=title)
        persist_detail(self.writer, detail)
        log.info("Successfully generated detailed recipe id=%s", recipe_id)
        return detail

    async def get_recipe_by_id(self, recipe_id: str) -> RecipeDetail:
        detail = await run_in_threadpool(recipes_repo.get_recipe_detail, recipe_id)
        if detail is None:
            raise RecipeNotFoundError(recipe_id)
        return detail
