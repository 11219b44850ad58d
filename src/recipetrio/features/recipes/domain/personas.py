from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from recipetrio.features.recipes.domain.models import Persona


@dataclass(frozen=True)
class PersonaProfile:
    persona: Persona
    role: str
    framing: str
    detail_context: str
    description_hint: str
    fallback_title: str
    fallback_description: str


PLACEHOLDER_MAIN_INGREDIENTS: Tuple[str, ...] = ("Ingredient 1", "Ingredient 2", "Ingredient 3")
PLACEHOLDER_FEATURES: Tuple[str, ...] = ("Tasty", "Easy", "Nutritious")

FALLBACK_MAIN_INGREDIENTS: Tuple[str, ...] = ("Fresh ingredients", "Seasonings", "Spices")
FALLBACK_FEATURES: Tuple[str, ...] = ("Healthy", "Easy to cook", "Authentic flavor")
FALLBACK_COOKING_TIME = 30

PROFILES: Dict[Persona, PersonaProfile] = {
    Persona.CLASSIC: PersonaProfile(
        persona=Persona.CLASSIC,
        role="You are an experienced home-cooking expert. You propose delicious, faithful recipes anyone can make.",
        framing="Propose ONE dish that satisfies the conditions below.",
        detail_context="favouring traditional, homestyle techniques",
        description_hint="Describe the dish in 2-3 sentences. This value is required.",
        fallback_title="classic special recipe",
        fallback_description="A dependable home-style recipe suggested by AI.",
    ),
    Persona.FUSION: PersonaProfile(
        persona=Persona.FUSION,
        role="You are a creative fusion chef. You combine different culinary cultures into original recipes.",
        framing=(
            "Propose ONE innovative dish that satisfies the conditions below. "
            "Combine elements of different cuisines to create a new flavour experience."
        ),
        detail_context="using creative and innovative cooking techniques",
        description_hint="Describe the dish in 2-3 sentences, stressing its originality. This value is required.",
        fallback_title="fusion special recipe",
        fallback_description="A cross-cultural recipe suggested by AI.",
    ),
    Persona.HEALTHY: PersonaProfile(
        persona=Persona.HEALTHY,
        role="You are a health-conscious chef with deep knowledge of nutrition. You propose balanced, nourishing recipes.",
        framing=(
            "Propose ONE nutrient-dense dish that satisfies the conditions below. "
            "Use low-calorie, high-nutrition, well-balanced ingredients."
        ),
        detail_context="choosing cooking methods that preserve the most nutrients",
        description_hint="Describe the dish in 2-3 sentences, including its health benefits. This value is required.",
        fallback_title="healthy special recipe",
        fallback_description="A nutritious, balanced recipe suggested by AI.",
    ),
}


def get_profile(persona: Persona | str) -> PersonaProfile:
    try:
        return PROFILES[Persona(persona)]
    except ValueError:
        raise ValueError(f"Unknown persona: {persona}") from None
