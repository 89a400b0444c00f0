"""Grounding context and prompt construction."""

import json
from typing import Sequence

from src.llm.prompts import FALLBACK_SENTENCE, RECIPE_FORMAT_PROMPT, RECIPE_SEARCH_PROMPT
from src.models.query import RecipeQuery
from src.models.recipe import Recipe, RetrievedRecipe

_FALLBACK_MARKER = FALLBACK_SENTENCE.rstrip(".").lower()


def format_score(score: float | None) -> str:
    return "N/A" if score is None else f"{score:.4f}"


def render_recipe_context(recipes: Sequence[RetrievedRecipe]) -> str:
    """Render one ``Recipe <rank> - Title: "...", Score: ...`` line per recipe."""
    return "\n".join(
        f'Recipe {rank} - Title: "{recipe.title}", Score: {format_score(recipe.score)}'
        for rank, recipe in enumerate(recipes, start=1)
    )


def build_search_prompt(query: RecipeQuery, context: str) -> str:
    """Build the listing prompt for a validated query and its context."""
    return RECIPE_SEARCH_PROMPT.format(
        query=query.text,
        context=context,
        dietary_restrictions=query.dietary_restrictions or "no dietary restrictions",
        cuisine_preferences=query.cuisine_preferences or "any",
        meal_type=query.meal_type or "any meal",
        fallback=FALLBACK_SENTENCE,
    )


def build_format_prompt(recipe: Recipe) -> str:
    """Build the restructuring prompt for one raw recipe."""
    recipe_json = json.dumps(
        {
            "_id": recipe.id,
            "title": recipe.title,
            "ingredients": recipe.ingredients,
            "instructions": recipe.instructions,
        },
        ensure_ascii=False,
    )
    return RECIPE_FORMAT_PROMPT.format(recipe_json=recipe_json)


def is_fallback_answer(text: str) -> bool:
    """True if the generated text contains the no-information sentence.

    Substring match, case-insensitive, with typographic apostrophes folded
    to ASCII.
    """
    normalized = text.replace("’", "'").replace("‘", "'").lower()
    return _FALLBACK_MARKER in normalized
