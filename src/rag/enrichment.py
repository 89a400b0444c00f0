"""Merge image URLs from the image store into recipe results."""

from typing import Iterable, Sequence

from src.models.recipe import EnrichedRecipe, ImageRecord, RetrievedRecipe


def collect_recipe_ids(recipes: Iterable[RetrievedRecipe]) -> list[str]:
    """Non-null identifiers in rank order, without duplicates."""
    return list(dict.fromkeys(r.id for r in recipes if r.id is not None))


def build_image_url_map(records: Iterable[ImageRecord]) -> dict[str, str]:
    """Map recipe id to its first image URL, skipping records without one."""
    return {
        record.id: record.first_image_url
        for record in records
        if record.first_image_url
    }


def attach_image_urls(
    recipes: Sequence[RetrievedRecipe],
    image_urls: dict[str, str],
) -> list[EnrichedRecipe]:
    """Attach ``image_url`` to every recipe, None when unmatched, keeping order."""
    return [
        EnrichedRecipe(
            **recipe.model_dump(),
            image_url=image_urls.get(recipe.id) if recipe.id is not None else None,
        )
        for recipe in recipes
    ]
