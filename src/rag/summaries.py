"""Batch recipe summaries with first images."""

import asyncio
from typing import Sequence

import structlog

from src.errors import EnrichmentError, ValidationError, translate_upstream_errors
from src.metrics import record_image_enrichment
from src.models.recipe import RecipeSummary
from src.rag.enrichment import build_image_url_map
from src.stores.images import ImageStore
from src.stores.recipes import RecipeStore

logger = structlog.get_logger()

MISSING_IDS_MESSAGE = "Missing 'ids' query parameter."
SUMMARIES_FAILED_MESSAGE = "An error occurred while fetching recipe summaries."


def parse_id_list(raw_ids: str | None) -> list[str]:
    """Split a comma-separated id parameter, dropping blanks and repeats.

    Raises:
        ValidationError: If no identifier remains
    """
    ids = [part.strip() for part in (raw_ids or "").split(",")]
    ids = list(dict.fromkeys(i for i in ids if i))
    if not ids:
        raise ValidationError(MISSING_IDS_MESSAGE)
    return ids


class SummaryAggregator:
    """Merge summary projections from the recipe store with first images."""

    def __init__(self, recipe_store: RecipeStore, image_store: ImageStore):
        self.recipe_store = recipe_store
        self.image_store = image_store

    async def get_summaries(self, raw_ids: str | None) -> list[RecipeSummary]:
        """One summary per requested id found in the recipe store, in request order."""
        recipe_ids = parse_id_list(raw_ids)

        image_lookup = asyncio.create_task(self._lookup_image_urls(recipe_ids))
        try:
            with translate_upstream_errors("summary_fetch", SUMMARIES_FAILED_MESSAGE):
                rows = await self.recipe_store.get_summaries(recipe_ids)
        except BaseException:
            image_lookup.cancel()
            raise
        image_urls = await image_lookup

        by_id = {row["id"]: row for row in rows}
        summaries = [
            RecipeSummary(
                id=recipe_id,
                title=by_id[recipe_id]["title"],
                prep_time_minutes=by_id[recipe_id]["prep_time_minutes"] or None,
                servings=by_id[recipe_id]["servings"] or None,
                image_url=image_urls.get(recipe_id),
            )
            for recipe_id in recipe_ids
            if recipe_id in by_id
        ]

        logger.info(
            "recipe_summaries_built",
            requested=len(recipe_ids),
            returned=len(summaries),
        )
        return summaries

    async def _lookup_image_urls(self, recipe_ids: Sequence[str]) -> dict[str, str]:
        try:
            records = await self.image_store.fetch_images(recipe_ids)
        except EnrichmentError:
            record_image_enrichment("summaries", len(recipe_ids), 0, failed=True)
            return {}
        image_urls = build_image_url_map(records)
        record_image_enrichment("summaries", len(recipe_ids), len(image_urls))
        return image_urls
