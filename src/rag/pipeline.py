"""Retrieval-augmented recipe search.

Validates the query, embeds it, retrieves the nearest recipes, asks the
language model to list them in a fixed format, and attaches each recipe's
first image. Steps run in order except the image lookup, which only needs
the search results and runs alongside generation.
"""

import asyncio
import time
from typing import Any, Sequence

import structlog

from src.config import get_settings
from src.errors import EmptyResultError, EnrichmentError, translate_upstream_errors
from src.llm.embeddings import EmbeddingGenerator, GeminiEmbeddingGenerator
from src.llm.generation import GenerationSettings, TextGenerator
from src.metrics import record_fallback_answer, record_image_enrichment
from src.models.recipe import EnrichedRecipe, RetrievedRecipe
from src.rag.context import build_search_prompt, is_fallback_answer, render_recipe_context
from src.rag.enrichment import attach_image_urls, build_image_url_map, collect_recipe_ids
from src.rag.validation import validate_query
from src.search.vector import VectorSearcher
from src.stores.images import ImageStore

logger = structlog.get_logger()

SEARCH_FAILED_MESSAGE = "An error occurred during recipe search."
NO_RECIPES_MESSAGE = "No recipes found for your query."


class RecipeSearchPipeline:
    """Compose embedding, vector search, generation and image lookup."""

    def __init__(
        self,
        embedding_generator: EmbeddingGenerator | GeminiEmbeddingGenerator,
        vector_searcher: VectorSearcher,
        text_generator: TextGenerator,
        image_store: ImageStore,
        generation_settings: GenerationSettings | None = None,
        top_k: int | None = None,
        num_candidates: int | None = None,
    ):
        settings = get_settings()
        self.embedding_generator = embedding_generator
        self.vector_searcher = vector_searcher
        self.text_generator = text_generator
        self.image_store = image_store
        self.generation_settings = generation_settings or GenerationSettings.from_settings()
        self.top_k = top_k or settings.vector_top_k
        self.num_candidates = num_candidates or settings.vector_num_candidates

    async def run(
        self,
        query: Any,
        dietary_restrictions: Any = None,
        cuisine_preferences: Any = None,
        meal_type: Any = None,
    ) -> tuple[str, list[EnrichedRecipe]]:
        """Answer a recipe query.

        Returns:
            The generated answer text and the retrieved recipes with image
            URLs, in search rank order. The list is empty when the answer
            is the no-information fallback.

        Raises:
            ValidationError: Malformed query; nothing downstream is called
            EmptyResultError: Vector search found nothing; generation skipped
            UpstreamError: Embedding, search or generation failed
        """
        recipe_query = validate_query(
            query, dietary_restrictions, cuisine_preferences, meal_type
        )
        start_time = time.time()
        logger.info("recipe_search_started", query=recipe_query.text[:50])

        with translate_upstream_errors("embedding", SEARCH_FAILED_MESSAGE):
            embedding = await self.embedding_generator.generate_query_embedding(
                recipe_query.text
            )

        with translate_upstream_errors("vector_search", SEARCH_FAILED_MESSAGE):
            recipes = await self.vector_searcher.search(
                embedding, top_k=self.top_k, num_candidates=self.num_candidates
            )

        if not recipes:
            logger.info("recipe_search_no_results", query=recipe_query.text[:50])
            raise EmptyResultError(NO_RECIPES_MESSAGE, stage="vector_search")

        prompt = build_search_prompt(recipe_query, render_recipe_context(recipes))

        image_lookup = asyncio.create_task(self._lookup_image_urls(recipes))
        try:
            answer = await self._generate(prompt)
        except BaseException:
            image_lookup.cancel()
            raise
        image_urls = await image_lookup

        enriched = attach_image_urls(recipes, image_urls)

        if is_fallback_answer(answer):
            logger.info("recipe_search_fallback_answer", retrieved=len(recipes))
            record_fallback_answer()
            enriched = []

        logger.info(
            "recipe_search_complete",
            result_count=len(enriched),
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return answer, enriched

    async def _generate(self, prompt: str) -> str:
        with translate_upstream_errors("generation", SEARCH_FAILED_MESSAGE):
            return await self.text_generator.generate(prompt, self.generation_settings)

    async def _lookup_image_urls(self, recipes: Sequence[RetrievedRecipe]) -> dict[str, str]:
        """Image URLs keyed by recipe id; empty on lookup failure."""
        recipe_ids = collect_recipe_ids(recipes)
        if not recipe_ids:
            logger.info("image_lookup_skipped", reason="no_recipe_ids")
            return {}

        try:
            records = await self.image_store.fetch_images(recipe_ids)
        except EnrichmentError:
            record_image_enrichment("search", len(recipe_ids), 0, failed=True)
            return {}

        image_urls = build_image_url_map(records)
        record_image_enrichment("search", len(recipe_ids), len(image_urls))
        return image_urls
