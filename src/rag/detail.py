"""Recipe detail formatting through the language model."""

import json
import re

import structlog
from pydantic import ValidationError as SchemaValidationError

from src.errors import EnrichmentError, NotFoundError, UpstreamError, translate_upstream_errors
from src.llm.generation import GenerationSettings, TextGenerator
from src.metrics import record_image_enrichment
from src.models.recipe import FormattedRecipeDetail
from src.rag.context import build_format_prompt
from src.stores.images import ImageStore
from src.stores.recipes import RecipeStore

logger = structlog.get_logger()

RECIPE_NOT_FOUND_MESSAGE = "Recipe not found in backend database."
FETCH_FAILED_MESSAGE = "Internal server error while fetching recipe."
FORMAT_FAILED_MESSAGE = "An error occurred during recipe formatting."

_CODE_FENCE = re.compile(r"^\s*```[A-Za-z]*\s*\n?|\n?\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    return _CODE_FENCE.sub("", text).strip()


def parse_formatted_recipe(text: str) -> FormattedRecipeDetail:
    """Parse model output into a ``FormattedRecipeDetail``.

    Raises:
        ValueError: If the output is not a JSON object matching the schema
    """
    payload = json.loads(strip_code_fences(text))
    if not isinstance(payload, dict):
        raise ValueError("Formatted recipe is not a JSON object")
    return FormattedRecipeDetail.model_validate(payload)


class RecipeDetailNormalizer:
    """Fetch one recipe and have the model restructure it into a fixed schema."""

    def __init__(
        self,
        recipe_store: RecipeStore,
        text_generator: TextGenerator,
        image_store: ImageStore,
        generation_settings: GenerationSettings | None = None,
    ):
        self.recipe_store = recipe_store
        self.text_generator = text_generator
        self.image_store = image_store
        self.generation_settings = generation_settings or GenerationSettings.from_settings()

    async def get_formatted_recipe(self, recipe_id: str) -> FormattedRecipeDetail:
        """Return the formatted detail for ``recipe_id``.

        Raises:
            NotFoundError: Identifier absent from the primary store
            UpstreamError: Store read, generation or output parsing failed
        """
        with translate_upstream_errors("recipe_fetch", FETCH_FAILED_MESSAGE):
            recipe = await self.recipe_store.get_recipe(recipe_id)

        if recipe is None:
            raise NotFoundError(RECIPE_NOT_FOUND_MESSAGE, stage="recipe_fetch")

        prompt = build_format_prompt(recipe)
        with translate_upstream_errors("recipe_formatting", FORMAT_FAILED_MESSAGE):
            response_text = await self.text_generator.generate(
                prompt, self.generation_settings
            )

        try:
            detail = parse_formatted_recipe(response_text)
        except (ValueError, SchemaValidationError) as e:
            logger.error(
                "recipe_format_parse_error",
                recipe_id=recipe_id,
                error=str(e),
                raw_output=response_text[:500],
            )
            raise UpstreamError(FORMAT_FAILED_MESSAGE, stage="recipe_formatting") from e

        image_url = await self._lookup_image_url(recipe_id)
        logger.info("recipe_formatted", recipe_id=recipe_id, has_image=image_url is not None)
        return detail.model_copy(
            update={
                "id": recipe.id or recipe_id,
                "title": detail.title or recipe.title,
                "image_url": image_url,
            }
        )

    async def _lookup_image_url(self, recipe_id: str) -> str | None:
        try:
            image_url = await self.image_store.fetch_image_url(recipe_id)
        except EnrichmentError:
            record_image_enrichment("detail", 1, 0, failed=True)
            return None
        record_image_enrichment("detail", 1, 1 if image_url else 0)
        return image_url
