"""Tests for recipe detail formatting."""

import json

import pytest

from src.errors import EnrichmentError, NotFoundError, UpstreamError
from src.llm.generation import GenerationSettings
from src.models.recipe import Recipe
from src.rag.detail import (
    FETCH_FAILED_MESSAGE,
    FORMAT_FAILED_MESSAGE,
    RECIPE_NOT_FOUND_MESSAGE,
    RecipeDetailNormalizer,
    parse_formatted_recipe,
    strip_code_fences,
)


def _formatted_payload(**overrides):
    payload = {
        "id": "abc",
        "title": "Pancakes",
        "prepTimeMinutes": 20,
        "servings": 3,
        "ingredients": ["3/4 cup sugar", "2 eggs"],
        "instructions": ["1. Whisk the eggs.", "2. Fry the batter."],
        "nutrition": {
            "perServing": {
                "calories": 320,
                "totalFat": 9.5,
                "saturatedFat": 3,
                "carbohydrates": 48,
                "sugar": 21,
                "protein": 8,
            }
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def raw_recipe():
    return Recipe(
        id="abc",
        title="Pancakes",
        ingredients=["34 cup sugar", "2 eggs"],
        instructions=["whisk eggs", "fry"],
    )


@pytest.fixture
def normalizer(recipe_store, text_generator, image_store, raw_recipe):
    recipe_store.get_recipe.return_value = raw_recipe
    text_generator.generate.return_value = json.dumps(_formatted_payload())
    return RecipeDetailNormalizer(
        recipe_store=recipe_store,
        text_generator=text_generator,
        image_store=image_store,
        generation_settings=GenerationSettings(),
    )


class TestStripCodeFences:
    @pytest.mark.parametrize(
        "text",
        [
            '```json\n{"a": 1}\n```',
            '```\n{"a": 1}\n```',
            '  ```JSON\n{"a": 1}\n```  \n',
            '{"a": 1}',
            '\n{"a": 1}\n',
        ],
    )
    def test_fences_and_whitespace_are_removed(self, text):
        assert strip_code_fences(text) == '{"a": 1}'


class TestParseFormattedRecipe:
    """Tests for parsing model output."""

    def test_parses_nested_schema(self):
        detail = parse_formatted_recipe(json.dumps(_formatted_payload()))

        assert detail.prep_time_minutes == 20
        assert detail.servings == 3
        assert detail.nutrition.per_serving.total_fat == 9.5
        assert detail.nutrition.per_serving.protein == 8

    def test_servings_are_clamped_to_two_to_four(self):
        assert parse_formatted_recipe(json.dumps(_formatted_payload(servings=8))).servings == 4
        assert parse_formatted_recipe(json.dumps(_formatted_payload(servings=1))).servings == 2

    def test_fractional_prep_time_is_rounded(self):
        detail = parse_formatted_recipe(json.dumps(_formatted_payload(prepTimeMinutes=17.6)))

        assert detail.prep_time_minutes == 18

    @pytest.mark.parametrize("text", ["Here is your recipe!", "[1, 2, 3]", ""])
    def test_non_object_output_raises(self, text):
        with pytest.raises(ValueError):
            parse_formatted_recipe(text)


class TestRecipeDetailNormalizer:
    """Tests for RecipeDetailNormalizer.get_formatted_recipe."""

    @pytest.mark.asyncio
    async def test_returns_formatted_detail_with_image(self, normalizer, image_store):
        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.id == "abc"
        assert detail.title == "Pancakes"
        assert detail.ingredients == ["3/4 cup sugar", "2 eggs"]
        assert detail.image_url == "https://img.example/r1.jpg"
        image_store.fetch_image_url.assert_awaited_once_with("abc")

    @pytest.mark.asyncio
    async def test_prompt_carries_raw_recipe(self, normalizer, text_generator):
        await normalizer.get_formatted_recipe("abc")

        prompt, settings = text_generator.generate.await_args.args
        assert '"34 cup sugar"' in prompt
        assert '"_id": "abc"' in prompt
        assert settings.temperature == 0.0
        assert settings.safety_threshold == "BLOCK_NONE"

    @pytest.mark.asyncio
    async def test_fenced_output_is_accepted(self, normalizer, text_generator):
        text_generator.generate.return_value = (
            "```json\n" + json.dumps(_formatted_payload()) + "\n```"
        )

        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.servings == 3

    @pytest.mark.asyncio
    async def test_returned_id_is_the_requested_recipe(self, normalizer, text_generator):
        text_generator.generate.return_value = json.dumps(_formatted_payload(id="something-else"))

        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.id == "abc"

    @pytest.mark.asyncio
    async def test_unknown_recipe_is_not_found(self, normalizer, recipe_store, text_generator):
        recipe_store.get_recipe.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await normalizer.get_formatted_recipe("missing")

        assert exc_info.value.message == RECIPE_NOT_FOUND_MESSAGE
        assert exc_info.value.status_code == 404
        text_generator.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_is_upstream_error(self, normalizer, recipe_store):
        recipe_store.get_recipe.side_effect = OSError("connection refused")

        with pytest.raises(UpstreamError) as exc_info:
            await normalizer.get_formatted_recipe("abc")

        assert exc_info.value.message == FETCH_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_unparseable_output_is_formatting_error(self, normalizer, text_generator):
        text_generator.generate.return_value = "Sure! Here is the recipe you asked for."

        with pytest.raises(UpstreamError) as exc_info:
            await normalizer.get_formatted_recipe("abc")

        assert exc_info.value.message == FORMAT_FAILED_MESSAGE
        assert exc_info.value.stage == "recipe_formatting"

    @pytest.mark.asyncio
    async def test_output_without_id_uses_requested_id(self, normalizer, text_generator):
        payload = _formatted_payload()
        del payload["id"]
        text_generator.generate.return_value = json.dumps(payload)

        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.id == "abc"
        assert detail.servings == 3

    @pytest.mark.asyncio
    async def test_output_without_title_keeps_stored_title(self, normalizer, text_generator):
        payload = _formatted_payload()
        del payload["title"]
        text_generator.generate.return_value = json.dumps(payload)

        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.title == "Pancakes"

    @pytest.mark.asyncio
    async def test_schema_mismatch_is_formatting_error(self, normalizer, text_generator):
        text_generator.generate.return_value = json.dumps(
            _formatted_payload(servings="a few", ingredients="sugar and eggs")
        )

        with pytest.raises(UpstreamError) as exc_info:
            await normalizer.get_formatted_recipe("abc")

        assert exc_info.value.message == FORMAT_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_generation_failure_is_formatting_error(self, normalizer, text_generator):
        text_generator.generate.side_effect = RuntimeError("rate limited")

        with pytest.raises(UpstreamError) as exc_info:
            await normalizer.get_formatted_recipe("abc")

        assert exc_info.value.message == FORMAT_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_image_failure_yields_null_url(self, normalizer, image_store):
        image_store.fetch_image_url.side_effect = EnrichmentError("Image lookup failed")

        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.image_url is None
        assert detail.model_dump(by_alias=True)["imageUrl"] is None

    @pytest.mark.asyncio
    async def test_missing_image_yields_null_url(self, normalizer, image_store):
        image_store.fetch_image_url.return_value = None

        detail = await normalizer.get_formatted_recipe("abc")

        assert detail.image_url is None
