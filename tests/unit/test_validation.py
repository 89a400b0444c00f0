"""Tests for search query validation."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.errors import ValidationError
from src.rag.validation import (
    INVALID_QUERY_MESSAGE,
    MISSING_QUERY_MESSAGE,
    validate_query,
)


class TestValidateQuery:
    """Tests for validate_query."""

    def test_plain_query_is_accepted(self):
        query = validate_query("vegan pasta")

        assert query.text == "vegan pasta"
        assert query.dietary_restrictions is None
        assert query.cuisine_preferences is None
        assert query.meal_type is None

    def test_common_punctuation_is_accepted(self):
        query = validate_query('What\'s a quick (30-min) "weeknight" dinner, please?!')

        assert query.text.startswith("What's")

    @pytest.mark.parametrize("value", [None, "", 42, ["pasta"], {"q": "pasta"}])
    def test_missing_or_non_string_query_is_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_query(value)

        assert exc_info.value.message == MISSING_QUERY_MESSAGE
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        "value",
        ["pasta; DROP TABLE recipes", "<script>", "crème brûlée", "soup & bread", "tacos @ home"],
    )
    def test_disallowed_characters_are_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_query(value)

        assert exc_info.value.message == INVALID_QUERY_MESSAGE

    @pytest.mark.parametrize("value", ["1234", "   ", "?!", "(42)"])
    def test_query_without_letters_is_rejected(self, value):
        with pytest.raises(ValidationError):
            validate_query(value)

    def test_overlong_query_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_query("a" * 11, max_length=10)

        assert "at most 10" in exc_info.value.message

    def test_facet_strings_are_trimmed(self):
        query = validate_query("soup", dietary_restrictions="  vegan ", meal_type="lunch")

        assert query.dietary_restrictions == "vegan"
        assert query.meal_type == "lunch"

    def test_facet_lists_are_joined(self):
        query = validate_query(
            "soup", dietary_restrictions=["vegan", "gluten-free", " "], cuisine_preferences=[]
        )

        assert query.dietary_restrictions == "vegan, gluten-free"
        assert query.cuisine_preferences is None

    def test_blank_facet_becomes_absent(self):
        query = validate_query("soup", cuisine_preferences="   ")

        assert query.cuisine_preferences is None

    def test_non_string_facet_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_query("soup", meal_type=3)

        assert "mealType" in exc_info.value.message

    def test_validated_query_is_immutable(self):
        query = validate_query("soup")

        with pytest.raises(PydanticValidationError):
            query.text = "something else"
