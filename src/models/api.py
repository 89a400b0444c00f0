"""API request and response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.recipe import EnrichedRecipe

Facet = str | list[str] | None


class SearchRequest(BaseModel):
    """Recipe search request.

    ``query`` is left untyped so that a missing or non-string query is
    reported by query validation with a 400, not by FastAPI with a 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    query: Any = None
    dietary_restrictions: Facet = Field(default=None, alias="dietaryRestrictions")
    cuisine_preferences: Facet = Field(default=None, alias="cuisinePreferences")
    meal_type: Facet = Field(default=None, alias="mealType")


class SearchResponse(BaseModel):
    """Recipe search response."""

    llm_response: str
    retrieved_recipes: list[EnrichedRecipe]


class ErrorResponse(BaseModel):
    """Error body returned with 4xx/5xx statuses."""

    error: str
