"""Data models for the recipe search service."""

from src.models.recipe import (
    EnrichedRecipe,
    FormattedRecipeDetail,
    ImageDescriptor,
    ImageRecord,
    Nutrition,
    NutritionPerServing,
    Recipe,
    RecipeSummary,
    RetrievedRecipe,
    normalize_recipe_id,
)
from src.models.query import RecipeQuery
from src.models.api import ErrorResponse, SearchRequest, SearchResponse

__all__ = [
    # Recipe models
    "Recipe",
    "RetrievedRecipe",
    "EnrichedRecipe",
    "ImageDescriptor",
    "ImageRecord",
    "Nutrition",
    "NutritionPerServing",
    "FormattedRecipeDetail",
    "RecipeSummary",
    "normalize_recipe_id",
    # Query
    "RecipeQuery",
    # API models
    "SearchRequest",
    "SearchResponse",
    "ErrorResponse",
]
