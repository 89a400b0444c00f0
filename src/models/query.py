"""Validated search query model."""

from pydantic import BaseModel, ConfigDict


class RecipeQuery(BaseModel):
    """User query plus optional facets, immutable once validated."""

    model_config = ConfigDict(frozen=True)

    text: str
    dietary_restrictions: str | None = None
    cuisine_preferences: str | None = None
    meal_type: str | None = None
