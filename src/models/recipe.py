"""Recipe models shared by the stores and the orchestrators."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_SERVINGS = 2
MAX_SERVINGS = 4


def normalize_recipe_id(value: Any) -> str | None:
    """Render a store identifier (text, UUID, integer key...) as a plain string."""
    if value is None:
        return None
    return str(value)


class Recipe(BaseModel):
    """Raw recipe as held by the primary store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="_id")
    title: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str | None:
        return normalize_recipe_id(value)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class RetrievedRecipe(Recipe):
    """Recipe returned by vector search, with its similarity score."""

    score: float | None = None


class EnrichedRecipe(RetrievedRecipe):
    """Retrieved recipe with its first image attached (null when unmatched)."""

    image_url: str | None = Field(default=None, alias="imageUrl")


class ImageDescriptor(BaseModel):
    """One image entry of an image record."""

    model_config = ConfigDict(extra="allow")

    url: str | None = None


class ImageRecord(BaseModel):
    """Images stored for a recipe in the secondary store."""

    id: str
    images: list[ImageDescriptor] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    @property
    def first_image_url(self) -> str | None:
        """URL of the first image, or None when there is no usable image."""
        if self.images and self.images[0].url:
            return self.images[0].url
        return None


class NutritionPerServing(BaseModel):
    """Estimated nutrition for one serving."""

    model_config = ConfigDict(populate_by_name=True)

    calories: float | None = None
    total_fat: float | None = Field(default=None, alias="totalFat")
    saturated_fat: float | None = Field(default=None, alias="saturatedFat")
    carbohydrates: float | None = None
    sugar: float | None = None
    protein: float | None = None


class Nutrition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    per_serving: NutritionPerServing = Field(
        default_factory=NutritionPerServing, alias="perServing"
    )


class FormattedRecipeDetail(BaseModel):
    """Recipe restructured by the generative step.

    Prep time, servings and nutrition are model estimates, not measured
    values.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    title: str = ""
    prep_time_minutes: int | None = Field(default=None, alias="prepTimeMinutes")
    servings: int | None = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    nutrition: Nutrition = Field(default_factory=Nutrition)
    image_url: str | None = Field(default=None, alias="imageUrl")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return normalize_recipe_id(value) or ""

    @field_validator("prep_time_minutes", mode="before")
    @classmethod
    def _whole_minutes(cls, value: Any) -> Any:
        if isinstance(value, float):
            return round(value)
        return value

    @field_validator("servings", mode="before")
    @classmethod
    def _clamp_servings(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return min(max(round(value), MIN_SERVINGS), MAX_SERVINGS)
        return value


class RecipeSummary(BaseModel):
    """Lightweight, read-only recipe projection for listings."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str | None = None
    prep_time_minutes: int | None = Field(default=None, alias="prepTimeMinutes")
    servings: int | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
