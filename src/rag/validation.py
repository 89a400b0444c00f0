"""Query and facet validation for recipe search."""

import re
from typing import Any

from src.config import get_settings
from src.errors import ValidationError
from src.models.query import RecipeQuery

ALLOWED_QUERY_PATTERN = re.compile(r"[A-Za-z0-9\s.,?!'\"()-]+")
LETTER_PATTERN = re.compile(r"[A-Za-z]")

MISSING_QUERY_MESSAGE = "Query parameter is required and must be a string."
INVALID_QUERY_MESSAGE = (
    "Query must contain only letters, numbers, spaces and common punctuation, "
    "and include at least one letter."
)


def _normalize_facet(name: str, value: Any) -> str | None:
    """Collapse a facet given as a string or list of strings into one string."""
    if value is None:
        return None
    if isinstance(value, str):
        parts = [value]
    elif isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        parts = list(value)
    else:
        raise ValidationError(f"'{name}' must be a string or a list of strings.")

    joined = ", ".join(p.strip() for p in parts if p.strip())
    return joined or None


def validate_query(
    query: Any,
    dietary_restrictions: Any = None,
    cuisine_preferences: Any = None,
    meal_type: Any = None,
    max_length: int | None = None,
) -> RecipeQuery:
    """Validate raw request values into a ``RecipeQuery``.

    Raises:
        ValidationError: If the query is missing, not a string, too long,
            contains characters outside the allow-list or has no letter
    """
    if not query or not isinstance(query, str):
        raise ValidationError(MISSING_QUERY_MESSAGE)

    max_length = max_length or get_settings().max_query_length
    if len(query) > max_length:
        raise ValidationError(f"Query must be at most {max_length} characters.")

    if not ALLOWED_QUERY_PATTERN.fullmatch(query) or not LETTER_PATTERN.search(query):
        raise ValidationError(INVALID_QUERY_MESSAGE)

    return RecipeQuery(
        text=query,
        dietary_restrictions=_normalize_facet("dietaryRestrictions", dietary_restrictions),
        cuisine_preferences=_normalize_facet("cuisinePreferences", cuisine_preferences),
        meal_type=_normalize_facet("mealType", meal_type),
    )
