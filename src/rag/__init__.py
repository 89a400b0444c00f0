"""Recipe search, detail formatting and summary orchestration."""

from src.rag.detail import RecipeDetailNormalizer
from src.rag.pipeline import RecipeSearchPipeline
from src.rag.summaries import SummaryAggregator

__all__ = [
    "RecipeSearchPipeline",
    "RecipeDetailNormalizer",
    "SummaryAggregator",
]
