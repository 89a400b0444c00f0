"""Vector retrieval over the recipe corpus."""

from src.search.vector import VectorSearcher

__all__ = [
    "VectorSearcher",
]
