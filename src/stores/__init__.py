"""Primary recipe store and secondary image store."""

from src.stores.images import ImageStore
from src.stores.recipes import RecipeStore

__all__ = [
    "ImageStore",
    "RecipeStore",
]
