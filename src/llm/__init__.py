"""Embedding and generative text clients."""

from src.llm.embeddings import (
    EmbeddingGenerator,
    GeminiEmbeddingGenerator,
    get_embedding_generator,
)
from src.llm.generation import (
    GeminiTextGenerator,
    GenerationBlockedError,
    GenerationSettings,
    OpenAITextGenerator,
    TextGenerator,
    get_text_generator,
)

__all__ = [
    "EmbeddingGenerator",
    "GeminiEmbeddingGenerator",
    "get_embedding_generator",
    "GenerationSettings",
    "GenerationBlockedError",
    "TextGenerator",
    "OpenAITextGenerator",
    "GeminiTextGenerator",
    "get_text_generator",
]
