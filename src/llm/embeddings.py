"""Query embedding generation for vector search."""

import time

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from openai import APITimeoutError, AsyncOpenAI, RateLimitError

from src.config import get_settings
from src.llm.retry import upstream_retrying
from src.metrics import record_llm_call

logger = structlog.get_logger()


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, (RateLimitError, APITimeoutError, TimeoutError))


class EmbeddingGenerator:
    """Generate query embeddings using OpenAI."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        max_attempts: int | None = None,
    ):
        """Initialize embedding generator.

        Args:
            client: Optional AsyncOpenAI client
            max_attempts: Attempts per call; defaults to ``upstream_max_attempts``
        """
        settings = get_settings()
        # SDK-level retries stay off; retrying is governed by max_attempts
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)
        self.model = settings.openai_embedding_model
        self.dimensions = settings.embedding_dimensions
        self.max_attempts = max_attempts or settings.upstream_max_attempts

    async def generate_embedding(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Raises:
            ValueError: If the provider returns a vector of the wrong size
        """
        start_time = time.time()
        try:
            async for attempt in upstream_retrying(self.max_attempts, _is_transient):
                with attempt:
                    response = await self.client.embeddings.create(
                        model=self.model,
                        input=text,
                        dimensions=self.dimensions,
                    )
        except Exception:
            record_llm_call(
                model=self.model,
                operation="query_embedding",
                duration=time.time() - start_time,
                success=False,
            )
            raise

        usage = getattr(response, "usage", None)
        record_llm_call(
            model=self.model,
            operation="query_embedding",
            duration=time.time() - start_time,
            input_tokens=usage.prompt_tokens if usage else 0,
        )

        embedding = list(response.data[0].embedding)
        if len(embedding) != self.dimensions:
            raise ValueError(
                f"Embedding has {len(embedding)} dimensions, expected {self.dimensions}"
            )

        logger.debug("query_embedding_generated", dimensions=len(embedding))
        return embedding

    async def generate_query_embedding(self, query: str) -> list[float]:
        """Generate embedding for a search query."""
        return await self.generate_embedding(query)

    async def close(self) -> None:
        await self.client.close()


def _is_gemini_transient(exc: BaseException) -> bool:
    return isinstance(exc, genai_errors.APIError) and exc.code == 429


class GeminiEmbeddingGenerator:
    """Generate query embeddings using the Gemini embedding models.

    Use this backend when the stored recipe vectors were built with a
    Gemini embedding model (``embedding-001`` produces 768 dimensions, so
    set ``EMBEDDING_DIMENSIONS=768``).
    """

    def __init__(
        self,
        client: genai.Client | None = None,
        model: str | None = None,
        max_attempts: int | None = None,
    ):
        settings = get_settings()
        self.client = client or genai.Client(api_key=settings.gemini_api_key)
        self.model = model or settings.gemini_embedding_model
        self.task_type = settings.gemini_embedding_task_type
        self.dimensions = settings.embedding_dimensions
        self.max_attempts = max_attempts or settings.upstream_max_attempts

    async def generate_embedding(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Raises:
            ValueError: If the provider returns no vector or one of the wrong size
        """
        start_time = time.time()
        try:
            async for attempt in upstream_retrying(self.max_attempts, _is_gemini_transient):
                with attempt:
                    response = await self.client.aio.models.embed_content(
                        model=self.model,
                        contents=text,
                        config=types.EmbedContentConfig(task_type=self.task_type),
                    )
        except Exception:
            record_llm_call(
                model=self.model,
                operation="query_embedding",
                duration=time.time() - start_time,
                success=False,
            )
            raise

        record_llm_call(
            model=self.model,
            operation="query_embedding",
            duration=time.time() - start_time,
        )

        if not response.embeddings or not response.embeddings[0].values:
            raise ValueError("Gemini returned no embedding")

        embedding = list(response.embeddings[0].values)
        if len(embedding) != self.dimensions:
            raise ValueError(
                f"Embedding has {len(embedding)} dimensions, expected {self.dimensions}"
            )

        logger.debug("query_embedding_generated", dimensions=len(embedding))
        return embedding

    async def generate_query_embedding(self, query: str) -> list[float]:
        """Generate embedding for a search query."""
        return await self.generate_embedding(query)

    async def close(self) -> None:
        """Nothing to release; the genai client has no pool to drain."""


def get_embedding_generator(
    provider: str | None = None,
) -> EmbeddingGenerator | GeminiEmbeddingGenerator:
    """Get the embedding generator for the configured provider."""
    provider = provider or get_settings().embedding_provider
    if provider == "gemini":
        return GeminiEmbeddingGenerator()
    if provider == "openai":
        return EmbeddingGenerator()
    raise ValueError(f"Unknown embedding provider: {provider}")
