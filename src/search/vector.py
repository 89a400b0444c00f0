"""Vector similarity search via pgvector."""

import time

import asyncpg
import structlog

from src.config import get_settings
from src.metrics import record_search_request
from src.models.recipe import RetrievedRecipe
from src.stores.sql import create_pool, quote_ident

logger = structlog.get_logger()
settings = get_settings()

# pgvector rejects hnsw.ef_search above this value
MAX_EF_SEARCH = 1000


class VectorSearcher:
    """Execute recipe similarity search via pgvector.

    The pool belongs to the primary recipe store and is shared with
    ``RecipeStore``.
    """

    def __init__(
        self,
        pool: asyncpg.Pool | None = None,
        table: str | None = None,
        embedding_column: str | None = None,
    ):
        self.pool = pool
        self._dsn = settings.postgres_dsn
        self._table = quote_ident(table or settings.recipes_table)
        self._embedding_column = quote_ident(
            embedding_column or settings.recipe_embedding_column
        )

    async def connect(self) -> None:
        """Connect to PostgreSQL."""
        if self.pool is None:
            self.pool = await create_pool(self._dsn, "recipes")
            logger.info("vector_searcher_connected")

    async def close(self) -> None:
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None

    def _build_query(self) -> str:
        column = self._embedding_column
        return f"""
            SELECT
                id,
                title,
                ingredients,
                instructions,
                1 - ({column} <=> $1::vector) AS score
            FROM {self._table}
            WHERE {column} IS NOT NULL
            ORDER BY {column} <=> $1::vector
            LIMIT $2
        """

    async def search(
        self,
        embedding: list[float],
        top_k: int | None = None,
        num_candidates: int | None = None,
    ) -> list[RetrievedRecipe]:
        """Return the ``top_k`` recipes nearest to ``embedding``.

        Args:
            embedding: Query vector
            top_k: Number of results to return
            num_candidates: Candidate breadth hint for the ANN index

        Returns:
            Recipes ordered by descending similarity, ids as strings
        """
        top_k = top_k or settings.vector_top_k
        num_candidates = num_candidates or settings.vector_num_candidates
        ef_search = max(top_k, min(num_candidates, MAX_EF_SEARCH))

        logger.info(
            "vector_search",
            top_k=top_k,
            num_candidates=num_candidates,
            ef_search=ef_search,
        )

        if self.pool is None:
            await self.connect()

        start_time = time.time()
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    "SELECT set_config('hnsw.ef_search', $1, true)",
                    str(ef_search),
                )
                rows = await conn.fetch(self._build_query(), str(embedding), top_k)

        results = [
            RetrievedRecipe(
                id=row["id"],
                title=row["title"] or "",
                ingredients=row["ingredients"],
                instructions=row["instructions"],
                score=float(row["score"]) if row["score"] is not None else None,
            )
            for row in rows
        ]

        record_search_request(
            "vector",
            time.time() - start_time,
            len(results),
            results[0].score if results else None,
        )
        logger.info("vector_search_complete", result_count=len(results))
        return results
