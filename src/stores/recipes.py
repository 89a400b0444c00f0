"""Primary recipe store reads."""

from typing import Any, Sequence

import asyncpg
import structlog

from src.config import get_settings
from src.models.recipe import Recipe
from src.stores.sql import create_pool, quote_ident

logger = structlog.get_logger()


class RecipeStore:
    """Read recipes and summary projections from the primary store."""

    def __init__(self, pool: asyncpg.Pool | None = None, table: str | None = None):
        settings = get_settings()
        self.pool = pool
        self._dsn = settings.postgres_dsn
        self._table = quote_ident(table or settings.recipes_table)

    async def connect(self) -> None:
        if self.pool is None:
            self.pool = await create_pool(self._dsn, "recipes")

    async def close(self) -> None:
        if self.pool:
            await self.pool.close()
            self.pool = None

    async def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Fetch one raw recipe, or None if the identifier is unknown."""
        if self.pool is None:
            await self.connect()

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT id, title, ingredients, instructions
                FROM {self._table}
                WHERE id::text = $1
                """,
                recipe_id,
            )

        if row is None:
            logger.info("recipe_not_found", recipe_id=recipe_id)
            return None

        return Recipe(
            id=row["id"],
            title=row["title"] or "",
            ingredients=row["ingredients"],
            instructions=row["instructions"],
        )

    async def get_summaries(self, recipe_ids: Sequence[str]) -> list[dict[str, Any]]:
        """Fetch the summary projection for the given identifiers.

        Unknown identifiers are simply absent from the result.
        """
        if not recipe_ids:
            return []

        if self.pool is None:
            await self.connect()

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT id, title, prep_time_minutes, servings
                FROM {self._table}
                WHERE id::text = ANY($1::text[])
                """,
                list(recipe_ids),
            )

        logger.info(
            "recipe_summaries_fetched",
            requested=len(recipe_ids),
            found=len(rows),
        )
        return [
            {
                "id": str(row["id"]),
                "title": row["title"],
                "prep_time_minutes": row["prep_time_minutes"],
                "servings": row["servings"],
            }
            for row in rows
        ]
