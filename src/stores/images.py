"""Secondary store holding recipe images."""

from typing import Sequence

import asyncpg
import structlog

from src.config import get_settings
from src.errors import EnrichmentError
from src.models.recipe import ImageRecord
from src.stores.sql import create_pool, json_value, quote_ident

logger = structlog.get_logger()


class ImageStore:
    """Look up image records by recipe identifier.

    Backed by its own pool so that image lookups stay independent of the
    recipe store's topology.
    """

    def __init__(self, pool: asyncpg.Pool | None = None, table: str | None = None):
        settings = get_settings()
        self.pool = pool
        self._dsn = settings.images_postgres_dsn
        self._table = quote_ident(table or settings.images_table)

    async def connect(self) -> None:
        """Connect to the image database."""
        if self.pool is None:
            self.pool = await create_pool(self._dsn, "images")
            logger.info("image_store_connected")

    async def close(self) -> None:
        if self.pool:
            await self.pool.close()
            self.pool = None

    async def fetch_images(self, recipe_ids: Sequence[str]) -> list[ImageRecord]:
        """Fetch image records for exactly ``recipe_ids``.

        Raises:
            EnrichmentError: On any lookup failure
        """
        if not recipe_ids:
            return []

        try:
            if self.pool is None:
                await self.connect()

            async with self.pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT id, images
                    FROM {self._table}
                    WHERE id::text = ANY($1::text[])
                    """,
                    list(recipe_ids),
                )

            return [
                ImageRecord(id=row["id"], images=json_value(row["images"]) or [])
                for row in rows
            ]
        except Exception as e:
            logger.warning(
                "image_lookup_error",
                requested=len(recipe_ids),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EnrichmentError("Image lookup failed", stage="image_lookup") from e

    async def fetch_image_url(self, recipe_id: str) -> str | None:
        """First image URL for one recipe, or None."""
        records = await self.fetch_images([recipe_id])
        for record in records:
            if record.id == recipe_id:
                return record.first_image_url
        return None
