"""asyncpg helpers shared by the recipe and image stores."""

import json
import re
from typing import Any

import asyncpg
import structlog

from src.config import get_settings

logger = structlog.get_logger()

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def quote_ident(name: str) -> str:
    """Quote a configured table/column name for interpolation into SQL.

    Accepts ``name`` or ``schema.name``.

    Raises:
        ValueError: If the name is not a plain SQL identifier
    """
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return ".".join(f'"{part}"' for part in name.split("."))


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode json/jsonb columns into Python objects."""
    for typename in ("json", "jsonb"):
        await conn.set_type_codec(
            typename,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


async def create_pool(dsn: str, name: str) -> asyncpg.Pool:
    """Create a connection pool for one store."""
    settings = get_settings()
    pool = await asyncpg.create_pool(
        dsn,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        init=_init_connection,
    )
    logger.info("database_pool_created", store=name)
    return pool


def json_value(value: Any) -> Any:
    """Decode a json column that arrived as text (pools without the codec)."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
