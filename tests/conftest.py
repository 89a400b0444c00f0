"""Shared fixtures: recipe data and mocked collaborators."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.recipe import ImageRecord, RetrievedRecipe

GENERATED_LISTING = (
    "Recipe 1 (Score: 0.9100): Pasta Primavera\n"
    "Recipe 2 (Score: 0.7700): Veggie Penne"
)


@pytest.fixture
def retrieved_recipes():
    """Two search results, best first."""
    return [
        RetrievedRecipe(
            id="r1",
            title="Pasta Primavera",
            ingredients=["200 g penne", "1 zucchini"],
            instructions=["Boil pasta", "Saute vegetables"],
            score=0.91,
        ),
        RetrievedRecipe(
            id="r2",
            title="Veggie Penne",
            ingredients=["250 g penne", "1 red pepper"],
            instructions=["Cook penne", "Mix with peppers"],
            score=0.77,
        ),
    ]


@pytest.fixture
def image_records():
    return [
        ImageRecord(id="r1", images=[{"url": "https://img.example/r1.jpg"}]),
        ImageRecord(id="r2", images=[{"url": "https://img.example/r2.jpg"}]),
    ]


@pytest.fixture
def embedding_generator():
    generator = AsyncMock()
    generator.generate_query_embedding = AsyncMock(return_value=[0.1, 0.2, 0.3])
    return generator


@pytest.fixture
def vector_searcher(retrieved_recipes):
    searcher = AsyncMock()
    searcher.search = AsyncMock(return_value=retrieved_recipes)
    return searcher


@pytest.fixture
def text_generator():
    generator = AsyncMock()
    generator.generate = AsyncMock(return_value=GENERATED_LISTING)
    return generator


@pytest.fixture
def image_store(image_records):
    store = AsyncMock()
    store.fetch_images = AsyncMock(return_value=image_records)
    store.fetch_image_url = AsyncMock(return_value="https://img.example/r1.jpg")
    return store


@pytest.fixture
def recipe_store():
    return AsyncMock()


@pytest.fixture
def mock_conn():
    """Mock asyncpg connection with transaction support."""
    conn = AsyncMock()

    @asynccontextmanager
    async def transaction():
        yield

    conn.transaction = MagicMock(side_effect=transaction)
    return conn


@pytest.fixture
def mock_pool(mock_conn):
    """Mock asyncpg pool with async context manager support."""
    pool = AsyncMock()

    @asynccontextmanager
    async def acquire():
        yield mock_conn

    pool.acquire = MagicMock(side_effect=acquire)
    pool.close = AsyncMock()
    return pool
