"""FastAPI application entry point."""

import asyncio
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Awaitable, TypeVar

import structlog
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from src.config import configure_logging, get_settings
from src.errors import RecipeServiceError, UpstreamError
from src.llm.embeddings import (
    EmbeddingGenerator,
    GeminiEmbeddingGenerator,
    get_embedding_generator,
)
from src.llm.generation import TextGenerator, get_text_generator
from src.metrics import record_service_error
from src.models.api import ErrorResponse, SearchRequest, SearchResponse
from src.models.recipe import FormattedRecipeDetail, RecipeSummary
from src.monitoring.middleware import (
    ErrorTrackingMiddleware,
    MetricsMiddleware,
    RequestContextMiddleware,
    metrics_endpoint,
)
from src.monitoring.tracing import setup_tracing
from src.rag.detail import RecipeDetailNormalizer
from src.rag.pipeline import RecipeSearchPipeline
from src.rag.summaries import SummaryAggregator
from src.search.vector import VectorSearcher
from src.stores.images import ImageStore
from src.stores.recipes import RecipeStore

logger = structlog.get_logger()
settings = get_settings()

VERSION = "0.1.0"
SERVICE_BANNER = "Recipe Book Backend is running!"
REQUEST_TIMEOUT_MESSAGE = "The request took too long to complete."

T = TypeVar("T")

# Global instances, created once in the lifespan and shared by all requests
vector_searcher: VectorSearcher | None = None
image_store: ImageStore | None = None
embedding_generator: EmbeddingGenerator | GeminiEmbeddingGenerator | None = None
text_generator: TextGenerator | None = None
search_pipeline: RecipeSearchPipeline | None = None
detail_normalizer: RecipeDetailNormalizer | None = None
summary_aggregator: SummaryAggregator | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    global vector_searcher, image_store, embedding_generator, text_generator
    global search_pipeline, detail_normalizer, summary_aggregator

    logger.info("application_starting", app_name=settings.app_name)

    vector_searcher = VectorSearcher()
    image_store = ImageStore()
    try:
        await vector_searcher.connect()
        await image_store.connect()
    except Exception as e:
        logger.error("database_connection_error", error=str(e))
        await vector_searcher.close()
        await image_store.close()
        raise

    recipe_store = RecipeStore(pool=vector_searcher.pool)
    embedding_generator = get_embedding_generator()
    text_generator = get_text_generator()

    search_pipeline = RecipeSearchPipeline(
        embedding_generator=embedding_generator,
        vector_searcher=vector_searcher,
        text_generator=text_generator,
        image_store=image_store,
    )
    detail_normalizer = RecipeDetailNormalizer(
        recipe_store=recipe_store,
        text_generator=text_generator,
        image_store=image_store,
    )
    summary_aggregator = SummaryAggregator(
        recipe_store=recipe_store,
        image_store=image_store,
    )
    logger.info(
        "application_ready",
        llm_provider=settings.llm_provider,
        embedding_provider=settings.embedding_provider,
    )

    yield

    # Cleanup
    logger.info("application_shutting_down")
    await embedding_generator.close()
    await image_store.close()
    await vector_searcher.close()


def error_response(error: RecipeServiceError, operation: str) -> JSONResponse:
    """Render a service error as ``{"error": message}``."""
    record_service_error(type(error).__name__, operation)
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


async def with_deadline(awaitable: Awaitable[T]) -> T:
    """Await under the configured overall request deadline, if any."""
    timeout = settings.request_timeout_seconds
    if not timeout:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("request_deadline_exceeded", timeout_seconds=timeout)
        raise UpstreamError(REQUEST_TIMEOUT_MESSAGE, stage="deadline") from e


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter()


@router.post(
    "/recipes/search",
    response_model=SearchResponse,
    responses=ERROR_RESPONSES,
)
async def search_recipes(request: SearchRequest):
    """Answer a free-text recipe query with a ranked, illustrated list.

    Examples:
    - {"query": "vegan pasta"}
    - {"query": "quick soup", "dietaryRestrictions": ["gluten-free"], "mealType": "lunch"}
    """
    try:
        answer, recipes = await with_deadline(
            search_pipeline.run(
                request.query,
                request.dietary_restrictions,
                request.cuisine_preferences,
                request.meal_type,
            )
        )
    except RecipeServiceError as e:
        return error_response(e, "search")
    except Exception as e:
        logger.error("search_error", error=str(e), error_type=type(e).__name__)
        return error_response(UpstreamError("An error occurred during recipe search."), "search")

    return SearchResponse(llm_response=answer, retrieved_recipes=recipes)


@router.get(
    "/recipes/{recipe_id}",
    response_model=FormattedRecipeDetail,
    responses=ERROR_RESPONSES,
)
async def get_recipe(recipe_id: str):
    """Formatted recipe with estimated prep time, servings and nutrition."""
    try:
        return await with_deadline(detail_normalizer.get_formatted_recipe(recipe_id))
    except RecipeServiceError as e:
        return error_response(e, "detail")
    except Exception as e:
        logger.error("recipe_detail_error", recipe_id=recipe_id, error=str(e))
        return error_response(
            UpstreamError("Internal server error while fetching recipe."), "detail"
        )


@router.get(
    "/summaries",
    response_model=list[RecipeSummary],
    responses=ERROR_RESPONSES,
)
async def get_summaries(ids: str | None = Query(default=None)):
    """Summaries for a comma-separated list of recipe ids."""
    try:
        return await with_deadline(summary_aggregator.get_summaries(ids))
    except RecipeServiceError as e:
        return error_response(e, "summaries")
    except Exception as e:
        logger.error("recipe_summaries_error", error=str(e))
        return error_response(
            UpstreamError("An error occurred while fetching recipe summaries."), "summaries"
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="Recipe Search API",
        description="Retrieval-augmented recipe search with formatted recipe details",
        version=VERSION,
        lifespan=lifespan,
    )

    setup_tracing(app)

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(ErrorTrackingMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        logger.info(
            "request_completed",
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            process_time_ms=round(process_time, 2),
        )

        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("request_validation_failed", errors=exc.errors())
        return JSONResponse(status_code=400, content={"error": "Malformed request body."})

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return SERVICE_BANNER

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return metrics_endpoint()

    app.include_router(router, prefix=settings.api_prefix, tags=["recipes"])

    return app


# Create app instance
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
