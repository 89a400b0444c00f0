"""Metrics definitions for the recipe search service."""

from prometheus_client import Counter, Histogram


# Application Metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration',
    ['method', 'endpoint']
)

APPLICATION_ERRORS = Counter(
    'application_errors_total',
    'Total application errors',
    ['type', 'endpoint']
)

SERVICE_ERRORS_TOTAL = Counter(
    'service_errors_total',
    'Errors returned to callers, by error class',
    ['error', 'operation']
)


# LLM Metrics
LLM_CALL_DURATION = Histogram(
    'llm_call_duration_seconds',
    'LLM call duration',
    ['model', 'operation']
)

LLM_CALLS_TOTAL = Counter(
    'llm_calls_total',
    'Total LLM calls',
    ['model', 'operation', 'outcome']
)

LLM_TOKEN_USAGE_INPUT = Counter(
    'llm_token_usage_input_total',
    'Total input tokens used',
    ['model']
)

LLM_TOKEN_USAGE_OUTPUT = Counter(
    'llm_token_usage_output_total',
    'Total output tokens used',
    ['model']
)


# Search Metrics
SEARCH_REQUESTS_TOTAL = Counter(
    'search_requests_total',
    'Total search requests',
    ['search_type']
)

SEARCH_DURATION_SECONDS = Histogram(
    'search_duration_seconds',
    'Search duration in seconds',
    ['search_type']
)

VECTOR_SEARCH_RESULTS_COUNT = Histogram(
    'vector_search_results_count',
    'Number of vector search results',
    buckets=[0, 1, 2, 3, 4, 5, 10, 20]
)

ZERO_RESULTS_SEARCHES_TOTAL = Counter(
    'zero_results_searches_total',
    'Total searches with zero results',
    ['search_type']
)

SEARCH_RELEVANCE_SCORE = Histogram(
    'search_relevance_score_bucket',
    'Top result relevance score',
    ['search_type'],
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
)

FALLBACK_ANSWERS_TOTAL = Counter(
    'rag_fallback_answers_total',
    'Generated answers that reported not enough information'
)


# Image enrichment Metrics
IMAGE_ENRICHMENT_FAILURES_TOTAL = Counter(
    'image_enrichment_failures_total',
    'Image lookups that failed and were downgraded to null URLs',
    ['operation']
)

IMAGE_URLS_RESOLVED_TOTAL = Counter(
    'image_urls_resolved_total',
    'Image URL lookups by outcome',
    ['operation', 'outcome']
)


def record_llm_call(
    model: str,
    operation: str,
    duration: float,
    input_tokens: int = 0,
    output_tokens: int = 0,
    success: bool = True,
):
    """Record LLM call metrics."""
    LLM_CALL_DURATION.labels(model=model, operation=operation).observe(duration)

    LLM_CALLS_TOTAL.labels(
        model=model,
        operation=operation,
        outcome="success" if success else "error",
    ).inc()

    if input_tokens > 0:
        LLM_TOKEN_USAGE_INPUT.labels(model=model).inc(input_tokens)

    if output_tokens > 0:
        LLM_TOKEN_USAGE_OUTPUT.labels(model=model).inc(output_tokens)


def record_search_request(search_type: str, duration: float, result_count: int, relevance_score: float = None):
    """Record search request metrics."""
    SEARCH_REQUESTS_TOTAL.labels(search_type=search_type).inc()

    SEARCH_DURATION_SECONDS.labels(search_type=search_type).observe(duration)

    if search_type == "vector":
        VECTOR_SEARCH_RESULTS_COUNT.observe(result_count)

    if result_count == 0:
        ZERO_RESULTS_SEARCHES_TOTAL.labels(search_type=search_type).inc()

    if relevance_score is not None:
        SEARCH_RELEVANCE_SCORE.labels(search_type=search_type).observe(relevance_score)


def record_fallback_answer():
    """Count an answer that fell back to the no-information sentence."""
    FALLBACK_ANSWERS_TOTAL.inc()


def record_image_enrichment(operation: str, requested: int, resolved: int, failed: bool = False):
    """Record the outcome of one image enrichment step."""
    if failed:
        IMAGE_ENRICHMENT_FAILURES_TOTAL.labels(operation=operation).inc()
        return

    if resolved > 0:
        IMAGE_URLS_RESOLVED_TOTAL.labels(operation=operation, outcome="found").inc(resolved)

    missing = requested - resolved
    if missing > 0:
        IMAGE_URLS_RESOLVED_TOTAL.labels(operation=operation, outcome="missing").inc(missing)


def record_service_error(error: str, operation: str):
    """Count an error returned to a caller."""
    SERVICE_ERRORS_TOTAL.labels(error=error, operation=operation).inc()
