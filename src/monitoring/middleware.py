"""Middleware for monitoring HTTP requests."""

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

from src.config import bind_request_context, clear_request_context
from src.metrics import APPLICATION_ERRORS, REQUEST_COUNT, REQUEST_DURATION


def _route_label(request: Request) -> str:
    """Route template (``/recipes/{recipe_id}``) rather than the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect metrics for HTTP requests."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> StarletteResponse:
        start_time = time.time()

        response = await call_next(request)

        endpoint = _route_label(request)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code
        ).inc()

        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(time.time() - start_time)

        return response


class ErrorTrackingMiddleware(BaseHTTPMiddleware):
    """Middleware to capture unhandled errors and track error metrics."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> StarletteResponse:
        try:
            response = await call_next(request)

            if response.status_code >= 500:
                APPLICATION_ERRORS.labels(
                    type="http_5xx",
                    endpoint=_route_label(request),
                ).inc()

            return response
        except Exception:
            APPLICATION_ERRORS.labels(
                type="unhandled_exception",
                endpoint=_route_label(request),
            ).inc()
            raise


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to all log events emitted while serving a request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> StarletteResponse:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        bind_request_context(request_id=request_id, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["x-request-id"] = request_id
        return response


def metrics_endpoint():
    """Endpoint to expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
