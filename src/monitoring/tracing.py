"""OpenTelemetry tracing setup for the recipe search service."""

import importlib

import structlog
from fastapi import FastAPI

from src.config import get_settings

logger = structlog.get_logger()


def setup_tracing(app: FastAPI) -> bool:
    """Instrument the FastAPI app with OpenTelemetry when enabled.

    The OpenTelemetry packages are an optional install (``.[tracing]``),
    so they are resolved at call time.

    Returns:
        True if instrumentation was installed
    """
    settings = get_settings()

    if not settings.otel_tracing_enabled:
        logger.info("otel_tracing_disabled")
        return False

    try:
        trace = importlib.import_module("opentelemetry.trace")
        exporter_module = importlib.import_module(
            "opentelemetry.exporter.otlp.proto.http.trace_exporter"
        )
        instrumentation_module = importlib.import_module(
            "opentelemetry.instrumentation.fastapi"
        )
        resources_module = importlib.import_module("opentelemetry.sdk.resources")
        trace_module = importlib.import_module("opentelemetry.sdk.trace")
        trace_export_module = importlib.import_module("opentelemetry.sdk.trace.export")
    except ImportError as exc:
        logger.warning("otel_tracing_unavailable", error=str(exc))
        return False

    resource = resources_module.Resource.create(
        {
            "service.name": settings.otel_service_name,
            "deployment.environment": settings.app_env,
        }
    )

    provider = trace_module.TracerProvider(resource=resource)
    exporter = exporter_module.OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint
    )
    provider.add_span_processor(trace_export_module.BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    instrumentation_module.FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls="health,metrics",
    )
    logger.info(
        "otel_tracing_initialized",
        service_name=settings.otel_service_name,
        endpoint=settings.otel_exporter_otlp_endpoint,
    )
    return True
