"""Service error taxonomy.

Each error carries the public message returned to the caller and the HTTP
status it maps to. Internal detail (driver messages, raw model output)
goes to the log only.
"""

from contextlib import contextmanager
from typing import Iterator

import structlog

logger = structlog.get_logger()


class RecipeServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, *, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class ValidationError(RecipeServiceError):
    """Bad or missing input; rejected before any collaborator call."""

    status_code = 400


class NotFoundError(RecipeServiceError):
    """Identifier absent from the primary recipe store."""

    status_code = 404


class EmptyResultError(RecipeServiceError):
    """Vector search returned nothing for a valid query."""

    status_code = 400


class UpstreamError(RecipeServiceError):
    """A collaborator failed, or its structured output could not be parsed."""

    status_code = 500


class EnrichmentError(RecipeServiceError):
    """Image lookup failed. Always downgraded to a null image URL."""

    status_code = 500


@contextmanager
def translate_upstream_errors(stage: str, message: str) -> Iterator[None]:
    """Re-raise collaborator failures as ``UpstreamError``.

    Service errors pass through untouched so that a ``NotFoundError`` raised
    inside the block keeps its status.

    Args:
        stage: Pipeline stage name, used in the log event
        message: Public message for the resulting ``UpstreamError``
    """
    try:
        yield
    except RecipeServiceError:
        raise
    except Exception as e:
        logger.error(
            "upstream_error",
            stage=stage,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise UpstreamError(message, stage=stage) from e
