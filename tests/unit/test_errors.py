"""Tests for the service error taxonomy."""

import pytest

from src.errors import (
    EmptyResultError,
    EnrichmentError,
    NotFoundError,
    RecipeServiceError,
    UpstreamError,
    ValidationError,
    translate_upstream_errors,
)


@pytest.mark.parametrize(
    "error_cls,status",
    [
        (ValidationError, 400),
        (EmptyResultError, 400),
        (NotFoundError, 404),
        (UpstreamError, 500),
        (EnrichmentError, 500),
    ],
)
def test_status_codes(error_cls, status):
    error = error_cls("message", stage="stage")

    assert error.status_code == status
    assert error.message == "message"
    assert error.stage == "stage"
    assert isinstance(error, RecipeServiceError)


class TestTranslateUpstreamErrors:
    def test_foreign_exception_becomes_upstream_error(self):
        with pytest.raises(UpstreamError) as exc_info:
            with translate_upstream_errors("embedding", "Public message."):
                raise ConnectionError("10.0.0.3:5432 refused")

        assert exc_info.value.message == "Public message."
        assert exc_info.value.stage == "embedding"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert "10.0.0.3" not in str(exc_info.value)

    def test_service_errors_pass_through(self):
        with pytest.raises(NotFoundError):
            with translate_upstream_errors("recipe_fetch", "Public message."):
                raise NotFoundError("Recipe not found in backend database.")

    def test_no_error(self):
        with translate_upstream_errors("recipe_fetch", "Public message."):
            value = 1

        assert value == 1
