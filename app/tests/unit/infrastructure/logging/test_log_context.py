"""Unit tests for request context binding."""

import pytest
import structlog

from infrastructure.logging.context import (
    bind_request_context,
    get_correlation_id,
)


@pytest.fixture(autouse=True)
def clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.mark.unit
class TestBindRequestContext:
    def test_binds_given_correlation_id(self):
        with bind_request_context(correlation_id="req-123"):
            assert get_correlation_id() == "req-123"

        assert get_correlation_id() is None

    def test_generates_correlation_id_when_missing(self):
        with bind_request_context():
            correlation_id = get_correlation_id()
            assert correlation_id
            assert len(correlation_id) == 36

    def test_binds_optional_fields_and_extra_context(self):
        with bind_request_context(
            correlation_id="req-1",
            user_id="player-7",
            request_path="/api/v1/notifications",
            request_method="POST",
            dispatch="match-42",
        ):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["user_id"] == "player-7"
            assert ctx["request_path"] == "/api/v1/notifications"
            assert ctx["request_method"] == "POST"
            assert ctx["dispatch"] == "match-42"

        assert structlog.contextvars.get_contextvars() == {}

    def test_omits_unset_fields(self):
        with bind_request_context(correlation_id="req-1"):
            ctx = structlog.contextvars.get_contextvars()
            assert "user_id" not in ctx
            assert "request_path" not in ctx
