"""Property-based tests for error conversion, classification and history."""

import asyncio
from unittest.mock import Mock, patch

import httpx
import pytest
from hypothesis import given, settings, strategies as st

from gamedex.services import HttpClientService
from gamedex.services.errors import (
    AppError,
    AuthError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    RateLimitError,
    UpstreamError,
    ValidationError,
)


class TestErrorConversionProperties:
    """Every exception maps onto an application error and a status."""

    @given(
        error_type=st.sampled_from(["connect", "timeout", "async_timeout", "http_status", "value", "runtime"]),
        error_message=st.text(min_size=1, max_size=100),
    )
    @settings(deadline=None)
    def test_any_exception_converts_to_app_error(self, error_type: str, error_message: str) -> None:
        service = ErrorHandlingService()

        if error_type == "connect":
            error: Exception = httpx.ConnectError(error_message)
            expected = (ErrorCategory.UPSTREAM, 503)
        elif error_type == "timeout":
            error = httpx.ReadTimeout(error_message)
            expected = (ErrorCategory.UPSTREAM, 503)
        elif error_type == "async_timeout":
            error = asyncio.TimeoutError()
            expected = (ErrorCategory.UPSTREAM, 503)
        elif error_type == "http_status":
            response = Mock()
            response.status_code = 502
            error = httpx.HTTPStatusError(error_message, request=Mock(), response=response)
            expected = (ErrorCategory.UPSTREAM, 503)
        elif error_type == "value":
            error = ValueError(error_message)
            expected = (ErrorCategory.UNEXPECTED, 500)
        else:
            error = RuntimeError(error_message)
            expected = (ErrorCategory.UNEXPECTED, 500)

        app_error = service.convert(error, "lookup", "test")

        assert isinstance(app_error, AppError)
        assert (app_error.category, service.status_for(app_error)) == expected
        assert app_error.message

    @given(
        exception_type=st.sampled_from([KeyError, ValueError, TypeError]),
        message=st.text(min_size=1, max_size=100),
    )
    def test_unexpected_errors_hide_details_from_users(self, exception_type: type[Exception], message: str) -> None:
        app_error = ErrorHandlingService().convert(exception_type(message), "lookup", "test")

        assert app_error.message == "Internal server error"
        assert app_error.technical_details is not None
        assert app_error.technical_details.startswith(exception_type.__name__)


class TestApplicationErrors:
    """Fields and classification of the application error types."""

    def test_status_per_error_type(self) -> None:
        service = ErrorHandlingService()

        assert service.status_for(ValidationError("bad")) == 400
        assert service.status_for(RateLimitError("search:zelda", 50, 60)) == 429
        assert service.status_for(UpstreamError("down", status_code=500)) == 503
        assert service.status_for(AuthError("no token", status_code=401)) == 503
        assert service.status_for(ConfigurationError("broken")) == 500
        assert service.status_for(AppError("boom")) == 500

    def test_app_errors_pass_through_unchanged(self) -> None:
        original = RateLimitError("popular:limit-20", 50, 60)

        assert ErrorHandlingService().convert(original) is original

    def test_rate_limit_error_fields(self) -> None:
        error = RateLimitError("details:1", 50, 60.0)

        assert error.message == "Rate limit exceeded. Please try again later."
        assert error.severity == ErrorSeverity.WARNING
        assert "Limit: 50 per 60s" in (error.technical_details or "")
        assert error.identifier == "details:1"

    def test_upstream_error_keeps_body(self) -> None:
        error = UpstreamError("IGDB API error: 400", status_code=400, body="Syntax Error")

        assert error.status_code == 400
        assert error.body == "Syntax Error"
        assert "Body: Syntax Error" in (error.technical_details or "")
        assert error.suggested_actions == ["The query was rejected, check the search text"]

    def test_auth_error_wraps_original(self) -> None:
        cause = httpx.ConnectError("refused")
        error = AuthError("Failed to get access token", original_error=cause)

        assert error.category == ErrorCategory.AUTH
        assert "ConnectError: refused" in (error.technical_details or "")

    def test_user_message_lists_suggestions(self) -> None:
        service = ErrorHandlingService()
        friendly = service.handle_error(UpstreamError("down", status_code=503), "popular", "api")

        message = service.create_user_message(friendly)

        assert message.startswith("down")
        assert "Suggested actions:" in message
        assert service.create_user_message(friendly, include_suggestions=False) == "down"


class TestErrorHistory:
    """Bounded history used for health reporting."""

    def test_counts_by_category(self) -> None:
        service = ErrorHandlingService()
        service.handle_error(ValidationError("bad"), "search", "api")
        service.handle_error(ValidationError("worse"), "search", "api")
        service.handle_error(httpx.ConnectError("down"), "popular", "api")

        assert service.get_error_count_by_category() == {
            ErrorCategory.VALIDATION: 2,
            ErrorCategory.UPSTREAM: 1,
        }
        assert [e.message for e in service.get_recent_errors(2)] == [
            "worse",
            "Game database temporarily unavailable",
        ]

    @given(count=st.integers(min_value=0, max_value=30))
    def test_history_is_bounded(self, count: int) -> None:
        service = ErrorHandlingService(max_history_size=10)
        for i in range(count):
            service.handle_error(ValidationError(f"error {i}"), "search", "api")

        recent = service.get_recent_errors(100)
        assert len(recent) == min(count, 10)
        if count:
            assert recent[-1].message == f"error {count - 1}"

    def test_clear_history(self) -> None:
        service = ErrorHandlingService()
        service.handle_error(ValidationError("bad"), "search", "api")
        service.clear_history()

        assert service.get_recent_errors() == []

    def test_errors_are_logged_with_details(self) -> None:
        service = ErrorHandlingService()

        with patch("gamedex.services.errors.log") as mock_logger:
            service.handle_error(UpstreamError("down", status_code=500, body="oops"), "details", "api")
            service.handle_error(ValidationError("bad"), "search", "api")

        error_kwargs = mock_logger.error.call_args.kwargs
        assert error_kwargs["category"] == "upstream"
        assert "Body: oops" in error_kwargs["technical_details"]
        assert mock_logger.warning.call_args.kwargs["category"] == "validation"


class TestHttpClientErrorHandling:
    """Transport failures are logged and re-raised for the caller to classify."""

    @pytest.mark.asyncio
    async def test_network_error_is_logged_and_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = HttpClientService(transport=httpx.MockTransport(handler))

        with patch("gamedex.services.http_client.log") as mock_logger:
            with pytest.raises(httpx.ConnectError):
                await client.post("https://api.example.com/games", content="fields name;")

        warning_kwargs = mock_logger.warning.call_args.kwargs
        assert warning_kwargs["error_type"] == "ConnectError"
        assert warning_kwargs["url"] == "https://api.example.com/games"
        await client.close()

    @pytest.mark.asyncio
    async def test_error_status_is_returned_not_raised(self) -> None:
        client = HttpClientService(
            transport=httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
        )

        async with client:
            response = await client.post("https://api.example.com/games", json={"a": 1})

        assert response.status_code == 503
        assert response.text == "busy"
