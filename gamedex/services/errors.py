"""Error handling module for the gamedex application.

This module provides:
- Custom exception classes for the failure modes of the game database client
  (authentication, local rate limiting, upstream errors, validation)
- User-friendly error messages with suggested actions
- HTTP-style status classification for the action dispatcher
- Centralized error handling service with a bounded error history
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    UPSTREAM = "upstream"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ErrorContext:
    """Context information for an error."""
    operation: str
    component: str
    details: dict[str, Any]


@dataclass(frozen=True)
class UserFriendlyError:
    """User-friendly error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable
        self.context = context

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


class AuthError(AppError):
    """Raised when the access token cannot be obtained."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = None
        if status_code is not None:
            technical_details = f"Token endpoint status: {status_code}"
        if original_error:
            technical_details = (technical_details + "\n" if technical_details else "") + (
                f"{type(original_error).__name__}: {original_error}"
            )

        super().__init__(
            message=message,
            category=ErrorCategory.AUTH,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Check TWITCH_CLIENT_ID and TWITCH_CLIENT_SECRET",
                "Verify the application is registered with Twitch",
            ],
            technical_details=technical_details,
            recoverable=True,
        )
        self.status_code = status_code
        self.original_error = original_error


class RateLimitError(AppError):
    """Raised when the local request budget for an identifier is exhausted."""

    def __init__(self, identifier: str, limit: int, window: float) -> None:
        super().__init__(
            message="Rate limit exceeded. Please try again later.",
            category=ErrorCategory.RATE_LIMIT,
            severity=ErrorSeverity.WARNING,
            suggested_actions=[
                f"Wait up to {window:g} seconds before retrying",
                "Avoid repeating the same lookup in a loop",
            ],
            technical_details=f"Identifier: {identifier}\nLimit: {limit} per {window:g}s",
            recoverable=True,
        )
        self.identifier = identifier
        self.limit = limit
        self.window = window


class UpstreamError(AppError):
    """Raised when the game database answers with an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        suggested_actions = ["Try again in a few moments"]
        if status_code is not None and status_code >= 500:
            suggested_actions = [
                "The game database is experiencing issues",
                "Try again later",
            ]
        elif status_code == 400:
            suggested_actions = ["The query was rejected, check the search text"]

        technical_details = None
        if status_code is not None:
            technical_details = f"Status: {status_code}"
        if body:
            technical_details = (technical_details + "\n" if technical_details else "") + f"Body: {body[:500]}"
        if original_error:
            technical_details = (technical_details + "\n" if technical_details else "") + (
                f"{type(original_error).__name__}: {original_error}"
            )

        super().__init__(
            message=message,
            category=ErrorCategory.UPSTREAM,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.status_code = status_code
        self.body = body
        self.original_error = original_error


class ValidationError(AppError):
    """Exception for invalid caller input."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        constraints: list[str] | None = None,
    ) -> None:
        suggested_actions = ["Review the input requirements"]
        if constraints:
            suggested_actions.extend([f"Ensure: {c}" for c in constraints])

        technical_details = None
        if field:
            technical_details = f"Field: {field}"
        if value is not None:
            value_str = str(value)[:100]
            technical_details = (technical_details or "") + f"\nValue: {value_str}"

        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.field = field
        self.value = value
        self.constraints = constraints or []


class ConfigurationError(AppError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        current_value: Any = None,
        expected: str | None = None,
    ) -> None:
        suggested_actions = [
            "Check the configuration settings",
            "Reset to default values if needed",
        ]
        if expected:
            suggested_actions.append(f"Expected: {expected}")

        technical_details = None
        if setting:
            technical_details = f"Setting: {setting}"
        if current_value is not None:
            technical_details = (technical_details or "") + f"\nCurrent: {current_value}"

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.setting = setting
        self.current_value = current_value
        self.expected = expected


# HTTP-style status per category, as exposed by the action dispatcher
_CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.RATE_LIMIT: 429,
    ErrorCategory.UPSTREAM: 503,
    ErrorCategory.AUTH: 503,
    ErrorCategory.CONFIGURATION: 500,
    ErrorCategory.UNEXPECTED: 500,
}


class ErrorHandlingService:
    """Centralized error handling service.

    This service provides:
    - Conversion of library exceptions into AppError
    - Error logging with technical details
    - Status classification for API responses
    - A bounded history for health reporting
    """

    def __init__(self, max_history_size: int = 100) -> None:
        self._error_history: list[tuple[float, AppError]] = []
        self._max_history_size = max_history_size
        log.info("Error handling service initialized")

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information

        Returns:
            User-friendly error representation
        """
        app_error = self.convert(error, operation, component, context)
        self._log_error(app_error, operation, component, context)

        self._error_history.append((time.time(), app_error))
        if len(self._error_history) > self._max_history_size:
            self._error_history.pop(0)

        return app_error.to_user_friendly()

    def convert(
        self,
        error: Exception,
        operation: str = "",
        component: str = "",
        context: dict[str, Any] | None = None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        if isinstance(error, AppError):
            return error

        if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
            return UpstreamError(
                message="The game database took too long to respond.",
                original_error=error,
            )
        elif isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            return UpstreamError(
                message=self._get_http_error_message(status_code),
                status_code=status_code,
                original_error=error,
            )
        elif isinstance(error, httpx.RequestError):
            return UpstreamError(
                message="Game database temporarily unavailable",
                original_error=error,
            )

        return AppError(
            message="Internal server error",
            category=ErrorCategory.UNEXPECTED,
            severity=ErrorSeverity.ERROR,
            technical_details=f"{type(error).__name__}: {error}",
            recoverable=True,
            context=ErrorContext(
                operation=operation,
                component=component,
                details=context or {},
            ),
        )

    @staticmethod
    def status_for(error: AppError) -> int:
        """HTTP-style status code for an application error."""
        return _CATEGORY_STATUS.get(error.category, 500)

    @staticmethod
    def _get_http_error_message(status_code: int) -> str:
        """Get a user-friendly message for HTTP status codes."""
        messages = {
            400: "The game database rejected the query.",
            401: "The game database refused the access token.",
            403: "Access to the game database was denied.",
            404: "The game database endpoint was not found.",
            429: "The game database is throttling requests. Please wait before trying again.",
            500: "Game database temporarily unavailable",
            502: "Game database temporarily unavailable",
            503: "Game database temporarily unavailable",
            504: "The game database took too long to respond.",
        }
        return messages.get(status_code, f"Game database error {status_code}.")

    def _log_error(
        self,
        error: AppError,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> None:
        """Log error with full technical details."""
        log_method = log.warning if error.severity == ErrorSeverity.WARNING else log.error

        log_method(
            "Error occurred",
            error_message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            operation=operation,
            component=component,
            technical_details=error.technical_details,
            context=context,
        )

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        """Get the most recent errors from history."""
        recent = self._error_history[-count:] if self._error_history else []
        return [error for _, error in recent]

    def get_error_count_by_category(self) -> dict[ErrorCategory, int]:
        """Get count of errors by category."""
        counts: dict[ErrorCategory, int] = {}
        for _, error in self._error_history:
            counts[error.category] = counts.get(error.category, 0) + 1
        return counts

    def clear_history(self) -> None:
        self._error_history.clear()

    def create_user_message(
        self,
        error: UserFriendlyError,
        include_suggestions: bool = True,
    ) -> str:
        """Create a formatted user message from an error."""
        parts = [error.message]

        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:
                parts.append(f"  • {action}")

        return "\n".join(parts)


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Convenience function to handle errors using the global service."""
    return get_error_service().handle_error(error, operation, component, context)
