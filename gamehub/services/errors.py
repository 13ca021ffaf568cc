"""Error types and centralized error handling for the Game Hub application.

Each error kind fixes its category, severity and default suggestions at
class level; instances add the technical details they know about.
Discovery and storage failures are normally recovered where they happen,
so these types mostly travel to the UI and the logs.
"""

import json
import time
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    NETWORK = "network"
    STORAGE = "storage"
    DISCOVERY = "discovery"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UserFriendlyError:
    """What the UI shows for a failure."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str] = field(default_factory=list)
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base class for failures the hub knows how to explain."""

    category: ClassVar[ErrorCategory] = ErrorCategory.UNEXPECTED
    severity: ClassVar[ErrorSeverity] = ErrorSeverity.ERROR
    default_actions: ClassVar[tuple[str, ...]] = ("Try again; restart the hub if it keeps happening",)

    def __init__(
        self,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
        suggested_actions: list[str] | None = None,
        original_error: Exception | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.recoverable = recoverable
        self.suggested_actions = suggested_actions if suggested_actions is not None else list(self.default_actions)

        lines = [f"{label}: {value}" for label, value in (details or {}).items() if value is not None]
        if original_error is not None:
            lines.append(f"{type(original_error).__name__}: {original_error}")
        self.technical_details = "\n".join(lines) or None

    def to_user_friendly(self) -> UserFriendlyError:
        return UserFriendlyError(
            self.message,
            self.category,
            self.severity,
            list(self.suggested_actions),
            self.technical_details,
            self.recoverable,
        )


class NetworkError(AppError):
    """A request to the host failed or was refused."""

    category = ErrorCategory.NETWORK
    default_actions = ("Check your internet connection", "Try refreshing in a moment")

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        if status_code == 404:
            actions: list[str] | None = ["Check that the hub URL points at the hosted page"]
        elif status_code in (403, 429):
            actions = ["The host is rate limiting requests", "Wait a few minutes and refresh"]
        elif status_code is not None and status_code >= 500:
            actions = ["The host is having trouble", "Try refreshing later"]
        else:
            actions = None
        super().__init__(
            message,
            details={"Status": status_code, "URL": url},
            suggested_actions=actions,
            original_error=original_error,
        )
        self.url = url
        self.status_code = status_code


class StorageError(AppError):
    """Local persistence is unavailable or over quota."""

    category = ErrorCategory.STORAGE
    severity = ErrorSeverity.WARNING
    default_actions = (
        "Check that the storage file location is writable",
        "Free some disk space or remove old saved data",
    )

    def __init__(
        self,
        message: str,
        key: str | None = None,
        path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, details={"Key": key, "Path": path}, original_error=original_error)
        self.key = key
        self.path = path


class DiscoveryError(AppError):
    """A discovery strategy got an answer it could not use."""

    category = ErrorCategory.DISCOVERY
    severity = ErrorSeverity.WARNING
    default_actions = ("Check that the asset folder exists on the host", "Refresh to try discovery again")

    def __init__(
        self,
        message: str,
        strategy: str | None = None,
        url: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, details={"Strategy": strategy, "URL": url}, original_error=original_error)
        self.strategy = strategy
        self.url = url


class ValidationError(AppError):
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING
    default_actions = ("Review the input requirements",)

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        shown = str(value)[:100] if value is not None else None
        super().__init__(message, details={"Field": field, "Value": shown})
        self.field = field
        self.value = value


class ConfigurationError(AppError):
    """The hub cannot start with the given settings."""

    category = ErrorCategory.CONFIGURATION
    default_actions = ("Check the configuration file", "Pass the hub URL on the command line")

    def __init__(self, message: str, setting: str | None = None, expected: str | None = None) -> None:
        actions = list(self.default_actions)
        if expected:
            actions.append(f"Expected: {expected}")
        super().__init__(message, details={"Setting": setting}, suggested_actions=actions)
        self.setting = setting
        self.expected = expected


class ErrorHandlingService:
    """Converts exceptions to user-facing errors, logs them and keeps a short history."""

    def __init__(self, max_history_size: int = 100) -> None:
        self._history: deque[tuple[float, AppError]] = deque(maxlen=max_history_size)

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Convert, log and remember an error.

        Args:
            error: The exception that occurred
            operation: What was being done, e.g. "refresh"
            component: Where it happened, e.g. a screen name
            context: Extra key/value details for the log

        Returns:
            The error as the UI should present it
        """
        app_error = self.convert(error, context)
        report = log.warning if app_error.severity is ErrorSeverity.WARNING else log.error
        report(
            "Operation failed",
            operation=operation,
            component=component,
            category=app_error.category.value,
            severity=app_error.severity.value,
            error_message=app_error.message,
            technical_details=app_error.technical_details,
            context=context,
        )
        self._history.append((time.time(), app_error))
        return app_error.to_user_friendly()

    def convert(self, error: Exception, context: dict[str, Any] | None = None) -> AppError:
        """Map an arbitrary exception onto the closest AppError kind."""
        if isinstance(error, AppError):
            return error

        ctx = context or {}
        match error:
            case httpx.TimeoutException():
                return NetworkError("The request timed out.", original_error=error, url=ctx.get("url"))
            case httpx.HTTPStatusError():
                status = error.response.status_code
                return NetworkError(
                    f"The server answered with HTTP {status}.",
                    original_error=error,
                    url=str(error.request.url),
                    status_code=status,
                )
            case httpx.RequestError():
                return NetworkError("Unable to reach the server.", original_error=error, url=ctx.get("url"))
            case json.JSONDecodeError():
                return ValidationError("The data could not be parsed as JSON.", field="json_content")
            case OSError():
                return StorageError(f"A file system error occurred: {error}", path=ctx.get("path"), original_error=error)
            case ValueError() | TypeError():
                return ValidationError(str(error), field=ctx.get("field"))
        return AppError("An unexpected error occurred. Please try again.", original_error=error)

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        """Most recent errors, oldest first."""
        return [error for _, error in list(self._history)[-count:]]

    def create_user_message(self, error: UserFriendlyError, include_suggestions: bool = True) -> str:
        if not include_suggestions or not error.suggested_actions:
            return error.message
        bullets = "\n".join(f"  • {action}" for action in error.suggested_actions[:3])
        return f"{error.message}\n\nSuggested actions:\n{bullets}"


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Process-wide error handling service, created on first use."""
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
    return get_error_service().handle_error(error, operation, component, context)
