"""Shared behaviour for hub screens: app access, notifications and error reporting."""

from typing import TYPE_CHECKING, ClassVar, Literal

from textual.screen import Screen

import structlog

from gamehub.services.errors import ErrorSeverity, UserFriendlyError, get_error_service, handle_error

if TYPE_CHECKING:
    from gamehub.ui.app import HubApp

log = structlog.stdlib.get_logger()

NotifySeverity = Literal["information", "warning", "error"]

_SEVERITY_FOR_ERROR: dict[ErrorSeverity, NotifySeverity] = {
    ErrorSeverity.WARNING: "warning",
    ErrorSeverity.ERROR: "error",
    ErrorSeverity.CRITICAL: "error",
}


class BaseScreen(Screen[None]):
    SCREEN_TITLE: ClassVar[str] = "Hub"
    SCREEN_NAME: ClassVar[str] = "base"

    def __init__(self) -> None:
        super().__init__(name=self.SCREEN_NAME)

    @property
    def hub_app(self) -> "HubApp":
        from gamehub.ui.app import HubApp

        if not isinstance(self.app, HubApp):
            raise RuntimeError(f"{type(self).__name__} must be pushed by a HubApp")
        return self.app

    async def on_mount(self) -> None:
        log.debug("Screen mounted", screen=self.SCREEN_NAME)

    def report(self, message: str, severity: NotifySeverity = "information") -> None:
        """Show a toast and keep a copy of it in the log."""
        self.notify(message, severity=severity)
        log_method = log.info if severity == "information" else getattr(log, severity)
        log_method("User notified", notice=message, screen=self.SCREEN_NAME)

    def handle_exception(
        self,
        error: Exception,
        operation: str,
        context: dict[str, str | int | float | bool] | None = None,
    ) -> UserFriendlyError:
        """Log an unexpected failure and tell the user about it in one line."""
        user_error = handle_error(error, operation=operation, component=self.SCREEN_NAME, context=context)
        self.report(
            get_error_service().create_user_message(user_error, include_suggestions=False),
            _SEVERITY_FOR_ERROR[user_error.severity],
        )
        return user_error
