"""Logging setup for the Game Hub application.

structlog builds the event dictionaries; rendering happens per handler via
``structlog.stdlib.ProcessorFormatter``, so the console can stay human
readable while log files are always JSON. Records from stdlib loggers
(httpx, textual) go through the same formatters.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

HUB_LOG_NAME = "hub.log"
ERROR_LOG_NAME = "error.log"

_SHARED_PROCESSORS: list[Any] = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


class LoggingService:
    """Configures structlog on top of the standard library logging tree."""

    def __init__(
        self,
        log_level: str = "INFO",
        log_dir: Path | None = None,
        tui_mode: bool = False,
    ) -> None:
        """
        Args:
            log_level: Name of the minimum level to record
            log_dir: Where hub.log and error.log go; None disables file logging
            tui_mode: Suppress console output so the terminal UI is not corrupted
        """
        self.log_level = log_level.upper()
        self.log_dir = log_dir
        self.tui_mode = tui_mode
        self.is_development = os.getenv("ENVIRONMENT", "development") == "development"

    @property
    def level(self) -> int:
        return logging.getLevelNamesMapping().get(self.log_level, logging.INFO)

    def configure(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(self.level)

        # httpx reports every request at INFO; HttpClientService logs its own
        logging.getLogger("httpx").setLevel(max(self.level, logging.WARNING))

        for handler in self._build_handlers():
            root.addHandler(handler)

        structlog.configure(
            processors=[structlog.stdlib.filter_by_level, *_SHARED_PROCESSORS,
                        structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _build_handlers(self) -> list[logging.Handler]:
        handlers: list[logging.Handler] = []

        if not self.tui_mode:
            console = logging.StreamHandler(sys.stderr)
            console.setLevel(self.level)
            console.setFormatter(self._formatter(json_output=not self.is_development))
            handlers.append(console)

        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            for name, level, max_bytes, backups in (
                (HUB_LOG_NAME, self.level, 5 * 1024 * 1024, 3),
                (ERROR_LOG_NAME, logging.ERROR, 1024 * 1024, 2),
            ):
                rotating = logging.handlers.RotatingFileHandler(
                    self.log_dir / name, maxBytes=max_bytes, backupCount=backups, encoding="utf-8",
                )
                rotating.setLevel(level)
                rotating.setFormatter(self._formatter(json_output=True))
                handlers.append(rotating)

        return handlers

    @staticmethod
    def _formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
        if json_output:
            final: list[Any] = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        else:
            final = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )

    def get_logger(self, name: str | None = None) -> structlog.stdlib.BoundLogger:
        return structlog.stdlib.get_logger(name)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    environment: str | None = None,
    tui_mode: bool = False,
) -> LoggingService:
    """Configure logging for the process and return the service.

    ``environment`` ("development" or "production") is exported as
    ``ENVIRONMENT`` so the choice of console renderer sticks.
    """
    if environment:
        os.environ["ENVIRONMENT"] = environment

    service = LoggingService(log_level=log_level, log_dir=log_dir, tui_mode=tui_mode)
    service.configure()
    return service
