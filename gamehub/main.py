"""Command-line entry point.

``game-hub URL`` opens the terminal browser for a hosted hub;
``--no-tui`` runs one discovery pass and prints the catalog instead.
Services are wired together lazily by ``ApplicationContext``.
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass, replace
from pathlib import Path

import structlog

from gamehub import __version__
from gamehub.models import AppConfig, HostingContext
from gamehub.services.config import ConfigurationService
from gamehub.services.discovery import DiscoveryEngine
from gamehub.services.engagement import EngagementStore
from gamehub.services.errors import ConfigurationError
from gamehub.services.http_client import HttpClientService
from gamehub.services.hub import HubController
from gamehub.services.logging import setup_logging
from gamehub.services.storage import FileStorage

log = structlog.stdlib.get_logger()

EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class ApplicationContext:
    """Container for application services.

    Services are built lazily on first use; ``cleanup()`` releases the
    network connections.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        hub_url: str | None = None,
        log_level: str | None = None,
        use_cache: bool = True,
    ) -> None:
        self._config_path = config_path
        self._hub_url = hub_url
        self._log_level = log_level
        self.use_cache = use_cache

        self._config_service: ConfigurationService | None = None
        self._config: AppConfig | None = None
        self._http_client: HttpClientService | None = None
        self._store: EngagementStore | None = None
        self._engine: DiscoveryEngine | None = None
        self._controller: HubController | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        """File configuration with command-line overrides applied."""
        if self._config is None:
            config = self.config_service.load_config()
            if self._hub_url:
                config = replace(config, hub_url=self._hub_url)
            if self._log_level:
                config = replace(config, log_level=self._log_level)
            self._config = config
        return self._config

    @property
    def hosting_context(self) -> HostingContext:
        """Hosting context for the configured hub URL.

        Raises:
            ConfigurationError: If no usable hub URL is configured
        """
        if not self.config.hub_url:
            raise ConfigurationError(
                "No hub URL given. Pass it as an argument or set hub_url in the config file.",
                setting="hub_url",
                expected="an absolute http(s) URL",
            )
        try:
            return HostingContext.from_url(self.config.hub_url, self.config.asset_dir, self.config.branch)
        except ValueError as e:
            raise ConfigurationError(str(e), setting="hub_url", expected="an absolute http(s) URL") from e

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(
                timeout=self.config.request_timeout,
                max_retries=self.config.max_retries,
            )
        return self._http_client

    @property
    def store(self) -> EngagementStore:
        if self._store is None:
            self._store = EngagementStore(FileStorage(self.config.storage_path))
        return self._store

    @property
    def engine(self) -> DiscoveryEngine:
        if self._engine is None:
            self._engine = DiscoveryEngine.from_config(self.http_client, self.config)
        return self._engine

    @property
    def controller(self) -> HubController:
        if self._controller is None:
            self._controller = HubController(
                self.engine,
                self.store,
                self.hosting_context,
                cache_ttl_seconds=self.config.cache_ttl_seconds,
                use_cache=self.use_cache,
            )
        return self._controller

    async def cleanup(self) -> None:
        """Close network connections."""
        log.info("Cleaning up application resources")
        if self._http_client is not None:
            await self._http_client.close()
        log.info("Application cleanup complete")


@dataclass(frozen=True)
class ParsedArgs:
    hub_url: str | None
    config: Path | None
    log_level: str | None
    log_dir: Path | None
    no_tui: bool
    no_cache: bool


def parse_arguments(argv: list[str] | None = None) -> ParsedArgs:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="game-hub",
        description="Browse, play and rate the games published in a hosted hub's asset folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  game-hub https://someone.github.io/games/       Browse a hub
  game-hub --no-tui https://someone.github.io/games/  Print the catalog
  game-hub --config ./hub.json --log-level DEBUG  Use a custom config file
        """,
    )

    _ = parser.add_argument("hub_url", nargs="?", default=None, help="Public URL of the hub page")

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/game-hub/config.json)",
    )

    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: from config, INFO)",
    )

    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: ./logs when running the TUI)",
    )

    _ = parser.add_argument("--no-tui", action="store_true", help="Print the catalog and exit")

    _ = parser.add_argument("--no-cache", action="store_true", help="Ignore the cached catalog")

    ns = parser.parse_args(argv)

    return ParsedArgs(
        hub_url=ns.hub_url,
        config=ns.config,
        log_level=ns.log_level,
        log_dir=ns.log_dir,
        no_tui=bool(ns.no_tui),
        no_cache=bool(ns.no_cache),
    )


def format_catalog(controller: HubController) -> str:
    """Plain-text catalog listing for scripting mode."""
    rows = controller.rows()
    if not rows:
        return controller.empty_message()
    lines = []
    for row in rows:
        marker = "*" if row.record.favorited else " "
        lines.append(f"{marker} {row.entry.display_name}\t{row.entry.play_url}\tplays={row.record.play_count}")
    stats = controller.stats()
    lines.append(f"{stats.games} games, {stats.total_plays} plays, {stats.favorites} favorites")
    return "\n".join(lines)


async def run_print(context: ApplicationContext) -> int:
    """Run one discovery pass and print the catalog."""
    try:
        await context.controller.refresh()
        print(format_catalog(context.controller))
        return 0
    finally:
        await context.cleanup()


async def run_tui(context: ApplicationContext) -> int:
    """Run the terminal browser until the user quits.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    from gamehub.ui.app import HubApp

    log.info("Starting TUI application")
    try:
        app = HubApp(controller=context.controller)
        await app.run_async()
        log.info("TUI application exited normally")
        return 0
    except Exception as e:
        log.error("TUI application error", error=str(e), exc_info=True)
        return 1
    finally:
        await context.cleanup()


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, set up logging, run the selected mode and exit with its code."""
    args = parse_arguments(argv)

    log_dir = args.log_dir
    if log_dir is None and not args.no_tui:
        log_dir = Path("logs")

    context = ApplicationContext(
        config_path=args.config,
        hub_url=args.hub_url,
        log_level=args.log_level,
        use_cache=not args.no_cache,
    )

    _ = setup_logging(
        log_level=args.log_level or "INFO",
        log_dir=log_dir,
        tui_mode=not args.no_tui,
    )
    # Level from the config file applies once the file has been read
    if context.config.log_level != (args.log_level or "INFO"):
        _ = setup_logging(log_level=context.config.log_level, log_dir=log_dir, tui_mode=not args.no_tui)

    log.info(
        "Starting Game Hub",
        version=__version__,
        config_path=str(context.config_service.config_path),
    )

    try:
        try:
            _ = context.hosting_context
        except ConfigurationError as e:
            print(f"game-hub: {e.message}", file=sys.stderr)
            exit_code = EXIT_USAGE
        else:
            runner = run_print if args.no_tui else run_tui
            exit_code = asyncio.run(runner(context))

    except KeyboardInterrupt:
        log.info("Application interrupted by user")
        exit_code = EXIT_INTERRUPTED

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = 1

    log.info("Application exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
