"""Game discovery for a hosted asset folder.

Static hosts offer no directory listing API, so discovery tries an ordered
list of strategies and keeps the first one that finds anything:

1. the repository tree API, one request for the whole asset folder;
2. the asset folder's own hyperlink listing, when the server renders one;
3. probing a bounded set of guessed file names.

Every strategy shares one contract, ``async (context) -> DiscoveryResult``,
and a failing strategy simply counts as having found nothing.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol
from urllib.parse import quote, unquote, urljoin, urlsplit

import httpx
import structlog
from bs4 import BeautifulSoup

from ..models.config import AppConfig
from ..models.discovery import DiscoveryAttempt, DiscoveryReport, DiscoveryResult
from ..models.game import Catalog, GameEntry, build_catalog
from ..models.hosting import HostingContext
from .errors import DiscoveryError
from .http_client import HttpClientService
from .naming import display_name_for_path, sidecar_stem

log = structlog.stdlib.get_logger()

IMAGE_DIR = "images"
DESCRIPTION_DIR = "descriptions"
SIDECAR_DIRS = frozenset({IMAGE_DIR, DESCRIPTION_DIR})
THUMBNAIL_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp")
DEFAULT_BRANCHES = ("main", "master", "gh-pages")

PROBE_NUMBER_LIMIT = 20
PROBE_VOCABULARY = (
    "snake", "tetris", "pong", "pacman", "flappy", "flappy-bird", "2048",
    "minesweeper", "breakout", "chess", "checkers", "sudoku", "solitaire",
    "asteroids", "space-invaders", "platformer", "runner", "racing",
    "shooter", "puzzle", "memory", "tic-tac-toe", "dino", "clicker", "maze",
)
PROBE_SUFFIXES = ("", "1", "2", "-game", "_game")
PROBE_EXAMPLES = ("game", "example", "demo", "sample", "my-game", "test-game")


class DiscoveryStrategy(Protocol):
    """A way of finding playable files for a hosting context."""

    name: str

    async def __call__(self, context: HostingContext) -> DiscoveryResult: ...


def is_playable(relative_path: str, extension: str) -> bool:
    """True for game files: right extension, outside the sidecar folders."""
    if not relative_path or not relative_path.lower().endswith(extension.lower()):
        return False
    first_segment = relative_path.split("/", 1)[0]
    return first_segment not in SIDECAR_DIRS


def asset_url(context: HostingContext, relative_path: str) -> str:
    return context.asset_root_url + quote(relative_path)


class RepositoryTreeStrategy:
    """List the asset folder through the repository's recursive git tree."""

    name = "repository tree"

    def __init__(
        self,
        http_client: HttpClientService,
        playable_extension: str = ".html",
        api_base_url: str = "https://api.github.com",
    ) -> None:
        self.http_client = http_client
        self.playable_extension = playable_extension
        self.api_base_url = api_base_url.rstrip("/")

    def tree_url(self, context: HostingContext, branch: str) -> str:
        return f"{self.api_base_url}/repos/{context.owner}/{context.repo}/git/trees/{quote(branch, safe='')}"

    async def __call__(self, context: HostingContext) -> DiscoveryResult:
        if not context.has_repository:
            log.debug("No repository identity, skipping tree listing", base_url=context.base_url)
            return DiscoveryResult()

        branches = [context.branch] + [b for b in DEFAULT_BRANCHES if b != context.branch]
        for branch in branches:
            url = self.tree_url(context, branch)
            try:
                response = await self.http_client.get(
                    url,
                    headers={"Accept": "application/vnd.github+json"},
                    params={"recursive": "1"},
                )
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 404:
                    log.debug("Branch not found", branch=branch, repo=context.repo)
                    continue
                raise
            return self.parse_tree(response.json(), context)

        raise DiscoveryError(
            "None of the candidate branches exist",
            strategy=self.name,
            url=self.tree_url(context, context.branch),
        )

    def parse_tree(self, payload: object, context: HostingContext) -> DiscoveryResult:
        """Pick playable blobs under the asset folder out of a tree listing."""
        tree = payload.get("tree") if isinstance(payload, dict) else None
        if not isinstance(tree, list):
            raise DiscoveryError("Tree listing has no 'tree' array", strategy=self.name)
        if isinstance(payload, dict) and payload.get("truncated"):
            log.warning("Repository tree listing was truncated", repo=context.repo)

        prefix = context.repository_asset_path + "/"
        known: set[str] = set()
        paths: list[str] = []
        for item in tree:
            if not isinstance(item, dict) or item.get("type") != "blob":
                continue
            path = item.get("path")
            if not isinstance(path, str) or not path.startswith(prefix):
                continue
            relative = path[len(prefix):]
            known.add(relative)
            if is_playable(relative, self.playable_extension):
                paths.append(relative)

        log.info("Repository tree listed", repo=context.repo, assets=len(known), games=len(paths))
        return DiscoveryResult(paths=paths, known_assets=frozenset(known))


class DirectoryListingStrategy:
    """Parse the hyperlinks of a server-rendered listing of the asset folder."""

    name = "directory listing"

    def __init__(self, http_client: HttpClientService, playable_extension: str = ".html") -> None:
        self.http_client = http_client
        self.playable_extension = playable_extension

    async def __call__(self, context: HostingContext) -> DiscoveryResult:
        root = context.asset_root_url
        response = await self.http_client.get(root)
        paths = self.parse_listing(response.text, root)
        log.info("Directory listing parsed", url=root, games=len(paths))
        return DiscoveryResult(paths=paths)

    def parse_listing(self, html: str, root: str) -> list[str]:
        root_parts = urlsplit(root)
        root_path = unquote(root_parts.path)
        soup = BeautifulSoup(html, "html.parser")

        paths: list[str] = []
        seen: set[str] = set()
        for link in soup.find_all("a", href=True):
            href = link["href"]
            if isinstance(href, list):
                href = href[0]
            parts = urlsplit(urljoin(root, str(href)))
            if parts.netloc != root_parts.netloc:
                continue
            path = unquote(parts.path)
            if not path.startswith(root_path):
                continue
            relative = path[len(root_path):]
            if relative in seen or not is_playable(relative, self.playable_extension):
                continue
            seen.add(relative)
            paths.append(relative)
        return paths


def probe_candidates(extension: str = ".html") -> list[str]:
    """Guessed file names: numbered games, common titles and example names."""
    names: list[str] = []
    for i in range(1, PROBE_NUMBER_LIMIT + 1):
        names.extend((f"{i}", f"game{i}", f"game-{i}"))
    for word in PROBE_VOCABULARY:
        names.extend(f"{word}{suffix}" for suffix in PROBE_SUFFIXES)
    names.extend(PROBE_EXAMPLES)
    return [f"{name}{extension}" for name in dict.fromkeys(names)]


class ProbingStrategy:
    """Check guessed file names for existence, a batch at a time.

    Approximate by nature: real games with unguessable names are missed.
    """

    name = "filename probing"

    def __init__(
        self,
        http_client: HttpClientService,
        playable_extension: str = ".html",
        batch_size: int = 15,
        match_threshold: int = 50,
        candidates: Sequence[str] | None = None,
    ) -> None:
        self.http_client = http_client
        self.batch_size = max(1, batch_size)
        self.match_threshold = match_threshold
        self.candidates = list(candidates) if candidates is not None else probe_candidates(playable_extension)

    async def __call__(self, context: HostingContext) -> DiscoveryResult:
        found: list[str] = []
        checked = 0
        for start in range(0, len(self.candidates), self.batch_size):
            batch = self.candidates[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self.http_client.exists(asset_url(context, name)) for name in batch),
                return_exceptions=True,
            )
            checked += len(batch)
            found.extend(name for name, ok in zip(batch, results) if ok is True)
            if len(found) >= self.match_threshold:
                log.info("Probe match threshold reached", found=len(found), checked=checked)
                break

        log.info("Filename probing finished", found=len(found), checked=checked)
        return DiscoveryResult(paths=found)


async def first_non_empty(
    strategies: Sequence[DiscoveryStrategy],
    context: HostingContext,
) -> tuple[DiscoveryResult, DiscoveryReport]:
    """Run strategies in order and return the first non-empty result.

    Strategies run one after another; a strategy that raises is logged and
    treated as having found nothing.
    """
    report = DiscoveryReport()
    for strategy in strategies:
        try:
            result = await strategy(context)
        except Exception as e:
            log.warning(
                "Discovery strategy failed",
                strategy=strategy.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            report.add(DiscoveryAttempt(strategy.name, 0, f"{type(e).__name__}: {e}"))
            continue

        report.add(DiscoveryAttempt(strategy.name, len(result.paths)))
        if result:
            report.winning_strategy = strategy.name
            return result, report
        log.info("Discovery strategy found nothing", strategy=strategy.name)

    return DiscoveryResult(), report


class DiscoveryEngine:
    """Produces the game catalog for a hosting context."""

    def __init__(
        self,
        http_client: HttpClientService,
        strategies: Sequence[DiscoveryStrategy],
        resolve_thumbnails: bool = True,
        thumbnail_batch_size: int = 15,
    ) -> None:
        self.http_client = http_client
        self.strategies = list(strategies)
        self.resolve_thumbnails = resolve_thumbnails
        self.thumbnail_batch_size = max(1, thumbnail_batch_size)
        self.last_report = DiscoveryReport()
        self._known_assets: frozenset[str] | None = None

    @classmethod
    def from_config(cls, http_client: HttpClientService, config: AppConfig) -> "DiscoveryEngine":
        return cls(
            http_client,
            strategies=[
                RepositoryTreeStrategy(http_client, config.playable_extension, config.api_base_url),
                DirectoryListingStrategy(http_client, config.playable_extension),
                ProbingStrategy(
                    http_client,
                    config.playable_extension,
                    batch_size=config.probe_batch_size,
                    match_threshold=config.probe_match_threshold,
                ),
            ],
            thumbnail_batch_size=config.probe_batch_size,
        )

    async def discover(self, context: HostingContext) -> Catalog:
        """Discover the catalog. An empty catalog means nothing was found anywhere."""
        log.info("Starting discovery", base_url=context.base_url, strategies=[s.name for s in self.strategies])
        result, report = await first_non_empty(self.strategies, context)
        self.last_report = report
        self._known_assets = result.known_assets

        entries: list[GameEntry] = []
        for path in result.paths:
            try:
                display_name = display_name_for_path(path)
            except ValueError:
                log.warning("Skipping game with unusable file name", path=path)
                continue
            entries.append(GameEntry(id=path, display_name=display_name, play_url=asset_url(context, path)))

        entries = await self._attach_thumbnails(context, entries, result.known_assets)
        catalog = build_catalog(entries)
        log.info("Discovery finished", strategy=report.winning_strategy, games=len(catalog))
        return catalog

    async def _attach_thumbnails(
        self,
        context: HostingContext,
        entries: list[GameEntry],
        known_assets: frozenset[str] | None,
    ) -> list[GameEntry]:
        if known_assets is not None:
            return [self._thumbnail_from_listing(context, entry, known_assets) for entry in entries]
        if not self.resolve_thumbnails or not entries:
            return entries

        resolved: list[GameEntry] = []
        for start in range(0, len(entries), self.thumbnail_batch_size):
            batch = entries[start:start + self.thumbnail_batch_size]
            results = await asyncio.gather(
                *(self._probe_thumbnail(context, entry) for entry in batch),
                return_exceptions=True,
            )
            for entry, outcome in zip(batch, results):
                resolved.append(outcome if isinstance(outcome, GameEntry) else entry)
        return resolved

    def _thumbnail_from_listing(
        self,
        context: HostingContext,
        entry: GameEntry,
        known_assets: frozenset[str],
    ) -> GameEntry:
        for candidate in self._thumbnail_candidates(entry):
            if candidate in known_assets:
                return replace(entry, thumbnail_url=asset_url(context, candidate))
        return entry

    async def _probe_thumbnail(self, context: HostingContext, entry: GameEntry) -> GameEntry:
        for candidate in self._thumbnail_candidates(entry):
            url = asset_url(context, candidate)
            if await self.http_client.exists(url):
                return replace(entry, thumbnail_url=url)
        return entry

    @staticmethod
    def _thumbnail_candidates(entry: GameEntry) -> list[str]:
        stem = sidecar_stem(entry.id)
        return [f"{IMAGE_DIR}/{stem}.{ext}" for ext in THUMBNAIL_EXTENSIONS]

    async def load_description(self, context: HostingContext, entry: GameEntry) -> GameEntry:
        """Fetch the sidecar description for an entry; absent or failing means unchanged."""
        if entry.description is not None:
            return entry

        relative = f"{DESCRIPTION_DIR}/{sidecar_stem(entry.id)}.txt"
        if self._known_assets is not None and relative not in self._known_assets:
            return entry

        try:
            response = await self.http_client.get(asset_url(context, relative))
        except httpx.HTTPError as e:
            log.debug("No description available", game_id=entry.id, error=str(e))
            return entry

        text = response.text.strip()
        return entry.with_description(text) if text else entry

