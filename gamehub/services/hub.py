"""Hub controller: owns the catalog state and ties discovery to the engagement store.

Startup shows a fresh cached catalog immediately, then replaces it with a
live discovery result. Engagement is joined to catalog entries by id and
is never deleted when a game drops out of a refreshed catalog.
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import structlog

from ..models.discovery import DiscoveryReport
from ..models.engagement import EngagementRecord, Vote
from ..models.game import Catalog, GameEntry
from ..models.hosting import HostingContext
from .discovery import DiscoveryEngine
from .engagement import EngagementStore
from .views import GameRow, HubStats, build_rows, empty_state_message, summary_stats

log = structlog.stdlib.get_logger()

RenderCallback = Callable[["HubState"], Awaitable[None]]


@dataclass
class HubState:
    """Everything the view needs besides the engagement store."""
    catalog: Catalog = field(default_factory=list)
    current_game: GameEntry | None = None
    filter_text: str = ""
    favorites_only: bool = False
    from_cache: bool = False
    fetched_at: float | None = None
    report: DiscoveryReport = field(default_factory=DiscoveryReport)


class HubController:
    """Single owner of the hub's application state."""

    def __init__(
        self,
        engine: DiscoveryEngine,
        store: EngagementStore,
        context: HostingContext,
        cache_ttl_seconds: float = 600.0,
        use_cache: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.engine = engine
        self.store = store
        self.context = context
        self.cache_ttl_seconds = cache_ttl_seconds
        self.use_cache = use_cache
        self._clock = clock
        self._refresh_generation = 0
        self.state = HubState()

    def load_cached(self) -> Catalog | None:
        """Install the cached catalog if it is still fresh."""
        if not self.use_cache:
            return None
        snapshot = self.store.get_cache_snapshot()
        if snapshot is None or not snapshot.catalog:
            return None
        if not snapshot.is_fresh(self.cache_ttl_seconds, self._clock()):
            log.info("Cached catalog is stale", fetched_at=snapshot.fetched_at)
            return None

        self._install(snapshot.catalog, from_cache=True, fetched_at=snapshot.fetched_at)
        log.info("Cached catalog loaded", games=len(snapshot.catalog))
        return snapshot.catalog

    async def refresh(self) -> bool:
        """Run live discovery and apply it.

        Returns True when a new catalog replaced the current one. A refresh
        overtaken by a later one is dropped. An empty result never replaces a
        displayed catalog; with nothing displayed, a stale cache is used.
        """
        self._refresh_generation += 1
        generation = self._refresh_generation

        catalog = await self.engine.discover(self.context)

        if generation != self._refresh_generation:
            log.info("Discarding superseded refresh", generation=generation)
            return False

        self.state.report = self.engine.last_report
        if not catalog:
            if self.state.catalog:
                log.warning("Discovery found nothing, keeping displayed catalog", games=len(self.state.catalog))
                return False
            snapshot = self.store.get_cache_snapshot() if self.use_cache else None
            if snapshot is not None and snapshot.catalog:
                log.warning("Discovery found nothing, falling back to stale cache", games=len(snapshot.catalog))
                self._install(snapshot.catalog, from_cache=True, fetched_at=snapshot.fetched_at)
            return False

        snapshot = self.store.record_cache_snapshot(catalog)
        self._install(catalog, from_cache=False, fetched_at=snapshot.fetched_at)
        log.info("Catalog refreshed", games=len(catalog))
        return True

    async def start(self, on_render: RenderCallback) -> None:
        """Render the cached catalog (when fresh), then refresh and render again."""
        if self.load_cached() is not None:
            await on_render(self.state)
        await self.refresh()
        await on_render(self.state)

    def _install(self, catalog: Catalog, from_cache: bool, fetched_at: float | None) -> None:
        self.state.catalog = catalog
        self.state.from_cache = from_cache
        self.state.fetched_at = fetched_at
        current = self.state.current_game
        if current is not None:
            self.state.current_game = self.find(current.id) or current

    def find(self, game_id: str) -> GameEntry | None:
        for entry in self.state.catalog:
            if entry.id == game_id:
                return entry
        return None

    # User actions

    def play(self, game_id: str) -> GameEntry | None:
        """Record a play of a cataloged game and make it the current game."""
        entry = self.find(game_id)
        if entry is None:
            log.warning("Play requested for unknown game", game_id=game_id)
            return None
        self.store.increment_play(entry.id)
        self.store.push_recent(entry.id, entry.display_name)
        self.state.current_game = entry
        log.info("Game played", game_id=entry.id)
        return entry

    def toggle_favorite(self, game_id: str) -> bool:
        return self.store.toggle_favorite(game_id)

    def vote(self, game_id: str, vote: Vote) -> EngagementRecord:
        return self.store.toggle_vote(game_id, vote)

    async def describe(self, entry: GameEntry) -> GameEntry:
        return await self.engine.load_description(self.context, entry)

    def set_filter(self, text: str) -> None:
        self.state.filter_text = text

    def toggle_favorites_only(self) -> bool:
        self.state.favorites_only = not self.state.favorites_only
        return self.state.favorites_only

    # View

    def rows(self) -> list[GameRow]:
        return build_rows(self.state.catalog, self.store, self.state.filter_text, self.state.favorites_only)

    def stats(self) -> HubStats:
        return summary_stats(self.state.catalog, self.store)

    def empty_message(self) -> str:
        return empty_state_message(
            self.state.report,
            bool(self.state.catalog),
            self.state.filter_text,
            self.state.favorites_only,
        )
