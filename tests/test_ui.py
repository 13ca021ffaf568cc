"""Tests for the catalog screen formatting and the app's preference cycling."""

import asyncio

import pytest
from hypothesis import given, strategies as st
from textual.widgets import DataTable

from gamehub.models import Catalog, DiscoveryReport, EngagementRecord, GameEntry, HostingContext, RecentGame, Vote
from gamehub.services.engagement import EngagementStore
from gamehub.services.hub import HubController, HubState
from gamehub.services.storage import MemoryStorage
from gamehub.services.views import GameRow, HubStats
from gamehub.ui.app import CLOAKS, THEMES, HubApp, next_in_cycle
from gamehub.ui.screens.catalog import CatalogScreen, format_details, format_recent, format_row, format_stats

CONTEXT = HostingContext.from_url("https://alice.github.io/arcade/")
PONG = GameEntry(id="pong.html", display_name="Pong", play_url=f"{CONTEXT.asset_root_url}pong.html")


class TestFormatting:
    """Tests for table and panel text."""

    def test_row_marks_favorite_and_own_vote(self) -> None:
        record = EngagementRecord(play_count=3, like_count=2, dislike_count=1, favorited=True, user_vote=Vote.LIKED)
        assert format_row(GameRow(PONG, record)) == ("★", "Pong", "3", "2*", "1")

    def test_row_without_engagement(self) -> None:
        assert format_row(GameRow(PONG, EngagementRecord())) == ("", "Pong", "0", "0", "0")

    def test_details_show_description_or_pending(self) -> None:
        row = GameRow(PONG, EngagementRecord(user_vote=Vote.DISLIKED))

        pending = format_details(row, description_pending=True)
        assert "Your vote: disliked" in pending
        assert pending.endswith("Loading description...")

        described = format_details(GameRow(PONG.with_description("Classic paddles."), EngagementRecord()))
        assert described.endswith("Classic paddles.")
        assert "Loading" not in described

    def test_recent_and_stats_lines(self) -> None:
        assert format_recent([]) == "Recently played: nothing yet"
        assert format_recent([RecentGame("pong.html", "Pong"), RecentGame("snake.html", "Snake")]) == (
            "Recently played: Pong, Snake"
        )
        state = HubState(from_cache=True, favorites_only=True)
        assert format_stats(HubStats(games=2, total_plays=5, favorites=1), state) == (
            "2 games | 5 plays | 1 favorites | cached | favorites only"
        )


class TestCycling:
    @given(st.sampled_from(THEMES))
    def test_cycle_visits_every_theme(self, start: str) -> None:
        seen = [start]
        for _ in range(len(THEMES) - 1):
            seen.append(next_in_cycle(THEMES, seen[-1]))
        assert sorted(seen) == sorted(THEMES)
        assert next_in_cycle(THEMES, seen[-1]) == start

    def test_unknown_value_restarts_cycle(self) -> None:
        assert next_in_cycle(tuple(CLOAKS), "bogus") == "none"
        assert next_in_cycle(THEMES, None) == THEMES[0]


class StaticEngine:
    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.last_report = DiscoveryReport()

    async def discover(self, context: HostingContext) -> Catalog:
        return list(self.catalog)

    async def load_description(self, context: HostingContext, entry: GameEntry) -> GameEntry:
        return entry.with_description(f"About {entry.display_name}")


@pytest.mark.asyncio
async def test_app_loads_catalog_and_persists_preferences() -> None:
    store = EngagementStore(MemoryStorage())
    store.set_cloak("docs")
    controller = HubController(StaticEngine([PONG]), store, CONTEXT)  # type: ignore[arg-type]
    app = HubApp(controller)

    async with app.run_test() as pilot:
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert app.title == CLOAKS["docs"][0]
        assert app.screen.query_one("#games-table", DataTable).row_count == 1

        await pilot.press("f")
        assert store.get_record("pong.html").favorited is True

        await pilot.press("c")
        assert store.get_cloak() == next_in_cycle(tuple(CLOAKS), "docs")

        await pilot.press("t")
        assert store.get_theme() in THEMES


class SlowLiveEngine(StaticEngine):
    """Live discovery finishes only after a description has been loaded."""

    def __init__(self, catalog: Catalog) -> None:
        super().__init__(catalog)
        self.described = asyncio.Event()

    async def discover(self, context: HostingContext) -> Catalog:
        await self.described.wait()
        return list(self.catalog)

    async def load_description(self, context: HostingContext, entry: GameEntry) -> GameEntry:
        self.described.set()
        return await super().load_description(context, entry)


@pytest.mark.asyncio
async def test_live_catalog_replaces_descriptions_of_cached_entries() -> None:
    """Scenario: a game described from the cache shows the live entry once discovery finishes."""
    cached = GameEntry(id="pong.html", display_name="Pong", play_url="https://old.example.org/pong.html")
    store = EngagementStore(MemoryStorage())
    store.record_cache_snapshot([cached])
    controller = HubController(SlowLiveEngine([PONG]), store, CONTEXT)  # type: ignore[arg-type]
    app = HubApp(controller)

    async with app.run_test() as pilot:
        await app.workers.wait_for_complete()
        await pilot.pause()
        await app.workers.wait_for_complete()

        screen = app.screen
        assert isinstance(screen, CatalogScreen)
        row = screen._selected_row()
        assert row is not None
        assert row.entry.play_url == PONG.play_url
        assert row.entry.description == "About Pong"
        assert all(controller.find(game_id) is not None for game_id in screen._descriptions)
