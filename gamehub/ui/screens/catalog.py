"""Catalog screen: search, browse and play hosted games."""

import webbrowser
from typing import ClassVar, override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import DataTable, Input, Static
from textual.worker import Worker, WorkerState

import structlog

from gamehub.models.engagement import RecentGame, Vote
from gamehub.models.game import GameEntry
from gamehub.services.hub import HubController, HubState
from gamehub.services.views import GameRow, HubStats

from .base import BaseScreen

log = structlog.stdlib.get_logger()

FAVORITE_MARK = "★"
VOTE_LABELS = {Vote.NONE: "no vote", Vote.LIKED: "liked", Vote.DISLIKED: "disliked"}


def format_row(row: GameRow) -> tuple[str, str, str, str, str]:
    """Table cells for a game: favorite marker, name, plays, likes, dislikes."""
    record = row.record
    likes = f"{record.like_count}{'*' if record.user_vote is Vote.LIKED else ''}"
    dislikes = f"{record.dislike_count}{'*' if record.user_vote is Vote.DISLIKED else ''}"
    return (
        FAVORITE_MARK if record.favorited else "",
        row.entry.display_name,
        str(record.play_count),
        likes,
        dislikes,
    )


def format_details(row: GameRow, description_pending: bool = False) -> str:
    """Details panel text for the highlighted game."""
    entry, record = row.entry, row.record
    lines = [
        entry.display_name,
        f"Play: {entry.play_url}",
        f"Plays: {record.play_count}   Likes: {record.like_count}   Dislikes: {record.dislike_count}",
        f"Your vote: {VOTE_LABELS[record.user_vote]}   Favorite: {'yes' if record.favorited else 'no'}",
    ]
    if entry.thumbnail_url:
        lines.append(f"Thumbnail: {entry.thumbnail_url}")
    if entry.description:
        lines.extend(("", entry.description))
    elif description_pending:
        lines.extend(("", "Loading description..."))
    return "\n".join(lines)


def format_recent(recent: list[RecentGame]) -> str:
    if not recent:
        return "Recently played: nothing yet"
    return "Recently played: " + ", ".join(r.display_name for r in recent)


def format_stats(stats: HubStats, state: HubState) -> str:
    text = f"{stats.games} games | {stats.total_plays} plays | {stats.favorites} favorites"
    if state.from_cache:
        text += " | cached"
    if state.favorites_only:
        text += " | favorites only"
    return text


class CatalogScreen(BaseScreen):
    """The hub's only screen.

    Shows the cached catalog at once when it is fresh, then refreshes it
    in a background worker. Engagement actions apply to the highlighted row.
    """

    SCREEN_TITLE: ClassVar[str] = "Games"
    SCREEN_NAME: ClassVar[str] = "catalog"

    CSS: ClassVar[str] = """
    #catalog-container {
        height: 100%;
        padding: 0 1;
    }

    #search-input {
        margin-bottom: 1;
    }

    #games-table {
        height: 1fr;
    }

    #empty-state {
        height: 1fr;
        content-align: center middle;
        color: $text-muted;
        display: none;
    }

    #details {
        height: auto;
        max-height: 12;
        padding: 0 1;
        border: solid $secondary;
    }

    .status-line {
        color: $text-muted;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("slash", "focus_search", "Search", show=True),
        Binding("escape", "focus_table", "Table", show=False),
        Binding("f", "toggle_favorite", "Favorite", show=True),
        Binding("l", "like", "Like", show=True),
        Binding("d", "dislike", "Dislike", show=True),
        Binding("v", "toggle_favorites_only", "Favorites only", show=True),
        Binding("r", "refresh", "Refresh", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._selected_id: str | None = None
        self._row_ids: list[str] = []
        self._descriptions: dict[str, GameEntry] = {}
        self._loaded = False

    @property
    def controller(self) -> HubController:
        return self.hub_app.controller

    @override
    def compose(self) -> ComposeResult:
        with Container(id="catalog-container"):
            yield Input(placeholder="Search games...", id="search-input")
            yield DataTable(id="games-table", cursor_type="row", zebra_stripes=True)
            yield Static("Discovering games...", id="empty-state")
            with Vertical(id="details"):
                yield Static("", id="details-text")
            yield Static("", id="recent-line", classes="status-line")
            yield Static("", id="stats-line", classes="status-line")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        table = self.query_one("#games-table", DataTable)
        table.add_columns(FAVORITE_MARK, "Game", "Plays", "Likes", "Dislikes")
        table.focus()
        self.refresh_view()
        self.run_worker(
            self.controller.start(self._on_state),
            name="initial-load",
            group="refresh",
            exclusive=True,
            exit_on_error=False,
        )

    async def _on_state(self, state: HubState) -> None:
        self._loaded = True
        self._descriptions.clear()
        self.refresh_view()

    # Rendering

    def refresh_view(self) -> None:
        """Rebuild the table and status lines from the controller's state."""
        rows = self.controller.rows()
        table = self.query_one("#games-table", DataTable)
        empty = self.query_one("#empty-state", Static)

        table.clear()
        self._row_ids = []
        for row in rows:
            table.add_row(*format_row(row), key=row.entry.id)
            self._row_ids.append(row.entry.id)

        if rows:
            empty.display = False
            table.display = True
            if self._selected_id in self._row_ids:
                table.move_cursor(row=self._row_ids.index(self._selected_id))
            else:
                self._selected_id = self._row_ids[0]
        else:
            table.display = False
            empty.display = True
            empty.update(self.controller.empty_message() if self._loaded else "Discovering games...")
            self._selected_id = None

        self._update_details()
        self.query_one("#recent-line", Static).update(format_recent(self.controller.store.get_recent()))
        self.query_one("#stats-line", Static).update(format_stats(self.controller.stats(), self.controller.state))

    def _selected_row(self) -> GameRow | None:
        if self._selected_id is None:
            return None
        entry = self._descriptions.get(self._selected_id) or self.controller.find(self._selected_id)
        if entry is None:
            return None
        return GameRow(entry, self.controller.store.get_record(entry.id))

    def _update_details(self) -> None:
        details = self.query_one("#details-text", Static)
        row = self._selected_row()
        if row is None:
            details.update("")
            return
        pending = row.entry.id not in self._descriptions
        details.update(format_details(row, description_pending=pending))
        if pending:
            self.run_worker(
                self._load_description(row.entry),
                group="describe",
                exclusive=True,
                exit_on_error=False,
            )

    async def _load_description(self, entry: GameEntry) -> None:
        described = await self.controller.describe(entry)
        if self.controller.find(entry.id) != entry:
            # The catalog was replaced while loading
            return
        self._descriptions[entry.id] = described
        if entry.id == self._selected_id:
            self._update_details()

    # Events

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self.controller.set_filter(event.value)
            self.refresh_view()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input":
            self.action_focus_table()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        game_id = str(event.row_key.value)
        if game_id != self._selected_id:
            self._selected_id = game_id
            self._update_details()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key is not None and event.row_key.value is not None:
            self._play(str(event.row_key.value))

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state is WorkerState.ERROR and isinstance(event.worker.error, Exception):
            self.handle_exception(event.worker.error, operation=event.worker.name or "background task")
            if not self._loaded:
                self._loaded = True
                self.refresh_view()

    def _play(self, game_id: str) -> None:
        entry = self.controller.play(game_id)
        if entry is None:
            self.report("That game is no longer in the catalog", "warning")
            return
        try:
            opened = webbrowser.open(entry.play_url)
        except webbrowser.Error as e:
            self.handle_exception(e, operation="open game", context={"url": entry.play_url})
            opened = False
        if not opened:
            self.report(f"Open this link to play: {entry.play_url}", "warning")
        self.refresh_view()

    # Actions

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def action_focus_table(self) -> None:
        self.query_one("#games-table", DataTable).focus()

    def action_toggle_favorite(self) -> None:
        if self._selected_id is None:
            return
        favorited = self.controller.toggle_favorite(self._selected_id)
        log.info("Favorite toggled", game_id=self._selected_id, favorited=favorited)
        self.refresh_view()

    def action_like(self) -> None:
        self._vote(Vote.LIKED)

    def action_dislike(self) -> None:
        self._vote(Vote.DISLIKED)

    def _vote(self, vote: Vote) -> None:
        if self._selected_id is None:
            return
        self.controller.vote(self._selected_id, vote)
        self.refresh_view()

    def action_toggle_favorites_only(self) -> None:
        self.controller.toggle_favorites_only()
        self.refresh_view()

    def action_refresh(self) -> None:
        self.report("Refreshing catalog...")
        self.run_worker(self._refresh(), name="refresh", group="refresh", exclusive=True, exit_on_error=False)

    async def _refresh(self) -> None:
        changed = await self.controller.refresh()
        self._loaded = True
        self._descriptions.clear()
        self.refresh_view()
        if not changed and self.controller.state.catalog:
            self.report("No new catalog found, keeping the current one", "warning")
