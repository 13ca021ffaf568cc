"""Main Textual application for browsing the hub."""

from typing import ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.widgets import Footer, Header

import structlog

from gamehub.services.hub import HubController

log = structlog.stdlib.get_logger()

THEMES: tuple[str, ...] = ("textual-dark", "textual-light", "nord", "gruvbox", "dracula")

# Cloak id -> (window title, subtitle). The title disguise is cosmetic only.
CLOAKS: dict[str, tuple[str, str]] = {
    "none": ("Game Hub", "Browse hosted games"),
    "docs": ("Google Docs", "Untitled document"),
    "classroom": ("Google Classroom", "Classes"),
    "drive": ("My Drive - Google Drive", ""),
}


def next_in_cycle(options: tuple[str, ...], current: str | None) -> str:
    """Return the option after ``current``, wrapping; unknown values restart the cycle."""
    if current not in options:
        return options[0]
    return options[(options.index(current) + 1) % len(options)]


class HubApp(App[None]):
    """Root application: owns the hub controller and the process-wide preferences."""

    CSS: ClassVar[str] = """
    Screen {
        background: $surface;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("t", "cycle_theme", "Theme", show=True),
        Binding("c", "cycle_cloak", "Cloak", show=True),
    ]

    def __init__(self, controller: HubController) -> None:
        super().__init__()
        self.controller = controller
        self.cloak = "none"
        log.info("HubApp initialized", base_url=controller.context.base_url)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

    async def on_mount(self) -> None:
        store = self.controller.store

        saved_theme = store.get_theme()
        if saved_theme in THEMES:
            self.theme = saved_theme

        self._apply_cloak(store.get_cloak("none") or "none")

        from gamehub.ui.screens import CatalogScreen

        await self.push_screen(CatalogScreen())

    def _apply_cloak(self, cloak: str) -> None:
        if cloak not in CLOAKS:
            cloak = "none"
        self.cloak = cloak
        title, subtitle = CLOAKS[cloak]
        self.title = title
        self.sub_title = subtitle

    def action_cycle_theme(self) -> None:
        theme = next_in_cycle(THEMES, self.theme)
        self.theme = theme
        self.controller.store.set_theme(theme)
        log.info("Theme changed", theme=theme)

    def action_cycle_cloak(self) -> None:
        cloak = next_in_cycle(tuple(CLOAKS), self.cloak)
        self._apply_cloak(cloak)
        self.controller.store.set_cloak(cloak)
        log.info("Cloak changed", cloak=cloak)
