"""Pure view model: catalog x engagement x filter -> rows.

Rendering (cards, tables, themes) belongs to the UI layer; these
functions only decide what is shown.
"""

from collections.abc import Collection
from dataclasses import dataclass

from ..models.discovery import DiscoveryReport
from ..models.engagement import EngagementRecord
from ..models.game import Catalog, GameEntry
from .engagement import EngagementStore


@dataclass(frozen=True)
class GameRow:
    """One displayed game with its engagement."""
    entry: GameEntry
    record: EngagementRecord


@dataclass(frozen=True)
class HubStats:
    """Summary line figures."""
    games: int
    total_plays: int
    favorites: int


def filter_entries(
    catalog: Catalog,
    query: str,
    favorite_ids: Collection[str] | None = None,
) -> Catalog:
    """Filter a catalog by search text and, optionally, to favorites only.

    The query matches case-insensitively against display name and id.
    Catalog order is preserved.
    """
    result = catalog
    needle = query.strip().casefold()
    if needle:
        result = [
            e for e in result
            if needle in e.display_name.casefold() or needle in e.id.casefold()
        ]
    if favorite_ids is not None:
        result = [e for e in result if e.id in favorite_ids]
    return result


def build_rows(
    catalog: Catalog,
    store: EngagementStore,
    query: str = "",
    favorites_only: bool = False,
) -> list[GameRow]:
    favorite_ids = store.favorite_ids() if favorites_only else None
    return [GameRow(entry, store.get_record(entry.id)) for entry in filter_entries(catalog, query, favorite_ids)]


def summary_stats(catalog: Catalog, store: EngagementStore) -> HubStats:
    favorites = sum(1 for entry in catalog if store.get_record(entry.id).favorited)
    return HubStats(games=len(catalog), total_plays=store.total_plays(), favorites=favorites)


def empty_state_message(
    report: DiscoveryReport,
    has_catalog: bool,
    query: str = "",
    favorites_only: bool = False,
) -> str:
    """Text shown when there are no rows to display."""
    if not has_catalog:
        return report.explain()
    if query.strip():
        return "No games match your search. Try different words or clear the filter."
    if favorites_only:
        return "No favorites yet. Press f on a game to add it."
    return "No games to show."
