"""Game catalog data models."""

import locale
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class GameEntry:
    """A playable game discovered in the hosted asset folder."""
    id: str  # Path relative to the asset root, join key for engagement data
    display_name: str
    play_url: str
    thumbnail_url: str | None = None
    description: str | None = None

    def with_description(self, description: str | None) -> "GameEntry":
        return replace(self, description=description)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "play_url": self.play_url,
            "thumbnail_url": self.thumbnail_url,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEntry":
        """Build an entry from its persisted form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a required field is empty or not a string
        """
        game_id = data["id"]
        display_name = data["display_name"]
        play_url = data["play_url"]
        for field_name, value in (("id", game_id), ("display_name", display_name), ("play_url", play_url)):
            if not isinstance(value, str) or not value:
                raise ValueError(f"{field_name} must be a non-empty string")

        thumbnail_url = data.get("thumbnail_url")
        description = data.get("description")
        return cls(
            id=game_id,
            display_name=display_name,
            play_url=play_url,
            thumbnail_url=thumbnail_url if isinstance(thumbnail_url, str) else None,
            description=description if isinstance(description, str) else None,
        )


Catalog = list[GameEntry]


def catalog_sort_key(entry: GameEntry) -> tuple[str, str]:
    """Case-insensitive, locale-aware ordering key for catalog entries."""
    # strxfrm rejects embedded NUL characters
    return (locale.strxfrm(entry.display_name.casefold().replace("\x00", "")), entry.id)


def build_catalog(entries: Iterable[GameEntry]) -> Catalog:
    """Build a catalog snapshot: unique ids (first wins), sorted by display name."""
    seen: set[str] = set()
    unique: list[GameEntry] = []
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        unique.append(entry)
    return sorted(unique, key=catalog_sort_key)
