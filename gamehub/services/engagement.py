"""Local engagement store: favorites, votes, play counts and small UI state.

Each game's engagement lives in one serialized record so that favorite,
vote and play updates can never disagree with each other. Engagement is
keyed by game id and is independent of any catalog snapshot: records for
games missing from the latest discovery are kept.

Storage problems never reach callers. Reads fall back to defaults and
writes become no-ops, both logged.
"""

import json
import math
import time
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from ..models.engagement import CacheSnapshot, EngagementRecord, RecentGame, Vote
from ..models.game import Catalog, GameEntry
from .errors import StorageError
from .storage import KeyValueStorage

log = structlog.stdlib.get_logger()

KEY_PREFIX = "gamehub:"
GAME_KEY_PREFIX = f"{KEY_PREFIX}game:"
THEME_KEY = f"{KEY_PREFIX}theme"
CLOAK_KEY = f"{KEY_PREFIX}cloak"
RECENT_KEY = f"{KEY_PREFIX}recent"
CATALOG_KEY = f"{KEY_PREFIX}catalog"
TOTAL_PLAYS_KEY = f"{KEY_PREFIX}total_plays"

RECENT_LIMIT = 5


def apply_vote(record: EngagementRecord, vote: Vote) -> EngagementRecord:
    """Move a record to a new vote state, crediting and debiting counters together.

    The prior vote's counter loses exactly one unit and the new vote's
    counter gains exactly one, in the same returned record.
    """
    like_count = record.like_count
    dislike_count = record.dislike_count

    if record.user_vote is Vote.LIKED:
        like_count = max(0, like_count - 1)
    elif record.user_vote is Vote.DISLIKED:
        dislike_count = max(0, dislike_count - 1)

    if vote is Vote.LIKED:
        like_count += 1
    elif vote is Vote.DISLIKED:
        dislike_count += 1

    return EngagementRecord(
        play_count=record.play_count,
        like_count=like_count,
        dislike_count=dislike_count,
        favorited=record.favorited,
        user_vote=vote,
    )


class EngagementStore:
    """Durable per-client record of what the user did with each game."""

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], float] = time.time,
        recent_limit: int = RECENT_LIMIT,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self.recent_limit = recent_limit

    # Raw access

    def _read(self, key: str) -> Any:
        try:
            raw = self._storage.get(key)
        except (StorageError, OSError) as e:
            log.warning("Storage read failed, using default", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (ValueError, RecursionError):
            log.warning("Ignoring unreadable stored value", key=key)
            return None

    def _write(self, key: str, value: Any) -> bool:
        try:
            self._storage.set(key, json.dumps(value, ensure_ascii=False))
        except (StorageError, OSError) as e:
            log.warning("Storage write failed, change not saved", key=key, error=str(e))
            return False
        return True

    # Per-game records

    def get_record(self, game_id: str) -> EngagementRecord:
        """Return the stored record, or a zero-valued one."""
        data = self._read(GAME_KEY_PREFIX + game_id)
        if not isinstance(data, dict):
            return EngagementRecord()
        return EngagementRecord.from_dict(data)

    def _put_record(self, game_id: str, record: EngagementRecord) -> bool:
        return self._write(GAME_KEY_PREFIX + game_id, record.to_dict())

    def increment_play(self, game_id: str) -> EngagementRecord:
        """Count one play of a game and one play in the overall total.

        Every call counts; rapid repeats are not merged.
        """
        record = self.get_record(game_id)
        updated = EngagementRecord(
            play_count=record.play_count + 1,
            like_count=record.like_count,
            dislike_count=record.dislike_count,
            favorited=record.favorited,
            user_vote=record.user_vote,
        )
        if not self._put_record(game_id, updated):
            return record
        self._write(TOTAL_PLAYS_KEY, self.total_plays() + 1)
        log.debug("Play recorded", game_id=game_id, play_count=updated.play_count)
        return updated

    def reset_plays(self, game_id: str) -> EngagementRecord:
        """Reset a game's play count to zero; the overall total is left alone."""
        record = self.get_record(game_id)
        updated = EngagementRecord(
            like_count=record.like_count,
            dislike_count=record.dislike_count,
            favorited=record.favorited,
            user_vote=record.user_vote,
        )
        return updated if self._put_record(game_id, updated) else record

    def set_favorite(self, game_id: str, value: bool) -> EngagementRecord:
        record = self.get_record(game_id)
        updated = EngagementRecord(
            play_count=record.play_count,
            like_count=record.like_count,
            dislike_count=record.dislike_count,
            favorited=value,
            user_vote=record.user_vote,
        )
        return updated if self._put_record(game_id, updated) else record

    def toggle_favorite(self, game_id: str) -> bool:
        """Flip the favorite flag and return the resulting value."""
        return self.set_favorite(game_id, not self.get_record(game_id).favorited).favorited

    def set_vote(self, game_id: str, vote: Vote) -> EngagementRecord:
        """Set this client's vote, keeping like/dislike counts consistent with it."""
        record = self.get_record(game_id)
        if record.user_vote is vote:
            return record
        updated = apply_vote(record, vote)
        if not self._put_record(game_id, updated):
            return record
        log.debug("Vote changed", game_id=game_id, old_vote=record.user_vote.value, new_vote=vote.value)
        return updated

    def toggle_vote(self, game_id: str, vote: Vote) -> EngagementRecord:
        """Press a like/dislike button: choosing the active vote clears it."""
        current = self.get_record(game_id).user_vote
        return self.set_vote(game_id, Vote.NONE if current is vote else vote)

    def known_game_ids(self) -> list[str]:
        """Ids of every game with a stored record, whether or not it is still cataloged."""
        try:
            keys = self._storage.keys()
        except (StorageError, OSError) as e:
            log.warning("Storage listing failed", error=str(e))
            return []
        return sorted(k[len(GAME_KEY_PREFIX):] for k in keys if k.startswith(GAME_KEY_PREFIX))

    def favorite_ids(self) -> set[str]:
        return {game_id for game_id in self.known_game_ids() if self.get_record(game_id).favorited}

    def total_plays(self) -> int:
        value = self._read(TOTAL_PLAYS_KEY)
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return max(0, value)

    # Recently played

    def get_recent(self) -> list[RecentGame]:
        data = self._read(RECENT_KEY)
        if not isinstance(data, list):
            return []
        recent: list[RecentGame] = []
        seen: set[str] = set()
        for item in data:
            if not isinstance(item, dict):
                continue
            game_id = item.get("id")
            display_name = item.get("display_name")
            if not isinstance(game_id, str) or game_id in seen:
                continue
            seen.add(game_id)
            recent.append(RecentGame(game_id, display_name if isinstance(display_name, str) else game_id))
        return recent[: self.recent_limit]

    def push_recent(self, game_id: str, display_name: str) -> list[RecentGame]:
        """Move a game to the front of the recently played list."""
        recent = [RecentGame(game_id, display_name)]
        recent.extend(r for r in self.get_recent() if r.id != game_id)
        recent = recent[: self.recent_limit]
        self._write(RECENT_KEY, [{"id": r.id, "display_name": r.display_name} for r in recent])
        return recent

    # Catalog cache

    def record_cache_snapshot(self, catalog: Iterable[GameEntry]) -> CacheSnapshot:
        snapshot = CacheSnapshot(catalog=list(catalog), fetched_at=self._clock())
        self._write(CATALOG_KEY, {
            "catalog": [entry.to_dict() for entry in snapshot.catalog],
            "fetched_at": snapshot.fetched_at,
        })
        log.debug("Catalog cached", games=len(snapshot.catalog))
        return snapshot

    def get_cache_snapshot(self) -> CacheSnapshot | None:
        data = self._read(CATALOG_KEY)
        if not isinstance(data, dict):
            return None
        entries = data.get("catalog")
        fetched_at = data.get("fetched_at")
        if not isinstance(entries, list) or isinstance(fetched_at, bool) or not isinstance(fetched_at, (int, float)):
            return None
        if not math.isfinite(fetched_at):
            return None

        catalog: Catalog = []
        for item in entries:
            try:
                catalog.append(GameEntry.from_dict(item))
            except (KeyError, ValueError, TypeError, AttributeError):
                log.debug("Skipping malformed cached entry", entry=str(item)[:100])
        return CacheSnapshot(catalog=catalog, fetched_at=float(fetched_at))

    # Process-wide preferences

    def get_theme(self, default: str | None = None) -> str | None:
        value = self._read(THEME_KEY)
        return value if isinstance(value, str) else default

    def set_theme(self, theme: str) -> None:
        self._write(THEME_KEY, theme)

    def get_cloak(self, default: str | None = None) -> str | None:
        value = self._read(CLOAK_KEY)
        return value if isinstance(value, str) else default

    def set_cloak(self, cloak: str) -> None:
        self._write(CLOAK_KEY, cloak)
