"""Engagement state data models."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .game import Catalog


class Vote(str, Enum):
    """This client's own vote on a game."""
    NONE = "none"
    LIKED = "liked"
    DISLIKED = "disliked"

    @classmethod
    def parse(cls, value: Any) -> "Vote":
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


@dataclass(frozen=True)
class EngagementRecord:
    """Per-game engagement held in local storage."""
    play_count: int = 0
    like_count: int = 0
    dislike_count: int = 0
    favorited: bool = False
    user_vote: Vote = Vote.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "play_count": self.play_count,
            "like_count": self.like_count,
            "dislike_count": self.dislike_count,
            "favorited": self.favorited,
            "user_vote": self.user_vote.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngagementRecord":
        return cls(
            play_count=_count(data.get("play_count")),
            like_count=_count(data.get("like_count")),
            dislike_count=_count(data.get("dislike_count")),
            favorited=data.get("favorited") is True,
            user_vote=Vote.parse(data.get("user_vote")),
        )


@dataclass(frozen=True)
class CacheSnapshot:
    """Timestamped catalog kept for instant startup."""
    catalog: Catalog = field(default_factory=list)
    fetched_at: float = 0.0  # Epoch seconds

    def is_fresh(self, ttl_seconds: float, now: float) -> bool:
        return now - self.fetched_at < ttl_seconds


@dataclass(frozen=True)
class RecentGame:
    """Entry in the recently played list."""
    id: str
    display_name: str
