"""Data models for the Game Hub application."""

from .config import AppConfig
from .discovery import DiscoveryAttempt, DiscoveryReport, DiscoveryResult
from .engagement import CacheSnapshot, EngagementRecord, RecentGame, Vote
from .game import Catalog, GameEntry, build_catalog
from .hosting import HostingContext

__all__ = [
    "AppConfig",
    "CacheSnapshot",
    "Catalog",
    "DiscoveryAttempt",
    "DiscoveryReport",
    "DiscoveryResult",
    "EngagementRecord",
    "GameEntry",
    "HostingContext",
    "RecentGame",
    "Vote",
    "build_catalog",
]
