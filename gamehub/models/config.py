"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path


def default_storage_path() -> Path:
    return Path.home() / ".local" / "share" / "game-hub" / "storage.json"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    hub_url: str = ""  # Public URL of the hosted hub page
    asset_dir: str = "assets"
    branch: str = "main"
    playable_extension: str = ".html"
    cache_ttl_seconds: float = 600.0
    probe_batch_size: int = 15  # Concurrent existence checks per batch
    probe_match_threshold: int = 50  # Probing stops once this many games are found
    request_timeout: float = 10.0
    max_retries: int = 1
    storage_path: Path = field(default_factory=default_storage_path)
    log_level: str = "INFO"
    api_base_url: str = "https://api.github.com"
