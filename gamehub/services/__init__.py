"""Service layer for discovery, persistence and hub state."""

from .config import ConfigurationService, ValidationResult
from .discovery import (
    DirectoryListingStrategy,
    DiscoveryEngine,
    DiscoveryStrategy,
    ProbingStrategy,
    RepositoryTreeStrategy,
    first_non_empty,
    probe_candidates,
)
from .engagement import EngagementStore, apply_vote
from .errors import (
    AppError,
    ConfigurationError,
    DiscoveryError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    NetworkError,
    StorageError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .http_client import HttpClientService
from .hub import HubController, HubState
from .logging import LoggingService, setup_logging
from .naming import display_name_for_path, format_display_name, sidecar_stem
from .storage import FileStorage, KeyValueStorage, MemoryStorage
from .views import GameRow, HubStats, build_rows, empty_state_message, filter_entries, summary_stats

__all__ = [
    "AppError",
    "ConfigurationError",
    "ConfigurationService",
    "DirectoryListingStrategy",
    "DiscoveryEngine",
    "DiscoveryError",
    "DiscoveryStrategy",
    "EngagementStore",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FileStorage",
    "GameRow",
    "HttpClientService",
    "HubController",
    "HubState",
    "HubStats",
    "KeyValueStorage",
    "LoggingService",
    "MemoryStorage",
    "NetworkError",
    "ProbingStrategy",
    "RepositoryTreeStrategy",
    "StorageError",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "apply_vote",
    "build_rows",
    "display_name_for_path",
    "empty_state_message",
    "filter_entries",
    "first_non_empty",
    "format_display_name",
    "get_error_service",
    "handle_error",
    "probe_candidates",
    "setup_logging",
    "sidecar_stem",
    "summary_stats",
]
