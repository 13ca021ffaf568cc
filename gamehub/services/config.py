"""Configuration service for managing application settings."""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import structlog

from ..models import AppConfig

log = structlog.stdlib.get_logger()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Loads, validates and saves the hub configuration file."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "game-hub" / "config.json"
        log.info("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file, falling back to defaults when missing or invalid."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
            config = self._dict_to_config(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return AppConfig()

        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
            return AppConfig()

        log.info("Configuration loaded successfully")
        return config

    def save_config(self, config: AppConfig) -> None:
        """Validate and write configuration to file.

        Raises:
            ValueError: If the configuration is invalid
            OSError: If the file cannot be written
        """
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(validation_result.errors)}")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config_to_dict(config), f, indent=2, ensure_ascii=False)
            log.info("Configuration saved successfully")
        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if config.hub_url:
            parts = urlsplit(config.hub_url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                errors.append("hub_url must be an absolute http(s) URL")

        if not config.asset_dir.strip("/"):
            errors.append("asset_dir cannot be empty")

        if not config.branch:
            errors.append("branch cannot be empty")

        if not config.playable_extension.startswith(".") or len(config.playable_extension) < 2:
            errors.append("playable_extension must start with '.'")

        if isinstance(config.cache_ttl_seconds, bool) or not isinstance(config.cache_ttl_seconds, (int, float)) \
                or config.cache_ttl_seconds < 0:
            errors.append("cache_ttl_seconds must be a non-negative number")

        if not isinstance(config.probe_batch_size, int) or config.probe_batch_size < 1:
            errors.append("probe_batch_size must be a positive integer")
        elif config.probe_batch_size > 50:
            errors.append("probe_batch_size should not exceed 50")

        if not isinstance(config.probe_match_threshold, int) or config.probe_match_threshold < 1:
            errors.append("probe_match_threshold must be a positive integer")

        if not isinstance(config.request_timeout, (int, float)) or config.request_timeout <= 0:
            errors.append("request_timeout must be a positive number")

        if not isinstance(config.max_retries, int) or not 0 <= config.max_retries <= 5:
            errors.append("max_retries must be between 0 and 5")

        if not isinstance(config.storage_path, Path):
            errors.append("storage_path must be a Path object")
        elif not config.storage_path.is_absolute():
            errors.append("storage_path must be an absolute path")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if not config.api_base_url.startswith(("http://", "https://")):
            errors.append("api_base_url must be an http(s) URL")

        return ValidationResult(len(errors) == 0, errors)

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        data = asdict(config)
        data["storage_path"] = str(config.storage_path)
        return data

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig; unknown keys are ignored, missing keys take defaults."""
        defaults = AppConfig()
        known = self._config_to_dict(defaults)
        values: dict[str, Any] = {}
        for key, default in known.items():
            if key not in data:
                continue
            value = data[key]
            if isinstance(default, bool) or type(value) is not type(default):
                # Numbers written as ints are accepted for float settings
                if isinstance(default, float) and isinstance(value, int) and not isinstance(value, bool):
                    value = float(value)
                else:
                    raise TypeError(f"{key} must be of type {type(default).__name__}")
            values[key] = value

        if "storage_path" in values:
            values["storage_path"] = Path(values["storage_path"]).expanduser()
        return AppConfig(**values)
