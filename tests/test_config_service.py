"""Property-based tests for configuration service."""

import json
import tempfile
from dataclasses import replace
from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from gamehub.models import AppConfig
from gamehub.services import ConfigurationService


# Strategies for generating valid configuration data
valid_hub_urls = st.sampled_from([
    "",
    "https://alice.github.io/arcade/",
    "https://github.com/alice/arcade",
    "http://localhost:8000/",
])

valid_paths = st.builds(
    lambda x: Path.home() / "test" / x / "storage.json",
    st.text(min_size=1, max_size=30, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")))
)

valid_log_levels = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

valid_config_strategy = st.builds(
    AppConfig,
    hub_url=valid_hub_urls,
    asset_dir=st.sampled_from(["assets", "games", "public/games"]),
    branch=st.sampled_from(["main", "master", "gh-pages"]),
    playable_extension=st.sampled_from([".html", ".htm"]),
    cache_ttl_seconds=st.floats(min_value=0.0, max_value=86400.0, allow_nan=False, allow_infinity=False),
    probe_batch_size=st.integers(min_value=1, max_value=50),
    probe_match_threshold=st.integers(min_value=1, max_value=500),
    request_timeout=st.floats(min_value=0.1, max_value=120.0, allow_nan=False, allow_infinity=False),
    max_retries=st.integers(min_value=0, max_value=5),
    storage_path=valid_paths,
    log_level=valid_log_levels,
)


@given(valid_config_strategy)
def test_configuration_round_trip(config: AppConfig) -> None:
    """
    **Feature: game-hub, Property 9: Configuration persistence round-trip**

    For any valid configuration, saving it and then reloading should preserve all values.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "test_config.json"
        service = ConfigurationService(config_path)

        service.save_config(config)
        loaded_config = service.load_config()

        assert loaded_config == config


@given(valid_config_strategy)
def test_configuration_validation_accepts_valid(config: AppConfig) -> None:
    """For any valid configuration, validation passes without error messages."""
    result = ConfigurationService().validate_config(config)
    assert result.is_valid
    assert result.errors == []


@pytest.mark.parametrize(
    "changes",
    [
        {"hub_url": "alice.github.io/arcade"},
        {"hub_url": "ftp://example.com/"},
        {"asset_dir": "/"},
        {"branch": ""},
        {"playable_extension": "html"},
        {"cache_ttl_seconds": -1.0},
        {"probe_batch_size": 0},
        {"probe_batch_size": 51},
        {"probe_match_threshold": 0},
        {"request_timeout": 0.0},
        {"max_retries": 6},
        {"storage_path": Path("relative/storage.json")},
        {"log_level": "VERBOSE"},
        {"api_base_url": "api.github.com"},
    ],
)
def test_configuration_validation_rejects_invalid(changes: dict[str, object]) -> None:
    """Each invalid setting is reported with a message."""
    config = replace(AppConfig(), **changes)
    result = ConfigurationService().validate_config(config)

    assert not result.is_valid
    assert len(result.errors) == 1
    assert all(isinstance(error, str) for error in result.errors)


def test_save_rejects_invalid_config(tmp_path: Path) -> None:
    service = ConfigurationService(tmp_path / "config.json")
    with pytest.raises(ValueError, match="Invalid configuration"):
        service.save_config(replace(AppConfig(), max_retries=10))
    assert not (tmp_path / "config.json").exists()


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert ConfigurationService(tmp_path / "absent.json").load_config() == AppConfig()


@pytest.mark.parametrize(
    "content",
    [
        "{broken",
        "[]",
        json.dumps({"probe_batch_size": "many"}),
        json.dumps({"max_retries": 99}),
    ],
)
def test_unusable_file_gives_defaults(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(content, encoding="utf-8")
    assert ConfigurationService(config_path).load_config() == AppConfig()


def test_partial_file_keeps_other_defaults(tmp_path: Path) -> None:
    """Unit test: only the settings present in the file change."""
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({
        "hub_url": "https://alice.github.io/arcade/",
        "cache_ttl_seconds": 60,
        "unknown_setting": True,
    }), encoding="utf-8")

    config = ConfigurationService(config_path).load_config()

    assert config.hub_url == "https://alice.github.io/arcade/"
    assert config.cache_ttl_seconds == 60.0
    assert config.probe_batch_size == AppConfig().probe_batch_size


def test_default_config_path() -> None:
    service = ConfigurationService()
    assert service.config_path == Path.home() / ".config" / "game-hub" / "config.json"
