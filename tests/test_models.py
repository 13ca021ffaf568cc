"""Tests for catalog, engagement and hosting data models."""

import pytest
from hypothesis import given, strategies as st

from gamehub.models import (
    CacheSnapshot,
    EngagementRecord,
    GameEntry,
    HostingContext,
    Vote,
    build_catalog,
)


def make_entry(game_id: str, name: str) -> GameEntry:
    return GameEntry(id=game_id, display_name=name, play_url=f"https://example.com/assets/{game_id}")


class TestHostingContext:
    """Tests for deriving the hosting context from the hub URL."""

    def test_pages_project_site(self) -> None:
        context = HostingContext.from_url("https://alice.github.io/arcade/")
        assert context.owner == "alice"
        assert context.repo == "arcade"
        assert context.base_url == "https://alice.github.io/arcade/"
        assert context.asset_root_url == "https://alice.github.io/arcade/assets/"
        assert context.repository_asset_path == "assets"

    def test_pages_user_site(self) -> None:
        context = HostingContext.from_url("https://alice.github.io")
        assert context.owner == "alice"
        assert context.repo == "alice.github.io"
        assert context.base_url == "https://alice.github.io/"

    def test_page_file_is_stripped(self) -> None:
        context = HostingContext.from_url("https://alice.github.io/arcade/index.html?x=1#top")
        assert context.base_url == "https://alice.github.io/arcade/"

    def test_pages_site_in_subfolder(self) -> None:
        context = HostingContext.from_url("https://alice.github.io/arcade/hub/")
        assert context.repo == "arcade"
        assert context.repo_subdir == "hub"
        assert context.repository_asset_path == "hub/assets"

    def test_repository_url_maps_to_pages(self) -> None:
        context = HostingContext.from_url("https://github.com/Alice/arcade")
        assert context.owner == "Alice"
        assert context.repo == "arcade"
        assert context.base_url == "https://alice.github.io/arcade/"

    def test_raw_content_url_takes_branch(self) -> None:
        context = HostingContext.from_url("https://raw.githubusercontent.com/alice/arcade/gh-pages/index.html")
        assert (context.owner, context.repo, context.branch) == ("alice", "arcade", "gh-pages")

    def test_other_hosts_have_no_repository(self) -> None:
        context = HostingContext.from_url("https://games.example.org/hub/", asset_dir="/games/")
        assert not context.has_repository
        assert context.asset_root_url == "https://games.example.org/hub/games/"

    @pytest.mark.parametrize("url", ["", "alice.github.io", "ftp://example.com/", "file:///tmp/index.html"])
    def test_rejects_non_http_urls(self, url: str) -> None:
        with pytest.raises(ValueError):
            HostingContext.from_url(url)


class TestCatalog:
    """Tests for catalog construction."""

    def test_sorted_case_insensitively(self) -> None:
        catalog = build_catalog([
            make_entry("b.html", "banana"),
            make_entry("a.html", "Apple"),
            make_entry("c.html", "cherry"),
        ])
        assert [e.display_name for e in catalog] == ["Apple", "banana", "cherry"]

    def test_duplicate_ids_keep_first(self) -> None:
        catalog = build_catalog([
            make_entry("a.html", "First"),
            make_entry("a.html", "Second"),
        ])
        assert len(catalog) == 1
        assert catalog[0].display_name == "First"

    @given(st.lists(st.text(min_size=1, max_size=8), max_size=20))
    def test_ids_are_unique(self, ids: list[str]) -> None:
        """For any list of entries, the built catalog never repeats an id."""
        catalog = build_catalog(make_entry(i, i) for i in ids)
        assert len({e.id for e in catalog}) == len(catalog) == len(set(ids))

    def test_entry_round_trip(self) -> None:
        entry = GameEntry("a.html", "A", "https://x/a.html", thumbnail_url="https://x/images/a.png")
        assert GameEntry.from_dict(entry.to_dict()) == entry

    def test_entry_from_malformed_dict(self) -> None:
        with pytest.raises(KeyError):
            GameEntry.from_dict({"id": "a.html"})
        with pytest.raises(ValueError):
            GameEntry.from_dict({"id": "", "display_name": "A", "play_url": "https://x/a.html"})


class TestEngagementRecord:
    """Tests for engagement record persistence."""

    def test_from_dict_clamps_and_defaults(self) -> None:
        record = EngagementRecord.from_dict({
            "play_count": -3,
            "like_count": "many",
            "dislike_count": 2,
            "favorited": "yes",
            "user_vote": "loved",
        })
        assert record == EngagementRecord(dislike_count=2)

    def test_round_trip(self) -> None:
        record = EngagementRecord(play_count=4, like_count=1, favorited=True, user_vote=Vote.LIKED)
        assert EngagementRecord.from_dict(record.to_dict()) == record


def test_cache_snapshot_freshness() -> None:
    """A snapshot is fresh strictly before the TTL elapses."""
    snapshot = CacheSnapshot(catalog=[], fetched_at=1000.0)
    assert snapshot.is_fresh(600, now=1599.0)
    assert not snapshot.is_fresh(600, now=1600.0)
