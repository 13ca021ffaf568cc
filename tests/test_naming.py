"""Property-based tests for display names and sidecar stems."""

import pytest
from hypothesis import given, strategies as st

from gamehub.services.naming import display_name_for_path, format_display_name, sidecar_stem


# File names built from ASCII words joined by the separators seen in hosted game folders;
# "%" shows up in raw repository paths and must survive formatting untouched
ascii_words = st.text(
    min_size=1,
    max_size=10,
    alphabet=st.one_of(
        st.characters(whitelist_categories=("Lu", "Ll", "Nd"), max_codepoint=127),
        st.just("%"),
    ),
).filter(lambda word: word.replace("%20", ""))
separators = st.sampled_from(["-", "_", " ", ".", "+", "--", "_-"])
game_filenames = st.builds(
    lambda words, sep, ext: sep.join(words) + ext,
    st.lists(ascii_words, min_size=1, max_size=5),
    separators,
    st.sampled_from([".html", ".htm", ".HTML"]),
)


@given(game_filenames)
def test_display_name_is_deterministic_and_idempotent(filename: str) -> None:
    """
    **Feature: game-hub, Property 1: Display name determinism**

    Formatting the same file name twice gives the same result, and
    formatting an already formatted name changes nothing.
    """
    first = format_display_name(filename)
    assert first == format_display_name(filename)
    assert format_display_name(first) == first


@given(game_filenames)
def test_display_name_words_are_capitalised(filename: str) -> None:
    """Every word starts upper-case and continues lower-case, separated by single spaces."""
    name = format_display_name(filename)
    assert "  " not in name
    assert name == name.strip()
    for word in name.split(" "):
        assert word == word[:1].upper() + word[1:].lower()


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("space_invaders.html", "Space Invaders"),
        ("flappy-bird.html", "Flappy Bird"),
        ("2048.html", "2048"),
        ("super+mario__bros.html", "Super Mario Bros"),
        ("my%20cool%20game.html", "My Cool Game"),
        ("TETRIS.html", "Tetris"),
        ("game.v2.html", "Game V2"),
    ],
)
def test_display_name_examples(filename: str, expected: str) -> None:
    """Unit test examples for display name formatting."""
    assert format_display_name(filename) == expected


@pytest.mark.parametrize("filename", ["", "   ", "-_-", "%20"])
def test_display_name_rejects_names_without_words(filename: str) -> None:
    """A file name with nothing to display is malformed."""
    with pytest.raises(ValueError):
        format_display_name(filename)


def test_folder_games_use_the_folder_name() -> None:
    """Unit test: index documents are named after their folder."""
    assert sidecar_stem("snake/index.html") == "snake"
    assert display_name_for_path("snake-deluxe/index.html") == "Snake Deluxe"


def test_sidecar_stem_of_plain_files() -> None:
    """Unit test: plain files use their own stem."""
    assert sidecar_stem("pong.html") == "pong"
    assert sidecar_stem("arcade/pong.html") == "pong"
    assert sidecar_stem("index.html") == "index"


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("a%2541.html", "A%2541"),
        ("100%41off.html", "100%41off"),
        ("50%-sale.html", "50% Sale"),
    ],
)
def test_percent_signs_are_not_decoded(filename: str, expected: str) -> None:
    """Unit test: a literal percent sign stays as it is, and reformatting keeps it."""
    name = format_display_name(filename)
    assert name == expected
    assert format_display_name(name) == name
