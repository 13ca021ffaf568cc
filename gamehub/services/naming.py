"""Display names and sidecar stems derived from game file names."""

import posixpath
import re

INDEX_DOCUMENT = "index"

# A literal "%20" counts as a separator; names are never percent-decoded here
_SEPARATORS = re.compile(r"(?:[\s\-_.+]|%20)+")


def format_display_name(filename: str) -> str:
    """Turn a game file name into a human readable title.

    One trailing extension is removed, runs of separators become single
    spaces and each word gets an upper-case first letter with the rest
    lower-cased: ``space_invaders-2.html`` becomes ``Space Invaders 2``.
    Formatting an already formatted name returns it unchanged.

    Raises:
        ValueError: If no word is left to display
    """
    name = filename.strip()
    stem, _ = posixpath.splitext(name)
    if stem:
        name = stem

    words = [w for w in _SEPARATORS.split(name) if w]
    if not words:
        raise ValueError(f"Cannot derive a display name from {filename!r}")
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def sidecar_stem(relative_path: str) -> str:
    """Base name shared by a game and its image/description sidecars.

    Folder games (``snake/index.html``) use the folder name.
    """
    path = relative_path.strip("/")
    directory, filename = posixpath.split(path)
    stem, _ = posixpath.splitext(filename)
    if stem.lower() == INDEX_DOCUMENT and directory:
        return posixpath.basename(directory)
    return stem


def display_name_for_path(relative_path: str) -> str:
    """Display name for a game path relative to the asset root."""
    return format_display_name(sidecar_stem(relative_path))
