"""Key/value persistence backends for client-local state.

Values are opaque strings (callers store JSON). Every write is persisted
before returning; there is no buffering.
"""

import json
import os
from pathlib import Path
from typing import Protocol

import structlog

from .errors import StorageError

log = structlog.stdlib.get_logger()


class KeyValueStorage(Protocol):
    """Minimal string key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryStorage:
    """In-process storage, optionally bounded to model a storage quota."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self.max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            if used + len(key) + len(value) > self.max_bytes:
                raise StorageError("Storage quota exceeded", key=key)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileStorage:
    """Storage backed by a single JSON object file.

    The file is read on first access and rewritten in full on every change,
    through a temporary file that replaces the original.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: dict[str, str] | None = None
        log.info("File storage initialized", path=str(path))

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise StorageError("Storage file could not be read", path=str(self.path), original_error=e) from e
        except (ValueError, RecursionError) as e:
            return self._set_aside(f"{type(e).__name__}: {e}")

        if not isinstance(raw, dict):
            return self._set_aside(f"expected a JSON object, got {type(raw).__name__}")

        self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        log.debug("Storage file loaded", path=str(self.path), keys=len(self._data))
        return self._data

    def _set_aside(self, reason: str) -> dict[str, str]:
        """Move an unusable storage file out of the way and start empty."""
        corrupt_path = self.path.with_suffix(self.path.suffix + ".corrupt")
        try:
            self.path.replace(corrupt_path)
        except OSError as e:
            raise StorageError("Corrupt storage file could not be moved aside", path=str(self.path), original_error=e) from e
        log.warning("Storage file was unusable, starting empty", path=str(self.path), moved_to=str(corrupt_path), reason=reason)
        self._data = {}
        return self._data

    def _persist(self, data: dict[str, str]) -> None:
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(self.path)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    log.warning("Failed to clean up temporary storage file", path=str(temp_path))
            raise StorageError("Storage file could not be written", path=str(self.path), original_error=e) from e

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._persist(data)
        self._data = data

    def remove(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        data = {k: v for k, v in data.items() if k != key}
        self._persist(data)
        self._data = data

    def keys(self) -> list[str]:
        return list(self._load())
