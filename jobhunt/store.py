"""Durable key-value store for the application list and the profile.

Values are JSON text. A record that cannot be read or parsed is treated as
absent: ``load`` logs the problem and hands back the caller's default.
"""
from __future__ import annotations

import fcntl
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, TypeVar

from jobhunt.log import get_logger

log = get_logger(__name__)

T = TypeVar("T")

APPLICATIONS_KEY = "jobhunt_pro_apps_v1"
PROFILE_KEY = "jobhunt_pro_profile_v1"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class KeyValueStore(ABC):
    @abstractmethod
    def read(self, key: str) -> str | None:
        pass

    @abstractmethod
    def write(self, key: str, text: str) -> None:
        pass


class FileStore(KeyValueStore):
    """One ``<key>.json`` file per record inside *directory*."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            text = f.read()
            _unlock(f)
        return text

    def write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self._path(key), "a+", encoding="utf-8") as f:
            _lock(f)
            f.seek(0)
            f.truncate()
            f.write(text)
            f.flush()
            _unlock(f)


class MemoryStore(KeyValueStore):
    def __init__(self, records: dict[str, str] | None = None) -> None:
        self.records: dict[str, str] = dict(records or {})

    def read(self, key: str) -> str | None:
        return self.records.get(key)

    def write(self, key: str, text: str) -> None:
        self.records[key] = text


def load(
    store: KeyValueStore,
    key: str,
    default: Callable[[], T],
    decode: Callable[[Any], T],
) -> T:
    """Read *key* and decode it; any read or decode failure yields ``default()``."""
    try:
        text = store.read(key)
    except (OSError, ValueError) as exc:
        log.warning("Could not read %s: %s", key, exc)
        return default()
    if text is None:
        return default()
    try:
        return decode(json.loads(text))
    except (ValueError, TypeError, KeyError) as exc:
        log.warning("Discarding unreadable record %s: %s", key, exc)
        return default()


def save(store: KeyValueStore, key: str, value: Any) -> None:
    """Serialize *value* to JSON and write it through immediately."""
    store.write(key, json.dumps(value, ensure_ascii=False))
    log.debug("Saved %s", key)
