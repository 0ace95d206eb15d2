"""Key-value store adapters.

Every domain store reads and writes whole collections through one of
these adapters: read the serialized value, mutate in memory, write it
back.  There is no batching and no transactions.

``FileStore`` is the durable store (one JSON file per key).
``MemoryStore`` lives as long as the process and backs session-scoped
data such as draft snapshots.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from taman.shared.errors import CorruptDataError

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".json"


class KeyValueStore(Protocol):
    """Minimal string-to-string store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class FileStore:
    """Durable store keeping each key in ``<root>/<key>.json``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{key}{FILE_SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")
        logger.debug("Wrote %d bytes to %s", len(value), path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self._root.exists():
            return []
        return sorted(p.stem for p in self._root.glob(f"*{FILE_SUFFIX}"))


class MemoryStore:
    """Process-lifetime store.  Contents vanish with the session."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


def read_json(store: KeyValueStore, key: str) -> Any | None:
    """Load and parse the JSON value stored under ``key``.

    Returns None when the key is absent.

    Raises:
        CorruptDataError: If the stored payload is not UTF-8 text or not
            valid JSON.
    """
    try:
        raw = store.get(key)
        if raw is None:
            return None
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptDataError(key, str(exc)) from exc


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Serialize ``value`` and store it under ``key``."""
    store.set(key, json.dumps(value, ensure_ascii=False, indent=2))
