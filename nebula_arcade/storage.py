"""Key-value persistence.

Everything the arcade persists (credential, per-mode history, caches, the
alchemy inventory) goes through a tiny synchronous key-value interface with
string values, the same shape as browser localStorage. Callers serialise to
JSON themselves.

Two implementations:

    MemoryStore    a dict; used by tests and throwaway sessions.
    JsonFileStore  one flat JSON object on disk, written through on every
                     change.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStore:
    """Persist all keys in a single JSON object at `path`.

    The file is read once on construction; writes go straight to disk.
    A missing file is an empty store. A corrupt file is an error, not
    silently discarded.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._items: dict[str, str] = {}
        if self._path.is_file():
            data = self._read_json()
            if not isinstance(data, dict):
                raise ValueError(f"{self._path} does not hold a JSON object")
            self._items = {str(k): str(v) for k, v in data.items()}
            logger.debug("loaded %d keys from %s", len(self._items), self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_json(self) -> Any:
        return json.loads(self._path.read_text(encoding="utf-8"))

    def _write_json(self) -> None:
        self._path.write_text(
            json.dumps(self._items, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._write_json()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write_json()


# ---------------------------------------------------------------------------
# JSON helpers shared by history, cache and sessions
# ---------------------------------------------------------------------------

def load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read and decode a JSON value, returning `default` when absent."""
    raw = store.get_item(key)
    if raw is None:
        return default
    return json.loads(raw)


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set_item(key, json.dumps(value, ensure_ascii=False))
