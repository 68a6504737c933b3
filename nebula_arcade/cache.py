"""Persistent content cache.

Maps a canonical request signature to a decoded item so that repeating an
identical request (the same two alchemy elements, the same ladder step)
costs no quota and no latency. Entries live in one JSON object in the
key-value store, in insertion order. Once `max_entries` is reached the
oldest-inserted entry is evicted before a new key goes in; recency of reads
is not tracked.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from pydantic import ValidationError

from nebula_arcade.models import ContentItem
from nebula_arcade.storage import KeyValueStore, load_json, save_json

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ContentItem)

DEFAULT_MAX_ENTRIES = 500


def _normalise(word: str) -> str:
    return " ".join(word.split()).lower()


def combination_key(first: str, second: str) -> str:
    """Order-independent key: combination_key(a, b) == combination_key(b, a)."""
    return "+".join(sorted((_normalise(first), _normalise(second))))


def ladder_step_key(current: str, target: str, guess: str) -> str:
    return "|".join(_normalise(w) for w in (current, target, guess))


class ContentCache(Generic[T]):
    """Bounded key → item map persisted under `storage_key`.

    Args:
        store:       Key-value store holding the serialised map.
        storage_key: Store key, e.g. "alchemy_cache".
        model:       Item class used to rebuild values on read.
        max_entries: Size ceiling.
    """

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str,
        model: type[T],
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._store = store
        self._storage_key = storage_key
        self._model = model
        self._max_entries = max_entries
        self._entries: dict[str, dict] = load_json(store, storage_key, {})
        while len(self._entries) > max_entries:
            self._evict_oldest()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str) -> T | None:
        raw = self._entries.get(key)
        if raw is None:
            logger.debug("%s MISS %s", self._storage_key, key)
            return None
        try:
            value = self._model.model_validate(raw)
        except ValidationError:
            # written by an older schema
            logger.warning("%s dropping unreadable entry %s", self._storage_key, key)
            del self._entries[key]
            self._persist()
            return None
        logger.debug("%s HIT %s", self._storage_key, key)
        return value

    def put(self, key: str, value: T) -> None:
        if key not in self._entries and len(self._entries) >= self._max_entries:
            self._evict_oldest()
        self._entries[key] = value.to_json_dict()
        self._persist()

    def clear(self) -> None:
        self._entries.clear()
        self._store.remove_item(self._storage_key)

    def _evict_oldest(self) -> None:
        oldest = next(iter(self._entries))
        del self._entries[oldest]
        logger.debug("%s evicted %s", self._storage_key, oldest)

    def _persist(self) -> None:
        save_json(self._store, self._storage_key, self._entries)
