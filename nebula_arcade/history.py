"""Per-mode history of played answers.

Each mode keeps an ordered, duplicate-free list of identities under
`<mode>_history`. It only biases generation away from repeats and filters
prefetched batches; it is unrelated to the content cache. The stored list is
not capped: prompts take only its tail.
"""

from __future__ import annotations

import logging

from nebula_arcade.models import GameMode
from nebula_arcade.storage import KeyValueStore, load_json, save_json

logger = logging.getLogger(__name__)


def history_key(mode: GameMode) -> str:
    return f"{mode}_history"


class HistoryStore:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def items(self, mode: GameMode) -> list[str]:
        return list(load_json(self._store, history_key(mode), []))

    def contains(self, mode: GameMode, value: str) -> bool:
        return value in self.items(mode)

    def add(self, mode: GameMode, value: str) -> bool:
        """Append `value`; returns False when it was already recorded."""
        items = self.items(mode)
        if value in items:
            return False
        items.append(value)
        save_json(self._store, history_key(mode), items)
        logger.debug("%s history: +%r (%d total)", mode, value, len(items))
        return True

    def clear(self, mode: GameMode) -> None:
        self._store.remove_item(history_key(mode))
        logger.info("%s history cleared", mode)
