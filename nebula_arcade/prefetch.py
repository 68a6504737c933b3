"""Batch prefetch queue, one per queued game mode.

A single model call asks for a small batch of puzzles; the first is served
immediately and the rest wait in a FIFO buffer, so most "next puzzle" clicks
never touch the network.

next(history):
  1. Drop buffered items that entered history since they were queued, then
     pop the head if anything is left.
  2. Otherwise fetch a batch (prompt → transport → decode). Transport and
     decode errors propagate and nothing is queued.
  3. Filter the batch against history and against itself.
  4. Return the first survivor and queue the rest. If nothing survives the
     caller gets None and the buffer stays empty; retrying is the caller's
     decision.

A per-queue asyncio.Lock allows only one batch fetch in flight. A caller
arriving during a fetch waits, then is served from the refilled buffer.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterable

from nebula_arcade.decoder import decode_batch
from nebula_arcade.language import resolve_language
from nebula_arcade.models import Language, QueuedItem
from nebula_arcade.prompts import DEFAULT_EXCLUDE_LIMIT, build_prompt, is_batch, item_model
from nebula_arcade.transport import Transport

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


class PrefetchQueue:
    """Buffered supply of one kind of batch content.

    Args:
        kind:          Batch prompt kind, e.g. "cipher_batch".
        transport:     Executes the batch request.
        batch_size:    Items requested per round trip.
        language:      Called at fetch time for the content language.
        exclude_limit: History entries passed into the prompt.
    """

    def __init__(
        self,
        kind: str,
        transport: Transport,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        language: Callable[[], Language] = resolve_language,
        exclude_limit: int = DEFAULT_EXCLUDE_LIMIT,
    ) -> None:
        if not is_batch(kind):
            raise ValueError(f"{kind!r} is not a batch prompt kind")
        self._kind = kind
        self._model = item_model(kind)
        self._transport = transport
        self._batch_size = batch_size
        self._language = language
        self._exclude_limit = exclude_limit
        self._buffer: deque[QueuedItem] = deque()
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    @property
    def kind(self) -> str:
        return self._kind

    def pending(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        self._buffer.clear()

    async def next(self, history: Iterable[str]) -> QueuedItem | None:
        played = list(history)
        seen = set(played)
        async with self._lock:
            item = self._pop_unseen(seen)
            if item is not None:
                return item

            batch = await self._fetch(played)
            fresh = self._filter(batch, seen)
            if not fresh:
                logger.warning(
                    "%s: all %d fetched items were already played", self._kind, len(batch)
                )
                return None

            self._buffer.extend(fresh[1:])
            logger.info(
                "%s: fetched %d, kept %d, buffered %d",
                self._kind, len(batch), len(fresh), len(self._buffer),
            )
            return fresh[0]

    def _pop_unseen(self, seen: set[str]) -> QueuedItem | None:
        while self._buffer:
            item = self._buffer.popleft()
            if item.identity not in seen:
                return item
            logger.debug("%s: discarding buffered %r, already played", self._kind, item.identity)
        return None

    async def _fetch(self, played: list[str]) -> list[QueuedItem]:
        spec = build_prompt(
            self._kind,
            {"count": self._batch_size, "exclude_limit": self._exclude_limit},
            self._language(),
            exclude=played,
        )
        self.fetch_count += 1
        raw = await self._transport.execute(spec)
        return decode_batch(raw, self._model)

    def _filter(self, batch: list[QueuedItem], seen: set[str]) -> list[QueuedItem]:
        fresh: list[QueuedItem] = []
        taken: set[str] = set()
        for item in batch:
            key = item.identity
            if key in seen or key in taken:
                continue
            taken.add(key)
            fresh.append(item)
        return fresh
