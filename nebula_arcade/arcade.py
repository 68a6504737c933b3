"""The Arcade service, owner of every piece of orchestration state.

One Arcade instance is built at startup and handed to the session
controllers. It holds the credential resolver, the transport, per-mode
history and prefetch queues, and the two content caches. Nothing lives at
module level.

Single-shot operations (alchemy combination, ladder step validation, combat
evaluation) bypass the queues. Combinations and step verdicts are cached;
combat verdicts are not.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from nebula_arcade.cache import ContentCache, combination_key, ladder_step_key
from nebula_arcade.config import ArcadeConfig
from nebula_arcade.credentials import CredentialResolver, KeySelector
from nebula_arcade.decoder import decode
from nebula_arcade.history import HistoryStore
from nebula_arcade.language import resolve_language
from nebula_arcade.llm import LLM, GeminiLLM
from nebula_arcade.log import setup_logging
from nebula_arcade.models import (
    QUEUED_MODES,
    AlchemyCombination,
    AlchemyResult,
    ArenaCombatVerdict,
    GameMode,
    Language,
    QueuedItem,
    WordLadderStepVerdict,
)
from nebula_arcade.prefetch import PrefetchQueue
from nebula_arcade.prompts import build_prompt
from nebula_arcade.storage import JsonFileStore, KeyValueStore
from nebula_arcade.transport import Sleep, Transport

logger = logging.getLogger(__name__)

ALCHEMY_CACHE_KEY = "alchemy_cache"
LADDER_CACHE_KEY = "ladder_cache"
MIN_BATCH_SIZE = 3

# mode → (batch prompt kind, preferred batch size)
QUEUE_KINDS: dict[str, tuple[str, int]] = {
    "emoji": ("emoji_batch", 5),
    "dilemma": ("dilemma_batch", 3),
    "ladder": ("ladder_endpoints", 3),
    "cipher": ("cipher_batch", 5),
    "arena": ("arena_creatures", 3),
}


class Arcade:
    """Explicitly constructed orchestration service.

    Args:
        config:       Runtime settings.
        store:        Persistence for credential, history and caches.
        llm:          Model client; defaults to GeminiLLM built from config.
        key_selector: Optional host key-selection dialog.
        env:          Environment used for credential lookup (default os.environ).
        sleep:        Backoff sleep, injectable for tests.
    """

    def __init__(
        self,
        config: ArcadeConfig,
        store: KeyValueStore,
        llm: LLM | None = None,
        key_selector: KeySelector | None = None,
        env: Mapping[str, str] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.store = store
        self.credentials = CredentialResolver(store, env=env, key_selector=key_selector)
        self.transport = Transport(
            llm or GeminiLLM(config.model, config.api_base_url, config.request_timeout),
            self.credentials,
            max_attempts=config.max_attempts,
            initial_delay=config.initial_backoff,
            sleep=sleep,
        )
        self.history = HistoryStore(store)
        self.alchemy_cache = ContentCache(
            store, ALCHEMY_CACHE_KEY, AlchemyCombination, config.cache_size
        )
        self.ladder_cache = ContentCache(
            store, LADDER_CACHE_KEY, WordLadderStepVerdict, config.cache_size
        )
        self.queues: dict[str, PrefetchQueue] = {
            mode: PrefetchQueue(
                kind,
                self.transport,
                batch_size=max(MIN_BATCH_SIZE, min(size, config.batch_size)),
                language=self.language,
                exclude_limit=config.exclude_limit,
            )
            for mode, (kind, size) in QUEUE_KINDS.items()
        }

    def language(self) -> Language:
        return resolve_language(self.config.language or None)

    # ------------------------------------------------------------------
    # Queued content
    # ------------------------------------------------------------------

    def _queue(self, mode: GameMode) -> PrefetchQueue:
        if mode not in QUEUED_MODES:
            raise ValueError(f"{mode!r} is not served through a prefetch queue")
        return self.queues[mode]

    async def next_item(self, mode: GameMode) -> QueuedItem | None:
        """Next unplayed item for `mode`, or None if the batch held only repeats."""
        return await self._queue(mode).next(self.history.items(mode))

    def record_answer(self, mode: GameMode, identity: str) -> None:
        self.history.add(mode, identity)

    def clear_history(self, mode: GameMode) -> None:
        self.history.clear(mode)
        if mode in self.queues:
            self.queues[mode].clear()

    # ------------------------------------------------------------------
    # Single-shot operations
    # ------------------------------------------------------------------

    async def combine_elements(self, first: str, second: str) -> AlchemyResult:
        key = combination_key(first, second)
        cached = self.alchemy_cache.get(key)
        if cached is not None:
            logger.info("alchemy %s served from cache", key)
            return AlchemyResult(name=cached.name, emoji=cached.emoji, is_new=False)

        spec = build_prompt(
            "alchemy_combine", {"first": first, "second": second}, self.language()
        )
        combination = decode(await self.transport.execute(spec), AlchemyCombination)
        self.alchemy_cache.put(key, combination)
        return AlchemyResult(name=combination.name, emoji=combination.emoji, is_new=True)

    async def validate_ladder_step(
        self, current: str, target: str, guess: str
    ) -> WordLadderStepVerdict:
        key = ladder_step_key(current, target, guess)
        cached = self.ladder_cache.get(key)
        if cached is not None:
            return cached

        spec = build_prompt(
            "ladder_step",
            {"current": current, "target": target, "guess": guess},
            self.language(),
        )
        verdict = decode(await self.transport.execute(spec), WordLadderStepVerdict)
        self.ladder_cache.put(key, verdict)
        return verdict

    async def evaluate_combat(self, creature: str, strategy: str) -> ArenaCombatVerdict:
        spec = build_prompt(
            "arena_combat", {"creature": creature, "strategy": strategy}, self.language()
        )
        return decode(await self.transport.execute(spec), ArenaCombatVerdict)

    # ------------------------------------------------------------------
    # Credential lifecycle
    # ------------------------------------------------------------------

    def logout(self) -> None:
        """Forget the stored credential. History, queues and caches survive."""
        self.credentials.clear()


def create_arcade(
    config: ArcadeConfig | None = None,
    llm: LLM | None = None,
    key_selector: KeySelector | None = None,
) -> Arcade:
    """Build an Arcade from configuration, persisting to config.data_dir."""
    resolved = config or ArcadeConfig.from_env()
    setup_logging(resolved.log_level)
    store = JsonFileStore(resolved.store_path)
    arcade = Arcade(resolved, store, llm=llm, key_selector=key_selector)
    logger.info(
        "arcade ready (model=%s, store=%s, language=%s)",
        resolved.model, store.path, arcade.language(),
    )
    return arcade
