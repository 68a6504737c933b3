"""One model call with error classification and bounded exponential backoff.

    attempt → success: return text
            → failure: classify
                 quota / credential / unknown → raise at once
                 transient, attempts left      → sleep(delay), delay *= 2, retry
                 transient, none left          → MaxRetriesExceeded

With the defaults (3 attempts, 2 s initial delay) a permanently overloaded
endpoint costs two sleeps of 2 s and 4 s before the caller hears about it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from nebula_arcade.credentials import CredentialResolver
from nebula_arcade.errors import (
    ArcadeError,
    CredentialInvalid,
    MaxRetriesExceeded,
    ProviderError,
    QuotaExceeded,
    TransientError,
)
from nebula_arcade.llm import LLM
from nebula_arcade.models import PromptSpec

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 2.0

_INVALID_KEY_MARKERS = ("entity was not found", "not found", "api key not valid", "api_key_invalid")
_TRANSIENT_MARKERS = ("overloaded",)
_RATE_LIMIT_STATUSES = {"RESOURCE_EXHAUSTED"}
_UNAVAILABLE_STATUSES = {"UNAVAILABLE"}

Sleep = Callable[[float], Awaitable[None]]


def classify_error(error: ProviderError) -> ArcadeError:
    """Map a raw provider failure onto the error taxonomy.

    Returns the ProviderError itself when it fits no category; such errors
    are not retried.
    """
    message = error.message.lower()
    rate_limited = error.status == 429 or error.provider_status in _RATE_LIMIT_STATUSES

    if rate_limited and "quota" in message:
        return QuotaExceeded(error.message)
    if error.status == 401 or any(marker in message for marker in _INVALID_KEY_MARKERS):
        return CredentialInvalid(error.message)
    if (
        rate_limited
        or error.status == 503
        or error.provider_status in _UNAVAILABLE_STATUSES
        or any(marker in message for marker in _TRANSIENT_MARKERS)
    ):
        return TransientError(error.message)
    return error


class Transport:
    """Executes PromptSpecs against the model with the current credential.

    Args:
        llm:           Model client (see nebula_arcade.llm.LLM).
        credentials:   Read before every attempt, never cached.
        max_attempts:  Total attempts for transient failures, initial included.
        initial_delay: Seconds to wait before the first retry; doubles after.
        sleep:         Injected for tests; defaults to asyncio.sleep.
    """

    def __init__(
        self,
        llm: LLM,
        credentials: CredentialResolver,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._llm = llm
        self._credentials = credentials
        self._max_attempts = max_attempts
        self._initial_delay = initial_delay
        self._sleep = sleep

    async def execute(self, spec: PromptSpec) -> str:
        delay = self._initial_delay
        for attempt in range(1, self._max_attempts + 1):
            api_key = self._credentials.get_credential()
            try:
                return await self._llm(spec.instruction_text, spec.response_schema, api_key)
            except ProviderError as e:
                error = classify_error(e)
                if not isinstance(error, TransientError):
                    logger.warning("%s failed: %s (%s)", spec.kind, type(error).__name__, e)
                    if error is e:
                        raise
                    raise error from e
                if attempt == self._max_attempts:
                    logger.warning(
                        "%s failed after %d attempts: %s", spec.kind, attempt, e
                    )
                    raise MaxRetriesExceeded(
                        f"Max retries exceeded after {attempt} attempts: {e.message}"
                    ) from e
                logger.info(
                    "%s transient error (%s), retry %d/%d in %.1fs",
                    spec.kind, e, attempt, self._max_attempts - 1, delay,
                )
            await self._sleep(delay)
            delay *= 2
        raise RuntimeError("retry loop exited without a result")
