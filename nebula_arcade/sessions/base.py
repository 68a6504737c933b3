"""Shared session-controller machinery.

Controllers are the only layer that turns errors into UI state:

    QuotaExceeded                  → QUOTA (terminal; needs a new key)
    CredentialMissing / Invalid    → ERROR with needs_credential set
    any other ArcadeError          → ERROR (retry by repeating the action)
    queue returned no item         → EMPTY (retry by loading again)

A controller never issues a request while another one is outstanding, and
once closed it ignores whatever resolves afterwards.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from nebula_arcade.arcade import Arcade
from nebula_arcade.errors import ArcadeError, CredentialInvalid, CredentialMissing, QuotaExceeded
from nebula_arcade.models import GameMode, QueuedItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    VALIDATING = "validating"
    SUCCESS = "success"
    WRONG = "wrong"
    EMPTY = "empty"
    ERROR = "error"
    QUOTA = "quota"


def normalize_guess(text: str) -> str:
    """Fold a guess for comparison: "Pokémon: Red!" → "pokemonred"."""
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]", "", text.lower())


class GameSession:
    mode: GameMode

    def __init__(self, arcade: Arcade) -> None:
        self.arcade = arcade
        self.status = SessionStatus.IDLE
        self.error: str | None = None
        self.needs_credential = False
        self.busy = False
        self.closed = False

    @property
    def quota_exhausted(self) -> bool:
        return self.status is SessionStatus.QUOTA

    def close(self) -> None:
        """Unmount: results of requests still in flight will be discarded."""
        self.closed = True

    async def _guard(
        self,
        request: Callable[[], Awaitable[T]],
        pending: SessionStatus = SessionStatus.LOADING,
    ) -> tuple[bool, T | None]:
        """Run one request under the busy flag and convert its errors.

        Returns (True, result) on success, (False, None) when the request was
        skipped, failed, or resolved after close().
        """
        if self.closed or self.busy or self.quota_exhausted:
            return False, None

        self.busy = True
        self.status = pending
        self.error = None
        self.needs_credential = False
        try:
            result = await request()
        except QuotaExceeded as e:
            if not self.closed:
                logger.warning("%s: quota exhausted", self.mode)
                self.status = SessionStatus.QUOTA
                self.error = str(e)
            return False, None
        except (CredentialMissing, CredentialInvalid) as e:
            if not self.closed:
                self.status = SessionStatus.ERROR
                self.error = str(e)
                self.needs_credential = True
            return False, None
        except ArcadeError as e:
            if not self.closed:
                logger.warning("%s: request failed: %s", self.mode, e)
                self.status = SessionStatus.ERROR
                self.error = str(e)
            return False, None
        finally:
            self.busy = False

        if self.closed:
            logger.debug("%s: discarding result after close", self.mode)
            return False, None
        return True, result

    async def _fetch_next(self) -> QueuedItem | None:
        ok, item = await self._guard(lambda: self.arcade.next_item(self.mode))
        if not ok:
            return None
        if item is None:
            self.status = SessionStatus.EMPTY
            return None
        self.status = SessionStatus.READY
        return item

    def _record(self, identity: str) -> None:
        self.arcade.record_answer(self.mode, identity)
