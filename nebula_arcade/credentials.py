"""API credential resolution.

Sources, highest priority first:

    1. A key the user supplied explicitly, persisted in the key-value store.
    2. A key injected by the hosting platform through the environment
       (API_KEY, then GEMINI_API_KEY).
    3. The host's key-selection dialog, when one is available. A key chosen
       there is persisted, so it becomes source 1 from then on.

get_credential() re-reads the sources on every call. The user may swap
keys between two requests (typically after a quota error) and the next
request must pick the new one up.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Protocol

from nebula_arcade.errors import CredentialMissing
from nebula_arcade.storage import KeyValueStore

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "nebula_api_key"
ENV_VARS: tuple[str, ...] = ("API_KEY", "GEMINI_API_KEY")

# Build tooling substitutes short placeholders ("", "undefined") for unset keys.
MIN_ENV_KEY_LENGTH = 6


class KeySelector(Protocol):
    """Host-provided dialog that lets the user pick an API key."""

    async def open_select_key(self) -> str | None: ...


class CredentialResolver:
    def __init__(
        self,
        store: KeyValueStore,
        env: Mapping[str, str] | None = None,
        key_selector: KeySelector | None = None,
    ) -> None:
        self._store = store
        self._env = env if env is not None else os.environ
        self._key_selector = key_selector

    def _persisted(self) -> str:
        return (self._store.get_item(CREDENTIAL_KEY) or "").strip()

    def _injected(self) -> str:
        for name in ENV_VARS:
            value = (self._env.get(name) or "").strip()
            if len(value) >= MIN_ENV_KEY_LENGTH:
                return value
        return ""

    def get_credential(self) -> str:
        credential = self._persisted() or self._injected()
        if not credential:
            raise CredentialMissing(
                "No API key configured. Enter a key or set the API_KEY environment variable."
            )
        return credential

    def has_credential(self) -> bool:
        return bool(self._persisted() or self._injected())

    def source(self) -> str:
        """Name of the source currently supplying the key (for display)."""
        if self._persisted():
            return "stored"
        if self._injected():
            return "environment"
        return "none"

    def set_credential(self, value: str) -> None:
        value = value.strip()
        if not value:
            raise CredentialMissing("An empty API key cannot be stored")
        self._store.set_item(CREDENTIAL_KEY, value)
        logger.info("API key stored")

    def clear(self) -> None:
        """Log out: forget the stored key. History and caches are kept."""
        self._store.remove_item(CREDENTIAL_KEY)
        logger.info("API key cleared")

    @property
    def can_select_key(self) -> bool:
        return self._key_selector is not None

    async def select_key(self) -> bool:
        """Open the host key-selection dialog and persist the chosen key.

        Returns False when the user dismissed the dialog without choosing.
        """
        if self._key_selector is None:
            raise CredentialMissing(
                "Key selector not available. Set the API_KEY environment variable instead."
            )
        chosen = await self._key_selector.open_select_key()
        if not chosen or not chosen.strip():
            logger.info("key selection dismissed")
            return False
        self.set_credential(chosen)
        return True
