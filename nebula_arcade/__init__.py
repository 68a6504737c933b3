"""Nebula Arcade: model-generated party games behind a quota-aware client.

Build one Arcade with create_arcade() (or Arcade(config, store, llm=...))
and hand it to the session controllers in nebula_arcade.sessions.
"""

# Re-export the public surface so `from nebula_arcade import Arcade` works.

from .arcade import Arcade, create_arcade  # noqa: F401
from .config import ArcadeConfig  # noqa: F401
from .errors import (  # noqa: F401
    ArcadeError,
    CredentialInvalid,
    CredentialMissing,
    MalformedResponse,
    MaxRetriesExceeded,
    ProviderError,
    QuotaExceeded,
    TransientError,
)
from .llm import LLM, GeminiLLM  # noqa: F401
from .storage import JsonFileStore, KeyValueStore, MemoryStore  # noqa: F401
