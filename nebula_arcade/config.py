"""Runtime configuration, read from the environment (and a .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class ArcadeConfig:
    data_dir: Path = Path("data")
    model: str = DEFAULT_MODEL
    api_base_url: str = DEFAULT_API_BASE_URL
    language: str = ""
    log_level: str = "INFO"
    request_timeout: float = 60.0
    max_attempts: int = 3
    initial_backoff: float = 2.0
    cache_size: int = 500
    exclude_limit: int = 20
    batch_size: int = 5

    @property
    def store_path(self) -> Path:
        return self.data_dir / "arcade.json"

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> ArcadeConfig:
        load_dotenv(env_file or Path.cwd() / ".env")
        return cls(
            data_dir=Path(os.environ.get("ARCADE_DATA_DIR", "data")),
            model=os.environ.get("ARCADE_MODEL", DEFAULT_MODEL),
            api_base_url=os.environ.get("ARCADE_API_BASE_URL", DEFAULT_API_BASE_URL),
            language=os.environ.get("ARCADE_LANGUAGE", ""),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            request_timeout=float(os.environ.get("ARCADE_REQUEST_TIMEOUT", "60")),
            max_attempts=int(os.environ.get("ARCADE_MAX_ATTEMPTS", "3")),
            initial_backoff=float(os.environ.get("ARCADE_INITIAL_BACKOFF", "2.0")),
            cache_size=int(os.environ.get("ARCADE_CACHE_SIZE", "500")),
            exclude_limit=int(os.environ.get("ARCADE_EXCLUDE_LIMIT", "20")),
            batch_size=int(os.environ.get("ARCADE_BATCH_SIZE", "5")),
        )
