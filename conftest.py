import json
from unittest.mock import AsyncMock

import pytest

from nebula_arcade.arcade import Arcade
from nebula_arcade.config import ArcadeConfig
from nebula_arcade.storage import MemoryStore

TEST_API_KEY = "test-key-0123456789"


class ScriptedLLM:
    """Stand-in model client: replays queued responses and records every call.

    Queue strings (returned verbatim), JSON-able values (dumped) or
    exceptions (raised).
    """

    def __init__(self) -> None:
        self.responses: list = []
        self.calls: list[dict] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def __call__(self, prompt: str, schema: dict, api_key: str) -> str:
        self.calls.append({"prompt": prompt, "schema": schema, "api_key": api_key})
        if not self.responses:
            raise AssertionError(f"unexpected model call #{len(self.calls)}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, str):
            return response
        return json.dumps(response, ensure_ascii=False)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def env() -> dict[str, str]:
    return {"API_KEY": TEST_API_KEY}


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def config(tmp_path) -> ArcadeConfig:
    return ArcadeConfig(data_dir=tmp_path, language="English")


@pytest.fixture
def arcade(config, store, llm, env, sleep) -> Arcade:
    return Arcade(config, store, llm=llm, env=env, sleep=sleep)
