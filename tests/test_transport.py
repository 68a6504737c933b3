"""Tests for error classification and the retrying transport."""

from unittest.mock import AsyncMock, call

import pytest

from nebula_arcade.credentials import CredentialResolver
from nebula_arcade.errors import (
    CredentialInvalid,
    CredentialMissing,
    MaxRetriesExceeded,
    ProviderError,
    QuotaExceeded,
    TransientError,
)
from nebula_arcade.prompts import build_prompt
from nebula_arcade.storage import MemoryStore
from nebula_arcade.transport import Transport, classify_error

KEY = "env-key-123456"


def _overloaded() -> ProviderError:
    return ProviderError("The model is overloaded. Please try again later.", 503, "UNAVAILABLE")


def _quota() -> ProviderError:
    return ProviderError(
        "You exceeded your current quota, please check your plan.", 429, "RESOURCE_EXHAUSTED"
    )


@pytest.fixture
def spec():
    return build_prompt("alchemy_combine", {"first": "Fire", "second": "Water"}, "English")


@pytest.fixture
def credentials() -> CredentialResolver:
    return CredentialResolver(MemoryStore(), env={"API_KEY": KEY})


# ---------------------------------------------------------------------------
# classify_error
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("error, expected", [
    (_quota(), QuotaExceeded),
    (ProviderError("Quota exceeded for metric", None, "RESOURCE_EXHAUSTED"), QuotaExceeded),
    (ProviderError("Too many requests", 429), TransientError),
    (_overloaded(), TransientError),
    (ProviderError("Service unavailable", 503), TransientError),
    (ProviderError("API key not valid. Please pass a valid API key.", 400, "INVALID_ARGUMENT"),
     CredentialInvalid),
    (ProviderError("Requested entity was not found.", 404, "NOT_FOUND"), CredentialInvalid),
    (ProviderError("Unauthorized", 401), CredentialInvalid),
])
def test_classify_error(error, expected):
    assert isinstance(classify_error(error), expected)


def test_unclassified_error_returned_as_is():
    error = ProviderError("Invalid JSON payload received.", 400, "INVALID_ARGUMENT")
    assert classify_error(error) is error


# ---------------------------------------------------------------------------
# Transport.execute
# ---------------------------------------------------------------------------

class TestExecute:
    async def test_success_first_try(self, spec, credentials) -> None:
        llm = AsyncMock(return_value='{"name": "Steam", "emoji": "💨"}')
        sleep = AsyncMock()
        transport = Transport(llm, credentials, sleep=sleep)
        assert await transport.execute(spec) == '{"name": "Steam", "emoji": "💨"}'
        llm.assert_awaited_once_with(spec.instruction_text, spec.response_schema, KEY)
        sleep.assert_not_awaited()

    async def test_retries_transient_then_succeeds(self, spec, credentials) -> None:
        llm = AsyncMock(side_effect=[_overloaded(), _overloaded(), "{}"])
        sleep = AsyncMock()
        transport = Transport(llm, credentials, sleep=sleep)
        assert await transport.execute(spec) == "{}"
        assert llm.await_count == 3
        assert sleep.call_args_list == [call(2.0), call(4.0)]

    async def test_retry_bound(self, spec, credentials) -> None:
        llm = AsyncMock(side_effect=[_overloaded()] * 5)
        sleep = AsyncMock()
        transport = Transport(llm, credentials, sleep=sleep)
        with pytest.raises(MaxRetriesExceeded, match="after 3 attempts") as exc_info:
            await transport.execute(spec)
        assert llm.await_count == 3
        assert sleep.call_args_list == [call(2.0), call(4.0)]
        assert isinstance(exc_info.value.__cause__, ProviderError)

    async def test_quota_short_circuits(self, spec, credentials) -> None:
        llm = AsyncMock(side_effect=[_quota(), "{}"])
        sleep = AsyncMock()
        transport = Transport(llm, credentials, sleep=sleep)
        with pytest.raises(QuotaExceeded):
            await transport.execute(spec)
        assert llm.await_count == 1
        sleep.assert_not_awaited()

    async def test_invalid_key_not_retried(self, spec, credentials) -> None:
        llm = AsyncMock(side_effect=ProviderError("API key not valid.", 400))
        sleep = AsyncMock()
        with pytest.raises(CredentialInvalid):
            await Transport(llm, credentials, sleep=sleep).execute(spec)
        assert llm.await_count == 1
        sleep.assert_not_awaited()

    async def test_unclassified_error_propagates_unchanged(self, spec, credentials) -> None:
        error = ProviderError("Cannot connect to model endpoint")
        llm = AsyncMock(side_effect=error)
        with pytest.raises(ProviderError) as exc_info:
            await Transport(llm, credentials, sleep=AsyncMock()).execute(spec)
        assert exc_info.value is error
        assert llm.await_count == 1

    async def test_missing_credential_never_calls_model(self, spec) -> None:
        llm = AsyncMock()
        credentials = CredentialResolver(MemoryStore(), env={})
        with pytest.raises(CredentialMissing):
            await Transport(llm, credentials, sleep=AsyncMock()).execute(spec)
        llm.assert_not_awaited()

    async def test_credential_reread_between_attempts(self, spec, credentials) -> None:
        seen: list[str] = []

        async def llm(prompt: str, schema: dict, api_key: str) -> str:
            seen.append(api_key)
            if len(seen) == 1:
                credentials.set_credential("replacement-key-789")
                raise _overloaded()
            return "{}"

        await Transport(llm, credentials, sleep=AsyncMock()).execute(spec)
        assert seen == [KEY, "replacement-key-789"]

    async def test_custom_schedule(self, spec, credentials) -> None:
        llm = AsyncMock(side_effect=[_overloaded()] * 4)
        sleep = AsyncMock()
        transport = Transport(llm, credentials, max_attempts=4, initial_delay=0.5, sleep=sleep)
        with pytest.raises(MaxRetriesExceeded):
            await transport.execute(spec)
        assert sleep.call_args_list == [call(0.5), call(1.0), call(2.0)]

    def test_max_attempts_must_be_positive(self, credentials) -> None:
        with pytest.raises(ValueError):
            Transport(AsyncMock(), credentials, max_attempts=0)
