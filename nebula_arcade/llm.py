"""Model client: the HTTP boundary to the generative model.

The transport injects an LLM callable matching the protocol:

    async def __call__(self, prompt: str, schema: dict, api_key: str) -> str: ...

It sends one instruction plus a response schema and returns the raw text.
Every failure is raised as ProviderError carrying the provider's status code,
message and status marker, untouched; classification into quota / credential /
transient categories happens in transport.classify_error, not here.

GeminiLLM talks to the Gemini generateContent REST endpoint. Tests use a
scripted stand-in instead.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from nebula_arcade.config import DEFAULT_API_BASE_URL, DEFAULT_MODEL
from nebula_arcade.errors import ProviderError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every model client must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, prompt: str, schema: dict, api_key: str) -> str: ...


# ---------------------------------------------------------------------------
# GeminiLLM — generateContent over HTTPS
# ---------------------------------------------------------------------------

class GeminiLLM:
    """Async client for `POST {base}/models/{model}:generateContent`.

    Request body:
        {"contents": [{"role": "user", "parts": [{"text": prompt}]}],
         "generationConfig": {"responseMimeType": "application/json",
                              "responseSchema": schema}}
    Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
    Errors:   {"error": {"code": 429, "message": "...", "status": "RESOURCE_EXHAUSTED"}}

    Args:
        model:    Model identifier. Defaults to gemini-2.5-flash.
        base_url: API root, e.g. "https://generativelanguage.googleapis.com/v1beta".
        timeout:  HTTP timeout in seconds.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 60.0,
    ) -> None:
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def url(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def _build_body(self, prompt: str, schema: dict) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }

    def _parse_response(self, data: dict) -> str:
        """Concatenate the text parts of the first candidate."""
        if not isinstance(data, dict):
            raise ProviderError("Model endpoint returned an unexpected body")
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback", {})
            reason = feedback.get("blockReason", "no candidates")
            raise ProviderError(f"Model returned no content ({reason})")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts)

    @staticmethod
    def _error_from_response(resp: httpx.Response) -> ProviderError:
        message = resp.reason_phrase or "HTTP error"
        provider_status = ""
        try:
            body = resp.json()
        except ValueError:
            body = {}
        error = body.get("error", {}) if isinstance(body, dict) else {}
        if isinstance(error, dict):
            message = error.get("message") or message
            provider_status = error.get("status") or ""
        return ProviderError(message, status=resp.status_code, provider_status=provider_status)

    async def __call__(self, prompt: str, schema: dict, api_key: str) -> str:
        logger.debug("llm call model=%s prompt_len=%d", self._model, len(prompt))
        headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self.url, json=self._build_body(prompt, schema), headers=headers
                )
        except httpx.ConnectError as e:
            raise ProviderError(f"Cannot connect to model endpoint at {self._base_url}") from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"Model endpoint timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Model request failed: {e}") from e

        if resp.status_code >= 400:
            raise self._error_from_response(resp)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(
                "Model endpoint returned non-JSON body", status=resp.status_code
            ) from e
        text = self._parse_response(data)
        logger.debug("llm response model=%s len=%d", self._model, len(text))
        return text
