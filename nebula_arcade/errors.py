"""Error taxonomy for the orchestration layer.

The model client raises ProviderError with whatever the provider reported.
transport.classify_error() maps it into one of the closed categories below
before any caller sees it; downstream code matches on these classes only.
"""

from __future__ import annotations


class ArcadeError(Exception):
    """Base class for every error raised by nebula_arcade."""


class ProviderError(ArcadeError):
    """Raw failure reported by the model endpoint.

    Args:
        message:         Provider message, verbatim.
        status:          HTTP status code, or None for connection failures.
        provider_status: Provider status marker, e.g. "RESOURCE_EXHAUSTED".
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        provider_status: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.provider_status = provider_status

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"[{self.status}] {self.message}"


class CredentialMissing(ArcadeError):
    """No credential source yielded a usable API key."""


class CredentialInvalid(ArcadeError):
    """The provider rejected the active API key."""


class QuotaExceeded(ArcadeError):
    """The API quota is exhausted; the model is unusable for this session."""


class TransientError(ArcadeError):
    """Rate limiting or overload; worth retrying after a delay."""


class MaxRetriesExceeded(ArcadeError):
    """Every attempt failed with a transient error."""


class MalformedResponse(ArcadeError):
    """The model returned text that is not the expected JSON shape."""
