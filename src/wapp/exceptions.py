"""Application exception classes."""

from __future__ import annotations


class WappError(Exception):
    """Base class for errors rendered by the CLI as `<kind>: <message>`."""

    kind = "Error"


class ValidationError(WappError):
    """Raised when CLI input is missing or invalid, before any I/O happens."""

    kind = "ValidationError"


class ConfigurationError(WappError):
    """Raised when the provider choice or provider settings are unusable."""

    kind = "ConfigurationError"


class ProviderError(WappError):
    """Raised when a weather provider request or normalization fails."""

    kind = "ProviderError"

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class AuthError(ProviderError):
    """Upstream rejected the API key (401/403)."""

    kind = "AuthError"


class NotFoundError(ProviderError):
    """Upstream found no location matching the requested city."""

    kind = "NotFound"


class RateLimitedError(ProviderError):
    """Upstream answered 429."""

    kind = "RateLimited"


class UpstreamError(ProviderError):
    """Any other non-2xx status or a payload that cannot be normalized."""

    kind = "UpstreamError"


class NetworkError(ProviderError):
    """Transport-level failure: DNS, connect, timeout, protocol."""

    kind = "NetworkError"


class UnsupportedOperationError(ProviderError):
    """The requested data kind is unknown or not offered by the provider."""

    kind = "UnsupportedOperation"
