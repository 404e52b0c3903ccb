"""Provider-agnostic weather interface and the shared HTTP request path."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, ClassVar

import httpx

from .. import __version__
from ..config import ProviderSettings
from ..exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    ProviderError,
    RateLimitedError,
    UnsupportedOperationError,
    UpstreamError,
    ValidationError,
)
from ..redaction import sanitize_text
from .models import DataKind, WeatherFetchResult, WeatherReport

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def validate_city(city: str | None) -> str:
    """Return the stripped city name or raise ValidationError for missing/blank input."""
    if city is None:
        raise ValidationError("City is required. Use --city <NAME>.")
    stripped = city.strip()
    if not stripped:
        raise ValidationError("City name must not be empty.")
    return stripped


class WeatherProvider(ABC):
    """Base contract for weather providers.

    Subclasses describe how to build the request for a data kind and how to map the
    decoded JSON body into a `WeatherReport`. Input validation, the single GET, and
    the mapping of HTTP failures to `ProviderError` kinds happen here, so every
    provider fails the same way for the same upstream behavior.
    """

    provider_name: ClassVar[str]
    display_name: ClassVar[str]
    supported_kinds: ClassVar[frozenset[DataKind]] = frozenset(DataKind)

    def __init__(
        self,
        settings: ProviderSettings,
        logger: logging.Logger,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._clock = clock or utc_now
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            transport=transport,
            headers={
                "Accept": "application/json",
                "User-Agent": f"wapp/{__version__}",
            },
        )

    async def __aenter__(self) -> WeatherProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        await self._client.aclose()

    async def fetch(self, city: str, kind: DataKind | str) -> WeatherReport:
        """Fetch weather for `city` and return the normalized report."""
        result = await self.fetch_with_payload(city, kind)
        return result.report

    async def fetch_with_payload(self, city: str, kind: DataKind | str) -> WeatherFetchResult:
        """Fetch weather for `city`, returning the report and the raw upstream payload."""
        city_name = validate_city(city)
        data_kind = self._resolve_kind(kind)
        path, params = self._build_request(city_name, data_kind)
        payload = await self._request_json(path, params)
        report = self._normalize(payload, data_kind)
        return WeatherFetchResult(report=report, raw_payload=payload)

    @abstractmethod
    def _build_request(self, city: str, kind: DataKind) -> tuple[str, dict[str, Any]]:
        """Return the endpoint path (relative to the base URL) and query parameters."""

    @abstractmethod
    def _normalize(self, payload: dict[str, Any], kind: DataKind) -> WeatherReport:
        """Map a decoded 2xx body into a report or raise a ProviderError."""

    def _classify_status(
        self, status: int, payload: Any, detail: str
    ) -> ProviderError | None:
        """Hook for provider-specific failure statuses; None falls back to UpstreamError."""
        return None

    def _resolve_kind(self, kind: DataKind | str) -> DataKind:
        try:
            data_kind = DataKind(kind)
        except ValueError:
            expected = ", ".join(item.value for item in DataKind)
            raise UnsupportedOperationError(
                f"Unknown data kind '{kind}'; expected one of: {expected}.",
                provider=self.provider_name,
            ) from None
        if data_kind not in self.supported_kinds:
            raise UnsupportedOperationError(
                f"{self.display_name} does not support data kind '{data_kind.value}'.",
                provider=self.provider_name,
            )
        return data_kind

    async def _request_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        self.logger.info(
            "%s request path=%s",
            self.provider_name,
            path,
            extra={"provider": self.provider_name, "path": path, "params": params},
        )
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            # Transport/protocol errors: timeouts, connect/DNS failures, bad redirects.
            reason = sanitize_text(str(exc)) or type(exc).__name__
            raise NetworkError(
                f"{self.display_name} request failed: {reason}",
                provider=self.provider_name,
            ) from exc

        status = response.status_code
        self.logger.info(
            "%s response status=%d",
            self.provider_name,
            status,
            extra={"provider": self.provider_name, "status_code": status},
        )
        try:
            payload: Any = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            raise self._status_error(status, payload, response.text)
        if not isinstance(payload, dict):
            raise UpstreamError(
                f"{self.display_name} returned a non-JSON or non-object response "
                f"(HTTP {status}).",
                provider=self.provider_name,
                status_code=status,
            )
        return payload

    def _status_error(self, status: int, payload: Any, body_text: str) -> ProviderError:
        detail = self._upstream_message(payload) or body_text[:300] or ""
        # Error bodies may be multi-line HTML; the CLI renders one line per error.
        detail = sanitize_text(" ".join(detail.split())) or "no details"
        meta: dict[str, Any] = {"provider": self.provider_name, "status_code": status}
        if status in (401, 403):
            return AuthError(
                f"{self.display_name} rejected the API key (HTTP {status}): {detail}", **meta
            )
        if status == 404:
            return NotFoundError(f"{self.display_name} found no such location: {detail}", **meta)
        if status == 429:
            return RateLimitedError(
                f"{self.display_name} rate limit exceeded (HTTP 429): {detail}", **meta
            )
        classified = self._classify_status(status, payload, detail)
        if classified is not None:
            return classified
        return UpstreamError(f"{self.display_name} failed with HTTP {status}: {detail}", **meta)

    @staticmethod
    def _upstream_message(payload: Any) -> str | None:
        """Pull a human-readable message out of an error body, if there is one."""
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message
        return None

    @staticmethod
    def _as_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _as_number(value: Any) -> int | float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return value
        return None

    @staticmethod
    def _compact(values: dict[str, Any]) -> dict[str, Any]:
        """Drop absent optional fields; missing upstream data is not an error."""
        return {key: value for key, value in values.items() if value is not None}
