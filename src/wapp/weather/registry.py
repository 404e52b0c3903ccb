"""Resolve a configured provider identifier to a ready provider instance."""

from __future__ import annotations

import logging

import httpx

from ..config import OpenWeatherSettings, ProviderSettings, WeatherApiSettings, load_settings
from ..exceptions import ConfigurationError
from .base import Clock, WeatherProvider
from .openweather import OpenWeatherProvider
from .weatherapi import WeatherApiProvider

_PROVIDERS: dict[str, tuple[type[WeatherProvider], type[ProviderSettings]]] = {
    WeatherApiProvider.provider_name: (WeatherApiProvider, WeatherApiSettings),
    OpenWeatherProvider.provider_name: (OpenWeatherProvider, OpenWeatherSettings),
}

SUPPORTED_PROVIDERS: tuple[str, ...] = tuple(_PROVIDERS)


def build_provider(
    name: str,
    *,
    logger: logging.Logger,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Clock | None = None,
) -> WeatherProvider:
    """Build the provider registered under `name` with settings read from the environment.

    Raises ConfigurationError for an unknown identifier (before the environment is
    consulted) or when the provider's settings are incomplete, e.g. a missing API key.
    """
    try:
        provider_cls, settings_cls = _PROVIDERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported provider '{name}'. "
            f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}."
        ) from None

    try:
        settings = load_settings(settings_cls)
    except ConfigurationError as exc:
        raise ConfigurationError(f"Provider '{name}': {exc}") from exc

    logger.info("Selected provider %s settings=%s", name, settings.safe_summary())
    return provider_cls(settings=settings, logger=logger, transport=transport, clock=clock)
