"""Route parsed CLI intent to the configured provider."""

from __future__ import annotations

import logging

import httpx

from .config import AppSettings
from .exceptions import ConfigurationError
from .store import ProviderChoice, load_provider_choice, save_provider_choice
from .weather.base import Clock, validate_city
from .weather.models import DataKind, WeatherFetchResult
from .weather.registry import SUPPORTED_PROVIDERS, build_provider


def configure_provider(
    provider: str, *, app_settings: AppSettings, logger: logging.Logger
) -> ProviderChoice:
    """Persist `provider` as the active provider after checking it is supported."""
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"Provider '{provider}' is not supported. "
            f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}."
        )
    choice = save_provider_choice(app_settings.config_path, provider)
    logger.info("Saved provider choice %s to %s", provider, app_settings.config_path)
    return choice


async def fetch_weather(
    city: str | None,
    data_kind: DataKind | str,
    *,
    app_settings: AppSettings,
    logger: logging.Logger,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Clock | None = None,
) -> WeatherFetchResult:
    """Fetch weather for `city` from the persisted provider choice.

    The city is validated before the provider-choice file or the environment is
    read, so bad input never triggers I/O.
    """
    city_name = validate_city(city)
    choice = load_provider_choice(app_settings.config_path)
    provider = build_provider(choice.provider, logger=logger, transport=transport, clock=clock)
    async with provider:
        result = await provider.fetch_with_payload(city_name, data_kind)
    logger.info(
        "Fetched %s weather for %s via %s",
        result.report.data_kind.value,
        result.report.location,
        result.report.provider,
        extra={
            "provider": result.report.provider,
            "city": city_name,
            "data_kind": result.report.data_kind.value,
        },
    )
    return result
