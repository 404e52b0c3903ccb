"""Weather provider integrations."""

from .base import WeatherProvider, validate_city
from .models import DataKind, TemperatureUnit, WeatherFetchResult, WeatherReport
from .openweather import OpenWeatherProvider
from .registry import SUPPORTED_PROVIDERS, build_provider
from .weatherapi import WeatherApiProvider

__all__ = [
    "SUPPORTED_PROVIDERS",
    "DataKind",
    "OpenWeatherProvider",
    "TemperatureUnit",
    "WeatherApiProvider",
    "WeatherFetchResult",
    "WeatherProvider",
    "WeatherReport",
    "build_provider",
    "validate_city",
]
