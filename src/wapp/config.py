"""Typed settings loaders for the application and each weather provider."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, TypeVar

from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=False,
    extra="ignore",
)


class AppSettings(BaseSettings):
    """Process-level settings: where the provider choice lives and how loud to log."""

    model_config = _ENV_CONFIG

    config_path: Path = Field(default=Path("config.json"), alias="WAPP_CONFIG_PATH")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        alias="WAPP_LOG_LEVEL",
    )

    @field_validator("config_path", "log_level", mode="before")
    @classmethod
    def empty_string_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str) and value.strip() == "":
            return cls.model_fields[info.field_name].default
        if info.field_name == "log_level" and isinstance(value, str):
            return value.strip().upper()
        return value


class ProviderSettings(BaseSettings):
    """Fields shared by every provider configuration."""

    model_config = _ENV_CONFIG

    api_key: str | None = Field(default=None, repr=False)
    base_url: str
    lang: str = "en"
    timeout_seconds: float = 10.0

    @field_validator("api_key", "base_url", "lang", "timeout_seconds", mode="before")
    @classmethod
    def empty_string_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return cls.model_fields[info.field_name].default
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def validate_common(self) -> ProviderSettings:
        fields = type(self).model_fields
        if not self.api_key:
            raise ValueError(f"{fields['api_key'].alias} is required.")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"{fields['base_url'].alias} must be an http(s) URL.")
        if self.timeout_seconds <= 0:
            raise ValueError(f"{fields['timeout_seconds'].alias} must be > 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "base_url": self.base_url,
            "lang": self.lang,
            "timeout_seconds": self.timeout_seconds,
        }


class WeatherApiSettings(ProviderSettings):
    """WeatherAPI (weatherapi.com) settings."""

    api_key: str | None = Field(default=None, alias="WEATHERAPI_KEY", repr=False)
    base_url: str = Field(default="https://api.weatherapi.com/v1", alias="WEATHERAPI_BASE_URL")
    lang: str = Field(default="en", alias="WEATHERAPI_LANG")
    timeout_seconds: float = Field(default=10.0, alias="WEATHERAPI_TIMEOUT_SECONDS")
    forecast_days: int = Field(default=3, alias="WEATHERAPI_FORECAST_DAYS")

    @model_validator(mode="after")
    def validate_forecast_days(self) -> WeatherApiSettings:
        if not (1 <= self.forecast_days <= 14):
            raise ValueError("WEATHERAPI_FORECAST_DAYS must be between 1 and 14.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        return {**super().safe_summary(), "forecast_days": self.forecast_days}


class OpenWeatherSettings(ProviderSettings):
    """OpenWeatherMap (openweathermap.org) settings."""

    api_key: str | None = Field(default=None, alias="OPENWEATHER_KEY", repr=False)
    base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
    )
    lang: str = Field(default="en", alias="OPENWEATHER_LANG")
    units: Literal["metric", "imperial"] = Field(default="metric", alias="OPENWEATHER_UNITS")
    timeout_seconds: float = Field(default=10.0, alias="OPENWEATHER_TIMEOUT_SECONDS")

    @field_validator("units", mode="before")
    @classmethod
    def normalize_units(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or "metric"
        return value

    def safe_summary(self) -> dict[str, Any]:
        return {**super().safe_summary(), "units": self.units}


SettingsT = TypeVar("SettingsT", bound=BaseSettings)


def _describe_errors(exc: SettingsValidationError) -> str:
    """Flatten pydantic errors without echoing input values (they may hold keys)."""
    parts: list[str] = []
    for error in exc.errors(include_input=False, include_url=False):
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "__root__")
        message = str(error.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def load_settings(settings_cls: type[SettingsT]) -> SettingsT:
    """Load and validate a settings class, raising ConfigurationError on failure."""
    try:
        return settings_cls()
    except SettingsValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {_describe_errors(exc)}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Failed reading environment/.env: {exc}") from exc


def load_app_settings() -> AppSettings:
    """Load process-level settings."""
    return load_settings(AppSettings)
