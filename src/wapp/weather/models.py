"""Typed models for normalized weather reports."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class DataKind(str, Enum):
    """Temporal scope of a weather request."""

    NOW = "now"
    FORECAST = "forecast"
    TOMORROW = "tomorrow"


class TemperatureUnit(str, Enum):
    """Unit attached to every reported temperature."""

    CELSIUS = "Celsius"
    FAHRENHEIT = "Fahrenheit"

    @property
    def symbol(self) -> str:
        return "°C" if self is TemperatureUnit.CELSIUS else "°F"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class WeatherReport(BaseModel):
    """Provider-agnostic weather result. Temperature and unit are always set together.

    The report is immutable: `extra` is exposed as a read-only mapping and nested
    lists (such as forecast `days`) become tuples of read-only mappings.
    """

    model_config = ConfigDict(frozen=True)

    provider: str
    location: str = Field(min_length=1)
    data_kind: DataKind
    temperature: float
    unit: TemperatureUnit
    condition: str
    extra: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("extra", mode="after")
    @classmethod
    def freeze_extra(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_serializer("extra")
    def serialize_extra(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return _thaw(value)


class WeatherFetchResult(BaseModel):
    """Normalized report plus the decoded upstream payload it came from."""

    model_config = ConfigDict(frozen=True)

    report: WeatherReport
    raw_payload: dict[str, Any]
