"""Weather report invariants and secret redaction helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from wapp.redaction import REDACTED, sanitize_for_logging, sanitize_text
from wapp.weather.models import DataKind, TemperatureUnit, WeatherReport


def _report(**overrides: object) -> WeatherReport:
    fields: dict[str, object] = {
        "provider": "weatherapi",
        "location": "London",
        "data_kind": DataKind.NOW,
        "temperature": 15.0,
        "unit": TemperatureUnit.CELSIUS,
        "condition": "Cloudy",
    }
    fields.update(overrides)
    return WeatherReport(**fields)


def test_report_defaults_extra_to_empty_mapping() -> None:
    report = _report()
    assert report.extra == {}
    assert report.model_dump(mode="json") == {
        "provider": "weatherapi",
        "location": "London",
        "data_kind": "now",
        "temperature": 15.0,
        "unit": "Celsius",
        "condition": "Cloudy",
        "extra": {},
    }


def test_report_is_immutable() -> None:
    report = _report()
    with pytest.raises(PydanticValidationError):
        report.temperature = 20.0  # type: ignore[misc]


def test_report_extra_cannot_be_mutated_after_construction() -> None:
    source = {"region": "City of London", "days": [{"date": "2026-10-20", "min_temp": 8.0}]}
    report = _report(extra=source)

    with pytest.raises(TypeError):
        report.extra["region"] = "mutated"  # type: ignore[index]
    with pytest.raises(TypeError):
        report.extra["days"][0]["min_temp"] = -40.0  # type: ignore[index]
    with pytest.raises(AttributeError):
        report.extra["days"].append({})  # type: ignore[union-attr]

    # Mutating the input after construction does not leak into the report.
    source["region"] = "elsewhere"
    source["days"].append({"date": "2026-10-21"})
    assert report.extra["region"] == "City of London"
    assert len(report.extra["days"]) == 1


def test_default_extra_is_read_only() -> None:
    report = _report()
    with pytest.raises(TypeError):
        report.extra["humidity"] = 50  # type: ignore[index]


def test_frozen_extra_serializes_as_plain_json() -> None:
    report = _report(extra={"days": [{"date": "2026-10-20", "max_temp": 16.4}]})

    assert report.model_dump(mode="json")["extra"] == {
        "days": [{"date": "2026-10-20", "max_temp": 16.4}]
    }
    assert '"days":[{"date":"2026-10-20","max_temp":16.4}]' in report.model_dump_json()


@pytest.mark.parametrize("missing", ["temperature", "unit"])
def test_temperature_and_unit_are_required_together(missing: str) -> None:
    fields: dict[str, object] = {
        "provider": "weatherapi",
        "location": "London",
        "data_kind": DataKind.NOW,
        "temperature": 15.0,
        "unit": TemperatureUnit.CELSIUS,
        "condition": "Cloudy",
    }
    del fields[missing]
    with pytest.raises(PydanticValidationError):
        WeatherReport(**fields)


def test_temperature_unit_symbols() -> None:
    assert TemperatureUnit.CELSIUS.symbol == "°C"
    assert TemperatureUnit.FAHRENHEIT.symbol == "°F"


def test_data_kind_parses_cli_strings() -> None:
    assert DataKind("now") is DataKind.NOW
    assert DataKind("forecast") is DataKind.FORECAST
    assert DataKind("tomorrow") is DataKind.TOMORROW


@pytest.mark.parametrize(
    ("text", "secret"),
    [
        ("GET https://api.weatherapi.com/v1/current.json?key=abc123&q=London", "abc123"),
        ("GET /data/2.5/weather?q=London&appid=owm999&units=metric", "owm999"),
        ("api_key: topsecret", "topsecret"),
        ("Authorization: Bearer tok.en-value", "tok.en-value"),
    ],
)
def test_sanitize_text_redacts_provider_keys(text: str, secret: str) -> None:
    sanitized = sanitize_text(text)
    assert secret not in sanitized
    assert REDACTED in sanitized


def test_sanitize_text_keeps_city_query() -> None:
    assert "q=London" in sanitize_text("/current.json?key=abc&q=London")


def test_sanitize_for_logging_redacts_query_param_keys() -> None:
    params = {"key": "abc", "appid": "def", "q": "London", "nested": [{"api_key": "ghi"}]}
    assert sanitize_for_logging(params) == {
        "key": REDACTED,
        "appid": REDACTED,
        "q": "London",
        "nested": [{"api_key": REDACTED}],
    }
