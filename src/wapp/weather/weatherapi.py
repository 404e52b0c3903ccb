"""WeatherAPI (api.weatherapi.com) weather provider implementation."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from ..config import WeatherApiSettings
from ..exceptions import NotFoundError, ProviderError, UpstreamError
from .base import WeatherProvider
from .models import DataKind, TemperatureUnit, WeatherReport

# WeatherAPI answers 400 with this code when `q` matches no location.
_NO_MATCHING_LOCATION = 1006


class WeatherApiProvider(WeatherProvider):
    """Fetches and normalizes weather from api.weatherapi.com.

    Temperatures are always read from the `_c` fields, so reports are in Celsius.
    `now` uses `current.json`; `forecast` uses `forecast.json` with the configured
    number of days. WeatherAPI has no "tomorrow" endpoint: a two-day forecast is
    requested and the entry dated the day after the location's local date is used.
    """

    provider_name = "weatherapi"
    display_name = "WeatherAPI"

    settings: WeatherApiSettings

    def _build_request(self, city: str, kind: DataKind) -> tuple[str, dict[str, Any]]:
        params: dict[str, Any] = {
            "key": self.settings.api_key,
            "q": city,
            "lang": self.settings.lang,
        }
        if kind is DataKind.NOW:
            return "current.json", params
        days = 2 if kind is DataKind.TOMORROW else self.settings.forecast_days
        return "forecast.json", {**params, "days": days}

    def _classify_status(
        self, status: int, payload: Any, detail: str
    ) -> ProviderError | None:
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and error.get("code") == _NO_MATCHING_LOCATION:
            return NotFoundError(
                f"WeatherAPI found no such location: {detail}",
                provider=self.provider_name,
                status_code=status,
            )
        return None

    def _normalize(self, payload: dict[str, Any], kind: DataKind) -> WeatherReport:
        location = payload.get("location")
        if not isinstance(location, dict):
            raise NotFoundError(
                "WeatherAPI returned no location for the requested city.",
                provider=self.provider_name,
            )
        name = self._as_str(location.get("name"))
        if name is None:
            raise self._malformed("missing 'location.name'")

        if kind is DataKind.TOMORROW:
            return self._normalize_tomorrow(payload, name=name, location=location)

        current = payload.get("current")
        if not isinstance(current, dict):
            raise self._malformed("missing 'current' object")
        temperature = self._as_number(current.get("temp_c"))
        if temperature is None:
            raise self._malformed("missing numeric 'current.temp_c'")
        condition = self._condition_text(current)
        if condition is None:
            raise self._malformed("missing 'current.condition.text'")

        extra = self._compact(
            {
                "humidity": self._as_number(current.get("humidity")),
                "feels_like": self._as_number(current.get("feelslike_c")),
                "wind_kph": self._as_number(current.get("wind_kph")),
                "wind_dir": self._as_str(current.get("wind_dir")),
                "pressure_mb": self._as_number(current.get("pressure_mb")),
                "region": self._as_str(location.get("region")),
                "country": self._as_str(location.get("country")),
            }
        )
        if kind is DataKind.FORECAST:
            extra["days"] = [self._day_entry(item) for item in self._forecast_days(payload)]

        return WeatherReport(
            provider=self.provider_name,
            location=name,
            data_kind=kind,
            temperature=temperature,
            unit=TemperatureUnit.CELSIUS,
            condition=condition,
            extra=extra,
        )

    def _normalize_tomorrow(
        self, payload: dict[str, Any], *, name: str, location: dict[str, Any]
    ) -> WeatherReport:
        target = (self._local_date(location) + timedelta(days=1)).isoformat()
        entry = next(
            (item for item in self._forecast_days(payload) if item.get("date") == target),
            None,
        )
        if entry is None:
            raise self._malformed(f"forecast has no entry for {target}")

        day = entry.get("day")
        if not isinstance(day, dict):
            raise self._malformed(f"forecast entry for {target} missing 'day'")
        temperature = self._as_number(day.get("avgtemp_c"))
        if temperature is None:
            raise self._malformed("missing numeric 'day.avgtemp_c'")
        condition = self._condition_text(day)
        if condition is None:
            raise self._malformed("missing 'day.condition.text'")

        return WeatherReport(
            provider=self.provider_name,
            location=name,
            data_kind=DataKind.TOMORROW,
            temperature=temperature,
            unit=TemperatureUnit.CELSIUS,
            condition=condition,
            extra=self._day_entry(entry),
        )

    def _local_date(self, location: dict[str, Any]) -> date:
        # `localtime` looks like "2026-10-19 9:05"; only the date part is needed.
        localtime = self._as_str(location.get("localtime"))
        if localtime is not None:
            try:
                return date.fromisoformat(localtime.split(" ", 1)[0])
            except ValueError:
                self.logger.info("Unparseable WeatherAPI localtime %r; using clock", localtime)
        return self._clock().date()

    def _forecast_days(self, payload: dict[str, Any]) -> list[dict[str, Any]]:
        forecast = payload.get("forecast")
        if not isinstance(forecast, dict):
            raise self._malformed("missing 'forecast' object")
        raw_days = forecast.get("forecastday")
        if not isinstance(raw_days, list):
            raise self._malformed("missing 'forecast.forecastday' list")
        days = [item for item in raw_days if isinstance(item, dict)]
        if not days:
            raise self._malformed("forecast contained no days")
        return days

    def _day_entry(self, item: dict[str, Any]) -> dict[str, Any]:
        day = item.get("day")
        if not isinstance(day, dict):
            day = {}
        return self._compact(
            {
                "date": self._as_str(item.get("date")),
                "min_temp": self._as_number(day.get("mintemp_c")),
                "max_temp": self._as_number(day.get("maxtemp_c")),
                "avg_temp": self._as_number(day.get("avgtemp_c")),
                "condition": self._condition_text(day),
                "humidity": self._as_number(day.get("avghumidity")),
                "chance_of_rain": self._as_number(day.get("daily_chance_of_rain")),
                "max_wind_kph": self._as_number(day.get("maxwind_kph")),
            }
        )

    def _condition_text(self, block: dict[str, Any]) -> str | None:
        condition = block.get("condition")
        if isinstance(condition, dict):
            return self._as_str(condition.get("text"))
        return None

    def _malformed(self, reason: str) -> UpstreamError:
        return UpstreamError(f"WeatherAPI payload {reason}.", provider=self.provider_name)
