"""OpenWeatherMap (api.openweathermap.org) weather provider implementation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from ..config import OpenWeatherSettings
from ..exceptions import AuthError, NotFoundError, RateLimitedError, UpstreamError
from .base import WeatherProvider
from .models import DataKind, TemperatureUnit, WeatherReport

# UTC offsets are strictly within one day.
_MAX_UTC_OFFSET_SECONDS = 24 * 3600

_UNITS = {
    "metric": TemperatureUnit.CELSIUS,
    "imperial": TemperatureUnit.FAHRENHEIT,
}


@dataclass(frozen=True)
class _ForecastSlot:
    """One 3-hour forecast entry, timestamped in the city's local time."""

    local_time: datetime
    temperature: float
    temp_min: float
    temp_max: float
    condition: str | None
    humidity: float | None

    def distance_from_noon(self) -> float:
        noon = self.local_time.replace(hour=12, minute=0, second=0, microsecond=0)
        return abs((self.local_time - noon).total_seconds())


class OpenWeatherProvider(WeatherProvider):
    """Fetches and normalizes weather from the OpenWeatherMap 2.5 API.

    `main.temp` is interpreted according to the configured `units` parameter
    (`metric` -> Celsius, `imperial` -> Fahrenheit). `now` uses `/weather`;
    `forecast` and `tomorrow` both use the 3-hour `/forecast` endpoint. For
    `tomorrow`, entries falling on the next local calendar day (shifted by
    `city.timezone`) are selected and the one closest to local noon is reported.
    """

    provider_name = "openweather"
    display_name = "OpenWeatherMap"

    settings: OpenWeatherSettings

    @property
    def unit(self) -> TemperatureUnit:
        return _UNITS[self.settings.units]

    def _build_request(self, city: str, kind: DataKind) -> tuple[str, dict[str, Any]]:
        params: dict[str, Any] = {
            "q": city,
            "appid": self.settings.api_key,
            "units": self.settings.units,
            "lang": self.settings.lang,
        }
        path = "weather" if kind is DataKind.NOW else "forecast"
        return path, params

    def _normalize(self, payload: dict[str, Any], kind: DataKind) -> WeatherReport:
        self._check_body_code(payload)
        if kind is DataKind.NOW:
            return self._normalize_current(payload)
        return self._normalize_forecast(payload, kind)

    def _check_body_code(self, payload: dict[str, Any]) -> None:
        # OpenWeatherMap repeats the status as `cod` in the body, sometimes as a string.
        code = str(payload.get("cod", "200")).strip()
        if code == "200":
            return
        detail = " ".join((self._upstream_message(payload) or "no details").split())
        meta: dict[str, Any] = {"provider": self.provider_name}
        if code in ("401", "403"):
            raise AuthError(f"OpenWeatherMap rejected the API key: {detail}", **meta)
        if code == "404":
            raise NotFoundError(f"OpenWeatherMap found no such location: {detail}", **meta)
        if code == "429":
            raise RateLimitedError(f"OpenWeatherMap rate limit exceeded: {detail}", **meta)
        raise UpstreamError(f"OpenWeatherMap reported error code {code}: {detail}", **meta)

    def _normalize_current(self, payload: dict[str, Any]) -> WeatherReport:
        main = payload.get("main")
        name = self._as_str(payload.get("name"))
        if name is None and main is None:
            raise NotFoundError(
                "OpenWeatherMap returned no location for the requested city.",
                provider=self.provider_name,
            )
        if name is None:
            raise self._malformed("missing 'name'")
        if not isinstance(main, dict):
            raise self._malformed("missing 'main' object")
        temperature = self._as_number(main.get("temp"))
        if temperature is None:
            raise self._malformed("missing numeric 'main.temp'")
        condition = self._description(payload)
        if condition is None:
            raise self._malformed("missing 'weather[0].description'")

        wind = payload.get("wind") if isinstance(payload.get("wind"), dict) else {}
        sys_block = payload.get("sys") if isinstance(payload.get("sys"), dict) else {}
        extra = self._compact(
            {
                "humidity": self._as_number(main.get("humidity")),
                "feels_like": self._as_number(main.get("feels_like")),
                "pressure": self._as_number(main.get("pressure")),
                "wind_speed": self._as_number(wind.get("speed")),
                "country": self._as_str(sys_block.get("country")),
            }
        )
        return WeatherReport(
            provider=self.provider_name,
            location=name,
            data_kind=DataKind.NOW,
            temperature=temperature,
            unit=self.unit,
            condition=condition,
            extra=extra,
        )

    def _normalize_forecast(self, payload: dict[str, Any], kind: DataKind) -> WeatherReport:
        raw_entries = payload.get("list")
        if not isinstance(raw_entries, list) or not raw_entries:
            raise NotFoundError(
                "OpenWeatherMap returned no forecast entries for the requested city.",
                provider=self.provider_name,
            )
        city = payload.get("city")
        if not isinstance(city, dict):
            raise self._malformed("missing 'city' object")
        name = self._as_str(city.get("name"))
        if name is None:
            raise self._malformed("missing 'city.name'")
        offset = self._utc_offset(city)

        slots = sorted(
            (
                slot
                for slot in (self._parse_slot(item, offset) for item in raw_entries)
                if slot is not None
            ),
            key=lambda slot: slot.local_time,
        )
        if not slots:
            raise self._malformed("forecast entries were present but not parseable")

        country = self._as_str(city.get("country"))
        if kind is DataKind.TOMORROW:
            target = (self._clock().astimezone(UTC) + offset).date() + timedelta(days=1)
            day_slots = [slot for slot in slots if slot.local_time.date() == target]
            if not day_slots:
                raise self._malformed(f"forecast has no entries for {target.isoformat()}")
            summary = self._day_summary(target, day_slots)
            representative = min(day_slots, key=_ForecastSlot.distance_from_noon)
            condition = representative.condition or summary.get("condition")
            if condition is None:
                raise self._malformed(f"no forecast description for {target.isoformat()}")
            extra = self._compact(
                {**summary, "humidity": representative.humidity, "country": country}
            )
            return WeatherReport(
                provider=self.provider_name,
                location=name,
                data_kind=kind,
                temperature=representative.temperature,
                unit=self.unit,
                condition=condition,
                extra=extra,
            )

        first = slots[0]
        if first.condition is None:
            raise self._malformed("missing 'weather[0].description' in first forecast entry")
        by_day: dict[date, list[_ForecastSlot]] = {}
        for slot in slots:
            by_day.setdefault(slot.local_time.date(), []).append(slot)
        extra = self._compact(
            {
                "humidity": first.humidity,
                "country": country,
                "days": [self._day_summary(day, items) for day, items in by_day.items()],
            }
        )
        return WeatherReport(
            provider=self.provider_name,
            location=name,
            data_kind=kind,
            temperature=first.temperature,
            unit=self.unit,
            condition=first.condition,
            extra=extra,
        )

    def _parse_slot(self, item: Any, offset: timedelta) -> _ForecastSlot | None:
        if not isinstance(item, dict):
            return None
        timestamp = self._as_number(item.get("dt"))
        main = item.get("main")
        if timestamp is None or not isinstance(main, dict):
            return None
        temperature = self._as_number(main.get("temp"))
        if temperature is None:
            return None
        temp_min = self._as_number(main.get("temp_min"))
        temp_max = self._as_number(main.get("temp_max"))
        try:
            local_time = datetime.fromtimestamp(timestamp, UTC) + offset
        except (OverflowError, OSError, ValueError):
            return None
        return _ForecastSlot(
            local_time=local_time,
            temperature=temperature,
            temp_min=temperature if temp_min is None else temp_min,
            temp_max=temperature if temp_max is None else temp_max,
            condition=self._description(item),
            humidity=self._as_number(main.get("humidity")),
        )

    def _utc_offset(self, city: dict[str, Any]) -> timedelta:
        seconds = self._as_number(city.get("timezone")) or 0
        if abs(seconds) >= _MAX_UTC_OFFSET_SECONDS:
            raise self._malformed(f"has out-of-range 'city.timezone' offset {seconds}")
        return timedelta(seconds=seconds)

    @staticmethod
    def _day_summary(day: date, slots: list[_ForecastSlot]) -> dict[str, Any]:
        representative = min(slots, key=_ForecastSlot.distance_from_noon)
        described = [slot for slot in slots if slot.condition is not None]
        if representative.condition is None and described:
            representative = min(described, key=_ForecastSlot.distance_from_noon)
        summary: dict[str, Any] = {
            "date": day.isoformat(),
            "min_temp": min(slot.temp_min for slot in slots),
            "max_temp": max(slot.temp_max for slot in slots),
            "condition": representative.condition,
        }
        return {key: value for key, value in summary.items() if value is not None}

    def _description(self, block: dict[str, Any]) -> str | None:
        weather = block.get("weather")
        if isinstance(weather, list) and weather and isinstance(weather[0], dict):
            return self._as_str(weather[0].get("description"))
        return None

    def _malformed(self, reason: str) -> UpstreamError:
        return UpstreamError(f"OpenWeatherMap payload {reason}.", provider=self.provider_name)
