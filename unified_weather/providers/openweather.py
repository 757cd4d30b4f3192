"""
OpenWeather (openweathermap.org) weather provider.

Requires an API key. Responses are normalized to the Open-Meteo conventions:
wind in km/h, minute-precision ISO timestamps, and 3-hour forecast samples
aggregated into daily summaries.
"""

import math
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import pandas as pd
from pydantic import ValidationError

from unified_weather.errors import MalformedResponseError
from unified_weather.http_client import Transport
from unified_weather.logging_config import get_logger
from unified_weather.models import (
    Coordinates,
    CurrentWeather,
    CurrentWeatherUnits,
    ForecastDay,
    ProviderMetadata,
    ProviderType,
    RawCurrentWeather,
)
from unified_weather.providers.base import DEFAULT_FORECAST_DAYS, WeatherProviderBase

logger = get_logger(__name__)

MS_TO_KMH = 3.6

METRIC_UNITS = CurrentWeatherUnits(
    temperature="°C",
    wind_speed="km/h",
    wind_direction="°",
    pressure="hPa",
    humidity="%",
    visibility="m",
)


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like ``Math.round(value * 10) / 10`` (halves go up)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def ms_to_kmh(speed: float) -> float:
    """Convert m/s to km/h rounded to one decimal."""
    return round_half_up(speed * MS_TO_KMH)


def format_timestamp(epoch_seconds: int) -> str:
    """Format a UTC epoch timestamp as ``YYYY-MM-DDTHH:MM``."""
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime(
        "%Y-%m-%dT%H:%M"
    )


def format_utc_offset(offset_seconds: int) -> str:
    """Synthesize ``UTC+H`` / ``UTC-H`` from a shift in seconds."""
    hours = offset_seconds / 3600
    sign = "+" if hours >= 0 else ""
    return f"UTC{sign}{hours:g}"


def most_frequent(values: Iterable[str]) -> str:
    """Most common value; ties go to the one seen first."""
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    # dicts keep insertion order and max() returns the first maximum
    return max(counts, key=counts.__getitem__)


def _mean(series: pd.Series) -> float | None:
    values = series.dropna()
    if values.empty:
        return None
    return round_half_up(float(values.mean()))


def _positive_total(series: pd.Series) -> float | None:
    total = round_half_up(float(series.fillna(0).sum()))
    return total if total > 0 else None


def aggregate_forecast(
    samples: list[dict[str, Any]], days: int = DEFAULT_FORECAST_DAYS
) -> list[ForecastDay]:
    """
    Aggregate 3-hour forecast samples into daily summaries.

    Samples are grouped by the date part of ``dt_txt``; the first ``days``
    dates are kept in the order they first appear.

    Args:
        samples: The ``list`` array of an OpenWeather /forecast body
        days: Maximum number of days to return

    Returns:
        List of ForecastDay with min/max temperature, 1-decimal averages,
        max precipitation probability and rain/snow totals (only when > 0)
    """
    if days <= 0 or not samples:
        return []

    rows = []
    for item in samples:
        main = item["main"]
        rows.append(
            {
                "date": item["dt_txt"].split(" ")[0],
                "temp": main["temp"],
                "feels_like": main.get("feels_like"),
                "humidity": main.get("humidity"),
                "pressure": main.get("pressure"),
                "wind_speed": (item.get("wind") or {}).get("speed", 0) * MS_TO_KMH,
                "clouds": (item.get("clouds") or {}).get("all"),
                "pop": (item.get("pop") or 0) * 100,
                "rain": (item.get("rain") or {}).get("3h", 0),
                "snow": (item.get("snow") or {}).get("3h", 0),
                "description": item["weather"][0]["description"],
            }
        )

    df = pd.DataFrame(rows)
    forecast: list[ForecastDay] = []

    for date_str, day in df.groupby("date", sort=False):
        if len(forecast) >= days:
            break

        forecast.append(
            ForecastDay(
                date=date_str,
                min_temp=float(day["temp"].min()),
                max_temp=float(day["temp"].max()),
                description=most_frequent(day["description"]),
                avg_feels_like=_mean(day["feels_like"]),
                avg_humidity=_mean(day["humidity"]),
                avg_pressure=_mean(day["pressure"]),
                avg_wind_speed=_mean(day["wind_speed"]),
                avg_clouds=_mean(day["clouds"]),
                max_pop=int(round_half_up(float(day["pop"].max()), 0)),
                total_rain=_positive_total(day["rain"]),
                total_snow=_positive_total(day["snow"]),
            )
        )

    return forecast


class OpenWeatherProvider(WeatherProviderBase):
    """
    OpenWeather data provider.

    Raw mode is not supported: the upstream body has a different shape from
    the Open-Meteo one that raw callers expect.
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    provider_type = ProviderType.OPENWEATHER
    metadata = ProviderMetadata(
        requires_api_key=True,
        supports_forecast=True,
        supports_raw=False,
        supports_geocoding=False,
    )

    def __init__(
        self,
        api_key: str,
        transport: Transport | None = None,
        base_url: str | None = None,
    ) -> None:
        super().__init__(transport)
        if not api_key:
            raise ValueError("OpenWeather API key required")
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")

    def get_current_weather_by_city(
        self, city: str, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        self._ensure_raw_supported(raw)
        logger.info(f"Fetching OpenWeather current weather for '{city}'")
        data = self._request("weather", {"q": city})
        return self._convert_current_weather(data)

    def get_current_weather_by_coords(
        self, coords: Coordinates, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        self._ensure_raw_supported(raw)
        logger.info(
            f"Fetching OpenWeather current weather for ({coords.latitude}, {coords.longitude})"
        )
        data = self._request(
            "weather", {"lat": coords.latitude, "lon": coords.longitude}
        )
        return self._convert_current_weather(data)

    def get_forecast_by_city(
        self, city: str, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        logger.info(f"Fetching OpenWeather {days}-day forecast for '{city}'")
        data = self._request("forecast", {"q": city})
        return self._convert_forecast(data, days)

    def get_forecast_by_coords(
        self, coords: Coordinates, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        logger.info(
            f"Fetching OpenWeather {days}-day forecast for ({coords.latitude}, {coords.longitude})"
        )
        data = self._request(
            "forecast", {"lat": coords.latitude, "lon": coords.longitude}
        )
        return self._convert_forecast(data, days)

    def _request(self, endpoint: str, params: dict[str, Any]) -> Any:
        query = {**params, "units": "metric", "appid": self.api_key}
        return self._get(f"{self.base_url}/{endpoint}", query)

    def _convert_current_weather(self, data: dict[str, Any]) -> CurrentWeather:
        """Convert an OpenWeather /weather body to CurrentWeather."""
        try:
            main = data["main"]
            wind = data.get("wind") or {}
            sys_info = data["sys"]

            observed_at = data["dt"]
            sunrise = sys_info["sunrise"]
            sunset = sys_info["sunset"]
            offset = format_utc_offset(data.get("timezone", 0))
            gust = wind.get("gust")

            return CurrentWeather(
                city=data["name"],
                temperature=main["temp"],
                description=data["weather"][0]["description"],
                wind_speed=ms_to_kmh(wind.get("speed", 0)),
                wind_direction=wind.get("deg", 0),
                is_day=sunrise <= observed_at < sunset,
                timezone=offset,
                timezone_abbreviation=offset,
                time=format_timestamp(observed_at),
                units=METRIC_UNITS,
                feels_like=main.get("feels_like"),
                humidity=main.get("humidity"),
                pressure=main.get("pressure"),
                visibility=data.get("visibility"),
                clouds=(data.get("clouds") or {}).get("all"),
                wind_gust=ms_to_kmh(gust) if gust else None,
                sunrise=format_timestamp(sunrise),
                sunset=format_timestamp(sunset),
                country=sys_info.get("country"),
                sea_level_pressure=main.get("sea_level"),
                ground_level_pressure=main.get("grnd_level"),
            )
        except (KeyError, IndexError, TypeError, ValidationError) as e:
            raise MalformedResponseError(
                f"Unexpected OpenWeather current weather response: {e}",
                f"{self.base_url}/weather",
            ) from e

    def _convert_forecast(self, data: dict[str, Any], days: int) -> list[ForecastDay]:
        try:
            return aggregate_forecast(data["list"], days)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"Unexpected OpenWeather forecast response: {e}",
                f"{self.base_url}/forecast",
            ) from e
