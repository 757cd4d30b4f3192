"""
Open-Meteo weather provider.

Open-Meteo API provides:
- No API key required
- Geocoding of city names to coordinates
- Current conditions with WMO weather codes
- Daily forecasts (one value per day, no aggregation needed)
"""

from typing import Any

from pydantic import ValidationError

from unified_weather.cache import CacheCategory, TTLCache
from unified_weather.errors import ErrorKind, MalformedResponseError, WeatherError
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
from unified_weather.weather_codes import describe_weather_code

logger = get_logger(__name__)


class OpenMeteoProvider(WeatherProviderBase):
    """
    Open-Meteo weather data provider.

    City lookups are geocoded first; coordinates are cached when a geocoding
    cache is supplied.
    """

    GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
    FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
    DAILY_FIELDS = "temperature_2m_min,temperature_2m_max,weathercode"

    provider_type = ProviderType.OPEN_METEO
    metadata = ProviderMetadata(
        requires_api_key=False,
        supports_forecast=True,
        supports_raw=True,
        supports_geocoding=True,
    )

    def __init__(
        self,
        transport: Transport | None = None,
        geocode_cache: TTLCache | None = None,
    ) -> None:
        super().__init__(transport)
        self.geocode_cache = geocode_cache

    def geocode(self, city: str, use_cache: bool = True) -> Coordinates:
        """
        Convert a city name to coordinates using the Open-Meteo geocoding API.

        Args:
            city: City name to geocode
            use_cache: Read and write the geocoding cache (if one is set)

        Returns:
            Coordinates of the best match

        Raises:
            WeatherError: If no location matches ``city``
        """
        cache_key = TTLCache.create_key(
            self.provider_name, CacheCategory.GEOCODING, city
        )
        cache = self.geocode_cache if use_cache else None
        if cache is not None:
            cached = cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Geocoding cache hit for '{city}'")
                return cached

        data = self._get(self.GEOCODING_URL, {"name": city, "count": 1})
        results = (data or {}).get("results") or []
        if not results:
            logger.info(f"Open-Meteo geocoding found no match for '{city}'")
            raise WeatherError(f"City not found: {city}", kind=ErrorKind.NOT_FOUND)

        location = results[0]
        try:
            coords = Coordinates(
                latitude=location["latitude"], longitude=location["longitude"]
            )
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedResponseError(
                f"Unexpected Open-Meteo geocoding result: {e}", self.GEOCODING_URL
            ) from e

        if cache is not None:
            cache.set(cache_key, coords, CacheCategory.GEOCODING)

        return coords

    def get_current_weather_by_city(
        self, city: str, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        # Raw requests stay out of the cache entirely
        coords = self.geocode(city, use_cache=not raw)
        weather = self.get_current_weather_by_coords(coords, raw=raw)
        if raw:
            return weather
        # Echo the caller's input rather than the coordinate label
        return weather.model_copy(update={"city": city})

    def get_current_weather_by_coords(
        self, coords: Coordinates, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        logger.info(
            f"Fetching Open-Meteo current weather for ({coords.latitude}, {coords.longitude})"
        )
        data = self._get(
            self.FORECAST_URL,
            {
                "latitude": coords.latitude,
                "longitude": coords.longitude,
                "current_weather": "true",
            },
        )

        if raw:
            return data

        return self._convert_current_weather(data, coords)

    def get_forecast_by_city(
        self, city: str, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        coords = self.geocode(city)
        return self.get_forecast_by_coords(coords, days=days)

    def get_forecast_by_coords(
        self, coords: Coordinates, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        logger.info(
            f"Fetching Open-Meteo {days}-day forecast for ({coords.latitude}, {coords.longitude})"
        )
        data = self._get(
            self.FORECAST_URL,
            {
                "latitude": coords.latitude,
                "longitude": coords.longitude,
                "daily": self.DAILY_FIELDS,
                "forecast_days": days,
            },
        )
        return self._convert_daily_forecast(data)

    def _convert_current_weather(
        self, data: dict[str, Any], coords: Coordinates
    ) -> CurrentWeather:
        """Convert an Open-Meteo current-weather body to CurrentWeather."""
        try:
            current = data["current_weather"]
            units = data["current_weather_units"]
            return CurrentWeather(
                city=coords.label(),
                temperature=current["temperature"],
                description=describe_weather_code(current.get("weathercode")),
                wind_speed=current["windspeed"],
                wind_direction=current["winddirection"],
                is_day=current.get("is_day") == 1,
                timezone=data["timezone"],
                timezone_abbreviation=data["timezone_abbreviation"],
                time=current["time"],
                elevation=data.get("elevation"),
                units=CurrentWeatherUnits(
                    temperature=units["temperature"],
                    wind_speed=units["windspeed"],
                    wind_direction=units["winddirection"],
                ),
            )
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedResponseError(
                f"Unexpected Open-Meteo current weather response: {e}",
                self.FORECAST_URL,
            ) from e

    def _convert_daily_forecast(self, data: dict[str, Any]) -> list[ForecastDay]:
        """Map the daily series 1:1 onto ForecastDay entries."""
        try:
            daily = data["daily"]
            return [
                ForecastDay(
                    date=date_str,
                    min_temp=min_temp,
                    max_temp=max_temp,
                    description=describe_weather_code(code),
                )
                for date_str, min_temp, max_temp, code in zip(
                    daily["time"],
                    daily["temperature_2m_min"],
                    daily["temperature_2m_max"],
                    daily["weathercode"],
                    strict=True,
                )
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"Unexpected Open-Meteo forecast response: {e}", self.FORECAST_URL
            ) from e
