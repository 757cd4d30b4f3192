"""
Normalized weather data models shared by every provider.

Field names are snake_case in Python and serialize to camelCase, so
``to_dict()`` yields the same shape whichever upstream answered.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Open-Meteo current-weather body, returned untouched in raw mode
RawCurrentWeather = dict[str, Any]


class ProviderType(str, Enum):
    """Supported upstream weather providers."""

    OPEN_METEO = "open-meteo"
    OPENWEATHER = "openweather"

    @property
    def display_name(self) -> str:
        """Human-readable provider name used in messages."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ProviderType.OPEN_METEO: "Open-Meteo",
    ProviderType.OPENWEATHER: "OpenWeather",
}


class WeatherModel(BaseModel):
    """Immutable base with camelCase serialization."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Coordinates(WeatherModel):
    """Geographic coordinates in decimal degrees."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def label(self) -> str:
        """4-decimal ``"lat,lon"`` string used for labels and cache keys."""
        return f"{self.latitude:.4f},{self.longitude:.4f}"


class ProviderMetadata(WeatherModel):
    """Static capability flags of a provider."""

    requires_api_key: bool
    supports_forecast: bool
    supports_raw: bool = False
    supports_geocoding: bool = False


class CurrentWeatherUnits(WeatherModel):
    temperature: str
    wind_speed: str
    wind_direction: str
    pressure: str | None = None
    humidity: str | None = None
    visibility: str | None = None


class CurrentWeather(WeatherModel):
    """
    Normalized current conditions.

    Wind speed is always km/h. Fields after ``units`` are only filled by the
    providers that report them.
    """

    city: str
    temperature: float
    description: str
    wind_speed: float  # km/h
    wind_direction: float = Field(..., ge=0, le=360)
    is_day: bool
    timezone: str
    timezone_abbreviation: str
    time: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$")
    units: CurrentWeatherUnits

    # Open-Meteo
    elevation: float | None = None

    # OpenWeather
    feels_like: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    visibility: float | None = None
    clouds: float | None = None
    wind_gust: float | None = None
    sunrise: str | None = None
    sunset: str | None = None
    country: str | None = None
    sea_level_pressure: float | None = None
    ground_level_pressure: float | None = None


class ForecastDay(WeatherModel):
    """One calendar day of forecast."""

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    min_temp: float
    max_temp: float
    description: str

    # Aggregated from 3-hour samples (OpenWeather)
    avg_feels_like: float | None = None
    avg_humidity: float | None = None
    avg_pressure: float | None = None
    avg_wind_speed: float | None = None  # km/h
    avg_clouds: float | None = None
    max_pop: int | None = Field(None, ge=0, le=100)
    total_rain: float | None = Field(None, gt=0)
    total_snow: float | None = Field(None, gt=0)


__all__ = [
    "Coordinates",
    "CurrentWeather",
    "CurrentWeatherUnits",
    "ForecastDay",
    "ProviderMetadata",
    "ProviderType",
    "RawCurrentWeather",
]
