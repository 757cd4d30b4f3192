"""Unified weather: one response shape over Open-Meteo and OpenWeather."""

__version__ = "0.1.0"

from .cache import CacheConfig, CacheTTL
from .errors import ErrorKind, WeatherError
from .models import Coordinates, CurrentWeather, ForecastDay, ProviderType
from .service import WeatherService

__all__ = [
    "CacheConfig",
    "CacheTTL",
    "Coordinates",
    "CurrentWeather",
    "ErrorKind",
    "ForecastDay",
    "ProviderType",
    "WeatherError",
    "WeatherService",
]
