"""
Weather data providers.
"""

from unified_weather.cache import TTLCache
from unified_weather.http_client import Transport
from unified_weather.models import ProviderType
from unified_weather.providers.base import WeatherProviderBase
from unified_weather.providers.open_meteo import OpenMeteoProvider
from unified_weather.providers.openweather import OpenWeatherProvider

PROVIDER_CLASSES: dict[ProviderType, type[WeatherProviderBase]] = {
    ProviderType.OPEN_METEO: OpenMeteoProvider,
    ProviderType.OPENWEATHER: OpenWeatherProvider,
}


def create_provider(
    provider_type: ProviderType,
    api_key: str | None = None,
    transport: Transport | None = None,
    geocode_cache: TTLCache | None = None,
) -> WeatherProviderBase:
    """
    Build a provider by type.

    Args:
        provider_type: Which upstream to use
        api_key: API key for providers that require one
        transport: Optional transport override shared by the provider
        geocode_cache: Cache for geocoded coordinates (geocoding providers only)
    """
    if provider_type is ProviderType.OPENWEATHER:
        return OpenWeatherProvider(api_key or "", transport=transport)
    return OpenMeteoProvider(transport=transport, geocode_cache=geocode_cache)


__all__ = [
    "PROVIDER_CLASSES",
    "WeatherProviderBase",
    "OpenMeteoProvider",
    "OpenWeatherProvider",
    "create_provider",
]
