"""
Weather service: the single entry point for callers.

Composes a primary provider, an optional fallback provider and an optional
response cache. Upstream failures are classified once here; only transient
ones are retried, once, against the fallback provider.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from unified_weather.cache import CacheCategory, CacheConfig, TTLCache
from unified_weather.errors import ErrorKind, WeatherError, is_transient, wrap_error
from unified_weather.http_client import Transport
from unified_weather.logging_config import get_logger
from unified_weather.models import (
    Coordinates,
    CurrentWeather,
    ForecastDay,
    ProviderType,
    RawCurrentWeather,
)
from unified_weather.providers import PROVIDER_CLASSES, create_provider
from unified_weather.providers.base import DEFAULT_FORECAST_DAYS, WeatherProviderBase

logger = get_logger(__name__)

T = TypeVar("T")


def _parse_provider_type(value: ProviderType | str) -> ProviderType:
    try:
        return ProviderType(value)
    except ValueError as e:
        raise WeatherError(
            f"Unknown provider: {value}", e, ErrorKind.CONFIGURATION
        ) from e


class WeatherService:
    """
    Unified weather client over Open-Meteo and OpenWeather.

    Example:
        >>> service = WeatherService(
        ...     provider="open-meteo",
        ...     fallback_provider="openweather",
        ...     api_key="...",
        ...     cache=CacheConfig(enabled=True),
        ... )
        >>> service.get_forecast("Tokyo", days=3)  # doctest: +SKIP
    """

    def __init__(
        self,
        provider: ProviderType | str,
        api_key: str | None = None,
        fallback_provider: ProviderType | str | None = None,
        cache: CacheConfig | None = None,
        transport: Transport | None = None,
    ):
        """
        Initialize the service; configuration is validated eagerly.

        Args:
            provider: Primary provider
            api_key: API key, required when either provider needs one
            fallback_provider: Provider tried once on transient primary failures
            cache: Response cache settings (disabled when None)
            transport: Optional transport override for all providers

        Raises:
            WeatherError: If the configuration can never serve a request
        """
        primary_type = _parse_provider_type(provider)
        fallback_type = (
            _parse_provider_type(fallback_provider)
            if fallback_provider is not None
            else None
        )
        self._validate_config(primary_type, fallback_type, api_key)

        self.primary_type = primary_type
        self.fallback_type = fallback_type

        self.cache: TTLCache | None = None
        if cache is not None and cache.enabled:
            self.cache = TTLCache(cache.ttl)

        self.primary = create_provider(
            primary_type, api_key, transport, geocode_cache=self.cache
        )
        self.fallback: WeatherProviderBase | None = None
        if fallback_type is not None:
            self.fallback = create_provider(
                fallback_type, api_key, transport, geocode_cache=self.cache
            )

        logger.info(
            f"Weather service initialized: primary={primary_type.value}, "
            f"fallback={fallback_type.value if fallback_type else 'none'}, "
            f"cache={'enabled' if self.cache is not None else 'disabled'}"
        )

    @staticmethod
    def _validate_config(
        primary: ProviderType,
        fallback: ProviderType | None,
        api_key: str | None,
    ) -> None:
        if PROVIDER_CLASSES[primary].metadata.requires_api_key and not api_key:
            raise WeatherError(
                f"API key is required for {primary.display_name} provider",
                kind=ErrorKind.CONFIGURATION,
            )

        if fallback is None:
            return

        if PROVIDER_CLASSES[fallback].metadata.requires_api_key and not api_key:
            raise WeatherError(
                f"API key is required when using {fallback.display_name} as fallback provider",
                kind=ErrorKind.CONFIGURATION,
            )

        if fallback is primary:
            raise WeatherError(
                "Fallback provider must be different from primary provider",
                kind=ErrorKind.CONFIGURATION,
            )

    # Public API ---------------------------------------------------------
    def get_current_weather(
        self, city: str, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        """
        Get current weather for a city.

        Args:
            city: City name (e.g. "London", "Tokyo")
            raw: Return the untransformed upstream body; never cached

        Raises:
            WeatherError: If the city is not found or the request fails
        """

        def operation(provider: WeatherProviderBase):
            return provider.get_current_weather_by_city(city, raw=raw)

        if raw:
            return self._execute_with_fallback(operation, "get_current_weather", city)

        cache_key = TTLCache.create_key(
            self.primary_type.value, CacheCategory.CURRENT, city
        )
        return self._cached(
            cache_key, CacheCategory.CURRENT, operation, "get_current_weather", city
        )

    def get_weather_by_coords(
        self, coords: Coordinates, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        """
        Get current weather for coordinates.

        Args:
            coords: Latitude/longitude in decimal degrees
            raw: Return the untransformed upstream body; never cached
        """
        label = coords.label()

        def operation(provider: WeatherProviderBase):
            return provider.get_current_weather_by_coords(coords, raw=raw)

        if raw:
            return self._execute_with_fallback(
                operation, "get_weather_by_coords", label
            )

        cache_key = TTLCache.create_key(
            self.primary_type.value, CacheCategory.CURRENT, label
        )
        return self._cached(
            cache_key, CacheCategory.CURRENT, operation, "get_weather_by_coords", label
        )

    def get_forecast(
        self, city: str, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        """
        Get a daily forecast for a city.

        Args:
            city: City name
            days: Number of days (default 5; the upper bound depends on the provider)
        """

        def operation(provider: WeatherProviderBase):
            return provider.get_forecast_by_city(city, days=days)

        cache_key = TTLCache.create_key(
            self.primary_type.value, CacheCategory.FORECAST, city, days
        )
        return self._cached(
            cache_key, CacheCategory.FORECAST, operation, "get_forecast", city
        )

    def get_forecast_by_coords(
        self, coords: Coordinates, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        """Get a daily forecast for coordinates."""
        label = coords.label()

        def operation(provider: WeatherProviderBase):
            return provider.get_forecast_by_coords(coords, days=days)

        cache_key = TTLCache.create_key(
            self.primary_type.value, CacheCategory.FORECAST, label, days
        )
        return self._cached(
            cache_key, CacheCategory.FORECAST, operation, "get_forecast_by_coords", label
        )

    def clear_cache(self) -> None:
        """Drop every cached entry. No-op when caching is disabled."""
        if self.cache is not None:
            self.cache.clear()
            logger.info("Weather cache cleared")

    def get_provider_info(self) -> list[dict[str, Any]]:
        """Get information about the configured providers."""
        info = [{"role": "primary", **self.primary.get_provider_info()}]
        if self.fallback is not None:
            info.append({"role": "fallback", **self.fallback.get_provider_info()})
        return info

    # Helpers ------------------------------------------------------------
    def _cached(
        self,
        cache_key: str,
        category: CacheCategory,
        operation: Callable[[WeatherProviderBase], T],
        context: str,
        location: str,
    ) -> T:
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit: {cache_key}")
                # Cached lists are never handed out directly
                return list(cached) if isinstance(cached, list) else cached
            logger.debug(f"Cache miss: {cache_key}")

        result = self._execute_with_fallback(operation, context, location)

        if self.cache is not None:
            stored = list(result) if isinstance(result, list) else result
            self.cache.set(cache_key, stored, category)

        return result

    def _execute_with_fallback(
        self,
        operation: Callable[[WeatherProviderBase], T],
        context: str,
        location: str,
    ) -> T:
        """
        Run ``operation`` on the primary provider, falling back once.

        The fallback is only tried for transient failures. If it fails too,
        the primary failure is the one reported.
        """
        try:
            return operation(self.primary)
        except Exception as error:
            primary_error = error

        if self.fallback is None:
            raise wrap_error(primary_error, context, location)

        if not is_transient(primary_error):
            logger.info(
                f"{self.primary.provider_name} failed permanently in {context}, "
                f"not using fallback: {primary_error}"
            )
            raise wrap_error(primary_error, context, location)

        logger.warning(
            f"{self.primary.provider_name} failed in {context} ({primary_error}), "
            f"trying fallback {self.fallback.provider_name}"
        )
        try:
            return operation(self.fallback)
        except Exception as fallback_error:
            logger.error(
                f"Fallback {self.fallback.provider_name} also failed in {context}: "
                f"{fallback_error}"
            )

        raise wrap_error(primary_error, context, location)
