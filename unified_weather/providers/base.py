"""
Base weather provider interface.

Every provider fetches from its upstream and normalizes into the shared
models. Capabilities are declared as metadata flags so the service never has
to inspect concrete provider types.
"""

from abc import ABC, abstractmethod
from typing import Any

from unified_weather.errors import ErrorKind, WeatherError
from unified_weather.http_client import Transport, get_json
from unified_weather.logging_config import get_logger
from unified_weather.models import (
    Coordinates,
    CurrentWeather,
    ForecastDay,
    ProviderMetadata,
    ProviderType,
    RawCurrentWeather,
)

logger = get_logger(__name__)

DEFAULT_FORECAST_DAYS = 5


class WeatherProviderBase(ABC):
    """
    Abstract base class for weather data providers.

    Subclasses set ``provider_type`` and ``metadata`` and implement the four
    fetch operations.
    """

    provider_type: ProviderType
    metadata: ProviderMetadata

    def __init__(self, transport: Transport | None = None) -> None:
        """
        Args:
            transport: Callable ``(url, params) -> JSON body`` used for every
                upstream request (defaults to the shared requests session)
        """
        self.transport = transport or get_json
        self.provider_name = self.provider_type.value

    @abstractmethod
    def get_current_weather_by_city(
        self, city: str, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        """
        Get current weather for a city name.

        Args:
            city: City name as typed by the caller
            raw: Return the untransformed upstream body (if supported)
        """

    @abstractmethod
    def get_current_weather_by_coords(
        self, coords: Coordinates, raw: bool = False
    ) -> CurrentWeather | RawCurrentWeather:
        """Get current weather for coordinates."""

    @abstractmethod
    def get_forecast_by_city(
        self, city: str, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        """Get a daily forecast for a city name."""

    @abstractmethod
    def get_forecast_by_coords(
        self, coords: Coordinates, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[ForecastDay]:
        """Get a daily forecast for coordinates."""

    def get_provider_info(self) -> dict[str, Any]:
        """
        Get provider metadata and capabilities.

        Returns:
            Dict with provider name and capability flags
        """
        return {"name": self.provider_name, **self.metadata.model_dump()}

    def _ensure_raw_supported(self, raw: bool) -> None:
        if raw and not self.metadata.supports_raw:
            raise WeatherError(
                f"Raw mode is not supported by the {self.provider_name} provider",
                kind=ErrorKind.USAGE,
            )

    def _get(self, url: str, params: dict[str, Any]) -> Any:
        logger.debug(f"{self.provider_name}: requesting {url}")
        return self.transport(url, params)
