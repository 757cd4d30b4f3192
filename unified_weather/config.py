"""Configuration loading for the unified-weather command line.

Settings come from an optional YAML file, overridden by environment variables
(a ``.env`` file is honoured). The ``WeatherService`` itself never reads the
environment; callers build it from these settings.
"""

import os
from functools import partial
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from unified_weather.cache import CacheConfig
from unified_weather.http_client import DEFAULT_TIMEOUT_S, get_json
from unified_weather.logging_config import get_logger
from unified_weather.models import ProviderType
from unified_weather.service import WeatherService

logger = get_logger(__name__)

ENV_PREFIX = "WEATHER_"


class ClientSettings(BaseModel):
    """Settings used to build a WeatherService."""

    provider: ProviderType = ProviderType.OPEN_METEO
    api_key: str | None = None
    fallback_provider: ProviderType | None = None
    cache: CacheConfig = Field(default_factory=lambda: CacheConfig(enabled=True))
    timeout_s: float = Field(DEFAULT_TIMEOUT_S, gt=0)


def load_yaml_config(config_file: str | Path) -> dict[str, Any]:
    """Load a YAML settings file."""
    config_path = Path(config_file)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    logger.debug(f"Loaded configuration from {config_path}")
    return data or {}


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    for field in ("provider", "api_key", "fallback_provider", "timeout_s"):
        value = os.getenv(f"{ENV_PREFIX}{field.upper()}")
        if value:
            overrides[field] = value

    cache_enabled = os.getenv(f"{ENV_PREFIX}CACHE_ENABLED")
    if cache_enabled is not None:
        overrides["cache_enabled"] = cache_enabled.strip().lower() in {
            "1",
            "true",
            "yes",
            "on",
        }

    return overrides


def load_settings(config_file: str | Path | None = None) -> ClientSettings:
    """
    Load settings from YAML (optional) and the environment.

    Environment variables:
        WEATHER_PROVIDER: Primary provider (open-meteo | openweather)
        WEATHER_API_KEY: OpenWeather API key
        WEATHER_FALLBACK_PROVIDER: Fallback provider
        WEATHER_CACHE_ENABLED: Enable the response cache (true/false)
        WEATHER_TIMEOUT_S: Upstream request timeout in seconds

    Raises:
        FileNotFoundError: If ``config_file`` does not exist
        ValueError: If the YAML or the resulting settings are invalid
    """
    load_dotenv(override=False)

    data = load_yaml_config(config_file) if config_file else {}
    overrides = _env_overrides()

    cache_enabled = overrides.pop("cache_enabled", None)
    data.update(overrides)
    if cache_enabled is not None:
        data["cache"] = {**(data.get("cache") or {}), "enabled": cache_enabled}

    return ClientSettings(**data)


def build_service(settings: ClientSettings) -> WeatherService:
    """Construct a WeatherService from settings."""
    return WeatherService(
        provider=settings.provider,
        api_key=settings.api_key,
        fallback_provider=settings.fallback_provider,
        cache=settings.cache,
        transport=partial(get_json, timeout=settings.timeout_s),
    )
