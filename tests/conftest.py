"""
pytest configuration for unified-weather tests.

Provides small upstream payload fixtures and keeps the shared HTTP session
from leaking between tests.
"""

import importlib
import logging
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def _reset_http_session():
    """Reset the http_client module's singleton session between tests."""
    hc = importlib.import_module("unified_weather.http_client")
    hc.reset_session()
    yield
    hc.reset_session()


@pytest.fixture(autouse=True)
def _isolate_weather_env(monkeypatch):
    """Keep developer WEATHER_* variables out of the tests."""
    for name in (
        "WEATHER_PROVIDER",
        "WEATHER_API_KEY",
        "WEATHER_FALLBACK_PROVIDER",
        "WEATHER_CACHE_ENABLED",
        "WEATHER_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo setup_logging() calls made by a test."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    urllib3_level = logging.getLogger("urllib3").level
    yield
    logging.getLogger("urllib3").setLevel(urllib3_level)
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def geocoding_payload() -> dict[str, Any]:
    return {
        "results": [
            {
                "name": "London",
                "latitude": 51.50853,
                "longitude": -0.12574,
                "country": "United Kingdom",
            }
        ]
    }


@pytest.fixture
def open_meteo_current_payload() -> dict[str, Any]:
    return {
        "latitude": 51.5,
        "longitude": -0.120000124,
        "generationtime_ms": 0.05,
        "utc_offset_seconds": 0,
        "timezone": "GMT",
        "timezone_abbreviation": "GMT",
        "elevation": 23.0,
        "current_weather_units": {
            "time": "iso8601",
            "interval": "seconds",
            "temperature": "°C",
            "windspeed": "km/h",
            "winddirection": "°",
            "is_day": "",
            "weathercode": "wmo code",
        },
        "current_weather": {
            "time": "2024-03-10T14:00",
            "interval": 900,
            "temperature": 12.3,
            "windspeed": 14.8,
            "winddirection": 230,
            "is_day": 1,
            "weathercode": 3,
        },
    }


@pytest.fixture
def open_meteo_forecast_payload() -> dict[str, Any]:
    return {
        "daily": {
            "time": ["2024-03-10", "2024-03-11", "2024-03-12"],
            "temperature_2m_min": [4.1, 5.0, 3.2],
            "temperature_2m_max": [12.9, 14.2, 10.0],
            "weathercode": [3, 61, 1234],
        }
    }


@pytest.fixture
def openweather_current_payload() -> dict[str, Any]:
    return {
        "coord": {"lon": -0.1257, "lat": 51.5085},
        "weather": [
            {"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}
        ],
        "base": "stations",
        "main": {
            "temp": 11.6,
            "feels_like": 10.9,
            "temp_min": 10.4,
            "temp_max": 12.7,
            "pressure": 1012,
            "humidity": 81,
            "sea_level": 1012,
            "grnd_level": 1008,
        },
        "visibility": 10000,
        "wind": {"speed": 5, "deg": 240, "gust": 9.3},
        "clouds": {"all": 75},
        "dt": 1710079200,  # 2024-03-10T14:00Z
        "sys": {
            "type": 2,
            "id": 2075535,
            "country": "GB",
            "sunrise": 1710051360,  # 06:16Z
            "sunset": 1710093000,  # 17:50Z
        },
        "timezone": 0,
        "id": 2643743,
        "name": "London",
        "cod": 200,
    }


def make_forecast_sample(
    dt_txt: str,
    temp: float,
    description: str = "light rain",
    rain: float | None = None,
    snow: float | None = None,
    pop: float = 0.0,
    wind_speed: float = 5.0,
) -> dict[str, Any]:
    """Build one 3-hour OpenWeather /forecast sample."""
    sample: dict[str, Any] = {
        "dt_txt": dt_txt,
        "main": {
            "temp": temp,
            "feels_like": temp - 1,
            "temp_min": temp,
            "temp_max": temp,
            "pressure": 1010,
            "humidity": 80,
        },
        "weather": [{"description": description}],
        "clouds": {"all": 50},
        "wind": {"speed": wind_speed},
        "pop": pop,
    }
    if rain is not None:
        sample["rain"] = {"3h": rain}
    if snow is not None:
        sample["snow"] = {"3h": snow}
    return sample


@pytest.fixture
def openweather_forecast_payload() -> dict[str, Any]:
    """Two days of 3-hour samples (8 per day)."""
    hours = ["00", "03", "06", "09", "12", "15", "18", "21"]
    day_one = [10, 12, 15, 14, 13, 11, 9, 8]
    day_two = [7, 8, 9, 11, 12, 10, 8, 6]
    samples = [
        make_forecast_sample(f"2024-03-10 {hour}:00:00", temp)
        for hour, temp in zip(hours, day_one, strict=True)
    ]
    samples += [
        make_forecast_sample(f"2024-03-11 {hour}:00:00", temp, description="clear sky")
        for hour, temp in zip(hours, day_two, strict=True)
    ]
    return {"city": {"name": "London"}, "list": samples}


@pytest.fixture
def forecast_sample():
    """Factory for single 3-hour forecast samples."""
    return make_forecast_sample
