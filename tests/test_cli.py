"""Tests for CLI functionality."""

import json
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from unified_weather import __version__
from unified_weather.cli import main
from unified_weather.errors import ErrorKind, WeatherError
from unified_weather.models import (
    Coordinates,
    CurrentWeather,
    CurrentWeatherUnits,
    ForecastDay,
)


@pytest.fixture
def current_weather():
    return CurrentWeather(
        city="London",
        temperature=11.6,
        description="broken clouds",
        wind_speed=18.0,
        wind_direction=240,
        is_day=True,
        timezone="UTC+0",
        timezone_abbreviation="UTC+0",
        time="2024-03-10T14:00",
        units=CurrentWeatherUnits(
            temperature="°C", wind_speed="km/h", wind_direction="°"
        ),
        wind_gust=33.5,
    )


@pytest.fixture
def mock_service():
    """Patch service construction so commands never reach the network."""
    service = Mock()
    with (
        patch("unified_weather.cli.load_settings") as load_settings,
        patch("unified_weather.cli.build_service", return_value=service),
    ):
        load_settings.return_value = Mock()
        yield service


class TestCLI:
    """Test cases for CLI functionality."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        for command in ("current", "coords", "forecast", "providers"):
            assert command in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config_file(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--config", "does-not-exist.yaml", "providers"])
        assert result.exit_code == 2


class TestCurrentCommand:
    """Test the current command."""

    def test_json_output(self, mock_service, current_weather):
        mock_service.get_current_weather.return_value = current_weather

        result = CliRunner().invoke(main, ["current", "London", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["city"] == "London"
        assert data["windSpeed"] == 18.0
        assert data["windGust"] == 33.5
        mock_service.get_current_weather.assert_called_once_with("London", raw=False)

    def test_raw_output(self, mock_service):
        raw = {"current_weather": {"temperature": 12.3}}
        mock_service.get_current_weather.return_value = raw

        result = CliRunner().invoke(main, ["current", "London", "--raw"])

        assert result.exit_code == 0
        assert json.loads(result.output) == raw
        mock_service.get_current_weather.assert_called_once_with("London", raw=True)

    def test_table_output(self, mock_service, current_weather):
        mock_service.get_current_weather.return_value = current_weather

        result = CliRunner().invoke(main, ["current", "London"])

        assert result.exit_code == 0
        assert "London" in result.output
        assert "broken clouds" in result.output
        assert "33.5 km/h" in result.output

    def test_error_exits_non_zero(self, mock_service):
        mock_service.get_current_weather.side_effect = WeatherError(
            "City not found: Atlantis", kind=ErrorKind.NOT_FOUND
        )

        result = CliRunner().invoke(main, ["current", "Atlantis"])

        assert result.exit_code == 1
        assert "City not found: Atlantis" in result.output

    def test_configuration_error(self):
        with patch(
            "unified_weather.cli.build_service",
            side_effect=WeatherError(
                "API key is required for OpenWeather provider",
                kind=ErrorKind.CONFIGURATION,
            ),
        ):
            result = CliRunner().invoke(main, ["current", "London"])

        assert result.exit_code == 1
        assert "API key is required" in result.output


class TestCoordsCommand:
    def test_json_output(self, mock_service, current_weather):
        mock_service.get_weather_by_coords.return_value = current_weather

        result = CliRunner().invoke(
            main, ["coords", "--lat", "51.5", "--lon", "-0.12", "--json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["city"] == "London"
        mock_service.get_weather_by_coords.assert_called_once_with(
            Coordinates(latitude=51.5, longitude=-0.12), raw=False
        )

    def test_invalid_coordinates(self, mock_service):
        result = CliRunner().invoke(main, ["coords", "--lat", "95", "--lon", "0"])

        assert result.exit_code == 1
        mock_service.get_weather_by_coords.assert_not_called()


class TestForecastCommand:
    @pytest.fixture
    def forecast(self):
        return [
            ForecastDay(
                date="2024-03-10",
                min_temp=8,
                max_temp=15,
                description="light rain",
                max_pop=40,
                total_rain=1.3,
            ),
            ForecastDay(
                date="2024-03-11", min_temp=6, max_temp=12, description="clear sky"
            ),
        ]

    def test_json_output(self, mock_service, forecast):
        mock_service.get_forecast.return_value = forecast

        result = CliRunner().invoke(main, ["forecast", "London", "--days", "2", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [day["date"] for day in data] == ["2024-03-10", "2024-03-11"]
        assert data[0]["totalRain"] == 1.3
        assert "totalRain" not in data[1]
        mock_service.get_forecast.assert_called_once_with("London", days=2)

    def test_table_output(self, mock_service, forecast):
        mock_service.get_forecast.return_value = forecast

        result = CliRunner().invoke(main, ["forecast", "London"])

        assert result.exit_code == 0
        assert "2024-03-10" in result.output
        assert "clear sky" in result.output

    def test_days_out_of_range(self, mock_service):
        result = CliRunner().invoke(main, ["forecast", "London", "--days", "30"])
        assert result.exit_code == 2


class TestProvidersCommand:
    def test_lists_providers(self, mock_service):
        mock_service.get_provider_info.return_value = [
            {
                "role": "primary",
                "name": "open-meteo",
                "requires_api_key": False,
                "supports_forecast": True,
                "supports_raw": True,
                "supports_geocoding": True,
            },
            {
                "role": "fallback",
                "name": "openweather",
                "requires_api_key": True,
                "supports_forecast": True,
                "supports_raw": False,
                "supports_geocoding": False,
            },
        ]

        result = CliRunner().invoke(main, ["providers"])

        assert result.exit_code == 0
        assert "open-meteo" in result.output
        assert "openweather" in result.output
        assert "required" in result.output
