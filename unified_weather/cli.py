"""Command-line interface for unified-weather."""

import json
import sys
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from unified_weather import __version__
from unified_weather.config import build_service, load_settings
from unified_weather.errors import WeatherError
from unified_weather.logging_config import get_logger, setup_logging
from unified_weather.models import Coordinates, CurrentWeather, ForecastDay
from unified_weather.service import WeatherService

console = Console()
logger = get_logger(__name__)


def _service(ctx: click.Context) -> WeatherService:
    settings = load_settings(ctx.obj.get("config_file"))
    return build_service(settings)


def _fail(message: str) -> NoReturn:
    console.print(f"❌ Error: {escape(message)}")
    sys.exit(1)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_current(weather: CurrentWeather) -> None:
    units = weather.units
    console.print(f"🌤️  [bold]{escape(weather.city)}[/bold]: {escape(weather.description)}")

    table = Table(show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Temperature", f"{weather.temperature} {units.temperature}")
    if weather.feels_like is not None:
        table.add_row("Feels like", f"{weather.feels_like} {units.temperature}")
    table.add_row(
        "Wind",
        f"{weather.wind_speed} {units.wind_speed} at {weather.wind_direction}{units.wind_direction}",
    )
    if weather.wind_gust is not None:
        table.add_row("Gusts", f"{weather.wind_gust} {units.wind_speed}")
    if weather.humidity is not None:
        table.add_row("Humidity", f"{weather.humidity} {units.humidity or '%'}")
    if weather.pressure is not None:
        table.add_row("Pressure", f"{weather.pressure} {units.pressure or 'hPa'}")
    table.add_row("Daytime", "yes" if weather.is_day else "no")
    table.add_row("Observed", f"{weather.time} ({weather.timezone_abbreviation})")
    console.print(table)


def _print_forecast(title: str, forecast: list[ForecastDay]) -> None:
    table = Table(title=title)
    table.add_column("Date")
    table.add_column("Min °C", justify="right")
    table.add_column("Max °C", justify="right")
    table.add_column("Conditions")
    table.add_column("Rain %", justify="right")

    for day in forecast:
        table.add_row(
            day.date,
            f"{day.min_temp:.1f}",
            f"{day.max_temp:.1f}",
            day.description,
            "-" if day.max_pop is None else str(day.max_pop),
        )
    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML settings file",
)
@click.pass_context
def main(ctx: click.Context, log_level: str, config_file: str | None) -> None:
    """Unified weather: current conditions and forecasts from Open-Meteo or OpenWeather."""
    setup_logging(level=log_level.upper(), enable_file_logging=False)
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file


@main.command()
@click.argument("city")
@click.option("--raw", is_flag=True, help="Print the untransformed upstream response")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def current(ctx: click.Context, city: str, raw: bool, as_json: bool) -> None:
    """Get current weather for CITY."""
    try:
        result = _service(ctx).get_current_weather(city, raw=raw)
    except (WeatherError, ValueError, FileNotFoundError) as e:
        logger.error(f"Current weather lookup failed: {e}")
        _fail(str(e))

    if raw:
        _print_json(result)
    elif as_json:
        _print_json(result.to_dict())
    else:
        _print_current(result)


@main.command()
@click.option("--lat", type=float, required=True, help="Latitude in decimal degrees")
@click.option("--lon", type=float, required=True, help="Longitude in decimal degrees")
@click.option("--raw", is_flag=True, help="Print the untransformed upstream response")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def coords(
    ctx: click.Context, lat: float, lon: float, raw: bool, as_json: bool
) -> None:
    """Get current weather for a latitude/longitude pair."""
    try:
        location = Coordinates(latitude=lat, longitude=lon)
        result = _service(ctx).get_weather_by_coords(location, raw=raw)
    except (WeatherError, ValueError, FileNotFoundError) as e:
        logger.error(f"Coordinate weather lookup failed: {e}")
        _fail(str(e))

    if raw:
        _print_json(result)
    elif as_json:
        _print_json(result.to_dict())
    else:
        _print_current(result)


@main.command()
@click.argument("city")
@click.option("--days", default=5, show_default=True, type=click.IntRange(1, 16))
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def forecast(ctx: click.Context, city: str, days: int, as_json: bool) -> None:
    """Get a daily forecast for CITY."""
    try:
        result = _service(ctx).get_forecast(city, days=days)
    except (WeatherError, ValueError, FileNotFoundError) as e:
        logger.error(f"Forecast lookup failed: {e}")
        _fail(str(e))

    if as_json:
        _print_json([day.to_dict() for day in result])
    else:
        _print_forecast(f"{days}-day forecast for {city}", result)


@main.command()
@click.pass_context
def providers(ctx: click.Context) -> None:
    """Show the configured providers and their capabilities."""
    try:
        info = _service(ctx).get_provider_info()
    except (WeatherError, ValueError, FileNotFoundError) as e:
        _fail(str(e))

    table = Table(title="Configured providers")
    for column in ("Role", "Provider", "API key", "Forecast", "Raw", "Geocoding"):
        table.add_column(column)
    for entry in info:
        table.add_row(
            entry["role"],
            entry["name"],
            "required" if entry["requires_api_key"] else "no",
            "yes" if entry["supports_forecast"] else "no",
            "yes" if entry["supports_raw"] else "no",
            "yes" if entry["supports_geocoding"] else "no",
        )
    console.print(table)


if __name__ == "__main__":
    main()
