"""Command-line entry point: fetch normalized weather from a chosen provider."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from collections.abc import Iterable
from datetime import UTC, date

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import (
    AuthError,
    ConfigurationError,
    NetworkError,
    QueryError,
    WeatherProviderError,
)
from .log_setup import setup_logger
from .redaction import sanitize_text
from .weather.models import NormalizedWeatherResult, ProviderChoice, Quantity, Units, WeatherQuery
from .weather.service import WeatherService

DATE_FORMAT_HINT = (
    "Entered date should be in the YYYY-MM-DD format. "
    "Weather for the current time is retrieved."
)
_STRICT_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_LIKE_RE = re.compile(r"^\d+-\d+-\d+$")

_EXIT_CODES: tuple[tuple[type[Exception], int], ...] = (
    (ConfigurationError, 2),
    (AuthError, 3),
    (NetworkError, 4),
    (WeatherProviderError, 5),
    (QueryError, 6),
)

SHELL_HELP = """\
Commands:
  get <address> [YYYY-MM-DD]   fetch weather for an address, optionally on a date
  configure <provider>         switch provider (open-weather-map | weather-api)
  help                         show this message
  exit | quit                  leave the shell"""


def build_parser() -> tuple[argparse.ArgumentParser, dict[str, argparse.ArgumentParser]]:
    """Build the top-level parser and return it with its subcommand parsers."""
    parser = argparse.ArgumentParser(
        prog="weather-fetch",
        description="Fetch current or dated weather from open-weather-map or weather-api.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")
    provider_names = [choice.value for choice in ProviderChoice]

    get_parser = subparsers.add_parser("get", help="Fetch weather for a location.")
    get_parser.add_argument(
        "address", nargs="*", help="Place to look up, e.g. 'Kyiv, Ukraine'."
    )
    get_parser.add_argument("--lat", type=float, default=None, help="Latitude instead of address.")
    get_parser.add_argument("--lon", type=float, default=None, help="Longitude instead of address.")
    get_parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Day to fetch (YYYY-MM-DD). Omit for current conditions.",
    )
    get_parser.add_argument(
        "--provider",
        choices=provider_names,
        default=None,
        help="Provider to query. Defaults to WEATHER_DEFAULT_PROVIDER or open-weather-map.",
    )
    get_parser.add_argument(
        "--units", choices=["metric", "imperial"], default="metric", help="Unit system."
    )
    get_parser.add_argument(
        "--json", action="store_true", dest="as_json", help="Print the result as JSON."
    )

    providers_parser = subparsers.add_parser(
        "providers", help="List providers and whether an API key is configured."
    )

    shell_parser = subparsers.add_parser(
        "shell", help="Interactive mode reading get/configure commands from stdin."
    )
    shell_parser.add_argument(
        "--provider", choices=provider_names, default=None, help="Initial provider."
    )
    shell_parser.add_argument(
        "--units", choices=["metric", "imperial"], default="metric", help="Unit system."
    )
    shell_parser.add_argument(
        "--json", action="store_true", dest="as_json", help="Print results as JSON."
    )

    help_parser = subparsers.add_parser("help", help="Show help for a command.")
    help_parser.add_argument("topic", nargs="?", choices=["get", "providers", "shell"])

    return parser, {
        "get": get_parser,
        "providers": providers_parser,
        "shell": shell_parser,
        "help": help_parser,
    }


def parse_date_argument(value: str | None, console: Console) -> date | None:
    """Parse a YYYY-MM-DD date; other formats fall back to current weather."""
    if value is None:
        return None
    if not _STRICT_DATE_RE.match(value):
        console.print(f"[yellow]{DATE_FORMAT_HINT}[/yellow]")
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise QueryError(f"Invalid date {value!r}: {exc}") from exc


def exit_code_for(exc: Exception) -> int:
    for error_type, code in _EXIT_CODES:
        if isinstance(exc, error_type):
            return code
    return 99


def _report_failure(console: Console, logger: logging.Logger, exc: Exception) -> int:
    code = exit_code_for(exc)
    console.print(f"[red]Error ({type(exc).__name__}):[/red] {escape(sanitize_text(str(exc)))}")
    logger.debug("Command failed with exit code %d", code, exc_info=exc)
    return code


def _format_quantity(quantity: Quantity | None) -> str:
    if quantity is None:
        return "-"
    return f"{quantity.value:g} {quantity.unit}"


def render_result(console: Console, result: NormalizedWeatherResult, as_json: bool) -> None:
    if as_json:
        console.print_json(result.model_dump_json())
        return

    location = result.location
    place = ", ".join(
        part for part in [location.name, location.region, location.country] if part
    )
    wind = _format_quantity(result.wind_speed)
    if result.wind_direction is not None:
        wind = f"{wind} @ {result.wind_direction.value:g}{result.wind_direction.unit}"
    conditions = result.conditions
    if result.description:
        conditions = f"{conditions} ({result.description})"

    table = Table(title=f"Weather from {result.source}")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("Location", escape(place) if place else "unknown")
    table.add_row("Coordinates", f"({location.latitude:.4f}, {location.longitude:.4f})")
    table.add_row("Timeframe", result.timeframe)
    table.add_row("Observed (UTC)", result.observed_at.astimezone(UTC).isoformat())
    table.add_row("Temperature", _format_quantity(result.temperature))
    table.add_row("Feels like", _format_quantity(result.feels_like))
    table.add_row("Humidity", _format_quantity(result.humidity))
    table.add_row("Pressure", _format_quantity(result.pressure))
    table.add_row("Wind", wind)
    table.add_row("Conditions", escape(conditions))
    console.print(table)


def _print_providers(console: Console, settings: Settings) -> None:
    default = settings.resolve_default_provider()
    configured = settings.configured_providers()
    table = Table(title="Weather Providers")
    table.add_column("Provider")
    table.add_column("Env var")
    table.add_column("Configured")
    table.add_column("Default")
    for choice in ProviderChoice:
        table.add_row(
            choice.value,
            choice.env_var,
            "yes" if choice in configured else "no",
            "*" if choice is default else "",
        )
    console.print(table)


def _run_get(
    args: argparse.Namespace,
    service: WeatherService,
    settings: Settings,
    console: Console,
    err_console: Console,
) -> int:
    query = WeatherQuery(
        address=" ".join(args.address) or None,
        latitude=args.lat,
        longitude=args.lon,
        target_date=parse_date_argument(args.date, err_console),
        units=args.units,
    )
    choice = ProviderChoice(args.provider) if args.provider else settings.resolve_default_provider()
    result = service.query(query, choice)
    render_result(console, result, as_json=args.as_json)
    return 0


class WeatherShell:
    """Line-oriented interactive mode.

    Keeps a current provider that `configure` switches; `get` queries it.
    Input errors and provider failures are reported and the loop continues.
    """

    def __init__(
        self,
        service: WeatherService,
        console: Console,
        err_console: Console,
        logger: logging.Logger,
        provider: ProviderChoice,
        units: Units = "metric",
        as_json: bool = False,
    ) -> None:
        self.service = service
        self.console = console
        self.err_console = err_console
        self.logger = logger
        self.provider = provider
        self.units = units
        self.as_json = as_json

    def run(self, lines: Iterable[str]) -> int:
        self.console.print(f"Provider {self.provider} will be used.")
        for line in lines:
            tokens = line.split()
            if not tokens:
                continue
            command = tokens[0].lower()
            if command in {"exit", "quit"}:
                break
            try:
                self.handle(command, tokens[1:])
            except (ConfigurationError, QueryError, WeatherProviderError) as exc:
                _report_failure(self.err_console, self.logger, exc)
            except Exception as exc:
                self.logger.exception("Unexpected failure handling %r: %s", command, exc)
                _report_failure(self.err_console, self.logger, exc)
        return 0

    def handle(self, command: str, arguments: list[str]) -> None:
        if command == "help":
            self.console.print(SHELL_HELP)
        elif command == "get":
            self._get(arguments)
        elif command == "configure":
            self._configure(arguments)
        else:
            raise QueryError(f"Unknown command {command!r}. Please, see help and try again!")

    def _get(self, arguments: list[str]) -> None:
        raw_date: str | None = None
        if arguments and _DATE_LIKE_RE.match(arguments[-1]):
            raw_date = arguments[-1]
            arguments = arguments[:-1]
        if not arguments:
            raise QueryError("Usage: get <address> [YYYY-MM-DD]")
        query = WeatherQuery(
            address=" ".join(arguments),
            target_date=parse_date_argument(raw_date, self.err_console),
            units=self.units,
        )
        result = self.service.query(query, self.provider)
        render_result(self.console, result, as_json=self.as_json)

    def _configure(self, arguments: list[str]) -> None:
        names = ", ".join(choice.value for choice in ProviderChoice)
        if len(arguments) != 1:
            raise QueryError(f"Usage: configure <provider> where provider is one of: {names}")
        try:
            choice = ProviderChoice(arguments[0].lower())
        except ValueError as exc:
            raise QueryError(
                f"Unknown provider {arguments[0]!r}; expected one of: {names}"
            ) from exc

        if choice is self.provider:
            self.console.print(f"Provider {choice} is already in use.")
            return
        if choice not in self.service.available_providers():
            raise ConfigurationError(
                f"No API key configured for {choice}. Set {choice.env_var} and restart."
            )
        self.console.print(f"Changing provider: {self.provider} => {choice}.")
        self.provider = choice


def main() -> int:
    """Run the weather-fetch command line."""
    parser, subcommands = build_parser()
    args = parser.parse_args()
    console = Console()
    err_console = Console(stderr=True)

    if args.command == "help":
        target = subcommands[args.topic] if args.topic else parser
        target.print_help()
        return 0

    logger = setup_logger()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        return _report_failure(err_console, logger, exc)

    setup_logger(level=settings.log_level)
    logger.debug("Loaded settings: %s", settings.safe_summary())

    try:
        with WeatherService(settings=settings, logger=logger) as service:
            if args.command == "providers":
                _print_providers(console, settings)
                return 0
            if args.command == "shell":
                provider = (
                    ProviderChoice(args.provider)
                    if args.provider
                    else settings.resolve_default_provider()
                )
                shell = WeatherShell(
                    service,
                    console,
                    err_console,
                    logger,
                    provider=provider,
                    units=args.units,
                    as_json=args.as_json,
                )
                return shell.run(sys.stdin)
            return _run_get(args, service, settings, console, err_console)
    except (ConfigurationError, QueryError, WeatherProviderError) as exc:
        return _report_failure(err_console, logger, exc)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected weather-fetch failure: %s", exc)
        return 99


if __name__ == "__main__":
    sys.exit(main())
