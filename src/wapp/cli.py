"""wapp CLI: choose a weather provider, then fetch normalized weather from it."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

from .config import load_app_settings
from .dispatcher import configure_provider, fetch_weather
from .exceptions import ConfigurationError, ProviderError, ValidationError, WappError
from .log_setup import setup_logger
from .redaction import sanitize_for_logging
from .weather.models import DataKind, WeatherFetchResult, WeatherReport
from .weather.registry import SUPPORTED_PROVIDERS

EXIT_OK = 0
EXIT_VALIDATION = 2
EXIT_CONFIGURATION = 3
EXIT_PROVIDER = 4
EXIT_UNEXPECTED = 99


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="wapp",
        description="Fetch current weather or a forecast from the configured provider.",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    configure = subcommands.add_parser("configure", help="Select and save the weather provider.")
    configure.add_argument(
        "provider",
        help=f"Provider name, one of: {', '.join(SUPPORTED_PROVIDERS)}.",
    )

    get = subcommands.add_parser("get", help="Fetch weather from the configured provider.")
    get.add_argument("--city", type=str, default=None, help="City name (required).")
    get.add_argument(
        "--data",
        type=str,
        default=DataKind.NOW.value,
        help="Data kind: now, forecast or tomorrow (default: now).",
    )
    get.add_argument(
        "--output",
        choices=["table", "json", "raw"],
        default="table",
        help="Render the normalized report (table/json) or the raw provider payload.",
    )
    return parser.parse_args(argv)


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _print_report(console: Console, report: WeatherReport) -> None:
    console.print(f"Location:    {report.location}")
    console.print(f"Provider:    {report.provider}")
    console.print(f"Data:        {report.data_kind.value}")
    console.print(
        f"Temperature: {report.temperature:.1f} {report.unit.symbol} ({report.unit.value})"
    )
    console.print(f"Condition:   {report.condition}")

    for key, value in report.extra.items():
        if key == "days":
            continue
        label = key.replace("_", " ").capitalize() + ":"
        console.print(f"{label:<13}{_format_value(value)}")

    days = report.extra.get("days")
    if not days:
        return

    table = Table(title=f"Forecast ({report.unit.symbol})")
    table.add_column("Date")
    table.add_column("Min")
    table.add_column("Max")
    table.add_column("Condition", overflow="fold")
    for day in days:
        table.add_row(
            str(day.get("date", "-")),
            _format_value(day["min_temp"]) if "min_temp" in day else "-",
            _format_value(day["max_temp"]) if "max_temp" in day else "-",
            str(day.get("condition", "-")),
        )
    console.print(table)


def _render(console: Console, result: WeatherFetchResult, output: str) -> None:
    if output == "json":
        console.print_json(result.report.model_dump_json())
    elif output == "raw":
        console.print_json(data=sanitize_for_logging(result.raw_payload))
    else:
        _print_report(console, result.report)


def _error_line(exc: WappError) -> str:
    return f"{exc.kind}: {' '.join(str(exc).split())}"


def _exit_code_for(exc: WappError) -> int:
    if isinstance(exc, ValidationError):
        return EXIT_VALIDATION
    if isinstance(exc, ConfigurationError):
        return EXIT_CONFIGURATION
    if isinstance(exc, ProviderError):
        return EXIT_PROVIDER
    return EXIT_UNEXPECTED


def main(
    argv: list[str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Run the CLI and return the process exit code."""
    args = parse_args(argv)
    console = Console(highlight=False, markup=False, soft_wrap=True)
    err_console = Console(stderr=True, highlight=False, markup=False, soft_wrap=True)

    try:
        app_settings = load_app_settings()
    except ConfigurationError as exc:
        err_console.print(_error_line(exc))
        return EXIT_CONFIGURATION

    logger = setup_logger(level=app_settings.log_level)
    try:
        if args.command == "configure":
            choice = configure_provider(args.provider, app_settings=app_settings, logger=logger)
            console.print(f"Provider saved: {choice.provider}")
            return EXIT_OK

        result = asyncio.run(
            fetch_weather(
                args.city,
                args.data,
                app_settings=app_settings,
                logger=logger,
                transport=transport,
            )
        )
        _render(console, result, args.output)
        return EXIT_OK
    except WappError as exc:
        logger.info("Command %s failed kind=%s: %s", args.command, exc.kind, exc)
        err_console.print(_error_line(exc))
        return _exit_code_for(exc)
    except Exception as exc:  # pragma: no cover - last-resort CLI handler
        logger.exception("Unexpected failure: %s", exc)
        err_console.print(f"Error: {type(exc).__name__}: {exc}")
        return EXIT_UNEXPECTED


if __name__ == "__main__":
    sys.exit(main())
