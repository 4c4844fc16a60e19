"""
Command-line interface for the application.

This module provides the main entry point for the CLI.  Credentials come
from ``AMBIENT_API_KEY`` / ``AMBIENT_APPLICATION_KEY`` (or a ``.env`` file).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from ambient_weather import __version__
from ambient_weather.config import Settings, get_settings
from ambient_weather.context import CallContext
from ambient_weather.datasources.ambient import (
    AmbientClient,
    DeviceRecord,
    FunctionData,
    create_api_config,
    fetch_historical,
    fetch_latest,
    stream_historical,
)
from ambient_weather.errors import AmbientWeatherError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    if numeric > logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ambient-weather",
        description="Fetch device snapshots and historical data from the Ambient Weather API",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall deadline in seconds (default: none)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    subparsers.add_parser("devices", help="Show registered devices and their latest data")

    history_parser = subparsers.add_parser("history", help="Fetch historical records")
    history_parser.add_argument("--mac", required=True, help="Device MAC address")
    history_parser.add_argument(
        "--start",
        required=True,
        help="First day to fetch, YYYY-MM-DD (UTC)",
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Records per 24h window, 1-288 (default: limit from settings)",
    )
    history_parser.add_argument(
        "--stream",
        action="store_true",
        help="Print each window as soon as it arrives",
    )

    return parser


def _client(settings: Settings) -> AmbientClient:
    return AmbientClient(
        settings.base_url,
        transport=settings.transport_config(),
        request_interval=settings.request_interval,
    )


def _context(args: argparse.Namespace) -> CallContext:
    if args.timeout is None:
        return CallContext.background()
    return CallContext.with_timeout(args.timeout)


def _print_record(record: DeviceRecord) -> None:
    print(record.model_dump_json(by_alias=True, exclude_none=True))


def _report(exc: AmbientWeatherError) -> int:
    print(f"error: {exc.kind}: {exc}", file=sys.stderr)
    return 1


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Base URL: {settings.base_url}")
    print(f"Credentials: {'configured' if settings.has_credentials else 'missing'}")
    print(f"Log level: {settings.log_level}")
    return 0


def cmd_devices(args: argparse.Namespace) -> int:
    """Handle the 'devices' command: latest snapshot of every device."""
    settings = get_settings()
    fd = create_api_config(settings.api_key, settings.application_key)
    try:
        with _client(settings) as client:
            devices = fetch_latest(client, _context(args), fd)
    except AmbientWeatherError as exc:
        return _report(exc)

    payload = [d.model_dump(mode="json", by_alias=True, exclude_none=True) for d in devices]
    print(json.dumps(payload, indent=2))
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """Handle the 'history' command: one JSON record per line, oldest first."""
    settings = get_settings()
    try:
        fd = FunctionData.from_date(
            settings.api_key,
            settings.application_key,
            mac_address=args.mac,
            start_date=args.start,
            limit=args.limit if args.limit is not None else settings.limit,
        )
        ctx = _context(args)
        with _client(settings) as client:
            if args.stream:
                with stream_historical(client, ctx, fd) as stream:
                    for record in stream.records():
                        _print_record(record)
            else:
                for record in fetch_historical(client, ctx, fd):
                    _print_record(record)
    except AmbientWeatherError as exc:
        return _report(exc)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging("DEBUG" if args.debug else get_settings().log_level)
    logger.debug("Running command %s", args.command)

    commands = {
        "info": cmd_info,
        "devices": cmd_devices,
        "history": cmd_history,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
