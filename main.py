"""Command-line interface for the APOD ratings service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

from apod_ratings.config import Settings, load_settings
from apod_ratings.errors import ConfigurationError

logger = logging.getLogger("apod_ratings.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="APOD ratings service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP ratings service")
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Bind address for the API (default: APOD_RATINGS_HOST or 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: APOD_RATINGS_PORT or 8080)",
    )

    subparsers.add_parser(
        "check-config", help="Validate the configuration and print the effective settings"
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "check-config"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc


def _serve(*, settings: Settings, host: str | None, port: int | None) -> None:
    from apod_ratings.service import create_app
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting APOD ratings API on http://%s:%s", bind_host, bind_port)

    app = create_app(settings=settings)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


def _check_config(settings: Settings) -> None:
    print("Configuration OK.")
    for key, value in settings.describe().items():
        print(f"  {key}: {value}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = _load_settings_or_exit()

    if args.command == "serve":
        _serve(settings=settings, host=args.host, port=args.port)
    elif args.command == "check-config":
        _check_config(settings)


if __name__ == "__main__":
    main()
