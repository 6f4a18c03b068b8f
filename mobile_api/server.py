#!/usr/bin/env python3
"""
Smart Device Mobile API - Server Entry Point

Loads the settings, checks the device identity and serves the API with
uvicorn.

Usage:
    mobile-api-server                          # Settings from env / .env
    mobile-api-server --config mobile-api.yaml # Settings from YAML
    mobile-api-server --home ./sifis-home -v   # Local development
    mobile-api-server --check                  # Validate and exit

Exit codes:
    0 - Stopped normally (or --check passed)
    1 - Settings or device.json invalid
"""

import argparse
import sys

import uvicorn

from mobile_api import __version__
from mobile_api.api.main import create_app
from mobile_api.common.exceptions import StartupError
from mobile_api.common.logging_setup import get_service_logger, setup_logging
from mobile_api.common.settings import load_settings

logger = get_service_logger("server")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mobile-api-server",
        description="Smart Device Mobile API server",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to a YAML settings file",
    )
    parser.add_argument(
        "--home",
        type=str,
        default=None,
        help="SIFIS-Home directory holding device.json (default: /opt/sifis-home)",
    )
    parser.add_argument("--host", type=str, default=None, help="Address to listen on")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate settings and device.json, then exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            sifis_home_path=args.home,
            host=args.host,
            port=args.port,
            log_level="DEBUG" if args.verbose else None,
        )
    except StartupError as e:
        setup_logging("INFO", json_format=False)
        logger.error(e.message)
        return 1

    setup_logging(settings.log_level, json_format=settings.log_format == "json")

    try:
        app = create_app(settings)
    except StartupError as e:
        logger.error(e.message)
        return 1

    if args.check:
        logger.info("Settings and device information are valid")
        return 0

    logger.info(f"Starting Mobile API on {settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
