#!/usr/bin/env python3
"""
Create Device Information

Writes a new device.json for the Mobile API server with a random
authorization key and a UUIDv7 device id.

The file goes to the SIFIS-Home directory (default /opt/sifis-home, or
SIFIS_HOME_PATH), unless -o gives another directory.

Usage:
    create-device-info "Smart Lamp"                 # /opt/sifis-home/device.json
    create-device-info "Smart Lamp" -o ./sifis-home # ./sifis-home/device.json
    create-device-info "Smart Lamp" -f --show-key   # Overwrite, print the key

Exit codes:
    0 - Written, or already present and -f not given
    1 - Could not write the file
"""

import argparse
import sys
from pathlib import Path

from mobile_api.common.config import DeviceIdentity
from mobile_api.common.exceptions import StartupError
from mobile_api.common.security import SecurityKey, generate_uuid7
from mobile_api.common.settings import DEVICE_INFO_FILE, load_settings
from mobile_api.common.state import atomic_write_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-device-info",
        description="Creates 'device.json' for the server",
    )
    parser.add_argument(
        "product_name",
        help="Product name for the SIFIS-Home Smart Device",
    )
    parser.add_argument(
        "--output-path", "-o",
        type=Path,
        default=None,
        metavar="PATH",
        help="Directory to write device.json to",
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite an existing device.json",
    )
    parser.add_argument(
        "--private-key", "-p",
        type=Path,
        default=None,
        metavar="FILE",
        help="Path of the device's private key (default: <home>/private.pem)",
    )
    parser.add_argument(
        "--show-key",
        action="store_true",
        help="Print the new authorization key",
    )
    return parser


def new_identity(product_name: str, private_key_file: Path) -> DeviceIdentity:
    """Create a device identity with a fresh key and id."""
    return DeviceIdentity(
        product_name=product_name,
        uuid=generate_uuid7(),
        authorization_key=SecurityKey.generate().hex(),
        private_key_file=private_key_file,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except StartupError as e:
        print(e.message, file=sys.stderr)
        return 1

    home_path = args.output_path or settings.sifis_home_path
    private_key_file = args.private_key or settings.private_key_path

    device_info_file = home_path / DEVICE_INFO_FILE

    if device_info_file.exists() and not args.force:
        print(f"The device information file already exists at: {device_info_file}")
        print("You can use the -f option to overwrite it with a new one.")
        return 0

    try:
        identity = new_identity(args.product_name, private_key_file)
    except ValueError as e:
        print(f"Invalid device information: {e}", file=sys.stderr)
        return 1

    try:
        home_path.mkdir(parents=True, exist_ok=True)
        atomic_write_text(
            device_info_file,
            identity.model_dump_json(by_alias=True, indent=2) + "\n",
        )
    except OSError as e:
        print(f"Could not write device information: {e}", file=sys.stderr)
        return 1

    print(f"A new device information file was written to: {device_info_file}")
    if args.show_key:
        print(f"Authorization key: {identity.authorization_key}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
