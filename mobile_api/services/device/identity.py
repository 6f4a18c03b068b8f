"""
Device Identity Store

Loads device.json once at startup. The file is the root of trust for the API
key and cannot be synthesized at runtime, so any problem with it stops the
service before it serves a single request.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from mobile_api.common.config import DeviceIdentity
from mobile_api.common.exceptions import StartupError
from mobile_api.common.logging_setup import get_service_logger
from mobile_api.common.state import read_json

logger = get_service_logger("device.identity")


def load_identity(path: Path) -> DeviceIdentity:
    """
    Load and validate the device information file.

    Args:
        path: Location of device.json

    Returns:
        The immutable device identity

    Raises:
        StartupError: If the file is missing, unreadable, not JSON, fails
            validation, or has an all-zero authorization key
    """
    try:
        data = read_json(path)
    except FileNotFoundError as e:
        raise StartupError(
            f"Device information file {str(path)!r} not found. "
            "You can use the create-device-info tool to create it."
        ) from e
    except json.JSONDecodeError as e:
        raise StartupError(f"Device information file {str(path)!r} is not valid JSON: {e}") from e
    except OSError as e:
        raise StartupError(f"Could not load device information file {str(path)!r}: {e}") from e

    try:
        identity = DeviceIdentity.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "<root>" for error in e.errors()
        )
        raise StartupError(
            f"Device information file {str(path)!r} is invalid (fields: {fields})"
        ) from e

    if identity.security_key.is_null():
        raise StartupError(f"Device information file {str(path)!r} has an all-zero authorization key")

    logger.info(
        f"Loaded device identity for {identity.product_name}",
        extra={"uuid": str(identity.uuid), "path": str(path)},
    )
    return identity
