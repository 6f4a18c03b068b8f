"""
Common Utilities

Shared modules used across all services:
- config.py - DeviceIdentity and DeviceConfig models
- settings.py - Service settings (env, .env, YAML)
- security.py - SecurityKey and UUIDv7 generation
- state.py - Atomic file writes for shared state files
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
"""

from .config import DeviceConfig, DeviceIdentity
from .exceptions import (
    MobileApiError,
    StartupError,
    KeyFormatError,
    UnauthorizedError,
    ConfigNotFoundError,
    PersistError,
    ExecutionError,
    CommandBusyError,
    StatusTimeoutError,
    StatusUnavailableError,
)
from .logging_setup import setup_logging, get_service_logger
from .security import SecurityKey, generate_uuid7
from .settings import Settings, load_settings

__all__ = [
    # Models
    "DeviceConfig",
    "DeviceIdentity",
    # Exceptions
    "MobileApiError",
    "StartupError",
    "KeyFormatError",
    "UnauthorizedError",
    "ConfigNotFoundError",
    "PersistError",
    "ExecutionError",
    "CommandBusyError",
    "StatusTimeoutError",
    "StatusUnavailableError",
    # Logging
    "setup_logging",
    "get_service_logger",
    # Security
    "SecurityKey",
    "generate_uuid7",
    # Settings
    "Settings",
    "load_settings",
]
