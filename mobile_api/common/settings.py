"""
Service Settings

Settings are read, in priority order, from:
1. Explicit values (command-line flags and an optional YAML file)
2. Environment variables (MOBILE_API_*, plus SIFIS_HOME_PATH)
3. A .env file in the working directory

Create a .env file for development, e.g.:
    SIFIS_HOME_PATH=./sifis-home
    MOBILE_API_SCRIPTS_PATH=./scripts
    MOBILE_API_LOG_FORMAT=text
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import StartupError

DEFAULT_HOME_PATH = Path("/opt/sifis-home")

DEVICE_INFO_FILE = "device.json"
DEVICE_CONFIG_FILE = "config.json"
SCRIPTS_DIR = "scripts"
PRIVATE_KEY_FILE = "private.pem"


class Settings(BaseSettings):
    """Mobile API service settings"""

    model_config = SettingsConfigDict(
        env_prefix="MOBILE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sifis_home_path: Path = Field(
        DEFAULT_HOME_PATH,
        validation_alias=AliasChoices("sifis_home_path", "SIFIS_HOME_PATH"),
    )
    scripts_path: Path | None = Field(
        None,
        validation_alias=AliasChoices("scripts_path", "MOBILE_API_SCRIPTS_PATH"),
    )

    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)
    api_prefix: str = "/v1"

    log_level: str = "INFO"
    log_format: str = "json"

    script_timeout_seconds: float = Field(30.0, gt=0)
    status_timeout_seconds: float = Field(2.0, gt=0)
    disk_path: Path = Path("/")
    config_file_mode: int = 0o600
    factory_reset_confirmation: bool = False

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return value

    @field_validator("config_file_mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        # Accept "0o640" / "640" from env and YAML
        if isinstance(value, str):
            text = value.strip().lower().removeprefix("0o")
            return int(text, 8)
        return value

    @field_validator("config_file_mode")
    @classmethod
    def _check_mode(cls, value: int) -> int:
        if not 0 <= value <= 0o777:
            raise ValueError(f"config_file_mode must be a permission mode up to 0o777, got {value:#o}")
        return value

    @property
    def device_info_path(self) -> Path:
        return self.sifis_home_path / DEVICE_INFO_FILE

    @property
    def device_config_path(self) -> Path:
        return self.sifis_home_path / DEVICE_CONFIG_FILE

    @property
    def resolved_scripts_path(self) -> Path:
        return self.scripts_path or self.sifis_home_path / SCRIPTS_DIR

    @property
    def private_key_path(self) -> Path:
        return self.sifis_home_path / PRIVATE_KEY_FILE


def load_settings(config_file: str | Path | None = None, **overrides: Any) -> Settings:
    """
    Build settings from an optional YAML file plus explicit overrides.

    Args:
        config_file: YAML mapping of setting names to values
        **overrides: Values that win over the file (None values are ignored)

    Raises:
        StartupError: If the file cannot be read or a value is invalid
    """
    values: dict[str, Any] = {}

    if config_file is not None:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise StartupError(f"Settings file not found: {config_file}") from e
        except (OSError, yaml.YAMLError) as e:
            raise StartupError(f"Could not read settings file {config_file}: {e}") from e

        if not isinstance(loaded, dict):
            raise StartupError(f"Settings file {config_file} must contain a mapping")
        # YAML reads 600 as decimal and 0600 as octal
        mode = loaded.get("config_file_mode")
        if mode is not None and not isinstance(mode, str):
            raise StartupError(
                f"config_file_mode in {config_file} must be quoted, e.g. \"0o600\""
            )
        values.update(loaded)

    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        raise StartupError(f"Invalid settings: {e}") from e
