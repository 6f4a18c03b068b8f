"""
Device Configuration Store

Owns config.json. Its presence means "provisioned" both to this service and
to the boot sequence, so every change goes through an atomic rename and all
changes are serialized by one process-wide lock.
"""

import json
import threading
from pathlib import Path

from pydantic import ValidationError

from mobile_api.common.config import DeviceConfig
from mobile_api.common.exceptions import PersistError
from mobile_api.common.logging_setup import get_service_logger
from mobile_api.common.state import atomic_write_text, read_json, remove_state_file

logger = get_service_logger("device.config")


class ConfigStore:
    """
    Read/write access to the device configuration file.

    read() needs no lock: the file is only ever replaced by rename, so a
    reader sees either the old or the new complete file.
    """

    def __init__(self, path: Path, file_mode: int = 0o600):
        self.path = path
        self.file_mode = file_mode
        self._write_lock = threading.Lock()

    def exists(self) -> bool:
        """True when the device is provisioned"""
        return self.path.exists()

    def read(self) -> DeviceConfig | None:
        """
        Load the current configuration.

        Returns:
            The configuration, or None when the device is unprovisioned

        Raises:
            PersistError: If the file exists but cannot be read or parsed
        """
        try:
            data = read_json(self.path)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read {self.path}: {e}")
            raise PersistError(f"Could not read configuration: {e}", str(self.path)) from e

        try:
            return DeviceConfig.model_validate(data)
        except ValidationError as e:
            logger.error(f"Stored configuration {self.path} is invalid: {e.error_count()} errors")
            raise PersistError("Stored configuration is invalid", str(self.path)) from e

    def write(self, config: DeviceConfig) -> None:
        """
        Replace the configuration file with config.

        Raises:
            PersistError: If the write fails; the previous file is unchanged
        """
        text = config.to_json() + "\n"

        with self._write_lock:
            try:
                atomic_write_text(self.path, text, self.file_mode)
            except OSError as e:
                logger.error(f"Failed to write {self.path}: {e}")
                raise PersistError(f"Could not save configuration: {e}", str(self.path)) from e

        logger.info(f"Configuration saved for {config.name!r}", extra={"path": str(self.path)})

    def delete(self) -> None:
        """
        Remove the configuration file. Succeeds if it is already absent.

        Raises:
            PersistError: If the file exists but cannot be removed
        """
        with self._write_lock:
            try:
                removed = remove_state_file(self.path)
            except OSError as e:
                logger.error(f"Failed to remove {self.path}: {e}")
                raise PersistError(f"Could not remove configuration: {e}", str(self.path)) from e

        if removed:
            logger.info("Configuration removed", extra={"path": str(self.path)})
        else:
            logger.debug("Configuration was already absent", extra={"path": str(self.path)})
