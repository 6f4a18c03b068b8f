"""
Shared Test Fixtures

Every test gets its own SIFIS-Home directory under tmp_path with a valid
device.json and a scripts/ directory. Command scripts are generated per test
and leave a marker file next to themselves when they run.
"""

import json
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mobile_api.api.main import create_app
from mobile_api.common.settings import Settings

AUTH_KEY = "3c5e2a1f9b8d7c6e5f4a3b2c1d0e9f8a7b6c5d4e3f2a1b0c9d8e7f6a5b4c3d2e"
OTHER_KEY = "ab" * 32
DEVICE_UUID = "018b9f2e-7c3a-7d4e-9f10-2a3b4c5d6e7f"

VALID_CONFIG = {
    "name": "Living Room Lamp",
    "dht-shared-key": "0123456789abcdef" * 4,
}


def make_script(directory: Path, name: str, body: str = "exit 0") -> Path:
    """Write an executable shell script that records that it ran."""
    path = directory / name
    path.write_text(
        "#!/bin/sh\n"
        f'touch "{name}.ran"\n'
        f"{body}\n",
        encoding="utf-8",
    )
    os.chmod(path, 0o755)
    return path


def script_ran(directory: Path, name: str) -> bool:
    return (directory / f"{name}.ran").exists()


def write_device_info(home: Path, **changes) -> Path:
    data = {
        "product-name": "Test Smart Device",
        "uuid": DEVICE_UUID,
        "authorization-key": AUTH_KEY,
        "private-key-file": str(home / "private.pem"),
    }
    data.update(changes)
    path = home / "device.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host settings out of the tests."""
    for name in list(os.environ):
        if name.startswith("MOBILE_API_") or name == "SIFIS_HOME_PATH":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def home_path(tmp_path) -> Path:
    home = tmp_path / "sifis-home"
    home.mkdir()
    write_device_info(home)
    return home


@pytest.fixture
def scripts_path(home_path) -> Path:
    scripts = home_path / "scripts"
    scripts.mkdir()
    for name in ("factory_reset.sh", "restart.sh", "shutdown.sh"):
        make_script(scripts, name)
    return scripts


@pytest.fixture
def settings(home_path, scripts_path) -> Settings:
    return Settings(
        _env_file=None,
        sifis_home_path=home_path,
        scripts_path=scripts_path,
        script_timeout_seconds=5,
        status_timeout_seconds=5,
        disk_path=home_path,
        log_format="text",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict:
    return {"x-api-key": AUTH_KEY}
