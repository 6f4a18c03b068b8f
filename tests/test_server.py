"""
Tests for the server entry point (validation only, no sockets)
"""

import pytest

from mobile_api import server


@pytest.fixture(autouse=True)
def no_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(server.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    return calls


def test_check_passes_with_valid_home(home_path, no_uvicorn):
    assert server.main(["--home", str(home_path), "--check"]) == 0
    assert no_uvicorn == []


def test_missing_device_info_fails(tmp_path, no_uvicorn):
    assert server.main(["--home", str(tmp_path), "--check"]) == 1
    assert no_uvicorn == []


def test_invalid_settings_file_fails(tmp_path):
    config_file = tmp_path / "mobile-api.yaml"
    config_file.write_text("port: not-a-port\n", encoding="utf-8")
    assert server.main(["--config", str(config_file)]) == 1


def test_runs_uvicorn_with_settings(home_path, no_uvicorn):
    assert server.main(["--home", str(home_path), "--host", "127.0.0.1", "--port", "8123"]) == 0
    assert no_uvicorn == [{"host": "127.0.0.1", "port": 8123}]
