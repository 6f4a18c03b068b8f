"""
Tests for API key validation
"""

import base64

import pytest

from mobile_api.services.auth.guard import AuthGuard
from mobile_api.services.device.identity import load_identity

from tests.conftest import AUTH_KEY, OTHER_KEY, write_device_info


@pytest.fixture
def guard(tmp_path) -> AuthGuard:
    return AuthGuard(load_identity(write_device_info(tmp_path)))


def test_accepts_hex_key(guard):
    assert guard.authorize(AUTH_KEY)


def test_accepts_uppercase_hex_key(guard):
    assert guard.authorize(AUTH_KEY.upper())


def test_accepts_base64_key(guard):
    encoded = base64.b64encode(bytes.fromhex(AUTH_KEY)).decode()
    assert guard.authorize(encoded)


@pytest.mark.parametrize("presented", [
    None,
    "",
    OTHER_KEY,
    AUTH_KEY[:-1],
    AUTH_KEY + "0",
    "0" * 64,
    "definitely not a key",
])
def test_rejects(guard, presented):
    assert not guard.authorize(presented)
