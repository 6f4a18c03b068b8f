"""
Tests for the create-device-info tool
"""

import json
import stat

from mobile_api.create_device_info import main
from mobile_api.services.device.identity import load_identity


def test_creates_device_info(tmp_path):
    assert main(["Smart Lamp", "-o", str(tmp_path)]) == 0

    identity = load_identity(tmp_path / "device.json")
    assert identity.product_name == "Smart Lamp"
    assert identity.uuid.version == 7
    assert not identity.security_key.is_null()


def test_file_uses_kebab_case_and_is_private(tmp_path):
    main(["Smart Lamp", "-o", str(tmp_path)])
    path = tmp_path / "device.json"

    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"product-name", "uuid", "authorization-key", "private-key-file"}
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_default_location_follows_sifis_home(monkeypatch, tmp_path):
    monkeypatch.setenv("SIFIS_HOME_PATH", str(tmp_path))

    assert main(["Smart Lamp"]) == 0

    identity = load_identity(tmp_path / "device.json")
    assert identity.private_key_file == tmp_path / "private.pem"


def test_creates_output_directory(tmp_path):
    output = tmp_path / "new" / "home"
    assert main(["Smart Lamp", "-o", str(output)]) == 0
    assert (output / "device.json").exists()


def test_custom_private_key(tmp_path):
    main(["Smart Lamp", "-o", str(tmp_path), "-p", "/etc/keys/device.pem"])
    assert str(load_identity(tmp_path / "device.json").private_key_file) == "/etc/keys/device.pem"


def test_does_not_overwrite_without_force(tmp_path, capsys):
    main(["First", "-o", str(tmp_path)])
    original = (tmp_path / "device.json").read_text(encoding="utf-8")

    assert main(["Second", "-o", str(tmp_path)]) == 0

    assert (tmp_path / "device.json").read_text(encoding="utf-8") == original
    assert "-f option" in capsys.readouterr().out


def test_force_overwrites_with_new_key(tmp_path):
    main(["First", "-o", str(tmp_path)])
    first = load_identity(tmp_path / "device.json")

    assert main(["Second", "-o", str(tmp_path), "-f"]) == 0

    second = load_identity(tmp_path / "device.json")
    assert second.product_name == "Second"
    assert second.authorization_key != first.authorization_key
    assert second.uuid != first.uuid


def test_show_key(tmp_path, capsys):
    main(["Smart Lamp", "-o", str(tmp_path), "--show-key"])
    identity = load_identity(tmp_path / "device.json")
    assert identity.authorization_key in capsys.readouterr().out


def test_key_is_not_printed_by_default(tmp_path, capsys):
    main(["Smart Lamp", "-o", str(tmp_path)])
    identity = load_identity(tmp_path / "device.json")
    assert identity.authorization_key not in capsys.readouterr().out


def test_empty_product_name_fails(tmp_path):
    assert main(["", "-o", str(tmp_path)]) == 1
    assert not (tmp_path / "device.json").exists()
