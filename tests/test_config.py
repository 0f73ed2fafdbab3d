"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from lanwake.config.loader import (
    DEFAULT_SETTINGS,
    devices_from_config,
    load_config,
    settings_from_config,
    validate_config,
)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        """Should load a valid YAML config file."""
        config_data = {
            "devices": [{"id": 1, "name": "nas", "mac": "AA-BB-CC-DD-EE-FF", "ip": "10.0.0.2"}]
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(config_data))

        result = load_config(config_file)

        assert result == config_data

    def test_load_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(Path("/nonexistent/config.yaml"))

    def test_load_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_config(config_file) is None

    def test_load_invalid_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            load_config(config_file)


class TestValidateConfig:
    """Tests for validate_config function."""

    def _device(self, **overrides: object) -> dict:
        base = {"id": 1, "name": "nas", "mac": "AA-BB-CC-DD-EE-FF"}
        base.update(overrides)
        return base

    def test_valid_config_no_errors(self) -> None:
        assert validate_config({"devices": [self._device()]}) == []

    def test_empty_config_is_valid(self) -> None:
        assert validate_config({}) == []

    def test_root_must_be_mapping(self) -> None:
        assert validate_config(["nope"]) == ["Config root must be a YAML mapping"]  # type: ignore[arg-type]

    def test_devices_must_be_list(self) -> None:
        errors = validate_config({"devices": {"id": 1}})
        assert any("devices" in e for e in errors)

    def test_colon_mac_is_accepted(self) -> None:
        assert validate_config({"devices": [self._device(mac="aa:bb:cc:dd:ee:ff")]}) == []

    def test_invalid_mac(self) -> None:
        errors = validate_config({"devices": [self._device(mac="NOTAMAC")]})
        assert any("invalid mac" in e for e in errors)

    def test_missing_required_field(self) -> None:
        device = self._device()
        del device["name"]
        errors = validate_config({"devices": [device]})
        assert any("'name'" in e for e in errors)

    def test_duplicate_ids(self) -> None:
        errors = validate_config({"devices": [self._device(), self._device(name="other")]})
        assert any("duplicate id 1" in e for e in errors)

    def test_invalid_port(self) -> None:
        errors = validate_config({"settings": {"wol_port": 70000}})
        assert any("wol_port" in e for e in errors)

    def test_non_positive_timeout(self) -> None:
        errors = validate_config({"settings": {"probe_timeout": 0}})
        assert any("probe_timeout" in e for e in errors)

    def test_invalid_ip_is_not_an_error(self) -> None:
        """Unparseable IPs are tolerated; probing skips them."""
        assert validate_config({"devices": [self._device(ip="not-an-ip")]}) == []


class TestDevicesFromConfig:
    def test_creates_devices(self) -> None:
        config = {
            "devices": [
                {"id": 1, "name": "nas", "mac": "AA-BB-CC-DD-EE-FF", "ip": "10.0.0.2"},
                {"id": 3, "name": "desktop", "mac": "11-22-33-44-55-66"},
            ]
        }
        devices = devices_from_config(config)
        assert [d.id for d in devices] == [1, 3]
        assert devices[0].ip == "10.0.0.2"
        assert devices[1].ip is None

    def test_mac_is_normalized(self) -> None:
        devices = devices_from_config(
            {"devices": [{"id": 1, "name": "nas", "mac": " aa:bb:cc:dd:ee:ff"}]}
        )
        assert devices[0].mac == "AA-BB-CC-DD-EE-FF"

    def test_no_devices(self) -> None:
        assert devices_from_config({}) == []


class TestSettingsFromConfig:
    def test_defaults(self) -> None:
        settings = settings_from_config({})
        assert settings == DEFAULT_SETTINGS
        assert settings["broadcast_ip"] == "255.255.255.255"
        assert settings["wol_port"] == 9

    def test_overrides(self) -> None:
        settings = settings_from_config({"settings": {"broadcast_ip": "192.168.1.255"}})
        assert settings["broadcast_ip"] == "192.168.1.255"
        assert settings["probe_timeout"] == DEFAULT_SETTINGS["probe_timeout"]
