"""Tests for the YAML config writer."""

from pathlib import Path
from unittest.mock import patch

import pytest

from lanwake.config.loader import devices_from_config, load_config
from lanwake.config.writer import build_config_dict, device_to_raw, write_config
from lanwake.core.device import Device


def _make_device(**kwargs) -> Device:
    defaults = dict(id=1, name="nas", mac="AA-BB-CC-DD-EE-FF", ip="192.168.1.10")
    defaults.update(kwargs)
    return Device(**defaults)


class TestDeviceToRaw:
    def test_required_fields_present(self) -> None:
        raw = device_to_raw(_make_device())
        assert raw == {"id": 1, "name": "nas", "mac": "AA-BB-CC-DD-EE-FF", "ip": "192.168.1.10"}

    def test_ip_omitted_when_none(self) -> None:
        raw = device_to_raw(_make_device(ip=None))
        assert "ip" not in raw


class TestWriteConfig:
    def test_write_and_reload(self, tmp_path: Path) -> None:
        cfg = {"devices": [{"id": 1, "name": "nas", "mac": "AA-BB-CC-DD-EE-FF"}]}
        p = tmp_path / "config.yaml"
        write_config(p, cfg)
        loaded = load_config(p)
        assert loaded is not None
        assert loaded["devices"][0]["name"] == "nas"

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        p = tmp_path / "nested" / "dir" / "config.yaml"
        write_config(p, {"devices": []})
        assert p.exists()

    def test_atomic_write_creates_no_tmp_on_success(self, tmp_path: Path) -> None:
        p = tmp_path / "config.yaml"
        write_config(p, {"devices": []})
        assert not (tmp_path / "config.yaml.tmp").exists()

    def test_failed_write_leaves_original(self, tmp_path: Path) -> None:
        p = tmp_path / "config.yaml"
        write_config(p, {"devices": []})
        with patch("lanwake.config.writer.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_config(p, {"devices": [{"id": 1}]})
        assert load_config(p) == {"devices": []}
        assert not (tmp_path / "config.yaml.tmp").exists()

    def test_write_preserves_unicode(self, tmp_path: Path) -> None:
        p = tmp_path / "config.yaml"
        write_config(p, {"devices": [{"id": 1, "name": "Küche", "mac": "AA-BB-CC-DD-EE-FF"}]})
        assert "Küche" in p.read_text(encoding="utf-8")


class TestBuildConfigDict:
    def test_structure(self) -> None:
        cfg = build_config_dict([_make_device()], settings={"wol_port": 7})
        assert cfg["settings"]["wol_port"] == 7
        assert len(cfg["devices"]) == 1

    def test_no_settings_omitted(self) -> None:
        cfg = build_config_dict([_make_device()])
        assert "settings" not in cfg

    def test_roundtrip_through_yaml(self, tmp_path: Path) -> None:
        devices = [_make_device(), _make_device(id=2, name="desktop", ip=None)]
        p = tmp_path / "config.yaml"
        write_config(p, build_config_dict(devices))
        loaded = load_config(p)
        assert loaded is not None
        assert devices_from_config(loaded) == devices
