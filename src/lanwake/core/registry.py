"""YAML-backed registry of wakeable devices."""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from lanwake.config.loader import (
    ConfigError,
    devices_from_config,
    load_config,
    settings_from_config,
    validate_config,
)
from lanwake.config.writer import build_config_dict, write_config
from lanwake.core.device import Device
from lanwake.core.mac import MacParseError, normalize_mac, parse_mac

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Base class for registry failures."""


class DeviceNotFound(RegistryError):
    def __init__(self, device_id: int) -> None:
        self.device_id = device_id
        super().__init__(f"Device {device_id} not found")


class InvalidDevice(RegistryError):
    """Submitted device fields were rejected."""


def _clean_fields(name: str, mac: str, ip: Optional[str]) -> tuple[str, str, Optional[str]]:
    name = name.strip()
    if not name:
        raise InvalidDevice("Device name is required")
    mac = normalize_mac(mac)
    try:
        parse_mac(mac)
    except MacParseError as exc:
        raise InvalidDevice(f"Invalid MAC address: {exc}") from exc
    ip = ip.strip() if ip else None
    return name, mac, ip or None


class DeviceRegistry:
    """
    Device store persisted in the ``devices`` section of the config file.

    Every write validates the MAC address and rewrites the whole file
    atomically. The ``settings`` section is carried through untouched.

    Usage::

        registry = DeviceRegistry(Path("config.yaml"))
        nas = registry.insert("nas", "aa:bb:cc:dd:ee:ff", "192.168.1.10")
        registry.delete(nas.id)
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._raw_settings: dict[str, Any] = {}
        self._devices: list[Device] = []
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def settings(self) -> dict[str, Any]:
        """Settings merged over defaults."""
        return settings_from_config({"settings": self._raw_settings})

    def reload(self) -> None:
        """
        Re-read the config file.

        A missing or empty file yields an empty registry.

        Raises:
            ConfigError: If the file is not YAML or fails validation
        """
        if not self._path.exists():
            logger.info("Config not found at %s, starting with no devices", self._path)
            self._raw_settings, self._devices = {}, []
            return
        try:
            raw = load_config(self._path) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {self._path}: {exc}") from exc
        errors = validate_config(raw)
        if errors:
            raise ConfigError("; ".join(errors))
        self._raw_settings = dict(raw.get("settings") or {})
        self._devices = devices_from_config(raw)
        logger.debug("Loaded %d device(s) from %s", len(self._devices), self._path)

    def all(self) -> list[Device]:
        return list(self._devices)

    def count(self) -> int:
        return len(self._devices)

    def get(self, device_id: int) -> Device:
        for device in self._devices:
            if device.id == device_id:
                return device
        raise DeviceNotFound(device_id)

    def find(self, key: str) -> Optional[Device]:
        """Look a device up by numeric id or by name."""
        if key.isdigit():
            try:
                return self.get(int(key))
            except DeviceNotFound:
                pass
        return next((d for d in self._devices if d.name == key), None)

    def insert(self, name: str, mac: str, ip: Optional[str] = None) -> Device:
        """
        Add a device and persist it.

        Raises:
            InvalidDevice: If the name is blank or the MAC does not parse
        """
        name, mac, ip = _clean_fields(name, mac, ip)
        device_id = max((d.id for d in self._devices), default=0) + 1
        device = Device(id=device_id, name=name, mac=mac, ip=ip)
        self._save([*self._devices, device])
        logger.info("Added device %d (%s, %s)", device.id, device.name, device.mac)
        return device

    def update(self, device_id: int, name: str, mac: str, ip: Optional[str] = None) -> Device:
        """
        Replace the fields of an existing device and persist it.

        Raises:
            DeviceNotFound: If no device has this id
            InvalidDevice: If the name is blank or the MAC does not parse
        """
        self.get(device_id)
        name, mac, ip = _clean_fields(name, mac, ip)
        updated = Device(id=device_id, name=name, mac=mac, ip=ip)
        self._save([updated if d.id == device_id else d for d in self._devices])
        logger.info("Updated device %d", device_id)
        return updated

    def delete(self, device_id: int) -> None:
        """
        Remove a device and persist the change.

        Raises:
            DeviceNotFound: If no device has this id
        """
        self.get(device_id)
        self._save([d for d in self._devices if d.id != device_id])
        logger.info("Deleted device %d", device_id)

    def _save(self, devices: list[Device]) -> None:
        # The in-memory list only changes once the file write has succeeded.
        write_config(self._path, build_config_dict(devices, self._raw_settings))
        self._devices = devices
