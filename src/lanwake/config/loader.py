"""YAML configuration loader and validator."""

from pathlib import Path
from typing import Any, Optional

import yaml

from lanwake.core.device import Device
from lanwake.core.mac import is_valid_mac, normalize_mac
from lanwake.core.probe import PROBE_TIMEOUT
from lanwake.core.wol import BROADCAST_ADDRESS, WOL_PORT

DEFAULT_SETTINGS: dict[str, Any] = {
    "broadcast_ip": BROADCAST_ADDRESS,
    "wol_port": WOL_PORT,
    "probe_timeout": PROBE_TIMEOUT,
    "privileged_ping": False,
    # Bound on a whole online-status batch, in seconds.
    "status_deadline": 10.0,
}


class ConfigError(Exception):
    """Raised for invalid or missing configuration."""


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate a loaded configuration dictionary.

    An absent or empty 'devices' list is valid: the registry starts empty.

    Returns:
        List of validation error messages (empty list = valid)
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    settings = config.get("settings") or {}
    if not isinstance(settings, dict):
        errors.append("'settings' must be a mapping")
    else:
        port = settings.get("wol_port", WOL_PORT)
        if not isinstance(port, int) or not 0 < port < 65536:
            errors.append(f"settings: invalid wol_port '{port}'")
        for key in ("probe_timeout", "status_deadline"):
            value = settings.get(key, DEFAULT_SETTINGS[key])
            if not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"settings: '{key}' must be a positive number")

    devices = config.get("devices") or []
    if not isinstance(devices, list):
        errors.append("'devices' must be a list")
        return errors

    seen_ids: set[int] = set()
    for i, device in enumerate(devices):
        prefix = f"devices[{i}]"
        if not isinstance(device, dict):
            errors.append(f"{prefix}: must be a mapping")
            continue
        for field in ("id", "name", "mac"):
            if not device.get(field):
                errors.append(f"{prefix}: missing required field '{field}'")
        device_id = device.get("id")
        if device_id is not None:
            if not isinstance(device_id, int) or device_id < 1:
                errors.append(f"{prefix}: id must be a positive integer")
            elif device_id in seen_ids:
                errors.append(f"{prefix}: duplicate id {device_id}")
            else:
                seen_ids.add(device_id)
        mac = device.get("mac", "")
        if mac and not is_valid_mac(str(mac)):
            errors.append(f"{prefix}: invalid mac '{mac}'")

    return errors


def settings_from_config(config: dict[str, Any]) -> dict[str, Any]:
    """Return the settings section merged over the defaults."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(config.get("settings") or {})
    return settings


def devices_from_config(config: dict[str, Any]) -> list[Device]:
    """
    Construct a list of Device objects from a validated config dict.

    Args:
        config: Parsed and validated config dictionary

    Returns:
        List of Device instances, in file order

    MAC addresses are stored normalized, so colon-separated or lower-case
    entries in a hand-written file parse like the canonical form.
    """
    devices: list[Device] = []
    for raw in config.get("devices") or []:
        ip = raw.get("ip")
        devices.append(
            Device(
                id=int(raw["id"]),
                name=str(raw["name"]),
                mac=normalize_mac(str(raw["mac"])),
                ip=str(ip) if ip else None,
            )
        )
    return devices
