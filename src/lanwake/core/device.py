"""Registered device record."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Device:
    """A host that can be woken and probed."""

    id: int
    name: str
    # Stored normalized, e.g. "AA-BB-CC-DD-EE-FF".
    mac: str
    # Devices without an IP can still be woken but are never probed.
    ip: Optional[str] = None
