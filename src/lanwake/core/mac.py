"""MAC address parsing and formatting."""

import re

MAC_LENGTH = 6
MAC_SEPARATOR = "-"

_HEX_GROUP_RE = re.compile(r"[0-9A-Fa-f]+")


class MacParseError(ValueError):
    """Raised when MAC address text cannot be parsed."""


class WrongGroupCount(MacParseError):
    """The text does not split into exactly six groups."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"expected {MAC_LENGTH} groups, got {count}")


class InvalidHexDigit(MacParseError):
    """A group is not a hexadecimal byte."""

    def __init__(self, group: str, position: int) -> None:
        self.group = group
        self.position = position
        super().__init__(f"invalid hex group '{group}' at position {position}")


def parse_mac(text: str) -> bytes:
    """
    Parse hyphen-separated MAC address text into its six raw bytes.

    Letter case is irrelevant. Separators are not normalized here, so
    ``AA:BB:CC:DD:EE:FF`` must go through :func:`normalize_mac` first.

    Args:
        text: MAC address, e.g. "AA-BB-CC-DD-EE-FF"

    Returns:
        6-byte hardware address, group 0 first

    Raises:
        WrongGroupCount: If the text does not have exactly six groups
        InvalidHexDigit: If a group is empty, not hex, or larger than a byte
    """
    groups = text.split(MAC_SEPARATOR)
    if len(groups) != MAC_LENGTH:
        raise WrongGroupCount(len(groups))

    raw = bytearray()
    for position, group in enumerate(groups):
        if not _HEX_GROUP_RE.fullmatch(group):
            raise InvalidHexDigit(group, position)
        value = int(group, 16)
        if value > 0xFF:
            raise InvalidHexDigit(group, position)
        raw.append(value)
    return bytes(raw)


def normalize_mac(text: str) -> str:
    """Strip, upper-case and turn ':' separators into '-'."""
    return text.strip().replace(":", MAC_SEPARATOR).upper()


def format_mac(raw: bytes) -> str:
    """Render a raw address as canonical 'AA-BB-CC-DD-EE-FF' text."""
    return MAC_SEPARATOR.join(f"{b:02X}" for b in raw)


def is_valid_mac(text: str) -> bool:
    try:
        parse_mac(normalize_mac(text))
    except MacParseError:
        return False
    return True
