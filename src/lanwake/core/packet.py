"""Wake-on-LAN magic packet construction."""

from lanwake.core.mac import MAC_LENGTH

SYNC_STREAM = b"\xff" * 6
MAC_REPEATS = 16
PACKET_LENGTH = len(SYNC_STREAM) + MAC_REPEATS * MAC_LENGTH  # 102


def build_magic_packet(mac: bytes) -> bytes:
    """
    Build the 102-byte magic packet for a raw MAC address.

    Layout: six 0xFF bytes followed by the address repeated 16 times.

    Args:
        mac: 6-byte hardware address as returned by parse_mac()

    Returns:
        The packet payload
    """
    if len(mac) != MAC_LENGTH:
        raise ValueError(f"MAC address must be {MAC_LENGTH} bytes, got {len(mac)}")
    return SYNC_STREAM + bytes(mac) * MAC_REPEATS
