"""Wake-on-LAN functionality."""

import logging
import socket

from lanwake.core.mac import MacParseError, format_mac, parse_mac
from lanwake.core.packet import build_magic_packet

logger = logging.getLogger(__name__)

BROADCAST_ADDRESS = "255.255.255.255"
WOL_PORT = 9


def _udp_socket() -> socket.socket:
    return socket.socket(socket.AF_INET, socket.SOCK_DGRAM)


class WakeError(Exception):
    """Base class for failures while sending a wake packet."""


class InvalidMacError(WakeError):
    """The device's MAC address text could not be parsed."""

    def __init__(self, error: MacParseError) -> None:
        self.error = error
        super().__init__(f"Could not parse MAC address: {error}")


class TransportError(WakeError):
    """Opening the broadcast socket or sending the datagram failed."""

    def __init__(self, error: OSError) -> None:
        self.error = error
        super().__init__(f"Network error: {error}")


def wake(mac_address: str, ip_address: str = BROADCAST_ADDRESS, port: int = WOL_PORT) -> None:
    """
    Send a Wake-on-LAN magic packet to wake a remote machine.

    A single datagram is sent from an ephemeral port with broadcast enabled.
    Delivery is not confirmed and nothing is retried.

    Args:
        mac_address: MAC address of the target machine (e.g., "AA-BB-CC-DD-EE-FF")
        ip_address: Broadcast IP address (default: 255.255.255.255)
        port: UDP port for WOL packet (default: 9)

    Raises:
        InvalidMacError: If mac_address is not a valid hyphen-separated MAC
        TransportError: If the socket could not be opened or the send failed
    """
    try:
        raw_mac = parse_mac(mac_address)
    except MacParseError as exc:
        raise InvalidMacError(exc) from exc

    packet = build_magic_packet(raw_mac)

    logger.info("Sending WOL magic packet to %s via %s:%d", format_mac(raw_mac), ip_address, port)
    try:
        with _udp_socket() as sock:
            sock.bind(("0.0.0.0", 0))
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.sendto(packet, (ip_address, port))
    except OSError as exc:
        logger.warning("WOL packet to %s failed: %s", format_mac(raw_mac), exc)
        raise TransportError(exc) from exc
    logger.debug("WOL packet sent successfully")
