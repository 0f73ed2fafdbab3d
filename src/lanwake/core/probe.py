"""Concurrent ICMP liveness probing of registered devices."""

import asyncio
import ipaddress
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from icmplib import (
    ICMPLibError,
    ICMPv4Socket,
    SocketPermissionError,
    SocketUnavailableError,
    async_ping,
)

from lanwake.core.device import Device

logger = logging.getLogger(__name__)

# Seconds to wait for the echo reply of a single probe.
PROBE_TIMEOUT = 2.0

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class ProbeFailed(Exception):
    """The probe machinery itself failed; no host-level result is available."""


@dataclass(frozen=True)
class ProbeTarget:
    device_id: int
    address: IPAddress


def probe_targets(devices: Iterable[Device]) -> list[ProbeTarget]:
    """
    Select the devices that can be probed.

    Devices with no IP, or with IP text that does not parse, are skipped
    silently and will not appear in probe results.
    """
    targets: list[ProbeTarget] = []
    for device in devices:
        if not device.ip:
            continue
        try:
            address = ipaddress.ip_address(device.ip.strip())
        except ValueError:
            logger.debug("Skipping device %d: '%s' is not an IP address", device.id, device.ip)
            continue
        targets.append(ProbeTarget(device_id=device.id, address=address))
    return targets


class Prober:
    """
    Echo client shared by every probe of a batch.

    Settings are fixed at construction, so one instance can be used by any
    number of concurrent probes without locking. Construction fails with
    ProbeFailed when this process is not allowed to open ICMP sockets.
    """

    def __init__(self, timeout: float = PROBE_TIMEOUT, privileged: bool = False) -> None:
        self._timeout = timeout
        self._privileged = privileged
        try:
            sock = ICMPv4Socket(privileged=privileged)
        except ICMPLibError as exc:
            raise ProbeFailed(f"Cannot open ICMP socket: {exc}") from exc
        sock.close()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def privileged(self) -> bool:
        return self._privileged

    async def ping(self, target: ProbeTarget) -> tuple[int, bool]:
        """
        Send one echo request to the target.

        Returns:
            Tuple of (device_id, reachable). Timeouts, ICMP error replies and
            other host-level network errors count as unreachable.

        Raises:
            SocketPermissionError, SocketUnavailableError: the local ICMP
                socket could not be used at all
        """
        try:
            host = await async_ping(
                str(target.address),
                count=1,
                timeout=self._timeout,
                privileged=self._privileged,
            )
        except (SocketPermissionError, SocketUnavailableError):
            raise
        except ICMPLibError as exc:
            logger.debug("Probe of %s failed: %s", target.address, exc)
            return target.device_id, False
        return target.device_id, host.is_alive


async def probe_all(
    devices: Iterable[Device], prober: Optional[Prober] = None
) -> dict[int, bool]:
    """
    Probe every device that has a valid IP address, concurrently.

    The call returns only once every probe has finished. An unreachable host
    is reported as False and does not affect the others.

    Args:
        devices: Registered devices
        prober: Shared echo client; a default one is created when None

    Returns:
        Mapping of device id to reachability for the probed devices only

    Raises:
        ProbeFailed: If the echo client cannot be created or a probe crashes
    """
    targets = probe_targets(devices)
    if not targets:
        return {}
    if prober is None:
        prober = Prober()

    logger.debug("Probing %d device(s)", len(targets))
    outcomes = await asyncio.gather(
        *(prober.ping(target) for target in targets), return_exceptions=True
    )

    results: dict[int, bool] = {}
    for target, outcome in zip(targets, outcomes):
        if isinstance(outcome, BaseException):
            logger.error("Probe of device %d crashed: %r", target.device_id, outcome)
            raise ProbeFailed(f"Probe of {target.address} failed: {outcome}") from outcome
        device_id, alive = outcome
        results[device_id] = alive
    logger.debug(
        "Probe finished: %d of %d online", sum(results.values()), len(results)
    )
    return results


def probe_all_sync(
    devices: Iterable[Device],
    prober: Optional[Prober] = None,
    deadline: Optional[float] = None,
) -> dict[int, bool]:
    """
    Run probe_all() to completion on a fresh event loop.

    Args:
        devices: Registered devices
        prober: Shared echo client; a default one is created when None
        deadline: Optional bound in seconds on the whole batch; outstanding
            probes are cancelled together when it expires

    Raises:
        ProbeFailed: As for probe_all()
        asyncio.TimeoutError: If the deadline expires
    """
    if deadline is None:
        return asyncio.run(probe_all(devices, prober))
    return asyncio.run(asyncio.wait_for(probe_all(devices, prober), timeout=deadline))
