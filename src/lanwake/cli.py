"""Command-line interface for lanwake."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from lanwake import __version__
from lanwake.core.registry import DeviceRegistry

DEFAULT_CONFIG = Path.home() / ".config" / "lanwake" / "config.yaml"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_registry(config: str) -> DeviceRegistry:
    from lanwake.config.loader import ConfigError

    try:
        return DeviceRegistry(Path(config))
    except ConfigError as exc:
        click.echo(f"Config validation errors: {exc}", err=True)
        sys.exit(1)


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="lanwake")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="LANWAKE_CONFIG",
    show_default=True,
    help="Path to lanwake config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """lanwake — wake LAN hosts and see which ones are up."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── devices group ─────────────────────────────────────────────────────────────


@main.group()
def devices() -> None:
    """Manage registered devices."""


@devices.command("list")
@click.pass_context
def devices_list(ctx: click.Context) -> None:
    """List all registered devices."""
    registry = _load_registry(ctx.obj["config"])
    devs = registry.all()
    if not devs:
        click.echo("No devices registered.")
        return
    click.echo(f"{'ID':<5} {'NAME':<24} {'MAC':<19} {'IP'}")
    click.echo("─" * 64)
    for d in devs:
        click.echo(f"{d.id:<5} {d.name:<24} {d.mac:<19} {d.ip or '-'}")


@devices.command("add")
@click.argument("name")
@click.argument("mac")
@click.option("--ip", default=None, help="IP address used for liveness probing")
@click.pass_context
def devices_add(ctx: click.Context, name: str, mac: str, ip: Optional[str]) -> None:
    """Register a device by NAME and MAC address."""
    from lanwake.core.registry import InvalidDevice

    registry = _load_registry(ctx.obj["config"])
    try:
        device = registry.insert(name, mac, ip)
    except InvalidDevice as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    click.echo(f"Added device {device.id}: {device.name} ({device.mac})")


@devices.command("edit")
@click.argument("device_id", type=int)
@click.option("--name", default=None, help="New name")
@click.option("--mac", default=None, help="New MAC address")
@click.option("--ip", default=None, help="New IP address ('' to clear)")
@click.pass_context
def devices_edit(
    ctx: click.Context,
    device_id: int,
    name: Optional[str],
    mac: Optional[str],
    ip: Optional[str],
) -> None:
    """Change fields of an existing device."""
    from lanwake.core.registry import RegistryError

    registry = _load_registry(ctx.obj["config"])
    try:
        current = registry.get(device_id)
        device = registry.update(
            device_id,
            name if name is not None else current.name,
            mac if mac is not None else current.mac,
            ip if ip is not None else current.ip,
        )
    except RegistryError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    click.echo(f"Updated device {device.id}: {device.name} ({device.mac})")


@devices.command("remove")
@click.argument("device_id", type=int)
@click.confirmation_option(prompt="Delete this device?")
@click.pass_context
def devices_remove(ctx: click.Context, device_id: int) -> None:
    """Delete a device by id."""
    from lanwake.core.registry import DeviceNotFound

    registry = _load_registry(ctx.obj["config"])
    try:
        registry.delete(device_id)
    except DeviceNotFound as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    click.echo(f"Deleted device {device_id}")


# ── wake command ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("device")
@click.pass_context
def wake(ctx: click.Context, device: str) -> None:
    """Send a Wake-on-LAN packet to DEVICE (id or name)."""
    from lanwake.core.wol import InvalidMacError, WakeError
    from lanwake.core.wol import wake as do_wake

    registry = _load_registry(ctx.obj["config"])
    match = registry.find(device)
    if match is None:
        click.echo(f"Device '{device}' not found.", err=True)
        sys.exit(1)

    s = registry.settings
    try:
        do_wake(match.mac, ip_address=s["broadcast_ip"], port=int(s["wol_port"]))
    except InvalidMacError as exc:
        click.echo(f"✗  {exc}", err=True)
        sys.exit(1)
    except WakeError as exc:
        click.echo(f"✗  {exc}", err=True)
        sys.exit(2)
    click.echo(f"WOL packet sent to {match.mac} ({match.name})")


# ── status command ────────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Ping every device that has an IP address and show which are up."""
    from lanwake.core.probe import Prober, ProbeFailed, probe_all_sync

    registry = _load_registry(ctx.obj["config"])
    devs = registry.all()
    if not devs:
        click.echo("No devices registered.")
        return

    s = registry.settings
    try:
        prober = Prober(timeout=float(s["probe_timeout"]), privileged=bool(s["privileged_ping"]))
        results = probe_all_sync(devs, prober, deadline=float(s["status_deadline"]))
    except ProbeFailed as exc:
        click.echo(f"Probe failed: {exc}", err=True)
        sys.exit(1)
    except asyncio.TimeoutError:
        click.echo(f"Probe did not finish within {s['status_deadline']}s", err=True)
        sys.exit(1)

    for d in devs:
        if d.id in results:
            state = "online" if results[d.id] else "offline"
        else:
            state = "no ip"
        click.echo(f"{d.id:<5} {d.name:<24} {d.ip or '-':<40} {state}")


# ── serve command ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind host")
@click.option("--port", default=8080, envvar="PORT", show_default=True, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the lanwake web UI and API server."""
    import uvicorn

    from lanwake.api.routes import create_app
    from lanwake.config.loader import ConfigError

    try:
        app = create_app(config_path=ctx.obj["config"])
    except ConfigError as exc:
        click.echo(f"Config validation errors: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Starting lanwake web UI at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
