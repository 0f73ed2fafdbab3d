"""FastAPI routes for the lanwake web UI and API."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from lanwake import __version__
from lanwake.api.models import DeviceListResponse, DeviceResponse, WakeRequest
from lanwake.core.device import Device
from lanwake.core.probe import Prober, ProbeFailed, probe_all, probe_targets
from lanwake.core.registry import DeviceNotFound, DeviceRegistry, InvalidDevice
from lanwake.core.wol import InvalidMacError, TransportError, WakeError, wake

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"
_STATIC_DIR = Path(__file__).parent / "static"

DEFAULT_CONFIG = Path.home() / ".config" / "lanwake" / "config.yaml"


def _redirect(
    path: str = "/", msg: Optional[str] = None, level: str = "success", **params: Any
) -> RedirectResponse:
    """Redirect back to a page, carrying a one-line message in the query string."""
    if msg:
        params.update(msg=msg, level=level)
    query = urlencode(params)
    return RedirectResponse(f"{path}?{query}" if query else path, status_code=303)


def _device_response(d: Device) -> DeviceResponse:
    return DeviceResponse(id=d.id, name=d.name, mac=d.mac, ip=d.ip)


def create_app(config_path: Optional[str] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config_path: Path to lanwake config.yaml. If None, uses the default location.

    Returns:
        FastAPI application instance

    Raises:
        ConfigError: If the config file exists but is invalid
    """
    _config_path = Path(config_path) if config_path else DEFAULT_CONFIG

    app = FastAPI(
        title="lanwake",
        version=__version__,
        description="Wake-on-LAN device registry with liveness probing",
    )

    # ── App state ─────────────────────────────────────────────────────────────
    registry = DeviceRegistry(_config_path)
    app.state.registry = registry
    app.state.prober = None
    logger.info("Loaded %d device(s) from %s", registry.count(), _config_path)

    app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")
    templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

    # ── Helpers ────────────────────────────────────────────────────────────────

    def _get_prober() -> Prober:
        # Built on first use and shared by every later status request.
        if app.state.prober is None:
            s = registry.settings
            app.state.prober = Prober(
                timeout=float(s["probe_timeout"]), privileged=bool(s["privileged_ping"])
            )
        prober: Prober = app.state.prober
        return prober

    def _send_wake(device: Device) -> None:
        s = registry.settings
        wake(device.mac, ip_address=s["broadcast_ip"], port=int(s["wol_port"]))

    # ── HTML page ─────────────────────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request, edit: Optional[int] = None) -> HTMLResponse:
        msg = request.query_params.get("msg")
        level = request.query_params.get("level", "success")
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "devices": registry.all(),
                "edit": edit,
                "flash": (level, msg) if msg else None,
            },
        )

    # ── Device CRUD (form posts) ──────────────────────────────────────────────

    @app.post("/wol")
    def create(
        name: str = Form(""), mac: str = Form(""), ip: str = Form("")
    ) -> RedirectResponse:
        try:
            registry.insert(name, mac, ip)
        except InvalidDevice as exc:
            return _redirect(msg=str(exc), level="error")
        return _redirect(msg="Device created")

    @app.post("/wol/{device_id}")
    def update(
        device_id: int, name: str = Form(""), mac: str = Form(""), ip: str = Form("")
    ) -> RedirectResponse:
        try:
            registry.update(device_id, name, mac, ip)
        except DeviceNotFound as exc:
            return _redirect(msg=str(exc), level="error")
        except InvalidDevice as exc:
            return _redirect(msg=str(exc), level="error", edit=device_id)
        return _redirect(msg="Device updated")

    @app.post("/wol/{device_id}/delete")
    def delete(device_id: int, confirm: bool = Form(False)) -> RedirectResponse:
        if not confirm:
            return _redirect(msg="Delete cancelled", level="error")
        try:
            registry.delete(device_id)
        except DeviceNotFound as exc:
            return _redirect(msg=str(exc), level="error")
        return _redirect(msg="Device deleted")

    @app.post("/wol/{device_id}/wake")
    def wake_device(device_id: int) -> RedirectResponse:
        try:
            _send_wake(registry.get(device_id))
        except (DeviceNotFound, WakeError) as exc:
            return _redirect(msg=str(exc), level="error")
        return _redirect(msg="Sent WOL packet")

    # ── Liveness ──────────────────────────────────────────────────────────────

    @app.get("/wol/online_status")
    async def online_status() -> JSONResponse:
        devices = registry.all()
        if not probe_targets(devices):
            return JSONResponse({})
        deadline = float(registry.settings["status_deadline"])
        try:
            results = await asyncio.wait_for(
                probe_all(devices, _get_prober()), timeout=deadline
            )
        except ProbeFailed as exc:
            logger.error("Online status check failed: %s", exc)
            return JSONResponse({"error": str(exc)}, status_code=500)
        except asyncio.TimeoutError:
            logger.warning("Online status check exceeded %.1fs", deadline)
            return JSONResponse({"error": "Online status check timed out"}, status_code=504)
        return JSONResponse({str(device_id): alive for device_id, alive in results.items()})

    # ── JSON API ──────────────────────────────────────────────────────────────

    @app.get("/devices", response_model=DeviceListResponse)
    async def list_devices() -> DeviceListResponse:
        return DeviceListResponse(devices=[_device_response(d) for d in registry.all()])

    @app.post("/wake")
    def post_wake(req: WakeRequest) -> JSONResponse:
        try:
            device = registry.get(req.device_id)
        except DeviceNotFound as exc:
            return JSONResponse({"error": str(exc)}, status_code=404)
        try:
            _send_wake(device)
        except InvalidMacError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        except TransportError as exc:
            return JSONResponse({"error": str(exc)}, status_code=502)
        return JSONResponse({"status": "wol_sent", "device_id": device.id, "mac": device.mac})

    return app
