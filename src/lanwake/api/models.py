"""Pydantic request/response models for the lanwake API."""

from typing import Optional

from pydantic import BaseModel


class WakeRequest(BaseModel):
    device_id: int


class DeviceResponse(BaseModel):
    id: int
    name: str
    mac: str
    ip: Optional[str]


class DeviceListResponse(BaseModel):
    devices: list[DeviceResponse]
