"""Pydantic response models for the control-plane API"""
from typing import List, Optional

from pydantic import BaseModel


class DeviceInfo(BaseModel):
    id: str
    connected: bool = True
    connectedAt: str


class DevicesResponse(BaseModel):
    devices: List[DeviceInfo]


class LedResponse(BaseModel):
    success: bool = True
    message: str
    device: str


class CommandResponse(BaseModel):
    success: bool = True
    message: str
    command: str
    device: str


class ErrorResponse(BaseModel):
    error: str
    device: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    connected_devices: int


class ApiInfoResponse(BaseModel):
    message: str
    websocket: str
    endpoints: List[str]
    status: str
