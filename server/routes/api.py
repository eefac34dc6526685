"""API routes"""
import json
from datetime import datetime, timezone
from typing import Optional

from config.settings import STATIC_DIR
from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from models.schemas import (
    ApiInfoResponse,
    CommandResponse,
    DevicesResponse,
    ErrorResponse,
    HealthResponse,
    LedResponse,
)
from routes.dependencies import get_command_router, get_registry
from services.commands import CommandRouter
from services.exceptions import MalformedRequestBody
from services.registry import DeviceRegistry

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/", response_model=ApiInfoResponse)
@router.get("/index.html", response_model=ApiInfoResponse, include_in_schema=False)
async def home():
    """Serve dashboard HTML or return API info"""
    dashboard_path = STATIC_DIR / "index.html"
    if dashboard_path.exists():
        return FileResponse(dashboard_path)
    return {
        "message": "IoT Device Bridge",
        "websocket": "/ws?id=<device-id>",
        "endpoints": [
            "GET /api/devices",
            "GET /api/led?state=on&device=default",
            "POST /api/command",
            "GET /health",
        ],
        "status": "running"
    }


@router.get("/health", response_model=HealthResponse)
async def health(registry: DeviceRegistry = Depends(get_registry)):
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "connected_devices": len(registry),
    }


@router.get("/api/devices", response_model=DevicesResponse)
async def list_devices(registry: DeviceRegistry = Depends(get_registry)):
    """List currently connected devices"""
    return {"devices": [connection.to_dict() for connection in registry.list_devices()]}


@router.get("/api/led", response_model=LedResponse, responses=ERROR_RESPONSES)
async def control_led(
    state: Optional[str] = None,
    device: Optional[str] = None,
    command_router: CommandRouter = Depends(get_command_router),
):
    """Turn a device's LED on or off"""
    result = await command_router.set_actuator_state(device, state)
    return {
        "success": True,
        "message": f"LED turned {state}",
        "device": result.device_id,
    }


@router.post("/api/command", response_model=CommandResponse, responses=ERROR_RESPONSES)
async def send_command(
    request: Request,
    command_router: CommandRouter = Depends(get_command_router),
):
    """Send a custom command string to a device"""
    body = await request.body()
    try:
        payload = json.loads(body)
    except ValueError:
        raise MalformedRequestBody()

    if not isinstance(payload, dict):
        payload = {}

    result = await command_router.send_command(payload.get("device"), payload.get("command"))
    return {
        "success": True,
        "message": "Command sent",
        "command": result.frame,
        "device": result.device_id,
    }

