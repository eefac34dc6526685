"""FastAPI dependencies resolving per-app components"""
from fastapi import Request
from services.commands import CommandRouter
from services.registry import DeviceRegistry


def get_registry(request: Request) -> DeviceRegistry:
    return request.app.state.registry


def get_command_router(request: Request) -> CommandRouter:
    return request.app.state.command_router
