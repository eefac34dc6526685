"""HTTP and WebSocket routers"""
from fastapi import FastAPI
from routes.api import router as api_router
from routes.websockets import router as websocket_router


def include_routers(app: FastAPI) -> None:
    app.include_router(api_router)
    app.include_router(websocket_router)


__all__ = ["api_router", "include_routers", "websocket_router"]
