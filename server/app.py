"""Main FastAPI application"""
from contextlib import asynccontextmanager
from typing import Optional

from config.logger import logger
from config.settings import CORS_ORIGINS, HEARTBEAT_INTERVAL, HOST, PORT, STATIC_DIR
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from middleware.cors import answer_preflight
from middleware.logging import log_requests
from routes import include_routers
from services.commands import CommandRouter
from services.exceptions import BridgeError
from services.registry import DeviceRegistry
from services.sessions import MessageObserver, log_device_message
from starlette.exceptions import HTTPException as StarletteHTTPException


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Device bridge started")
    logger.info("   GET  /api/devices - List connected devices")
    logger.info("   GET  /api/led?state=on&device=default - Control LED")
    logger.info("   POST /api/command - Send custom command")
    logger.info("   WS   /ws?id=<device-id> - Device connections")
    yield
    logger.info(f"🛑 Shutting down, dropping {len(app.state.registry)} device connection(s)")
    app.state.registry.clear()


async def bridge_error_handler(request: Request, exc: BridgeError):
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


def create_app(
    registry: Optional[DeviceRegistry] = None,
    message_observer: Optional[MessageObserver] = None,
    heartbeat_interval: float = HEARTBEAT_INTERVAL,
) -> FastAPI:
    """Build the application with its own device registry"""
    app = FastAPI(title="IoT Device Bridge", version="1.0.0", lifespan=lifespan)

    app.state.registry = registry if registry is not None else DeviceRegistry()
    app.state.command_router = CommandRouter(app.state.registry)
    app.state.message_observer = message_observer or log_device_message
    app.state.heartbeat_interval = heartbeat_interval

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(answer_preflight)
    app.middleware("http")(log_requests)

    app.add_exception_handler(BridgeError, bridge_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    include_routers(app)
    return app


app = create_app()


def main():
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
