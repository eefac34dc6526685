"""WebSocket routes"""
from fastapi import APIRouter, WebSocket
from services.sessions import DeviceSession

router = APIRouter()


@router.websocket("/ws{suffix:path}")
async def websocket_device(websocket: WebSocket, suffix: str):
    """
    WebSocket endpoint for devices (ESP32 and similar).
    Any path starting with /ws is accepted; the device id comes from ?id=.
    """
    state = websocket.app.state
    session = DeviceSession(
        websocket,
        state.registry,
        observer=state.message_observer,
        heartbeat_interval=state.heartbeat_interval,
    )
    await session.run()
