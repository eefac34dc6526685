"""Lifecycle of a single device WebSocket connection"""
import asyncio
import inspect
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from config.logger import logger
from config.settings import DEFAULT_DEVICE_ID, HEARTBEAT_INTERVAL
from fastapi import WebSocket
from services.registry import DeviceRegistry
from starlette.websockets import WebSocketDisconnect

GREETING_MESSAGE = "Connected to IoT server"

MessageObserver = Callable[[str, str], Union[None, Awaitable[None]]]


def log_device_message(device_id: str, message: str) -> None:
    """Default observer: log inbound frames and drop them"""
    logger.info(f"Message from {device_id}: {message}")


class SessionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class DeviceSession:
    """
    Drives one device connection from accept to close.

    CONNECTING -> OPEN -> CLOSED. The device is registered when the session
    opens and unregistered exactly once when it closes, whichever terminal
    event (disconnect, transport error, cancellation) ended it.
    """

    def __init__(
        self,
        websocket: WebSocket,
        registry: DeviceRegistry,
        observer: Optional[MessageObserver] = None,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
    ) -> None:
        self.websocket = websocket
        self.registry = registry
        self.observer = observer or log_device_message
        self.heartbeat_interval = heartbeat_interval
        self.device_id = websocket.query_params.get("id") or DEFAULT_DEVICE_ID
        self.state = SessionState.CONNECTING

    @property
    def client_host(self) -> str:
        return self.websocket.client.host if self.websocket.client else "Unknown"

    async def run(self) -> None:
        logger.info(f"Device connection attempt from {self.client_host} (id: {self.device_id})")
        heartbeat_task = None

        try:
            await self.websocket.accept()
            self._open()
            await self.websocket.send_text(json.dumps({
                "type": "connected",
                "message": GREETING_MESSAGE,
                "deviceId": self.device_id,
            }))

            if self.heartbeat_interval > 0:
                heartbeat_task = asyncio.create_task(self._heartbeat())

            await self._receive_loop()

        except WebSocketDisconnect:
            logger.info(f"Device {self.device_id} DISCONNECTED (normal disconnect)")
        except RuntimeError as e:
            # "Cannot call receive once a disconnect message has been received"
            if "disconnect" in str(e).lower():
                logger.info(f"Device {self.device_id} disconnected (runtime)")
            else:
                logger.error(f"Device {self.device_id} RuntimeError: {e}")
        except Exception as e:
            logger.error(f"Device {self.device_id} transport ERROR: {type(e).__name__}: {e}")
        finally:
            try:
                if heartbeat_task is not None:
                    await self._stop_heartbeat(heartbeat_task)
            finally:
                self._close()

    def _open(self) -> None:
        self.registry.register(self.device_id, self.websocket)
        self.state = SessionState.OPEN
        logger.info(f"Device CONNECTED: {self.device_id} from {self.client_host}")

    def _close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        was_open = self.state is SessionState.OPEN
        self.state = SessionState.CLOSED
        if was_open:
            self.registry.unregister(self.device_id, self.websocket)
            logger.info(f"Device DISCONNECTED: {self.device_id} (remaining: {len(self.registry)})")

    async def _receive_loop(self) -> None:
        while True:
            message = await self.websocket.receive()

            if message.get("type") == "websocket.disconnect":
                logger.info(f"Device {self.device_id} disconnected gracefully (code: {message.get('code')})")
                return

            if message.get("text") is not None:
                text = message["text"]
            elif message.get("bytes") is not None:
                text = message["bytes"].decode("utf-8", errors="replace")
            else:
                logger.debug(f"Unknown message type from {self.device_id}: {message.get('type', 'unknown')}")
                continue

            await self._observe(text)

    async def _observe(self, text: str) -> None:
        try:
            result = self.observer(self.device_id, text)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Message observer failed for {self.device_id}: {type(e).__name__}: {e}", exc_info=True)

    async def _stop_heartbeat(self, task: "asyncio.Task[None]") -> None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"Heartbeat for {self.device_id} failed: {type(e).__name__}: {e}")

    async def _heartbeat(self) -> None:
        """Send periodic heartbeat to keep idle connections alive"""
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            try:
                await self.websocket.send_text(json.dumps({
                    "type": "heartbeat",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }))
            except (WebSocketDisconnect, ConnectionError, RuntimeError):
                break
