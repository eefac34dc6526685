"""Registry of live device connections"""
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from config.logger import logger
from fastapi import WebSocket
from starlette.websockets import WebSocketState


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DeviceConnection:
    """One open device session. Reconnecting creates a new record."""

    device_id: str
    websocket: WebSocket
    connected_at: datetime = field(default_factory=utc_now)

    @property
    def is_open(self) -> bool:
        """Live check against the transport, never cached"""
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def to_dict(self) -> dict:
        return {
            "id": self.device_id,
            "connected": True,
            "connectedAt": self.connected_at.isoformat(),
        }


class DeviceRegistry:
    """
    Maps device id to its current connection.

    At most one record exists per id; registering an id again replaces the
    previous record without closing its socket. All methods are safe to call
    from any task or thread.
    """

    def __init__(self) -> None:
        self._devices: Dict[str, DeviceConnection] = {}
        self._lock = threading.Lock()

    def register(self, device_id: str, websocket: WebSocket) -> DeviceConnection:
        connection = DeviceConnection(device_id=device_id, websocket=websocket)
        with self._lock:
            previous = self._devices.get(device_id)
            self._devices[device_id] = connection

        if previous is not None and previous.websocket is not websocket:
            logger.warning(
                f"Device {device_id} reconnected, replacing connection "
                f"({id(previous.websocket)} -> {id(websocket)})"
            )
        logger.debug(f"Registered device {device_id} (total: {len(self)})")
        return connection

    def unregister(self, device_id: str, websocket: Optional[WebSocket] = None) -> bool:
        """
        Remove the entry for ``device_id``.

        When ``websocket`` is given the entry is only removed if it still
        belongs to that connection, so a late close from a replaced socket
        leaves the newer connection in place. Missing ids are ignored.

        Returns:
            True if an entry was removed.
        """
        with self._lock:
            current = self._devices.get(device_id)
            if current is None:
                return False
            if websocket is not None and current.websocket is not websocket:
                stale = True
            else:
                stale = False
                del self._devices[device_id]

        if stale:
            logger.debug(f"Ignoring stale close for device {device_id}")
            return False
        logger.debug(f"Unregistered device {device_id} (total: {len(self)})")
        return True

    def lookup(self, device_id: str) -> Optional[DeviceConnection]:
        with self._lock:
            return self._devices.get(device_id)

    def list_devices(self) -> List[DeviceConnection]:
        with self._lock:
            return list(self._devices.values())

    def clear(self) -> None:
        with self._lock:
            self._devices.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        with self._lock:
            return device_id in self._devices
