"""Routing of control-plane commands to connected devices"""
from dataclasses import dataclass
from typing import Optional

from config.logger import logger
from config.settings import DEFAULT_DEVICE_ID
from services.exceptions import DeviceUnavailable, InvalidArgument
from services.registry import DeviceRegistry
from starlette.websockets import WebSocketDisconnect

ACTUATOR_STATES = ("on", "off")


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of a successful send.

    Only means the frame was handed to an open transport; devices do not
    acknowledge commands.
    """

    device_id: str
    frame: str


class CommandRouter:
    """Looks devices up in the registry and sends them text frames."""

    def __init__(self, registry: DeviceRegistry, default_device_id: str = DEFAULT_DEVICE_ID) -> None:
        self.registry = registry
        self.default_device_id = default_device_id

    def resolve_device_id(self, device_id: Optional[str]) -> str:
        return device_id or self.default_device_id

    async def set_actuator_state(self, device_id: Optional[str], state: Optional[str]) -> CommandResult:
        """Send ``light:on`` or ``light:off`` to a device."""
        if state not in ACTUATOR_STATES:
            raise InvalidArgument("Invalid state. Use on or off")
        return await self._send(self.resolve_device_id(device_id), f"light:{state}")

    async def send_command(self, device_id: Optional[str], command) -> CommandResult:
        """Send an arbitrary command string verbatim."""
        if not command:
            raise InvalidArgument("Command is required")
        if not isinstance(command, str):
            raise InvalidArgument("Command must be a string")
        return await self._send(self.resolve_device_id(device_id), command)

    async def _send(self, device_id: str, frame: str) -> CommandResult:
        connection = self.registry.lookup(device_id)
        if connection is None or not connection.is_open:
            logger.warning(f"Device {device_id} not connected, dropping frame {frame!r}")
            raise DeviceUnavailable(device_id)

        try:
            await connection.websocket.send_text(frame)
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # Closed between the state check and the send
            logger.warning(f"Failed to send {frame!r} to device {device_id}: {e}")
            raise DeviceUnavailable(device_id) from e

        logger.info(f"Sent {frame!r} to device {device_id}")
        return CommandResult(device_id=device_id, frame=frame)
