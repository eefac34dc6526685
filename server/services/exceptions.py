"""
Errors raised while routing commands to devices.

Each error knows the HTTP status and JSON body it maps to, so the API layer
can turn any of them into a response with a single exception handler.
"""
from typing import Optional


class BridgeError(Exception):
    """Base class for errors surfaced to control-plane callers."""

    status_code = 500

    def __init__(self, message: str, device_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.device_id = device_id

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.device_id is not None:
            body["device"] = self.device_id
        return body


class InvalidArgument(BridgeError):
    """Caller supplied a bad state or an empty command."""

    status_code = 400


class MalformedRequestBody(InvalidArgument):
    """Request body could not be parsed as JSON."""

    def __init__(self, message: str = "Invalid JSON") -> None:
        super().__init__(message)


class DeviceUnavailable(BridgeError):
    """
    No connection is registered for the device, or it is no longer open.

    Reported with status 500 for compatibility with existing dashboards.
    """

    status_code = 500

    def __init__(self, device_id: str, message: str = "ESP32 device not connected") -> None:
        super().__init__(message, device_id=device_id)
