#!/usr/bin/env python3
"""
Simulated device - connects to the bridge like an ESP32 would.

Prints the greeting, tracks the LED state driven by light:on / light:off
and reports its status periodically.
"""
import argparse
import asyncio
import json
import sys
import time
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import websockets


def with_device_id(url: str, device_id: str) -> str:
    """Add or replace the ``id`` query parameter on a WebSocket URL"""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "id"]
    query.append(("id", device_id))
    return urlunsplit(parts._replace(query=urlencode(query)))


class DeviceClient:
    def __init__(self, websocket_url: str, device_id: str, status_interval: float = 10.0):
        self.websocket_url = with_device_id(websocket_url, device_id)
        self.device_id = device_id
        self.status_interval = status_interval
        self.websocket = None
        self.light_on = False
        self.started_at = time.monotonic()

    def handle_frame(self, frame: str) -> Optional[str]:
        """Apply a frame from the server; returns the reply to send, if any"""
        if frame.startswith("{"):
            try:
                message = json.loads(frame)
            except json.JSONDecodeError:
                message = None
            if isinstance(message, dict) and message.get("type") == "connected":
                print(f"✅ {message.get('message')} as '{message.get('deviceId')}'")
                return None
            if isinstance(message, dict) and message.get("type") == "heartbeat":
                return None

        if frame in ("light:on", "light:off"):
            self.light_on = frame == "light:on"
            print(f"💡 LED {'ON' if self.light_on else 'OFF'}")
            return f"light_state:{'on' if self.light_on else 'off'}"

        print(f"📥 Command: {frame}")
        return f"ack:{frame}"

    def status_message(self) -> str:
        return json.dumps({
            "source": "device_client",
            "device": self.device_id,
            "light": "on" if self.light_on else "off",
            "uptime": int(time.monotonic() - self.started_at),
        })

    async def connect_websocket(self) -> bool:
        """Connect to server via WebSocket"""
        try:
            print(f"🔌 Connecting to {self.websocket_url}...")

            # Headers for ngrok (bypass warning page)
            additional_headers = {}
            if "ngrok" in self.websocket_url:
                additional_headers["ngrok-skip-browser-warning"] = "true"

            self.websocket = await websockets.connect(
                self.websocket_url,
                additional_headers=additional_headers
            )
            return True
        except websockets.exceptions.InvalidURI:
            print(f"❌ Invalid URL: {self.websocket_url}")
            print("   Use: ws://localhost:8080/ws")
            return False
        except websockets.exceptions.InvalidStatus as e:
            print(f"❌ Server rejected WebSocket connection: {e}")
            print("   Check that the path starts with /ws")
            return False
        except ConnectionRefusedError:
            print("❌ Connection refused")
            print("   Check if server is running on the correct port")
            return False

    async def receive_loop(self):
        async for frame in self.websocket:
            if isinstance(frame, bytes):
                frame = frame.decode("utf-8", errors="replace")
            reply = self.handle_frame(frame)
            if reply is not None:
                await self.websocket.send(reply)

    async def status_loop(self):
        while True:
            await self.websocket.send(self.status_message())
            await asyncio.sleep(self.status_interval)

    async def run(self):
        """Run main loop"""
        if not await self.connect_websocket():
            return

        print("💡 Press Ctrl+C to stop\n")
        tasks = [asyncio.create_task(self.receive_loop())]
        if self.status_interval > 0:
            tasks.append(asyncio.create_task(self.status_loop()))

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                task.result()
        except websockets.exceptions.ConnectionClosed:
            print("\n❌ WebSocket connection closed")
        finally:
            for task in tasks:
                task.cancel()
            await self.cleanup()

    async def cleanup(self):
        if self.websocket:
            await self.websocket.close()
        print("✅ Disconnected")


def main():
    parser = argparse.ArgumentParser(
        description="Simulated device - connects to the bridge and obeys commands"
    )
    parser.add_argument(
        "--url", "-u",
        type=str,
        default="ws://localhost:8080/ws",
        help="WebSocket server URL (default: ws://localhost:8080/ws)"
    )
    parser.add_argument(
        "--id", "-i",
        dest="device_id",
        type=str,
        default="default",
        help="Device id reported to the server (default: default)"
    )
    parser.add_argument(
        "--interval", "-n",
        type=float,
        default=10.0,
        help="Seconds between status reports, 0 disables (default: 10)"
    )

    args = parser.parse_args()

    if not args.url.startswith(('ws://', 'wss://')):
        print("⚠️  URL must start with ws:// or wss://")
        print(f"   You provided: {args.url}")
        sys.exit(1)

    client = DeviceClient(args.url, args.device_id, args.interval)

    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        print("\n✅ Shutdown complete")


if __name__ == "__main__":
    main()
