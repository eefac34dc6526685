"""
End-to-end tests: real WebSocket sessions through the FastAPI app.

The client is used as a context manager so HTTP calls and WebSocket
sessions share one event loop.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app import create_app


@pytest.fixture
def app(registry):
    return create_app(registry=registry, heartbeat_interval=0)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def test_greeting_and_device_listing(client, registry):
    with client.websocket_connect("/ws?id=esp1") as ws:
        assert ws.receive_json() == {
            "type": "connected",
            "message": "Connected to IoT server",
            "deviceId": "esp1",
        }

        devices = client.get("/api/devices").json()["devices"]
        assert [d["id"] for d in devices] == ["esp1"]

    assert "esp1" not in registry


def test_default_id_and_sub_path(client):
    with client.websocket_connect("/ws/esp32") as ws:
        assert ws.receive_json()["deviceId"] == "default"


def test_led_command_reaches_device(client):
    with client.websocket_connect("/ws?id=esp1") as ws:
        ws.receive_json()

        response = client.get("/api/led?state=on&device=esp1")

        assert response.status_code == 200
        assert ws.receive_text() == "light:on"


def test_sensor_scenario(client):
    with client.websocket_connect("/ws?id=sensor1") as ws:
        ws.receive_json()

        response = client.post("/api/command", json={"command": "ping", "device": "sensor1"})
        assert response.status_code == 200
        assert ws.receive_text() == "ping"

    response = client.post("/api/command", json={"command": "ping", "device": "sensor1"})
    assert response.status_code == 500
    assert response.json()["device"] == "sensor1"


def test_inbound_frames_observed(registry):
    seen = []
    app = create_app(
        registry=registry,
        message_observer=lambda device_id, message: seen.append((device_id, message)),
        heartbeat_interval=0,
    )

    with TestClient(app) as client:
        with client.websocket_connect("/ws?id=esp1") as ws:
            ws.receive_json()
            ws.send_text("temp:21.5")
            ws.send_bytes(b"hum:40")
            # round trip through the server so both frames are processed
            client.get("/api/led?state=off&device=esp1")
            assert ws.receive_text() == "light:off"

    assert seen == [("esp1", "temp:21.5"), ("esp1", "hum:40")]


def test_reconnect_with_same_id(client, registry):
    with client.websocket_connect("/ws") as older:
        older.receive_json()
        with client.websocket_connect("/ws") as newer:
            newer.receive_json()
            assert len(registry) == 1

            client.get("/api/led?state=on")
            assert newer.receive_text() == "light:on"

        # the older socket stays open but is no longer registered
        assert "default" not in registry


def test_stale_close_keeps_newer_connection(client, registry):
    first_cm = client.websocket_connect("/ws")
    first = first_cm.__enter__()
    first.receive_json()

    with client.websocket_connect("/ws") as second:
        second.receive_json()

        first_cm.__exit__(None, None, None)

        assert "default" in registry
        response = client.post("/api/command", json={"command": "ping"})
        assert response.status_code == 200
        assert second.receive_text() == "ping"


def test_non_ws_upgrade_rejected(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/devices"):
            pass
