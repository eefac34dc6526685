"""Application settings loaded from environment (.env supported)"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Device id used when a device or caller does not supply one
DEFAULT_DEVICE_ID = os.getenv("DEFAULT_DEVICE_ID", "default")

# Seconds between keep-alive frames to devices (0 disables)
HEARTBEAT_INTERVAL = float(os.getenv("HEARTBEAT_INTERVAL", "0"))

STATIC_DIR = Path(os.getenv("STATIC_DIR", str(BASE_DIR / "static")))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
