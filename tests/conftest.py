"""
Pytest configuration and fixtures for testing.

Provides a fresh device registry per test.
"""

import os

import pytest

# Keep tests independent of a developer's .env
os.environ.setdefault("HEARTBEAT_INTERVAL", "0")
os.environ.setdefault("DEFAULT_DEVICE_ID", "default")

from services.registry import DeviceRegistry  # noqa: E402


@pytest.fixture
def registry():
    """
    Provides an empty device registry.

    Returns:
        DeviceRegistry: New registry instance.
    """
    return DeviceRegistry()
