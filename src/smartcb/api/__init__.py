from __future__ import annotations

from .client import DEFAULT_TIMEOUT, DeviceClient, create_session

__all__ = ["DEFAULT_TIMEOUT", "DeviceClient", "create_session"]
