from __future__ import annotations


class SmartCBError(Exception):
    """Base class for errors raised by smartcb."""


class DeviceTransportError(SmartCBError):
    """The device could not be reached (refused, unreachable, timed out)."""


class DeviceResponseError(SmartCBError):
    """The device answered, but with an error status or an unexpected body."""


class ConnectionStateError(SmartCBError):
    """An operation was requested that the current connection state forbids."""
