"""Mock SmartCB breaker serving the firmware HTTP API, for development and tests."""

from __future__ import annotations

import json
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

logger = logging.getLogger(__name__)


def _default_settings() -> dict[str, Any]:
    return {
        "minVoltage": 180.0,
        "maxVoltage": 250.0,
        "maxCurrent": 16.0,
        "protectionEnabled": True,
        "minFrequency": 49.0,
        "maxFrequency": 51.0,
        "frequencyProtection": True,
        "minPowerFactor": 0.85,
        "powerFactorProtection": True,
        "autoResetDelay": 30,
        "autoReconnectEnabled": True,
    }


@dataclass
class MockBreakerDevice:
    """In-process stand-in for a SmartCB unit.

    ``failing`` paths answer HTTP 500 and ``delays`` hold a path's response
    back for the given number of seconds.
    """

    host: str = "127.0.0.1"
    port: int = 0
    model: str = "SmartCB-ESP32"
    name: str = "SmartCB-001"
    firmware_version: str = "4.0.0"
    mac: str = "AA:BB:CC:DD:EE:FF"

    relay_state: bool = True
    energy: float = 12.45
    settings: dict[str, Any] = field(default_factory=_default_settings)
    schedules: list[dict[str, Any]] = field(default_factory=list)
    clock: dict[str, int] | None = None

    failing: set[str] = field(default_factory=set)
    delays: dict[str, float] = field(default_factory=dict)

    _server: ThreadingHTTPServer | None = field(default=None, repr=False)
    _thread: threading.Thread | None = field(default=None, repr=False)

    def start(self) -> None:
        """Start serving in a background thread."""
        self._bind()
        assert self._server is not None
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="smartcb-mock", daemon=True
        )
        self._thread.start()

    def serve_forever(self) -> None:
        """Serve in the calling thread until interrupted."""
        self._bind()
        assert self._server is not None
        try:
            self._server.serve_forever()
        finally:
            self._server.server_close()

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        logger.info("Mock device '%s' stopped", self.name)
        self._server = None
        self._thread = None

    def _bind(self) -> None:
        self._server = ThreadingHTTPServer((self.host, self.port), _make_handler(self))
        self._server.daemon_threads = True
        self.port = self._server.server_address[1]
        logger.info("Mock device '%s' listening on %s:%d", self.name, self.host, self.port)

    def info(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "name": self.name,
            "firmwareVersion": self.firmware_version,
            "mac": self.mac,
        }

    def status(self) -> dict[str, Any]:
        voltage = 220 + (random.random() - 0.5) * 10
        current = 1.2 + random.random() * 0.8 if self.relay_state else 0.0
        power_factor = 0.92 + random.random() * 0.07
        apparent = voltage * current
        power = apparent * power_factor
        return {
            "voltage": round(voltage, 1),
            "current": round(current, 2),
            "power": round(power, 1),
            "energy": self.energy,
            "frequency": round(50 + (random.random() - 0.5) * 0.2, 1),
            "powerFactor": round(power_factor, 2),
            "apparentPower": round(apparent, 1),
            "reactivePower": round(max(apparent**2 - power**2, 0) ** 0.5, 1),
            "relayState": self.relay_state,
            "timestamp": int(time.monotonic() * 1000),
            "protectionTriggered": False,
            "manualMode": False,
            "powerOutage": False,
            "reconnectionPending": False,
        }

    def handle(self, method: str, path: str, body: Any) -> tuple[int, Any]:
        """Route one request; returns (status, JSON body)."""
        if path in self.failing:
            return 500, {"error": "internal error"}

        if method == "GET":
            if path == "/api/info":
                return 200, self.info()
            if path == "/api/status":
                return 200, self.status()
            if path == "/api/settings":
                return 200, dict(self.settings)
            if path == "/api/schedules":
                return 200, {"schedules": list(self.schedules)}
            if path == "/api/time" and self.clock is not None:
                return 200, dict(self.clock)
            return 404, {"error": "not found"}

        if not isinstance(body, dict):
            return 400, {"success": False}
        if path == "/api/settings":
            self.settings.update(body)
        elif path == "/api/schedules":
            self.schedules = list(body.get("schedules", []))
        elif path == "/api/time":
            self.clock = {key: int(body[key]) for key in ("hour", "minute", "day")}
        elif path == "/api/relay":
            self.relay_state = bool(body.get("state"))
            logger.info("Relay switched %s", "on" if self.relay_state else "off")
        else:
            return 404, {"error": "not found"}
        return 200, {"success": True}


def _make_handler(device: MockBreakerDevice) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def _respond(self, method: str) -> None:
            delay = device.delays.get(self.path)
            if delay:
                time.sleep(delay)

            body: Any = None
            length = int(self.headers.get("Content-Length") or 0)
            if length:
                try:
                    body = json.loads(self.rfile.read(length))
                except json.JSONDecodeError:
                    body = None

            status, payload = device.handle(method, self.path, body)
            data = json.dumps(payload).encode()
            try:
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                self.wfile.write(data)
            except (BrokenPipeError, ConnectionResetError):
                logger.debug("Client went away before %s %s completed", method, self.path)

        def do_GET(self) -> None:  # noqa: N802
            self._respond("GET")

        def do_POST(self) -> None:  # noqa: N802
            self._respond("POST")

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.debug("%s - %s", self.address_string(), format % args)

    return Handler


def run_mock_device(**kwargs: Any) -> None:
    """Run a mock device in the foreground (``smartcb mock``)."""
    MockBreakerDevice(**kwargs).serve_forever()
