"""Connection lifecycle for a single SmartCB device."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from smartcb.api import DeviceClient
from smartcb.config import Settings
from smartcb.errors import ConnectionStateError, DeviceResponseError, DeviceTransportError
from smartcb.models import (
    ConnectionState,
    ConnectResult,
    DeviceConfig,
    DeviceEndpoint,
    ScanResult,
    SyncSession,
)
from smartcb.storage import Database

from . import scanner
from .sync import ClockSynchronizer, ConfigSynchronizer

logger = logging.getLogger(__name__)

ClientFactory = Callable[[DeviceEndpoint, float], DeviceClient]

_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.IDLE: frozenset(
        {ConnectionState.SCANNING, ConnectionState.CONNECTING}
    ),
    ConnectionState.SCANNING: frozenset({ConnectionState.IDLE}),
    ConnectionState.CONNECTING: frozenset(
        {ConnectionState.CONNECTED, ConnectionState.FAILED}
    ),
    ConnectionState.CONNECTED: frozenset({ConnectionState.IDLE}),
    ConnectionState.FAILED: frozenset(
        {ConnectionState.SCANNING, ConnectionState.CONNECTING, ConnectionState.IDLE}
    ),
}


def _default_client(endpoint: DeviceEndpoint, timeout: float) -> DeviceClient:
    return DeviceClient(endpoint, timeout=timeout)


class ConnectionManager:
    """Owns the connection state and the active endpoint.

    Nothing else mutates either; ``scan``, ``connect`` and ``disconnect`` are
    serialized by an internal lock. Connecting runs the sync session in order:
    remember the endpoint, check the device answers, pull configuration, push
    the clock. Only the second step can fail the attempt.
    """

    def __init__(
        self,
        settings: Settings,
        database: Database | None = None,
        client_factory: ClientFactory | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._settings = settings
        self._database = database
        self._client_factory = client_factory or _default_client
        self._clock = clock
        self._state = ConnectionState.IDLE
        self._endpoint: DeviceEndpoint | None = None
        self._discovered: list[DeviceEndpoint] = []
        self._config = database.load_config() if database else DeviceConfig()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def endpoint(self) -> DeviceEndpoint | None:
        return self._endpoint

    @property
    def discovered(self) -> list[DeviceEndpoint]:
        return list(self._discovered)

    @property
    def config(self) -> DeviceConfig:
        return self._config

    def _transition(self, target: ConnectionState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise ConnectionStateError(
                f"Cannot go from {self._state.value} to {target.value}"
            )
        logger.debug("Connection state: %s -> %s", self._state.value, target.value)
        self._state = target

    async def scan(
        self, candidates: Iterable[DeviceEndpoint] | None = None
    ) -> ScanResult:
        async with self._lock:
            if self._state is ConnectionState.CONNECTED:
                raise ConnectionStateError(
                    f"Connected to {self._endpoint}; disconnect before scanning"
                )
            self._transition(ConnectionState.SCANNING)
            try:
                if candidates is None:
                    candidates = await asyncio.to_thread(
                        scanner.build_candidates, self._settings.scanning
                    )
                candidate_list = list(candidates)
                found = await scanner.scan(candidate_list, self._settings.scanning)
            finally:
                self._transition(ConnectionState.IDLE)

            self._discovered = [result.endpoint for result in found]
            return ScanResult(
                scan_timestamp=datetime.now(timezone.utc),
                candidates=len(set(candidate_list)),
                devices=found,
            )

    async def connect(self, endpoint: DeviceEndpoint | None = None) -> ConnectResult:
        async with self._lock:
            if self._state is ConnectionState.CONNECTED:
                logger.info("Disconnecting from %s first", self._endpoint)
                self._disconnect()
            if endpoint is None:
                if not self._discovered:
                    raise ConnectionStateError(
                        "No endpoint given and no device discovered yet"
                    )
                endpoint = self._discovered[0]

            self._forget_other_device(endpoint)
            self._transition(ConnectionState.CONNECTING)
            session = SyncSession(endpoint=endpoint)
            self._endpoint = endpoint
            client = self._client_factory(endpoint, self._settings.device.timeout)
            try:
                return await self._run_session(session, client)
            except BaseException:
                if self._state is ConnectionState.CONNECTING:
                    self._endpoint = None
                    self._transition(ConnectionState.FAILED)
                raise
            finally:
                client.close()

    def _forget_other_device(self, endpoint: DeviceEndpoint) -> None:
        """Drop a device saved by an earlier session if we are switching away.

        Commands run in separate processes, so the saved endpoint is the
        previous connection even when this manager is still IDLE.
        """
        if self._database is None:
            return
        try:
            saved = self._database.load_endpoint()
        except ValueError as exc:
            logger.warning("Discarding unreadable saved device: %s", exc)
            self._database.clear_endpoint()
            return
        if saved is not None and saved != endpoint:
            logger.info("Disconnecting from %s first", saved)
            self._database.clear_endpoint()

    async def _run_session(
        self, session: SyncSession, client: DeviceClient
    ) -> ConnectResult:
        endpoint = session.endpoint
        try:
            session.device_info = await asyncio.to_thread(client.get_info)
        except (DeviceTransportError, DeviceResponseError) as exc:
            logger.error("Failed to connect to %s: %s", endpoint, exc)
            session.errors.append(f"connect: {exc}")
            self._endpoint = None
            self._transition(ConnectionState.FAILED)
            return ConnectResult.from_session(session, ConnectionState.FAILED)

        info = session.device_info
        logger.info("Reached %s at %s", info.model, endpoint)
        if not info.matches_family(self._settings.scanning.model_family):
            logger.warning(
                "Device at %s reports model %r, expected a %s device",
                endpoint,
                info.model,
                self._settings.scanning.model_family,
            )

        synchronizer = ConfigSynchronizer(client)
        pulled = await asyncio.to_thread(synchronizer.pull, self._config, session)
        self._config = synchronizer.apply(self._config, pulled)

        await asyncio.to_thread(
            ClockSynchronizer(client).push, self._clock(), session
        )

        if self._database is not None:
            self._database.save_config(self._config)
            self._database.save_endpoint(endpoint)

        self._transition(ConnectionState.CONNECTED)
        if session.errors:
            logger.warning(
                "Connected to %s, but sync was incomplete: %s",
                endpoint,
                "; ".join(session.errors),
            )
        else:
            logger.info("Connected to %s and synchronized", endpoint)
        return ConnectResult.from_session(session, ConnectionState.CONNECTED)

    async def reconnect(self) -> ConnectResult:
        """Run a fresh connect against the endpoint saved by an earlier session."""
        saved = self._database.load_endpoint() if self._database else None
        if saved is None:
            raise ConnectionStateError("No saved device to reconnect to")
        return await self.connect(saved)

    async def disconnect(self) -> None:
        async with self._lock:
            self._disconnect()

    def _disconnect(self) -> None:
        if self._state in (ConnectionState.CONNECTED, ConnectionState.FAILED):
            self._transition(ConnectionState.IDLE)
        if self._endpoint is not None:
            logger.info("Disconnected from %s", self._endpoint)
        self._endpoint = None
        if self._database is not None:
            self._database.clear_endpoint()

    def client(self) -> DeviceClient:
        """HTTP client for the connected device."""
        if self._state is not ConnectionState.CONNECTED or self._endpoint is None:
            raise ConnectionStateError("Not connected to a device")
        return self._client_factory(self._endpoint, self._settings.device.timeout)
