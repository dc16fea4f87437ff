from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from pydantic import ValidationError

from smartcb.config import COMMON_DEVICE_HOSTS, ScanningConfig
from smartcb.models import DeviceEndpoint, ProbeResult

from .probe import probe

logger = logging.getLogger(__name__)

# host numbers the firmware's setup guide suggests reserving
COMMON_HOST_NUMBERS = (10, 50, 100)


def detect_local_ip() -> str:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            local_ip = sock.getsockname()[0]
    except OSError as exc:
        raise RuntimeError("Could not detect local network") from exc
    logger.debug("Detected local address: %s", local_ip)
    return local_ip


def detect_local_network() -> str:
    network = ipaddress.ip_network(f"{detect_local_ip()}/24", strict=False)
    logger.debug("Detected local network: %s", network)
    return str(network)


def subnet_hosts(local_ip: str, *, full: bool = False, max_hosts: int = 254) -> list[str]:
    """Candidate hosts on the /24 around ``local_ip``.

    Without ``full`` only the customary SmartCB host numbers are returned;
    with it the whole subnet is swept, gateway first.
    """
    network = ipaddress.ip_network(f"{local_ip}/24", strict=False)
    prefix = str(network.network_address).rsplit(".", 1)[0]
    if not full:
        return [f"{prefix}.{number}" for number in COMMON_HOST_NUMBERS]

    gateway = f"{prefix}.1"
    hosts = [gateway]
    hosts.extend(str(host) for host in network.hosts() if str(host) != gateway)
    return hosts[: max(1, max_hosts)]


def build_candidates(
    config: ScanningConfig, local_ip: str | None = None
) -> list[DeviceEndpoint]:
    """Common SmartCB addresses, configured extras, then the local subnet."""
    hosts = list(COMMON_DEVICE_HOSTS) + list(config.extra_candidates)

    if config.scan_local_subnet:
        if local_ip is None:
            try:
                local_ip = detect_local_ip()
            except RuntimeError:
                logger.warning(
                    "Could not detect local network; probing common addresses only"
                )
        if local_ip is not None:
            hosts.extend(
                subnet_hosts(
                    local_ip, full=config.full_subnet, max_hosts=config.max_hosts
                )
            )

    candidates: list[DeviceEndpoint] = []
    seen: set[DeviceEndpoint] = set()
    for host in hosts:
        try:
            endpoint = DeviceEndpoint(host=host, port=config.port)
        except ValidationError:
            logger.warning("Skipping invalid candidate address %r", host)
            continue
        if endpoint not in seen:
            seen.add(endpoint)
            candidates.append(endpoint)
    return candidates


async def scan(
    candidates: Iterable[DeviceEndpoint], config: ScanningConfig
) -> list[ProbeResult]:
    """Probe every candidate concurrently and return those that answered.

    All probes are awaited; a scan never stops at the first hit.
    """
    unique = sorted(set(candidates), key=DeviceEndpoint.sort_key)
    if not unique:
        return []

    workers = min(config.parallel_probes, len(unique))
    logger.debug(
        "Scanning %d candidates (timeout=%.2fs, parallel=%d)",
        len(unique),
        config.timeout,
        workers,
    )
    semaphore = asyncio.Semaphore(workers)
    # extra threads for probes still unwinding after their deadline
    executor = ThreadPoolExecutor(
        max_workers=workers * 2, thread_name_prefix="smartcb-probe"
    )

    async def _bounded(endpoint: DeviceEndpoint) -> ProbeResult:
        async with semaphore:
            return await probe(
                endpoint,
                config.timeout,
                model_family=config.model_family,
                executor=executor,
            )

    try:
        results = await asyncio.gather(*(_bounded(endpoint) for endpoint in unique))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    found = [result for result in results if result.present]
    logger.debug("Scan complete: found %d devices", len(found))
    return found
