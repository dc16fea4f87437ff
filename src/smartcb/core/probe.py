from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor

from smartcb.api import DeviceClient
from smartcb.errors import DeviceResponseError, DeviceTransportError
from smartcb.models import DeviceEndpoint, DeviceInfo, ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL_FAMILY = "ESP32"


def _fetch_info(endpoint: DeviceEndpoint, timeout: float) -> DeviceInfo:
    with DeviceClient(endpoint, timeout=timeout) as client:
        return client.get_info()


async def probe(
    endpoint: DeviceEndpoint,
    deadline: float,
    *,
    model_family: str = DEFAULT_MODEL_FAMILY,
    executor: Executor | None = None,
) -> ProbeResult:
    """Check one address for a SmartCB within ``deadline`` seconds.

    Never raises for a missing device: timeouts, transport errors and foreign
    devices all come back as ``present=False``.
    """
    absent = ProbeResult(endpoint=endpoint, present=False)
    logger.debug("Probing %s", endpoint)
    loop = asyncio.get_running_loop()
    try:
        info = await asyncio.wait_for(
            loop.run_in_executor(executor, _fetch_info, endpoint, deadline),
            timeout=deadline,
        )
    except (asyncio.TimeoutError, TimeoutError):
        logger.debug("No response from %s (timeout)", endpoint)
        return absent
    except (DeviceTransportError, DeviceResponseError) as exc:
        logger.debug("No device at %s: %s", endpoint, exc)
        return absent

    if not info.matches_family(model_family):
        logger.debug(
            "Ignoring %s: model %r is not a %s device", endpoint, info.model, model_family
        )
        return absent

    logger.debug("Found %s at %s", info.model, endpoint)
    return ProbeResult(endpoint=endpoint, present=True, model=info.model)
