from __future__ import annotations

import logging
import os
from typing import Literal

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# libraries that log every HTTP connection; a scan opens dozens
NOISY_LOGGERS = ("urllib3",)


def setup_logging(level: LogLevel | None = None) -> None:
    """Install colored console logging.

    An explicit ``level`` wins over ``LOGLEVEL`` from the environment, which
    wins over INFO.
    """
    resolved = level or os.environ.get("LOGLEVEL", "INFO").upper()

    coloredlogs.install(level=resolved, fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
