from __future__ import annotations

import os
from pathlib import Path

import platformdirs

APP_NAME = "smartcb"
CONFIG_FILENAME = "config.toml"


def default_config_path() -> Path:
    # honours XDG_CONFIG_HOME on Linux
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILENAME


def default_data_dir() -> Path:
    return Path(platformdirs.user_data_dir(APP_NAME))


def expand_path(value: str | Path) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(str(value))).expanduser()
