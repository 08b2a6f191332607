from __future__ import annotations

import os
from pathlib import Path

import platformdirs

APP_NAME = "hkrestore"
CONFIG_FILENAME = "config.toml"
PHOTOS_DIRNAME = "Photos"


def default_config_path() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILENAME


def default_data_dir() -> Path:
    # Application Support on macOS, XDG data home elsewhere.
    return Path(platformdirs.user_data_dir(APP_NAME))


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
