from __future__ import annotations

from .paths import (
    APP_NAME,
    CONFIG_FILENAME,
    PHOTOS_DIRNAME,
    default_config_path,
    default_data_dir,
    expand_path,
)
from .settings import (
    CONFIG_ENV_VAR,
    ScanningConfig,
    Settings,
    StorageConfig,
    VaultBackend,
    VaultConfig,
    data_dir_from_settings,
    get_settings,
    load_settings,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "PHOTOS_DIRNAME",
    "ScanningConfig",
    "Settings",
    "StorageConfig",
    "VaultBackend",
    "VaultConfig",
    "data_dir_from_settings",
    "default_config_path",
    "default_data_dir",
    "expand_path",
    "get_settings",
    "load_settings",
    "render_settings_toml",
    "resolve_config_path",
    "write_settings",
]
