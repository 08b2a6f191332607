from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, default_data_dir, expand_path

CONFIG_ENV_VAR = "HKRESTORE_CONFIG"

VaultBackend = Literal["keyring", "file"]


class StorageConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class VaultConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    backend: VaultBackend = "keyring"
    service: str = "com.hkrestore.codes"
    account: str = "stored_codes"


class ScanningConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    scan_window: float = Field(default=30.0, gt=0)
    resolve_timeout: float = Field(default=5.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    vault: VaultConfig = Field(default_factory=VaultConfig)
    scanning: ScanningConfig = Field(default_factory=ScanningConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.storage.path)


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# hkrestore configuration",
        "",
        "[storage]",
        f"path = {_toml_string(settings.storage.path)}",
        "",
        "[vault]",
        "# keyring: OS credential store; file: 0600 JSON file in the data dir",
        f"backend = {_toml_string(settings.vault.backend)}",
        f"service = {_toml_string(settings.vault.service)}",
        f"account = {_toml_string(settings.vault.account)}",
        "",
        "[scanning]",
        f"scan_window = {settings.scanning.scan_window}",
        f"resolve_timeout = {settings.scanning.resolve_timeout}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
