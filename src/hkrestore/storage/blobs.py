"""Single-blob persistence backends.

Every collection is stored as one encoded blob and rewritten as a whole on
each change. Two concurrent writers can therefore lose each other's update;
callers are expected to be a single interactive user.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

import keyring
from keyring.errors import KeyringError

from hkrestore.errors import StorageError

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    def read(self) -> str | None: ...

    def write(self, data: str) -> None: ...


def _atomic_write(path: Path, text: str, mode: int = 0o644) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(text)
    os.replace(tmp_path, path)


class KeyringBlobStore:
    """Blob kept in the OS credential store under a service/account pair."""

    def __init__(self, service: str, account: str) -> None:
        self.service = service
        self.account = account

    def read(self) -> str | None:
        try:
            return keyring.get_password(self.service, self.account)
        except KeyringError as exc:
            raise StorageError(f"Keyring read failed: {exc}") from exc

    def write(self, data: str) -> None:
        try:
            keyring.set_password(self.service, self.account, data)
        except KeyringError as exc:
            raise StorageError(f"Keyring write failed: {exc}") from exc
        logger.debug("Stored %d bytes in keyring %s/%s", len(data), self.service, self.account)


class FileBlobStore:
    """Blob kept in a private file, for hosts without a keyring backend."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {self.path}: {exc}") from exc

    def write(self, data: str) -> None:
        try:
            _atomic_write(self.path, data, mode=0o600)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc


class Preferences:
    """Key-value preference file holding one string blob per key."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError(f"Failed to read {self.path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Invalid preferences file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Invalid preferences file {self.path}: not an object")
        return data

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        try:
            _atomic_write(self.path, json.dumps(data, indent=2, sort_keys=True) + "\n")
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    def blob(self, key: str) -> PreferenceBlobStore:
        return PreferenceBlobStore(self, key)


class PreferenceBlobStore:
    def __init__(self, preferences: Preferences, key: str) -> None:
        self.preferences = preferences
        self.key = key

    def read(self) -> str | None:
        return self.preferences.get(self.key)

    def write(self, data: str) -> None:
        self.preferences.set(self.key, data)
