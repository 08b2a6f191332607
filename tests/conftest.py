from __future__ import annotations

import pytest

from hkrestore.config import get_settings
from hkrestore.errors import StorageError
from hkrestore.storage import PhotoStore


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("HKRESTORE_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class MemoryBlobStore:
    """In-memory blob store; set ``fail_writes`` to simulate a storage error."""

    def __init__(self, blob: str | None = None) -> None:
        self.blob = blob
        self.fail_writes = False
        self.writes = 0

    def read(self) -> str | None:
        return self.blob

    def write(self, data: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        self.blob = data
        self.writes += 1


@pytest.fixture
def memory_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def photo_store(tmp_path) -> PhotoStore:
    return PhotoStore(tmp_path / "Photos")
