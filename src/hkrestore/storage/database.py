from __future__ import annotations

from pathlib import Path

from hkrestore.config import PHOTOS_DIRNAME, VaultConfig

from .blobs import BlobStore, FileBlobStore, KeyringBlobStore, Preferences
from .photos import PhotoStore

PREFERENCES_FILE = "preferences.json"
VAULT_FILE = "vault.json"
ACCESSORIES_KEY = "stored_accessories"


class Database:
    """Layout of the hkrestore data directory."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._photos_dir = data_dir / PHOTOS_DIRNAME
        self._preferences_path = data_dir / PREFERENCES_FILE
        self._vault_path = data_dir / VAULT_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def photos_dir(self) -> Path:
        return self._photos_dir

    @property
    def preferences_path(self) -> Path:
        return self._preferences_path

    @property
    def vault_path(self) -> Path:
        return self._vault_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._photos_dir.mkdir(parents=True, exist_ok=True)

    def preferences(self) -> Preferences:
        return Preferences(self._preferences_path)

    def accessories_store(self) -> BlobStore:
        return self.preferences().blob(ACCESSORIES_KEY)

    def vault_store(self, config: VaultConfig) -> BlobStore:
        if config.backend == "file":
            return FileBlobStore(self._vault_path)
        return KeyringBlobStore(config.service, config.account)

    def photo_store(self) -> PhotoStore:
        return PhotoStore(self._photos_dir)

    def init(self) -> bool:
        """Create the directory tree. Returns True if the data dir was new."""
        created = not self._preferences_path.exists()
        self.ensure_dirs()
        if created:
            self.preferences().set(ACCESSORIES_KEY, "[]")
        return created
