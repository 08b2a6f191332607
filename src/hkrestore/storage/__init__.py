from __future__ import annotations

from .blobs import (
    BlobStore,
    FileBlobStore,
    KeyringBlobStore,
    PreferenceBlobStore,
    Preferences,
)
from .database import ACCESSORIES_KEY, Database
from .photos import PhotoStore

__all__ = [
    "ACCESSORIES_KEY",
    "BlobStore",
    "Database",
    "FileBlobStore",
    "KeyringBlobStore",
    "PhotoStore",
    "PreferenceBlobStore",
    "Preferences",
]
