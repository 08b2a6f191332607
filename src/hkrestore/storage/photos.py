from __future__ import annotations

import io
import logging
from pathlib import Path
from uuid import UUID

from PIL import Image, UnidentifiedImageError

from hkrestore.errors import StorageError

logger = logging.getLogger(__name__)

PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA"}


class PhotoStore:
    """PNG photos of setup code labels, one file per vault record."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, record_id: UUID) -> Path:
        return self.directory / f"{record_id}.png"

    def save(self, record_id: UUID, image_data: bytes) -> Path:
        """Re-encode ``image_data`` as PNG and write it for ``record_id``."""
        path = self.path_for(record_id)
        try:
            with Image.open(io.BytesIO(image_data)) as img:
                img.load()
                if img.mode not in PNG_MODES:
                    converted = img.convert("RGBA")
                else:
                    converted = img
                self.directory.mkdir(parents=True, exist_ok=True)
                converted.save(path, format="PNG")
        except UnidentifiedImageError as exc:
            raise StorageError("Failed to convert image to PNG: unrecognised format") from exc
        except OSError as exc:
            raise StorageError(f"Failed to save photo: {exc}") from exc

        logger.debug("Saved photo for %s at %s", record_id, path)
        return path

    def delete(self, path: str | Path) -> None:
        Path(path).unlink(missing_ok=True)
