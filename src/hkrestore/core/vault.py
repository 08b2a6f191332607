"""Setup code vault.

The whole list is encoded as one JSON blob. Every mutation builds the new
list, persists it, and only then replaces the in-memory list, so a failed
write leaves the vault exactly as it was.
"""

from __future__ import annotations

import logging
from collections import Counter
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from hkrestore.errors import StorageError
from hkrestore.models import SetupCodeRecord
from hkrestore.storage import BlobStore, PhotoStore

logger = logging.getLogger(__name__)

_CODES = TypeAdapter(list[SetupCodeRecord])


class CodeVault:
    def __init__(self, store: BlobStore, photos: PhotoStore) -> None:
        self._store = store
        self._photos = photos
        self.codes: list[SetupCodeRecord] = []
        self.error_message: str | None = None

    def load(self) -> list[SetupCodeRecord]:
        self.error_message = None
        try:
            blob = self._store.read()
        except StorageError as exc:
            self._fail(f"Failed to read codes: {exc}")
            self.codes = []
            return self.codes

        if not blob:
            self.codes = []
            return self.codes

        try:
            self.codes = _CODES.validate_json(blob)
        except ValidationError as exc:
            self._fail(f"Failed to decode codes: {exc.error_count()} error(s)")
            logger.debug("Vault decode errors: %s", exc)
            self.codes = []
        else:
            logger.debug("Loaded %d code(s)", len(self.codes))
        return self.codes

    def save(self, record: SetupCodeRecord) -> bool:
        """Insert ``record``, or replace the record with the same id."""
        updated = list(self.codes)
        for index, existing in enumerate(updated):
            if existing.id == record.id:
                updated[index] = record.touched()
                break
        else:
            updated.append(record)

        return self._commit(updated, "Failed to save code to secure storage")

    def delete(self, record: SetupCodeRecord) -> bool:
        updated = [code for code in self.codes if code.id != record.id]
        if not self._commit(updated, "Failed to delete code from secure storage"):
            return False
        if record.photo_path:
            self._remove_photo(record.photo_path)
        return True

    def delete_all(self) -> bool:
        previous = list(self.codes)
        if not self._commit([], "Failed to clear codes from secure storage"):
            return False
        for code in previous:
            if code.photo_path:
                self._remove_photo(code.photo_path)
        return True

    def attach_photo(self, record: SetupCodeRecord, image_data: bytes) -> bool:
        try:
            path = self._photos.save(record.id, image_data)
        except StorageError as exc:
            self._fail(str(exc))
            return False
        if self.save(record.model_copy(update={"photo_path": str(path)})):
            return True
        # The stored record still points at this file when re-attaching.
        if record.photo_path != str(path):
            self._remove_photo(str(path))
        return False

    def get(self, record_id: UUID) -> SetupCodeRecord | None:
        return next((code for code in self.codes if code.id == record_id), None)

    def search(self, text: str) -> list[SetupCodeRecord]:
        if not text:
            return list(self.codes)
        lowered = text.lower()
        return [
            code
            for code in self.codes
            if lowered in code.accessory_name.lower()
            or lowered in code.manufacturer.lower()
            or lowered in code.model.lower()
            or text in code.code
        ]

    def codes_for_manufacturer(self, manufacturer: str) -> list[SetupCodeRecord]:
        lowered = manufacturer.lower()
        return [code for code in self.codes if lowered in code.manufacturer.lower()]

    def code_for_accessory(self, accessory_id: UUID) -> SetupCodeRecord | None:
        return next((code for code in self.codes if code.accessory_id == accessory_id), None)

    def code_for_name(self, name: str) -> SetupCodeRecord | None:
        lowered = name.lower()
        return next(
            (code for code in self.codes if code.accessory_name.lower() == lowered), None
        )

    @property
    def codes_with_photos(self) -> int:
        return sum(1 for code in self.codes if code.photo_path)

    def counts_by_manufacturer(self) -> list[tuple[str, int]]:
        return Counter(code.manufacturer for code in self.codes).most_common()

    def _commit(self, updated: list[SetupCodeRecord], failure: str) -> bool:
        try:
            self._store.write(_CODES.dump_json(updated, by_alias=True).decode("utf-8"))
        except StorageError as exc:
            self._fail(f"{failure}: {exc}")
            return False
        self.codes = updated
        self.error_message = None
        return True

    def _remove_photo(self, path: str) -> None:
        try:
            self._photos.delete(path)
        except OSError as exc:
            logger.debug("Ignoring failure to remove photo %s: %s", path, exc)

    def _fail(self, message: str) -> None:
        logger.warning(message)
        self.error_message = message
