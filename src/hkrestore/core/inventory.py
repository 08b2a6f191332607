"""Manually curated accessory inventory."""

from __future__ import annotations

import logging
from collections import Counter
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from hkrestore.errors import StorageError
from hkrestore.models import AccessoryRecord, DiscoveredDevice, GroupKey
from hkrestore.storage import BlobStore

logger = logging.getLogger(__name__)

_ACCESSORIES = TypeAdapter(list[AccessoryRecord])


class DeviceInventory:
    def __init__(self, store: BlobStore) -> None:
        self._store = store
        self.accessories: list[AccessoryRecord] = []
        self.error_message: str | None = None

    def load(self) -> list[AccessoryRecord]:
        self.error_message = None
        try:
            blob = self._store.read()
            self.accessories = _ACCESSORIES.validate_json(blob) if blob else []
        except StorageError as exc:
            self._fail(f"Failed to load accessories: {exc}")
            self.accessories = []
        except ValidationError as exc:
            self._fail(f"Failed to load accessories: {exc.error_count()} error(s)")
            self.accessories = []
        return self.accessories

    def add_or_update(self, record: AccessoryRecord) -> bool:
        updated = list(self.accessories)
        for index, item in enumerate(updated):
            if item.id == record.id:
                updated[index] = record
                break
        else:
            updated.append(record)
        updated.sort(key=lambda item: item.name)
        return self._commit(updated)

    def add_from_discovered(
        self, device: DiscoveredDevice, home: str = "Home", room: str | None = None
    ) -> AccessoryRecord | None:
        accessory = AccessoryRecord(
            name=device.name,
            manufacturer=device.manufacturer or "Unknown",
            model=device.model or "Unknown",
            room=room,
            home=home,
            category=device.service_type.category,
            is_reachable=True,
            ip_address=device.address,
        )
        return accessory if self.add_or_update(accessory) else None

    def remove(self, record: AccessoryRecord) -> bool:
        return self._commit([item for item in self.accessories if item.id != record.id])

    def get(self, record_id: UUID) -> AccessoryRecord | None:
        return next((item for item in self.accessories if item.id == record_id), None)

    def find_by_homekit_uuid(self, uuid: UUID) -> AccessoryRecord | None:
        return next((item for item in self.accessories if item.home_kit_uuid == uuid), None)

    @property
    def homes(self) -> list[str]:
        return sorted({item.home for item in self.accessories if item.home})

    def group_by(self, key: GroupKey) -> list[tuple[str, list[AccessoryRecord]]]:
        groups: dict[str, list[AccessoryRecord]] = {}
        for item in self.accessories:
            label = getattr(item, key.value) or key.sentinel
            groups.setdefault(label, []).append(item)
        return sorted(groups.items())

    def counts_by(self, key: GroupKey) -> list[tuple[str, int]]:
        return Counter(
            getattr(item, key.value) or key.sentinel for item in self.accessories
        ).most_common()

    def search(self, text: str) -> list[AccessoryRecord]:
        if not text:
            return list(self.accessories)
        lowered = text.lower()
        return [
            item
            for item in self.accessories
            if lowered in item.name.lower()
            or lowered in item.manufacturer.lower()
            or lowered in item.model.lower()
            or lowered in (item.room or "").lower()
        ]

    @property
    def reachable_count(self) -> int:
        return sum(1 for item in self.accessories if item.is_reachable)

    @property
    def unreachable_count(self) -> int:
        return len(self.accessories) - self.reachable_count

    def _commit(self, updated: list[AccessoryRecord]) -> bool:
        try:
            self._store.write(_ACCESSORIES.dump_json(updated, by_alias=True).decode("utf-8"))
        except StorageError as exc:
            self._fail(f"Failed to save accessories: {exc}")
            return False
        self.accessories = updated
        self.error_message = None
        return True

    def _fail(self, message: str) -> None:
        logger.warning(message)
        self.error_message = message
