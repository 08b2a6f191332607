"""Inventory accessory records."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .codes import utcnow

CATEGORY_LABELS: dict[str, str] = {
    "lightbulb": "Lightbulb",
    "switch": "Switch",
    "outlet": "Outlet",
    "thermostat": "Thermostat",
    "door": "Door",
    "doorlock": "Door Lock",
    "garagedoor": "Garage Door Opener",
    "fan": "Fan",
    "sensor": "Sensor",
    "security": "Security System",
    "camera": "Camera",
    "doorbell": "Video Doorbell",
    "window": "Window",
    "windowcovering": "Window Covering",
    "programmableswitch": "Programmable Switch",
    "bridge": "Bridge",
    "airpurifier": "Air Purifier",
    "airconditioner": "Air Conditioner",
    "airdehumidifier": "Air Dehumidifier",
    "airheater": "Air Heater",
    "airhumidifier": "Air Humidifier",
    "sprinkler": "Sprinkler",
    "faucet": "Faucet",
    "showerhead": "Shower Head",
}


def category_label(kind: str) -> str:
    """Display label for a category key; free text passes through."""
    key = kind.strip().lower().replace(" ", "").replace("_", "")
    return CATEGORY_LABELS.get(key, kind.strip() or "Unknown")


class AccessoryRecord(BaseModel):
    """Manually curated accessory. Only ``id`` is unique."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    id: UUID = Field(default_factory=uuid4, frozen=True)
    home_kit_uuid: UUID | None = Field(default=None, alias="homeKitUUID")
    name: str
    manufacturer: str = "Unknown"
    model: str = "Unknown"
    firmware_version: str | None = None
    serial_number: str | None = None
    room: str | None = None
    home: str | None = None
    category: str = "Unknown"
    is_reachable: bool = True
    ip_address: str | None = None
    mac_address: str | None = None
    last_seen: datetime = Field(default_factory=utcnow)
    setup_code: str | None = None
    notes: str | None = None


class GroupKey(str, Enum):
    ROOM = "room"
    MANUFACTURER = "manufacturer"
    CATEGORY = "category"
    HOME = "home"

    @property
    def sentinel(self) -> str:
        return GROUP_SENTINELS[self]


GROUP_SENTINELS: dict[GroupKey, str] = {
    GroupKey.ROOM: "Unassigned",
    GroupKey.MANUFACTURER: "Unknown",
    GroupKey.CATEGORY: "Unknown",
    GroupKey.HOME: "Unknown Home",
}
