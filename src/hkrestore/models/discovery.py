"""Devices seen during a discovery scan."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .codes import utcnow


class ServiceType(str, Enum):
    HAP = "_hap._tcp"
    MATTER_COMMISSIONING = "_matterc._udp"
    MATTER_OPERATIONAL = "_matter._tcp"
    OTHER = "other"

    @property
    def browse_type(self) -> str:
        """Fully qualified DNS-SD type, e.g. ``_hap._tcp.local.``."""
        return f"{self.value}.local."

    @property
    def label(self) -> str:
        return SERVICE_LABELS[self]

    @property
    def category(self) -> str:
        return SERVICE_CATEGORIES[self]


DISCOVERABLE_SERVICE_TYPES: tuple[ServiceType, ...] = (
    ServiceType.HAP,
    ServiceType.MATTER_COMMISSIONING,
    ServiceType.MATTER_OPERATIONAL,
)

SERVICE_LABELS: dict[ServiceType, str] = {
    ServiceType.HAP: "HomeKit (HAP)",
    ServiceType.MATTER_COMMISSIONING: "Matter (Commissioning)",
    ServiceType.MATTER_OPERATIONAL: "Matter (Operational)",
    ServiceType.OTHER: "Other",
}

SERVICE_CATEGORIES: dict[ServiceType, str] = {
    ServiceType.HAP: "HomeKit Device",
    ServiceType.MATTER_COMMISSIONING: "Matter Device (Unpaired)",
    ServiceType.MATTER_OPERATIONAL: "Matter Device",
    ServiceType.OTHER: "Unknown",
}

KNOWN_MANUFACTURERS: tuple[str, ...] = (
    "Eve",
    "Lutron",
    "Hue",
    "Nanoleaf",
    "Ecobee",
    "Aqara",
    "LIFX",
    "Wemo",
    "Meross",
    "VOCOlinc",
)


def infer_manufacturer(name: str) -> str | None:
    lowered = name.lower()
    for vendor in KNOWN_MANUFACTURERS:
        if vendor.lower() in lowered:
            return vendor
    return None


class DiscoveredDevice(BaseModel):
    """A service advertisement seen in the current scan session."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    service_type: ServiceType
    address: str | None = None
    port: int | None = None
    txt: dict[str, str] = Field(default_factory=dict)
    manufacturer: str | None = None
    model: str | None = None
    discovered_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, ServiceType]:
        return (self.name, self.service_type)

    @property
    def is_paired(self) -> bool:
        # Operational Matter records are only advertised by commissioned nodes.
        return self.service_type is ServiceType.MATTER_OPERATIONAL
