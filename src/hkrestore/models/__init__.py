"""Data models for hkrestore."""

from hkrestore.models.accessories import (
    CATEGORY_LABELS,
    GROUP_SENTINELS,
    AccessoryRecord,
    GroupKey,
    category_label,
)
from hkrestore.models.codes import (
    CODE_FORMAT_LABELS,
    CodeFormat,
    SetupCodeRecord,
    format_setup_code,
    normalize_code_input,
    utcnow,
)
from hkrestore.models.discovery import (
    DISCOVERABLE_SERVICE_TYPES,
    KNOWN_MANUFACTURERS,
    SERVICE_CATEGORIES,
    SERVICE_LABELS,
    DiscoveredDevice,
    ServiceType,
    infer_manufacturer,
)
from hkrestore.models.hints import CODE_LOCATION_HINTS, CodeLocationHint, hints_for

__all__ = [
    "CATEGORY_LABELS",
    "CODE_FORMAT_LABELS",
    "CODE_LOCATION_HINTS",
    "DISCOVERABLE_SERVICE_TYPES",
    "GROUP_SENTINELS",
    "KNOWN_MANUFACTURERS",
    "SERVICE_CATEGORIES",
    "SERVICE_LABELS",
    "AccessoryRecord",
    "CodeFormat",
    "CodeLocationHint",
    "DiscoveredDevice",
    "GroupKey",
    "ServiceType",
    "SetupCodeRecord",
    "category_label",
    "format_setup_code",
    "hints_for",
    "infer_manufacturer",
    "normalize_code_input",
    "utcnow",
]
