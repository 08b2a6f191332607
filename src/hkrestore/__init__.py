"""hkrestore - back up HomeKit and Matter setup codes and document your accessories."""

from __future__ import annotations

from importlib.metadata import version

from .config import ScanningConfig, Settings, get_settings
from .core import CodeVault, DeviceInventory, DiscoveryScanner, ZeroconfBackend
from .models import AccessoryRecord, DiscoveredDevice, ServiceType, SetupCodeRecord
from .storage import Database

__all__ = [
    "AccessoryRecord",
    "CodeVault",
    "Database",
    "DeviceInventory",
    "DiscoveredDevice",
    "DiscoveryScanner",
    "ScanningConfig",
    "ServiceType",
    "SetupCodeRecord",
    "Settings",
    "ZeroconfBackend",
    "__version__",
    "get_settings",
]

__version__ = version("hkrestore")
