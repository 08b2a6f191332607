from __future__ import annotations

from .export import (
    ExportFormat,
    default_filename,
    find_code,
    render,
    render_csv,
    render_json,
    render_text,
    unmatched_codes,
    write_export,
)
from .inventory import DeviceInventory
from .scanner import (
    BrowseFailed,
    DeviceRecorded,
    DiscoveryBackend,
    DiscoveryEvent,
    DiscoveryScanner,
    ResolvedEndpoint,
    ResolveFailed,
    ScanState,
    ScanStopped,
    ServiceFound,
    StopReason,
    ZeroconfBackend,
)
from .vault import CodeVault

__all__ = [
    "BrowseFailed",
    "CodeVault",
    "DeviceInventory",
    "DeviceRecorded",
    "DiscoveryBackend",
    "DiscoveryEvent",
    "DiscoveryScanner",
    "ExportFormat",
    "ResolveFailed",
    "ResolvedEndpoint",
    "ScanState",
    "ScanStopped",
    "ServiceFound",
    "StopReason",
    "ZeroconfBackend",
    "default_filename",
    "find_code",
    "render",
    "render_csv",
    "render_json",
    "render_text",
    "unmatched_codes",
    "write_export",
]
