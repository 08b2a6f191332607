"""Passive mDNS census of HomeKit and Matter advertisements.

A scan opens one browse subscription per service type, resolves each new
service once with a bounded wait, and stops by itself after the scan window.
All scanner state lives on the asyncio loop that called ``start_scan``;
backend callbacks must arrive on that loop.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from zeroconf import (
    BadTypeInNameException,
    ServiceBrowser,
    ServiceInfo,
    ServiceListener,
    Zeroconf,
)

from hkrestore.config import ScanningConfig
from hkrestore.errors import DiscoveryError, ResolveError
from hkrestore.models import (
    DISCOVERABLE_SERVICE_TYPES,
    DiscoveredDevice,
    ServiceType,
    infer_manufacturer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedEndpoint:
    address: str | None
    port: int | None
    properties: dict[str, str] = field(default_factory=dict)


class BrowseHandle(Protocol):
    def cancel(self) -> None: ...


class DiscoveryBackend(Protocol):
    def browse(
        self, service_type: ServiceType, on_found: Callable[[str], None]
    ) -> BrowseHandle: ...

    async def resolve(self, service_type: ServiceType, name: str) -> ResolvedEndpoint: ...


# Events


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"


class StopReason(str, Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ServiceFound:
    name: str
    service_type: ServiceType


@dataclass(frozen=True)
class DeviceRecorded:
    device: DiscoveredDevice
    resolved: bool


@dataclass(frozen=True)
class BrowseFailed:
    service_type: ServiceType
    message: str


@dataclass(frozen=True)
class ResolveFailed:
    name: str
    service_type: ServiceType
    message: str


@dataclass(frozen=True)
class ScanStopped:
    reason: StopReason
    device_count: int


DiscoveryEvent = ServiceFound | DeviceRecorded | BrowseFailed | ResolveFailed | ScanStopped
DiscoveryListener = Callable[[DiscoveryEvent], None]


class DiscoveryScanner:
    def __init__(
        self, backend: DiscoveryBackend, config: ScanningConfig | None = None
    ) -> None:
        self._backend = backend
        self._config = config or ScanningConfig()
        self._listeners: list[DiscoveryListener] = []
        self._handles: list[BrowseHandle] = []
        self._pending: dict[tuple[str, ServiceType], asyncio.Task[None]] = {}
        self._timer: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._idle = asyncio.Event()
        self._idle.set()

        self.devices: list[DiscoveredDevice] = []
        self.state = ScanState.IDLE
        self.status = ""
        self.error_message: str | None = None

    @property
    def is_scanning(self) -> bool:
        return self.state is ScanState.SCANNING

    def add_listener(self, listener: DiscoveryListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DiscoveryListener) -> None:
        self._listeners.remove(listener)

    # Lifecycle

    def start_scan(self) -> None:
        """Begin a new scan session, ending any active one first."""
        self.stop_scan()

        self._loop = asyncio.get_running_loop()
        self.devices = []
        self.error_message = None
        self.state = ScanState.SCANNING
        self.status = "Starting scan..."
        self._idle.clear()
        logger.debug(
            "Starting discovery (window=%.2fs, resolve_timeout=%.2fs)",
            self._config.scan_window,
            self._config.resolve_timeout,
        )

        for service_type in DISCOVERABLE_SERVICE_TYPES:
            self._subscribe(service_type)

        self._timer = self._loop.call_later(
            self._config.scan_window, self._on_scan_window_elapsed
        )

    def stop_scan(self, reason: StopReason = StopReason.MANUAL) -> None:
        """Cancel subscriptions, the scan timer and pending resolutions."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        for handle in self._handles:
            handle.cancel()
        self._handles = []

        for task in self._pending.values():
            task.cancel()
        self._pending.clear()

        if self.state is ScanState.SCANNING:
            self.state = ScanState.IDLE
            self._idle.set()
            logger.debug("Scan stopped (%s) with %d device(s)", reason.value, len(self.devices))
            self._emit(ScanStopped(reason, len(self.devices)))

    async def wait_until_idle(self) -> None:
        await self._idle.wait()

    async def wait_for_resolutions(self) -> None:
        """Wait until every in-flight resolution has recorded its device."""
        while self._pending:
            await asyncio.gather(*self._pending.values(), return_exceptions=True)

    async def scan(self) -> list[DiscoveredDevice]:
        """Run one full scan window and return what was found."""
        self.start_scan()
        try:
            await self.wait_until_idle()
        finally:
            self.stop_scan()
        return list(self.devices)

    # Views

    @property
    def hap_devices(self) -> list[DiscoveredDevice]:
        return self._of_type(ServiceType.HAP)

    @property
    def matter_commissioning_devices(self) -> list[DiscoveredDevice]:
        return self._of_type(ServiceType.MATTER_COMMISSIONING)

    @property
    def matter_operational_devices(self) -> list[DiscoveredDevice]:
        return self._of_type(ServiceType.MATTER_OPERATIONAL)

    @property
    def unpaired_devices(self) -> list[DiscoveredDevice]:
        return [device for device in self.devices if not device.is_paired]

    def devices_by_manufacturer(self, manufacturer: str) -> list[DiscoveredDevice]:
        lowered = manufacturer.lower()
        return [
            device
            for device in self.devices
            if device.manufacturer and lowered in device.manufacturer.lower()
        ]

    def search(self, text: str) -> list[DiscoveredDevice]:
        if not text:
            return list(self.devices)
        lowered = text.lower()
        return [
            device
            for device in self.devices
            if lowered in device.name.lower()
            or (device.manufacturer and lowered in device.manufacturer.lower())
            or (device.address and text in device.address)
        ]

    # Internals

    def _of_type(self, service_type: ServiceType) -> list[DiscoveredDevice]:
        return [device for device in self.devices if device.service_type is service_type]

    def _emit(self, event: DiscoveryEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _subscribe(self, service_type: ServiceType) -> None:
        try:
            handle = self._backend.browse(
                service_type, functools.partial(self._on_service_found, service_type)
            )
        except DiscoveryError as exc:
            message = f"Browser error for {service_type.label}: {exc}"
            logger.warning(message)
            self.error_message = message
            self._emit(BrowseFailed(service_type, str(exc)))
            return

        self._handles.append(handle)
        self.status = f"Scanning for {service_type.label}..."

    def _is_known(self, key: tuple[str, ServiceType]) -> bool:
        return any(device.key == key for device in self.devices)

    def _on_service_found(self, service_type: ServiceType, name: str) -> None:
        if not self.is_scanning or self._loop is None:
            return
        key = (name, service_type)
        if key in self._pending or self._is_known(key):
            logger.debug("Ignoring repeated advertisement of '%s' (%s)", name, service_type.value)
            return

        self._emit(ServiceFound(name, service_type))
        task = self._loop.create_task(self._resolve(name, service_type))
        self._pending[key] = task
        task.add_done_callback(functools.partial(self._forget, key))

    def _forget(self, key: tuple[str, ServiceType], task: asyncio.Task[None]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    async def _resolve(self, name: str, service_type: ServiceType) -> None:
        endpoint: ResolvedEndpoint | None = None
        try:
            endpoint = await asyncio.wait_for(
                self._backend.resolve(service_type, name),
                timeout=self._config.resolve_timeout,
            )
        except (asyncio.TimeoutError, TimeoutError):
            logger.debug("Resolution of '%s' timed out", name)
            self._emit(ResolveFailed(name, service_type, "resolution timed out"))
        except DiscoveryError as exc:
            logger.debug("Resolution of '%s' failed: %s", name, exc)
            self._emit(ResolveFailed(name, service_type, str(exc)))
        except Exception as exc:
            logger.warning("Unexpected error resolving '%s': %s", name, exc)
            self._emit(ResolveFailed(name, service_type, str(exc)))

        self._record(name, service_type, endpoint)

    def _record(
        self, name: str, service_type: ServiceType, endpoint: ResolvedEndpoint | None
    ) -> None:
        if not self.is_scanning or self._is_known((name, service_type)):
            return

        properties = endpoint.properties if endpoint else {}
        device = DiscoveredDevice(
            name=name,
            service_type=service_type,
            address=endpoint.address if endpoint else None,
            port=endpoint.port if endpoint else None,
            txt=properties,
            manufacturer=infer_manufacturer(name),
            model=properties.get("md") or None,
        )
        self.devices.append(device)
        self.status = f"Found {len(self.devices)} device(s)..."
        logger.debug(
            "Discovered '%s' (%s) at %s", name, service_type.value, device.address or "?"
        )
        self._emit(DeviceRecorded(device, resolved=endpoint is not None))

    def _on_scan_window_elapsed(self) -> None:
        self._timer = None
        if self.is_scanning:
            self.stop_scan(StopReason.TIMEOUT)
            self.status = "Scan complete"


# Zeroconf backend


def _decode_txt_properties(properties: dict[bytes, bytes | None]) -> dict[str, str]:
    decoded: dict[str, str] = {}
    for key, value in properties.items():
        key_text = key.decode("utf-8", errors="replace")
        if value is None:
            value_text = ""
        elif isinstance(value, bytes):
            value_text = value.decode("utf-8", errors="replace")
        else:
            value_text = str(value)
        decoded[key_text] = value_text
    return decoded


def _pick_ip(info: ServiceInfo) -> str | None:
    addresses = info.parsed_addresses()
    if not addresses:
        return None
    for address in addresses:
        if ":" not in address:
            return address
    return addresses[0]


def _strip_service_suffix(name: str, type_: str) -> str:
    suffix = f".{type_}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name.rstrip(".")


class _ServiceTypeListener(ServiceListener):
    """Forwards new instance names from the zeroconf thread to the loop."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop, on_found: Callable[[str], None]
    ) -> None:
        self._loop = loop
        self._on_found = on_found

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._on_found, _strip_service_suffix(name, type_))

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        pass

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug("Service went away: %s", name)


class ZeroconfBackend:
    """Browse and resolve DNS-SD services with python-zeroconf."""

    def __init__(self, resolve_timeout: float = 5.0) -> None:
        self._info_timeout_ms = max(int(resolve_timeout * 1000), 1)
        self._lock = threading.Lock()
        self._zeroconf: Zeroconf | None = None

    def _ensure_zeroconf(self) -> Zeroconf:
        with self._lock:
            if self._zeroconf is None:
                try:
                    self._zeroconf = Zeroconf()
                except OSError as exc:
                    raise DiscoveryError(f"Cannot open mDNS socket: {exc}") from exc
            return self._zeroconf

    def browse(
        self, service_type: ServiceType, on_found: Callable[[str], None]
    ) -> ServiceBrowser:
        zeroconf = self._ensure_zeroconf()
        listener = _ServiceTypeListener(asyncio.get_running_loop(), on_found)
        try:
            return ServiceBrowser(zeroconf, service_type.browse_type, listener)
        except (BadTypeInNameException, OSError, RuntimeError) as exc:
            raise DiscoveryError(str(exc)) from exc

    async def resolve(self, service_type: ServiceType, name: str) -> ResolvedEndpoint:
        zeroconf = self._ensure_zeroconf()
        type_ = service_type.browse_type
        try:
            info = await asyncio.to_thread(
                zeroconf.get_service_info, type_, f"{name}.{type_}", self._info_timeout_ms
            )
        except (BadTypeInNameException, OSError, RuntimeError) as exc:
            raise ResolveError(f"Cannot resolve '{name}': {exc}") from exc
        if info is None:
            raise ResolveError(f"No service info for '{name}'")
        return ResolvedEndpoint(
            address=_pick_ip(info),
            port=info.port,
            properties=_decode_txt_properties(info.properties),
        )

    async def close(self) -> None:
        with self._lock:
            zeroconf, self._zeroconf = self._zeroconf, None
        if zeroconf is not None:
            await asyncio.to_thread(zeroconf.close)
