from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from hkrestore.cli.helpers import load_settings_or_exit, open_inventory
from hkrestore.config import ScanningConfig
from hkrestore.core import (
    BrowseFailed,
    DiscoveryEvent,
    DiscoveryScanner,
    ResolveFailed,
    ZeroconfBackend,
)
from hkrestore.models import DiscoveredDevice
from hkrestore.utils.redaction import Redactor

logger = logging.getLogger(__name__)


async def run_scan(config: ScanningConfig, console: Console) -> list[DiscoveredDevice]:
    backend = ZeroconfBackend(resolve_timeout=config.resolve_timeout)
    scanner = DiscoveryScanner(backend, config)

    def on_event(event: DiscoveryEvent) -> None:
        if isinstance(event, BrowseFailed):
            console.print(f"[yellow]![/yellow] {event.service_type.label}: {event.message}")
        elif isinstance(event, ResolveFailed):
            logger.info("Could not resolve '%s': %s", event.name, event.message)

    scanner.add_listener(on_event)
    try:
        return await scanner.scan()
    finally:
        await backend.close()


def scan(
    window: float | None = typer.Option(
        None, "--window", "-w", help="Scan window in seconds (default from config)"
    ),
    add: bool = typer.Option(False, "--add", help="Add every found device to the inventory"),
    home: str = typer.Option("Home", "--home", help="Home for devices added with --add"),
    room: str | None = typer.Option(None, "--room", help="Room for devices added with --add"),
    redact: bool = typer.Option(False, "--redact", help="Redact addresses in output"),
) -> None:
    """Discover HomeKit and Matter devices via mDNS."""
    console = Console()

    settings = load_settings_or_exit()
    config = settings.scanning
    if window is not None:
        if window <= 0:
            console.print("[red]Scan window must be positive[/red]")
            raise typer.Exit(1)
        config = config.model_copy(update={"scan_window": window})

    console.print(f"Scanning for HomeKit and Matter devices ({config.scan_window:g}s)...")
    try:
        devices = asyncio.run(run_scan(config, console))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted.[/yellow]")
        raise typer.Exit(130) from None

    if not devices:
        console.print("No HomeKit or Matter devices found.")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("Name", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("Address")
    table.add_column("Port")
    table.add_column("Manufacturer")
    table.add_column("Paired")

    for device in devices:
        table.add_row(
            device.name,
            device.service_type.label,
            redactor.redact_ip(device.address),
            str(device.port) if device.port is not None else "",
            device.manufacturer or "",
            "yes" if device.is_paired else "no",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(devices)} device(s)[/green]")

    if add:
        inventory = open_inventory(settings, console)
        added = 0
        for device in devices:
            if inventory.add_from_discovered(device, home=home, room=room) is None:
                console.print(f"[red]✗[/red] {inventory.error_message}")
                raise typer.Exit(1)
            added += 1
        console.print(f"[green]✓[/green] Added {added} device(s) to the inventory")


def register(app: typer.Typer) -> None:
    app.command()(scan)
