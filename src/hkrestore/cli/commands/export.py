from __future__ import annotations

from datetime import date
from pathlib import Path

import typer
from rich.console import Console

from hkrestore.cli.helpers import load_settings_or_exit, open_inventory, open_vault
from hkrestore.core import ExportFormat, default_filename, render, write_export
from hkrestore.errors import ExportError


def export(
    fmt: ExportFormat = typer.Argument(..., metavar="FORMAT", help="csv, json or text"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Destination file (default: dated name in cwd)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Export the inventory and saved codes."""
    console = Console()
    settings = load_settings_or_exit()
    inventory = open_inventory(settings, console)
    vault = open_vault(settings, console)

    destination = output or Path(default_filename(fmt, date.today()))
    if destination.exists() and not force:
        console.print(f"[yellow]![/yellow] {destination} exists; use --force to overwrite")
        raise typer.Exit(1)

    content = render(fmt, inventory.accessories, vault.codes)
    try:
        write_export(destination, content)
    except ExportError as exc:
        console.print(f"[red]Export failed:[/red] {exc}")
        raise typer.Exit(1) from None

    console.print(
        f"[green]✓[/green] Exported {len(inventory.accessories)} accessory(ies) and "
        f"{len(vault.codes)} code(s) to {destination}"
    )


def register(app: typer.Typer) -> None:
    app.command()(export)
