from __future__ import annotations

from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from hkrestore.cli.helpers import load_settings_or_exit, open_inventory, pick_by_id
from hkrestore.models import AccessoryRecord, GroupKey, category_label

app = typer.Typer(no_args_is_help=True, help="Manage the accessory inventory.")


def _accessory_table(accessories: list[AccessoryRecord]) -> Table:
    table = Table()
    table.add_column("Id", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Manufacturer")
    table.add_column("Model")
    table.add_column("Category")
    table.add_column("Room")
    table.add_column("Home")
    table.add_column("Reachable")

    for item in accessories:
        table.add_row(
            str(item.id)[:8],
            item.name,
            item.manufacturer,
            item.model,
            item.category,
            item.room or "",
            item.home or "",
            "[green]yes[/green]" if item.is_reachable else "[red]no[/red]",
        )
    return table


@app.command("list")
def list_devices(
    group_by: GroupKey | None = typer.Option(None, "--group-by", "-g", help="Group the list"),
    search: str = typer.Option("", "--search", "-s", help="Filter by name, maker, model or room"),
) -> None:
    """List inventory accessories."""
    console = Console()
    inventory = open_inventory(load_settings_or_exit(), console)

    if not inventory.accessories:
        console.print("No accessories in the inventory.")
        console.print("Use 'hkrestore devices add' or 'hkrestore scan --add' to create some.")
        return

    if group_by is None or search:
        console.print(_accessory_table(inventory.search(search)))
    else:
        for label, members in inventory.group_by(group_by):
            console.print(f"\n[bold]{label}[/bold] ({len(members)})")
            console.print(_accessory_table(members))

    console.print(
        f"\n{len(inventory.accessories)} accessory(ies), "
        f"{inventory.reachable_count} reachable, {inventory.unreachable_count} unreachable"
    )


@app.command("add")
def add_device(
    name: str = typer.Argument(..., help="Accessory name"),
    manufacturer: str = typer.Option("Unknown", "--manufacturer", "-m"),
    model: str = typer.Option("Unknown", "--model"),
    category: str = typer.Option("Unknown", "--category", "-c", help="e.g. lightbulb, outlet"),
    room: str | None = typer.Option(None, "--room"),
    home: str | None = typer.Option(None, "--home"),
    ip_address: str | None = typer.Option(None, "--ip"),
    homekit_uuid: str | None = typer.Option(None, "--homekit-uuid"),
    setup_code: str | None = typer.Option(None, "--code"),
    notes: str | None = typer.Option(None, "--notes"),
    unreachable: bool = typer.Option(False, "--unreachable"),
) -> None:
    """Add an accessory to the inventory."""
    console = Console()

    try:
        uuid = UUID(homekit_uuid) if homekit_uuid else None
    except ValueError:
        console.print(f"[red]Invalid UUID:[/red] {homekit_uuid}")
        raise typer.Exit(1) from None

    inventory = open_inventory(load_settings_or_exit(), console)
    record = AccessoryRecord(
        home_kit_uuid=uuid,
        name=name,
        manufacturer=manufacturer or "Unknown",
        model=model or "Unknown",
        category=category_label(category),
        room=room,
        home=home,
        ip_address=ip_address,
        setup_code=setup_code,
        notes=notes,
        is_reachable=not unreachable,
    )
    if not inventory.add_or_update(record):
        console.print(f"[red]✗[/red] {inventory.error_message}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Added '{name}' ({str(record.id)[:8]})")


@app.command("remove")
def remove_device(
    ident: str = typer.Argument(..., help="Accessory id or unique id prefix"),
) -> None:
    """Remove an accessory from the inventory."""
    console = Console()
    inventory = open_inventory(load_settings_or_exit(), console)
    record = pick_by_id(inventory.accessories, ident, console)

    if not inventory.remove(record):
        console.print(f"[red]✗[/red] {inventory.error_message}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Removed '{record.name}'")
