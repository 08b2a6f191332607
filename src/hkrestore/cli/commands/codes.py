from __future__ import annotations

from pathlib import Path
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from hkrestore.cli.helpers import load_settings_or_exit, open_vault, pick_by_id
from hkrestore.models import CodeFormat, SetupCodeRecord, format_setup_code, hints_for
from hkrestore.utils.redaction import Redactor

app = typer.Typer(no_args_is_help=True, help="Manage saved setup codes.")


def _clean_code(code: str, code_format: CodeFormat) -> str:
    if code_format is CodeFormat.NUMERIC:
        return format_setup_code(code)
    return code.strip()


@app.command("list")
def list_codes(
    search: str = typer.Option("", "--search", "-s", help="Filter by name, maker, model or code"),
    redact: bool = typer.Option(False, "--redact", help="Mask setup codes in output"),
) -> None:
    """List saved setup codes."""
    console = Console()
    vault = open_vault(load_settings_or_exit(), console)
    codes = vault.search(search)

    if not codes:
        console.print("No setup codes saved." if not search else "No matching codes.")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("Id", style="dim")
    table.add_column("Accessory", style="cyan")
    table.add_column("Manufacturer")
    table.add_column("Model")
    table.add_column("Code", style="green")
    table.add_column("Location")

    for code in codes:
        table.add_row(
            str(code.id)[:8],
            code.accessory_name,
            code.manufacturer,
            code.model,
            redactor.redact_code(code.formatted_code),
            code.code_location or "",
        )

    console.print(table)
    console.print(f"\n{len(codes)} code(s), {vault.codes_with_photos} with photos")


@app.command("add")
def add_code(
    accessory_name: str = typer.Argument(..., help="Accessory name"),
    code: str = typer.Argument(..., help="Setup code, e.g. 123-45-678"),
    manufacturer: str = typer.Option("Unknown", "--manufacturer", "-m"),
    model: str = typer.Option("Unknown", "--model"),
    code_format: CodeFormat = typer.Option(CodeFormat.NUMERIC, "--format"),
    location: str | None = typer.Option(None, "--location", help="Where the code is printed"),
    notes: str | None = typer.Option(None, "--notes"),
    accessory_id: str | None = typer.Option(
        None, "--accessory-id", help="HomeKit UUID of the accessory"
    ),
) -> None:
    """Save a new setup code."""
    console = Console()

    try:
        linked = UUID(accessory_id) if accessory_id else None
    except ValueError:
        console.print(f"[red]Invalid UUID:[/red] {accessory_id}")
        raise typer.Exit(1) from None

    cleaned = _clean_code(code, code_format)
    if not cleaned:
        console.print("[red]Setup code is empty[/red]")
        raise typer.Exit(1)

    vault = open_vault(load_settings_or_exit(), console)
    record = SetupCodeRecord(
        accessory_id=linked,
        accessory_name=accessory_name,
        manufacturer=manufacturer or "Unknown",
        model=model or "Unknown",
        code=cleaned,
        code_format=code_format,
        code_location=location or None,
        notes=notes or None,
    )
    if not vault.save(record):
        console.print(f"[red]✗[/red] {vault.error_message}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Saved code for '{accessory_name}' ({str(record.id)[:8]})")
    if not record.is_valid_format and code_format is CodeFormat.NUMERIC:
        console.print("[yellow]![/yellow] Code does not look like XXX-XX-XXX")


@app.command("update")
def update_code(
    ident: str = typer.Argument(..., help="Code id or unique id prefix"),
    accessory_name: str | None = typer.Option(None, "--name"),
    code: str | None = typer.Option(None, "--code"),
    manufacturer: str | None = typer.Option(None, "--manufacturer", "-m"),
    model: str | None = typer.Option(None, "--model"),
    location: str | None = typer.Option(None, "--location"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    """Edit a saved setup code."""
    console = Console()
    vault = open_vault(load_settings_or_exit(), console)
    record = pick_by_id(vault.codes, ident, console)

    changes: dict[str, object] = {}
    if accessory_name is not None:
        changes["accessory_name"] = accessory_name
    if code is not None:
        cleaned = _clean_code(code, record.code_format)
        if not cleaned:
            console.print("[red]Setup code is empty[/red]")
            raise typer.Exit(1)
        changes["code"] = cleaned
    if manufacturer is not None:
        changes["manufacturer"] = manufacturer
    if model is not None:
        changes["model"] = model
    if location is not None:
        changes["code_location"] = location or None
    if notes is not None:
        changes["notes"] = notes or None

    if not vault.save(record.model_copy(update=changes)):
        console.print(f"[red]✗[/red] {vault.error_message}")
        raise typer.Exit(1)
    name = changes.get("accessory_name", record.accessory_name)
    console.print(f"[green]✓[/green] Updated code for '{name}'")


@app.command("remove")
def remove_code(ident: str = typer.Argument(..., help="Code id or unique id prefix")) -> None:
    """Delete a saved setup code and its photo."""
    console = Console()
    vault = open_vault(load_settings_or_exit(), console)
    record = pick_by_id(vault.codes, ident, console)

    if not vault.delete(record):
        console.print(f"[red]✗[/red] {vault.error_message}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Removed code for '{record.accessory_name}'")


@app.command("clear")
def clear_codes(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every saved setup code."""
    console = Console()
    vault = open_vault(load_settings_or_exit(), console)
    if not yes and not typer.confirm(f"Delete all {len(vault.codes)} code(s)?"):
        raise typer.Abort()

    if not vault.delete_all():
        console.print(f"[red]✗[/red] {vault.error_message}")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Cleared the vault")


@app.command("photo")
def attach_photo(
    ident: str = typer.Argument(..., help="Code id or unique id prefix"),
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image of the label"),
) -> None:
    """Attach a photo of the code label (stored as PNG)."""
    console = Console()
    vault = open_vault(load_settings_or_exit(), console)
    record = pick_by_id(vault.codes, ident, console)

    if not vault.attach_photo(record, image.read_bytes()):
        console.print(f"[red]✗[/red] {vault.error_message}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Attached photo to '{record.accessory_name}'")


@app.command("hints")
def show_hints(manufacturer: str = typer.Argument(..., help="Manufacturer name")) -> None:
    """Show where a manufacturer usually prints the setup code."""
    console = Console()
    hint = hints_for(manufacturer)
    if hint is None:
        console.print(f"No hints for '{manufacturer}'. Check the device and its packaging.")
        return

    console.print(f"[bold]{hint.manufacturer}[/bold] ({', '.join(hint.products)})\n")
    console.print("Look:")
    for location in hint.locations:
        console.print(f"  • {location}")
    console.print("\nTips:")
    for tip in hint.tips:
        console.print(f"  • {tip}")
