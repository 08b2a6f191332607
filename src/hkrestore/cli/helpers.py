from __future__ import annotations

from pathlib import Path
from typing import TypeVar
from uuid import UUID

import typer
from rich.console import Console

from hkrestore.config import (
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from hkrestore.core import CodeVault, DeviceInventory
from hkrestore.storage import Database

T = TypeVar("T")


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_database(settings: Settings, data_dir: Path | None = None) -> Database:
    path = data_dir or data_dir_from_settings(settings)
    return Database(path)


def open_vault(settings: Settings, console: Console) -> CodeVault:
    db = build_database(settings)
    vault = CodeVault(db.vault_store(settings.vault), db.photo_store())
    vault.load()
    if vault.error_message:
        console.print(f"[yellow]![/yellow] {vault.error_message}")
    return vault


def open_inventory(settings: Settings, console: Console) -> DeviceInventory:
    db = build_database(settings)
    inventory = DeviceInventory(db.accessories_store())
    inventory.load()
    if inventory.error_message:
        console.print(f"[yellow]![/yellow] {inventory.error_message}")
    return inventory


def pick_by_id(items: list[T], ident: str, console: Console) -> T:
    """Find the single record whose id equals or starts with ``ident``."""
    wanted = ident.strip().lower()
    try:
        exact = UUID(wanted)
    except ValueError:
        exact = None

    matches = [
        item
        for item in items
        if getattr(item, "id") == exact or str(getattr(item, "id")).startswith(wanted)
    ]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        console.print(f"[yellow]![/yellow] No record with id '{ident}'")
    else:
        console.print(f"[yellow]![/yellow] Id prefix '{ident}' is ambiguous")
    raise typer.Exit(1)
