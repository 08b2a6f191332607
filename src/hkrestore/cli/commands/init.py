from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from hkrestore.cli.helpers import build_database, load_settings_or_exit
from hkrestore.config import (
    Settings,
    StorageConfig,
    VaultBackend,
    VaultConfig,
    resolve_config_path,
    write_settings,
)


def register(app: typer.Typer) -> None:
    @app.command()
    def init(
        data_dir: Annotated[
            Path | None,
            typer.Option("--data-dir", "--path", help="Custom data directory"),
        ] = None,
        vault_backend: Annotated[
            str,
            typer.Option("--vault", help="Where codes are stored: keyring or file"),
        ] = "keyring",
        force: Annotated[
            bool,
            typer.Option("--force", "-f", help="Overwrite an existing config file"),
        ] = False,
    ) -> None:
        """Initialize hkrestore configuration and data directory."""
        console = Console()

        if vault_backend not in ("keyring", "file"):
            console.print(f"[red]Invalid vault backend:[/red] {vault_backend}")
            raise typer.Exit(1)
        backend: VaultBackend = "file" if vault_backend == "file" else "keyring"

        storage = StorageConfig(path=str(data_dir)) if data_dir else StorageConfig()
        settings = Settings(storage=storage, vault=VaultConfig(backend=backend))

        config_path, config_exists = resolve_config_path(allow_missing=True)
        if config_exists and not force:
            console.print(f"[dim]Config exists:[/dim] {config_path}")
            settings = load_settings_or_exit()
        else:
            write_settings(settings, config_path)
            action = "Overwrote" if config_exists else "Created"
            console.print(f"[green]✓[/green] {action} config: {config_path}")

        db = build_database(settings)
        if db.init():
            console.print(f"[green]✓[/green] Initialized data dir: {db.path}")
        else:
            console.print(f"[dim]Data dir exists:[/dim] {db.path}")
