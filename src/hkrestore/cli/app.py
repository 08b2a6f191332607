from __future__ import annotations

from typing import Annotated

import typer

from hkrestore.utils.logging import setup_logging

from .commands import codes as codes_cmd
from .commands import config as config_cmd
from .commands import devices as devices_cmd
from .commands.export import register as register_export
from .commands.init import register as register_init
from .commands.scan import register as register_scan

app = typer.Typer(
    help="hkrestore - back up HomeKit and Matter setup codes", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(codes_cmd.app, name="codes")
app.add_typer(devices_cmd.app, name="devices")

register_init(app)
register_scan(app)
register_export(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """hkrestore CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"hkrestore version {get_version('hkrestore')}")
        raise typer.Exit()
