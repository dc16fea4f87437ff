from __future__ import annotations

from typing import Annotated

import typer

from smartcb.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands.connect import register as register_connect
from .commands.device import register as register_device
from .commands.events import register as register_events
from .commands.info import register as register_info
from .commands.init import register as register_init
from .commands.mock import register as register_mock
from .commands.scan import register as register_scan
from .commands.status import register as register_status

app = typer.Typer(
    help="SmartCB - discover and manage a WiFi smart circuit breaker",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")

register_init(app)
register_info(app)
register_scan(app)
register_connect(app)
register_status(app)
register_device(app)
register_events(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log probes and device requests"),
    ] = False,
) -> None:
    """SmartCB CLI."""
    setup_logging("DEBUG" if debug else None)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"smartcb version {get_version('smartcb')}")
        raise typer.Exit()
