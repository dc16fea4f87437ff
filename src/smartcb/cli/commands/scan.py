from __future__ import annotations

import asyncio
import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from smartcb.cli.helpers import (
    build_database,
    build_manager,
    load_endpoint_or_exit,
    load_settings_or_exit,
    parse_endpoint_or_exit,
)
from smartcb.config import ScanningConfig
from smartcb.utils.redaction import Redactor

logger = logging.getLogger(__name__)


def scan(
    hosts: list[str] | None = typer.Argument(
        None,
        help="Addresses to probe. Common SmartCB addresses are used if omitted.",
    ),
    port: str | None = typer.Option(None, "--port", "-p", help="Device HTTP port"),
    subnet: bool | None = typer.Option(
        None,
        "--subnet/--no-subnet",
        help="Also probe the local /24 subnet",
    ),
    full: bool = typer.Option(
        False, "--full", help="Sweep every host of the local subnet"
    ),
    save: bool = typer.Option(False, help="Save scan results to data directory"),
    redact: bool = typer.Option(
        False,
        "--redact",
        help="Redact addresses in output",
    ),
) -> None:
    """Scan the network for SmartCB devices."""
    console = Console()

    settings = load_settings_or_exit()
    db = build_database(settings)

    updates: dict[str, object] = {}
    if port is not None:
        updates["port"] = port
    if subnet is not None:
        updates["scan_local_subnet"] = subnet
    if full:
        updates["full_subnet"] = True
    try:
        scanning = ScanningConfig.model_validate(
            {**settings.scanning.model_dump(), **updates}
        )
    except ValidationError as exc:
        typer.echo(f"Invalid scan options: {exc}", err=True)
        raise typer.Exit(1) from exc
    settings = settings.model_copy(update={"scanning": scanning})

    candidates = None
    if hosts:
        candidates = [parse_endpoint_or_exit(host, scanning.port) for host in hosts]

    saved = load_endpoint_or_exit(db)

    manager = build_manager(settings, db)
    console.print("Scanning for SmartCB devices...")
    logger.info(
        "Scan settings: timeout=%.2fs, parallel_probes=%d",
        scanning.timeout,
        scanning.parallel_probes,
    )
    result = asyncio.run(manager.scan(candidates))

    if not result.devices:
        console.print(f"No SmartCB devices found ({result.candidates} addresses probed).")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("IP", style="cyan")
    table.add_column("Port")
    table.add_column("Model", style="green")
    table.add_column("Saved", style="yellow")

    for device in result.devices:
        table.add_row(
            redactor.redact_ip(device.endpoint.host),
            device.endpoint.port,
            device.model or "",
            "✓" if device.endpoint == saved else "",
        )

    console.print(table)
    console.print(
        f"\n[green]Found {len(result.devices)} device(s) "
        f"out of {result.candidates} addresses[/green]"
    )

    if save:
        db.save_scan(result.devices, result.candidates)
        console.print(f"[green]✓[/green] Saved scan results to {db.path}")


def register(app: typer.Typer) -> None:
    app.command()(scan)
