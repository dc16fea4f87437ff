from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from smartcb.cli.helpers import (
    build_database,
    build_manager,
    load_endpoint_or_exit,
    load_settings_or_exit,
    parse_endpoint_or_exit,
)
from smartcb.errors import ConnectionStateError
from smartcb.models import ConnectResult


def connect(
    host: str | None = typer.Argument(
        None,
        help="Device IP address. Defaults to the saved device, then the configured one.",
    ),
    port: str | None = typer.Option(None, "--port", "-p", help="Device HTTP port"),
    discover: bool = typer.Option(
        False, "--scan", help="Scan first and connect to the first device found"
    ),
) -> None:
    """Connect to a device and synchronize thresholds, schedules and clock."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)
    saved = load_endpoint_or_exit(db)
    manager = build_manager(settings, db)

    async def _run() -> ConnectResult:
        if host is not None:
            endpoint = parse_endpoint_or_exit(host, port or settings.device.port)
            return await manager.connect(endpoint)
        if discover:
            scan = await manager.scan()
            console.print(f"Found {len(scan.devices)} device(s)")
            return await manager.connect()
        if saved is not None:
            return await manager.reconnect()
        fallback = parse_endpoint_or_exit(
            settings.device.host, port or settings.device.port
        )
        return await manager.connect(fallback)

    try:
        result = asyncio.run(_run())
    except ConnectionStateError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(1) from exc

    if not result.ok:
        console.print(f"[red]✗[/red] Could not connect to {result.endpoint}")
        for error in result.errors:
            console.print(f"  • {error}")
        raise typer.Exit(1)

    model = result.device_info.model if result.device_info else "device"
    console.print(f"[green]✓[/green] Connected to {model} at {result.endpoint}")
    for label, synced in (
        ("Thresholds", result.thresholds_synced),
        ("Schedules", result.schedules_synced),
        ("Clock", result.clock_synced),
    ):
        mark = "[green]✓[/green]" if synced else "[yellow]![/yellow]"
        console.print(f"  {mark} {label}")
    if result.partial_sync_failure:
        console.print(
            "[yellow]Some settings could not be synchronized; "
            "run 'smartcb connect' again to retry.[/yellow]"
        )


def disconnect() -> None:
    """Forget the connected device."""
    settings = load_settings_or_exit()
    db = build_database(settings)
    manager = build_manager(settings, db)
    asyncio.run(manager.disconnect())
    Console().print("[green]✓[/green] Disconnected")


def register(app: typer.Typer) -> None:
    app.command()(connect)
    app.command()(disconnect)
