from __future__ import annotations

from datetime import datetime
from enum import Enum

import typer
from rich.console import Console

from smartcb.cli.helpers import (
    build_database,
    load_settings_or_exit,
    saved_client_or_exit,
)
from smartcb.core import ClockSynchronizer, ConfigSynchronizer
from smartcb.errors import DeviceResponseError, DeviceTransportError


class RelayState(str, Enum):
    ON = "on"
    OFF = "off"


def relay(state: RelayState = typer.Argument(..., help="on or off")) -> None:
    """Switch the breaker relay."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)

    with saved_client_or_exit(settings, db) as client:
        try:
            accepted = client.set_relay(state is RelayState.ON)
        except (DeviceTransportError, DeviceResponseError) as exc:
            console.print(f"[red]✗[/red] {exc}")
            raise typer.Exit(1) from exc

    if not accepted:
        console.print("[red]✗[/red] Device rejected the relay command")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Relay switched {state.value}")


def sync_time() -> None:
    """Push the current time to the device."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)

    now = datetime.now()
    with saved_client_or_exit(settings, db) as client:
        synced = ClockSynchronizer(client).push(now)

    if not synced:
        console.print("[red]✗[/red] Time sync failed")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Device clock set to {now:%H:%M %A}")


def push() -> None:
    """Send local thresholds and schedules to the device."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)
    try:
        config = db.load_config()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    with saved_client_or_exit(settings, db) as client:
        result = ConfigSynchronizer(client).push(config, settings.reconnection)

    for label, accepted in (
        ("Thresholds", result.settings),
        ("Schedules", result.schedules),
    ):
        mark = "[green]✓[/green]" if accepted else "[red]✗[/red]"
        console.print(f"{mark} {label}")
    for error in result.errors:
        console.print(f"  • {error}")
    if not result.ok:
        raise typer.Exit(1)


def register(app: typer.Typer) -> None:
    app.command()(relay)
    app.command("sync-time")(sync_time)
    app.command()(push)
