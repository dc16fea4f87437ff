from __future__ import annotations

import time

import typer
from rich.console import Console
from rich.table import Table

from smartcb.cli.helpers import (
    build_database,
    load_settings_or_exit,
    saved_client_or_exit,
)
from smartcb.core import Classification, EventRecorder, Status, classify
from smartcb.errors import DeviceResponseError, DeviceTransportError
from smartcb.models import Reading

_STYLES = {Status.NORMAL: "green", Status.WARNING: "yellow", Status.CRITICAL: "red"}


def _render(reading: Reading, result: Classification) -> Table:
    def cell(status: Status) -> str:
        return f"[{_STYLES[status]}]{status.value}[/{_STYLES[status]}]"

    table = Table(title=f"Relay {'ON' if reading.relay_state else 'OFF'}")
    table.add_column("Measurement", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Status")
    table.add_row("Voltage", f"{reading.voltage:.1f} V", cell(result.voltage))
    table.add_row("Current", f"{reading.current:.2f} A", cell(result.current))
    table.add_row("Frequency", f"{reading.frequency:.1f} Hz", cell(result.frequency))
    table.add_row(
        "Power factor", f"{reading.power_factor:.2f}", cell(result.power_factor)
    )
    table.add_row("Power", f"{reading.power:.1f} W", "")
    table.add_row("Energy", f"{reading.energy:.2f} kWh", "")
    return table


def status(
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep polling"),
    interval: float = typer.Option(2.0, "--interval", help="Seconds between polls"),
) -> None:
    """Read the device and classify it against local thresholds."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)
    try:
        thresholds = db.load_config().thresholds
        db.load_events()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    recorder = EventRecorder(db, thresholds)
    with saved_client_or_exit(settings, db) as client:
        try:
            while True:
                try:
                    reading = client.get_status()
                except (DeviceTransportError, DeviceResponseError) as exc:
                    console.print(f"[red]✗[/red] {exc}")
                    if not watch:
                        raise typer.Exit(1) from exc
                else:
                    result = classify(reading, thresholds)
                    console.print(_render(reading, result))
                    if reading.protection_triggered:
                        reason = reading.protection_reason or "unknown reason"
                        console.print(f"[red]Protection triggered: {reason}[/red]")
                    if result.needs_attention:
                        names = ", ".join(result.breaches())
                        console.print(f"[yellow]Needs attention: {names}[/yellow]")
                    for event in recorder.record(reading):
                        console.print(f"[magenta]Event:[/magenta] {event.description}")
                if not watch:
                    return
                time.sleep(interval)
        except KeyboardInterrupt:
            console.print("\nStopped.")


def register(app: typer.Typer) -> None:
    app.command()(status)
