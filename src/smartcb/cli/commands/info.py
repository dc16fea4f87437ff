from __future__ import annotations

import typer
from rich.console import Console

from smartcb.cli.helpers import (
    build_database,
    load_settings_or_exit,
    resolve_config_path_or_exit,
)


def info() -> None:
    """Show data directory, saved device and local thresholds."""
    settings = load_settings_or_exit()
    db = build_database(settings)
    try:
        config = db.load_config()
        endpoint = db.load_endpoint()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    current_scan = db.load_current_scan()

    config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)

    console = Console()

    console.print("[bold]SmartCB Info[/bold]\n")
    console.print(f"Data directory: {db.path}")
    console.print(f"Config file: {config_path if config_exists else 'defaults'}")
    console.print(f"Device: {endpoint if endpoint else 'not connected'}")

    console.print("\n[bold]Scanning[/bold]")
    console.print(f"Port: {settings.scanning.port}")
    console.print(f"Timeout: {settings.scanning.timeout}s")
    console.print(f"Parallel probes: {settings.scanning.parallel_probes}")

    t = config.thresholds
    console.print("\n[bold]Thresholds[/bold]")
    console.print(f"Voltage: {t.voltage.min:g}-{t.voltage.max:g} V")
    console.print(f"Current: max {t.current.max:g} A ({_on_off(t.current.enabled)})")
    console.print(
        f"Frequency: {t.frequency.min:g}-{t.frequency.max:g} Hz "
        f"({_on_off(t.frequency.enabled)})"
    )
    console.print(
        f"Power factor: min {t.power_factor.min:g} ({_on_off(t.power_factor.enabled)})"
    )
    console.print(f"Energy: max {t.energy.max:g} kWh ({_on_off(t.energy.enabled)})")
    console.print(f"Schedules: {len(config.schedules)}")

    if current_scan:
        console.print(f"\nLast scan: {current_scan.scan_timestamp}")
        console.print(f"Devices found: {len(current_scan.devices)}")


def _on_off(enabled: bool) -> str:
    return "on" if enabled else "off"


def register(app: typer.Typer) -> None:
    app.command()(info)
