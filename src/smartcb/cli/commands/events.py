from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from smartcb.cli.helpers import build_database, load_settings_or_exit
from smartcb.core import EventRange, event_statistics, filter_events, range_start
from smartcb.models import EventType


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m {secs:02d}s" if hours else f"{minutes}m {secs:02d}s"


def events(
    period: EventRange = typer.Option(EventRange.ALL, "--range", "-r", help="Time window"),
    event_type: EventType | None = typer.Option(None, "--type", "-t", help="Only this type"),
    stats: bool = typer.Option(False, "--stats", help="Show 30-day statistics"),
    clear: bool = typer.Option(False, "--clear", help="Delete the event log"),
) -> None:
    """List events recorded by 'smartcb status'."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)

    if clear:
        removed = db.clear_events()
        console.print("[green]✓[/green] Event log cleared" if removed else "No events to clear")
        return

    try:
        log = db.load_events()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    if stats:
        summary = event_statistics(log)
        console.print("[bold]Last 30 days[/bold]")
        console.print(f"Events: {summary.total_events}")
        console.print(f"Outages: {summary.total_outages}")
        console.print(f"Average outage: {_format_duration(summary.average_outage_duration)}")
        console.print(f"Total downtime: {_format_duration(summary.total_downtime)}")
        return

    selected = filter_events(log, since=range_start(period), event_type=event_type)
    if not selected:
        console.print("No events recorded.")
        return

    table = Table()
    table.add_column("Time", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Description")
    for event in selected:
        table.add_row(
            f"{event.timestamp.astimezone():%Y-%m-%d %H:%M:%S}",
            event.type.value,
            event.description,
        )
    console.print(table)
    console.print(f"\n{len(selected)} event(s)")


def register(app: typer.Typer) -> None:
    app.command()(events)
