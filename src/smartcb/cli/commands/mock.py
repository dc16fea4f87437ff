from __future__ import annotations

import typer
from rich.console import Console

from smartcb.core import run_mock_device


def mock(
    port: int = typer.Option(8080, "--port", "-p", help="Port to listen on"),
    host: str = typer.Option("0.0.0.0", "--host", help="Address to bind"),
    model: str = typer.Option("SmartCB-ESP32", "--model", help="Model to report"),
    name: str = typer.Option("SmartCB-001", "--name", "-n", help="Device name"),
) -> None:
    """Run a mock SmartCB device for development."""
    console = Console()
    console.print(f"Starting mock device '{name}' on {host}:{port}...")
    console.print("Press Ctrl+C to stop.\n")

    try:
        run_mock_device(host=host, port=port, model=model, name=name)
    except KeyboardInterrupt:
        console.print("\n[green]Mock device stopped.[/green]")


def register(app: typer.Typer) -> None:
    app.command()(mock)
