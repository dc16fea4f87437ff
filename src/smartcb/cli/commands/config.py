from __future__ import annotations

from typing import Annotated

import typer
from pydantic import ValidationError

from smartcb.cli.helpers import load_settings_or_exit, resolve_config_path_or_exit
from smartcb.config import (
    DeviceConnectionConfig,
    Settings,
    render_settings_toml,
    write_settings,
)

app = typer.Typer(no_args_is_help=True, help="Show or create the configuration file")


@app.command("show")
def show_config() -> None:
    """Print the effective configuration as TOML."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    typer.echo(f"# source: {path if exists else 'built-in defaults'}")
    typer.echo(render_settings_toml(settings))


@app.command("path")
def config_path() -> None:
    """Print where the configuration file is read from."""
    path, _ = resolve_config_path_or_exit(allow_missing=True)
    typer.echo(str(path))


@app.command("init")
def init_config(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Default device address for 'smartcb connect'"),
    ] = None,
    port: Annotated[
        str | None,
        typer.Option("--port", "-p", help="Default device HTTP port"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Write a configuration file with default values."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)
    if exists and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)")
        return

    device: dict[str, object] = {}
    if host is not None:
        device["host"] = host
    if port is not None:
        device["port"] = port
    try:
        settings = Settings(device=DeviceConnectionConfig.model_validate(device))
    except ValidationError as exc:
        typer.echo(f"Invalid device address: {exc}", err=True)
        raise typer.Exit(1) from exc

    write_settings(settings, path)
    typer.echo(f"Wrote config to {path}")
