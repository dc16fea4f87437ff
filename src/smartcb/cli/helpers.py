from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from smartcb.api import DeviceClient
from smartcb.config import (
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from smartcb.core import ConnectionManager
from smartcb.models import DeviceEndpoint
from smartcb.storage import Database


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_database(settings: Settings, data_dir: Path | None = None) -> Database:
    path = data_dir or data_dir_from_settings(settings)
    return Database(path)


def build_manager(settings: Settings, db: Database) -> ConnectionManager:
    try:
        return ConnectionManager(settings, database=db)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def parse_endpoint_or_exit(host: str, port: str) -> DeviceEndpoint:
    try:
        return DeviceEndpoint(host=host, port=port)
    except ValidationError as exc:
        typer.echo(f"Invalid device address {host}:{port}", err=True)
        raise typer.Exit(1) from exc


def load_endpoint_or_exit(db: Database) -> DeviceEndpoint | None:
    try:
        return db.load_endpoint()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def saved_client_or_exit(settings: Settings, db: Database) -> DeviceClient:
    """Client for the device saved by the last successful ``connect``."""
    endpoint = load_endpoint_or_exit(db)
    if endpoint is None:
        typer.echo("Not connected to a device. Run 'smartcb connect' first.", err=True)
        raise typer.Exit(1)
    return DeviceClient(endpoint, timeout=settings.device.timeout)
