from __future__ import annotations

import json
from typing import Iterable, Sequence

import typer

from app.schemas import DeviceStatus, IngestionResponse
from services.snapshot import sort_snapshot

_COLUMNS = ("created_at", "device_Id", "state", "status", "temp", "humidity", "voltage")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_ingestion(result: IngestionResponse, attempt: int | None = None) -> None:
    label = f"[{attempt}] " if attempt is not None else ""
    color = typer.colors.GREEN if result.statusCode == 200 else typer.colors.RED
    typer.secho(f"{label}statusCode: {result.statusCode}", fg=color)
    typer.echo(json.dumps(result.body, indent=2, sort_keys=True))


def _row(device: DeviceStatus) -> Sequence[str]:
    return (
        device.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        device.device_Id,
        device.status_state or "",
        f"{device.status_code or ''} - {device.status_description or ''}",
        f"{device.temperature}°C",
        f"{device.humidity}%",
        f"{device.voltage}V",
    )


def render_devices(devices: Iterable[DeviceStatus]) -> None:
    rows = [_row(device) for device in sort_snapshot(devices)]
    echo_heading(f"Device statuses ({len(rows)})")
    if not rows:
        typer.echo("No device status recorded.")
        return
    widths = [
        max(len(column), *(len(row[index]) for row in rows))
        for index, column in enumerate(_COLUMNS)
    ]
    typer.echo("  ".join(column.ljust(width) for column, width in zip(_COLUMNS, widths)))
    for row in rows:
        typer.echo("  ".join(value.ljust(width) for value, width in zip(row, widths)))
