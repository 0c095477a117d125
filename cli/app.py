from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import DeviceClient
from cli.config import DEFAULT_COUNT, DEFAULT_INTERVAL, load_config
from cli.render import render_devices, render_ingestion
from logging_config import configure_logging
from services.ingestion import AppSyncConfig


@dataclass
class CLIState:
    config: AppSyncConfig
    client: DeviceClient


app = typer.Typer(
    help="Submit synthetic device readings to the managed GraphQL API and inspect them.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    endpoint: Optional[str] = typer.Option(
        None,
        "--endpoint",
        "-e",
        help="GraphQL endpoint URL (defaults to the APPSYNC_ENDPOINT env).",
    ),
    region: Optional[str] = typer.Option(
        None,
        "--region",
        "-r",
        help="Signing region (defaults to the REGION env or ap-northeast-1).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    config = load_config(endpoint=endpoint, region=region, timeout=timeout)
    client = DeviceClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("ingest")
def ingest_command(
    ctx: typer.Context,
    count: int = typer.Option(DEFAULT_COUNT, "--count", "-n", min=1, help="Number of readings to submit."),
    interval: float = typer.Option(
        DEFAULT_INTERVAL,
        "--interval",
        min=0.0,
        help="Seconds to wait between submissions.",
    ),
) -> None:
    """Generate readings and submit each one with a signed mutation."""
    state = _get_state(ctx)
    failures = 0
    for attempt in range(1, count + 1):
        result = state.client.ingest()
        render_ingestion(result, attempt=attempt if count > 1 else None)
        if result.statusCode != 200:
            failures += 1
        if attempt < count:
            time.sleep(interval)

    if failures:
        typer.secho(f"{failures} of {count} submissions failed.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("devices")
def devices_command(ctx: typer.Context) -> None:
    """List stored device statuses, newest first."""
    state = _get_state(ctx)
    render_devices(state.client.list_devices())


if __name__ == "__main__":
    app()
