from __future__ import annotations

from typing import List, NoReturn

import httpx
import typer
from botocore.exceptions import BotoCoreError

from app.schemas import DeviceStatus, IngestionResponse
from services.ingestion import AppSyncConfig, IngestionError, IngestionService


class DeviceClient:
    """Thin CLI wrapper around the ingestion service."""

    def __init__(self, config: AppSyncConfig) -> None:
        self._config = config
        self._service = IngestionService(config)

    def close(self) -> None:
        self._service.close()

    def ingest(self) -> IngestionResponse:
        return self._service.ingest()

    def list_devices(self) -> List[DeviceStatus]:
        try:
            return self._service.query_devices()
        except httpx.HTTPStatusError as exc:
            self._fail(
                f"Request failed with status {exc.response.status_code}: "
                f"{exc.response.text.strip() or 'no detail provided.'}"
            )
        except (httpx.HTTPError, IngestionError, BotoCoreError) as exc:
            self._fail(str(exc))

    @staticmethod
    def _fail(message: str) -> NoReturn:
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
