from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import pytest
from typer.testing import CliRunner

from app.schemas import DeviceStatus, IngestionResponse
from cli.app import app
from cli.config import load_config
from services.ingestion import IngestionError
from settings import get_settings


class StubClient:
    def __init__(self, config, results: List[IngestionResponse] | None = None) -> None:
        self.config = config
        self.results = list(results or [IngestionResponse(statusCode=200, body={"data": {}})])
        self.ingest_calls = 0
        self.devices = [
            DeviceStatus(
                id="old",
                device_Id="device_001",
                temperature=20.0,
                humidity=40.0,
                voltage="12.0",
                status_code="200",
                status_description="Normal operation",
                status_state="NORMAL",
                createdAt=datetime(2024, 1, 1, tzinfo=timezone.utc),
                updatedAt=datetime(2024, 1, 1, tzinfo=timezone.utc),
            ),
            DeviceStatus(
                id="new",
                device_Id="device_042",
                temperature=30.5,
                humidity=70.1,
                voltage="11.9",
                status_code="200",
                status_description="Normal operation",
                status_state="NORMAL",
                createdAt=datetime(2024, 1, 2, tzinfo=timezone.utc),
                updatedAt=datetime(2024, 1, 2, tzinfo=timezone.utc),
            ),
        ]
        self.closed = False

    def ingest(self) -> IngestionResponse:
        result = self.results[min(self.ingest_calls, len(self.results) - 1)]
        self.ingest_calls += 1
        return result

    def list_devices(self) -> List[DeviceStatus]:
        return self.devices

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.DeviceClient", factory)
    monkeypatch.setattr("cli.app.time.sleep", lambda seconds: None)


def test_ingest_once(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--endpoint", "https://example.com/graphql", "ingest"])

    assert result.exit_code == 0
    assert "statusCode: 200" in result.stdout
    assert stub.ingest_calls == 1
    assert stub.config.endpoint == "https://example.com/graphql"
    assert stub.closed is True


def test_ingest_repeated_reports_failures(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(
        config=None,
        results=[
            IngestionResponse(statusCode=200, body={"data": {}}),
            IngestionResponse.failure("connection refused"),
            IngestionResponse(statusCode=200, body={"data": {}}),
        ],
    )
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["ingest", "--count", "3", "--interval", "0"])

    assert result.exit_code == 1
    assert stub.ingest_calls == 3
    assert "[2] statusCode: 500" in result.stdout
    assert "connection refused" in result.stdout
    assert stub.closed is True


def test_devices_lists_newest_first(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--region", "eu-west-1", "devices"])

    assert result.exit_code == 0
    assert "Device statuses (2)" in result.stdout
    assert result.stdout.index("device_042") < result.stdout.index("device_001")
    assert stub.config.region == "eu-west-1"


def test_load_config_applies_overrides(monkeypatch) -> None:
    monkeypatch.setenv("APPSYNC_ENDPOINT", "https://env.example.com/graphql")
    monkeypatch.setenv("REGION", "us-east-2")
    get_settings.cache_clear()
    try:
        defaults = load_config()
        overridden = load_config(endpoint=" https://cli.example.com/graphql ", timeout=3.0)
    finally:
        get_settings.cache_clear()

    assert defaults.endpoint == "https://env.example.com/graphql"
    assert defaults.region == "us-east-2"
    assert overridden.endpoint == "https://cli.example.com/graphql"
    assert overridden.region == "us-east-2"
    assert overridden.timeout == 3.0


def test_devices_reports_malformed_response_without_traceback(monkeypatch, runner: CliRunner) -> None:
    def broken_query(self):
        raise IngestionError("Unexpected GraphQL response: items is not a list")

    monkeypatch.setattr("cli.client.IngestionService.query_devices", broken_query)

    result = runner.invoke(app, ["--endpoint", "https://example.com/graphql", "devices"])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "items is not a list" in result.output
