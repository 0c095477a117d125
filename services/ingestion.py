"""Signed ingestion of synthetic device readings into the managed GraphQL API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.schemas import DeviceStatus, IngestionResponse
from services.generator import ReadingGenerator
from services.signing import RequestSigner, SignedRequest
from settings import DEFAULT_REGION, Settings, get_settings

logger = logging.getLogger(__name__)

_DEVICE_STATUS_FIELDS = """
      id
      device_Id
      humidity
      temperature
      voltage
      last_updated
      status_code
      status_description
      status_state
      createdAt
      updatedAt
"""

CREATE_DEVICE_STATUS = f"""
  mutation CreateDeviceStatus($input: CreateDeviceStatusInput!) {{
    createDeviceStatus(input: $input) {{{_DEVICE_STATUS_FIELDS}    }}
  }}
"""

LIST_DEVICE_STATUSES = f"""
  query ListDeviceStatuses {{
    listDeviceStatuses {{
      items {{{_DEVICE_STATUS_FIELDS}      }}
    }}
  }}
"""


class IngestionError(Exception):
    """Base error for the ingestion flow."""


class ConfigurationError(IngestionError):
    """Required configuration is missing or malformed."""


@dataclass(frozen=True)
class AppSyncConfig:
    endpoint: Optional[str]
    region: str = DEFAULT_REGION
    timeout: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppSyncConfig":
        return cls(
            endpoint=settings.appsync_endpoint,
            region=settings.region,
            timeout=settings.request_timeout,
        )

    def require_endpoint(self) -> httpx.URL:
        if not self.endpoint:
            raise ConfigurationError("APPSYNC_ENDPOINT environment variable is not set")
        try:
            url = httpx.URL(self.endpoint)
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"APPSYNC_ENDPOINT is not a valid URL: {exc}") from exc
        if url.scheme not in {"http", "https"} or not url.host:
            raise ConfigurationError(
                f"APPSYNC_ENDPOINT must be an absolute http(s) URL, got {self.endpoint!r}"
            )
        return url


def build_graphql_request(
    endpoint: httpx.URL, query: str, variables: Dict[str, Any]
) -> SignedRequest:
    """Build the unsigned POST descriptor for a GraphQL operation."""
    body = json.dumps({"query": query, "variables": variables}).encode("utf-8")
    return SignedRequest(
        method="POST",
        url=str(endpoint),
        body=body,
        headers={
            "Content-Type": "application/json",
            "host": endpoint.netloc.decode("ascii"),
        },
    )


class IngestionService:
    """Generates a reading and delivers it with one signed ``createDeviceStatus`` call.

    Each ``ingest`` call is a single best-effort attempt: no retries and no
    coordination with other in-flight calls.
    """

    def __init__(
        self,
        config: AppSyncConfig,
        signer: Optional[RequestSigner] = None,
        client: Optional[httpx.Client] = None,
        generator: Optional[ReadingGenerator] = None,
    ) -> None:
        self.config = config
        self.signer = signer or RequestSigner(region=config.region)
        self.generator = generator or ReadingGenerator()
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=config.timeout)

    def __enter__(self) -> "IngestionService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def ingest(self) -> IngestionResponse:
        try:
            payload = self._create_device_status()
        except Exception as exc:  # noqa: BLE001 - every failure becomes a 500 response
            logger.exception(
                "Ingestion failed",
                extra={"endpoint": self.config.endpoint, "reason": str(exc)},
            )
            return IngestionResponse.failure(str(exc))
        return IngestionResponse(statusCode=200, body=payload)

    def query_devices(self) -> List[DeviceStatus]:
        """Fetch every persisted device status through the signed list query."""
        try:
            payload = self._execute(LIST_DEVICE_STATUSES, {})
        except json.JSONDecodeError as exc:
            raise IngestionError(f"Unexpected GraphQL response: {exc}") from exc
        if not isinstance(payload, dict):
            raise IngestionError("Unexpected GraphQL response: expected a JSON object")
        errors = payload.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else None
            raise IngestionError(message or "GraphQL request failed")
        data = payload.get("data") or {}
        connection = data.get("listDeviceStatuses") if isinstance(data, dict) else None
        items = (connection.get("items") if isinstance(connection, dict) else None) or []
        if not isinstance(items, list):
            raise IngestionError("Unexpected GraphQL response: items is not a list")
        try:
            return [DeviceStatus.model_validate(item) for item in items]
        except ValidationError as exc:
            raise IngestionError(f"Unexpected device status in response: {exc}") from exc

    def _create_device_status(self) -> Any:
        # Endpoint is validated before anything is generated or sent.
        self.config.require_endpoint()
        reading = self.generator.generate()
        payload = self._execute(CREATE_DEVICE_STATUS, {"input": reading.as_input()})
        logger.info(
            "Device status submitted",
            extra={"device_id": reading.device_Id, "endpoint": self.config.endpoint},
        )
        return payload

    def _execute(self, query: str, variables: Dict[str, Any]) -> Any:
        endpoint = self.config.require_endpoint()
        signed = self.signer.sign(build_graphql_request(endpoint, query, variables))
        response = self._client.request(
            signed.method,
            signed.url,
            content=signed.body,
            headers=signed.headers,
        )
        response.raise_for_status()
        return response.json()


def handler(event: Any = None, context: Any = None) -> Dict[str, Any]:
    """Scheduler entry point; the event payload is ignored."""
    config = AppSyncConfig.from_settings(get_settings())
    with IngestionService(config) as service:
        return service.ingest().model_dump()
