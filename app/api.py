"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from app.schemas import GraphQLRequest, IngestionResponse
from datastore.mock_appsync import MockDeviceStatusTable, build_default_table
from services.backend import MockAppSyncResolver
from services.ingestion import AppSyncConfig, IngestionService
from services.signing import APPSYNC_SERVICE
from settings import get_settings

router = APIRouter()

_SIGV4_ALGORITHM = "AWS4-HMAC-SHA256"


def get_table() -> MockDeviceStatusTable:
    return build_default_table()


def get_ingestion_service() -> Iterator[IngestionService]:
    with IngestionService(AppSyncConfig.from_settings(get_settings())) as service:
        yield service


def _is_sigv4_for_appsync(authorization: Optional[str]) -> bool:
    if not authorization or not authorization.startswith(_SIGV4_ALGORITHM):
        return False
    return f"/{APPSYNC_SERVICE}/aws4_request" in authorization


@router.post(
    "/graphql",
    summary="Mock managed GraphQL endpoint for device statuses.",
)
async def graphql(
    payload: GraphQLRequest,
    authorization: Optional[str] = Header(default=None),
    table: MockDeviceStatusTable = Depends(get_table),
) -> JSONResponse:
    if not _is_sigv4_for_appsync(authorization):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "errors": [
                    {
                        "errorType": "UnauthorizedException",
                        "message": "Valid authorization header not provided.",
                    }
                ]
            },
        )
    return JSONResponse(content=MockAppSyncResolver(table).execute(payload))


@router.post(
    "/ingest",
    response_model=IngestionResponse,
    summary="Generate one device reading and submit it like the scheduled trigger does.",
)
def ingest(
    service: IngestionService = Depends(get_ingestion_service),
) -> JSONResponse:
    result = service.ingest()
    return JSONResponse(status_code=result.statusCode, content=result.model_dump())


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> Dict[str, Any]:
    return {"status": "ok", "detail": "See /health for service status and /ui for the dashboard."}
