"""Pydantic schemas for the GraphQL boundary and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateDeviceStatusInput(BaseModel):
    """Input accepted by the ``createDeviceStatus`` mutation."""

    model_config = ConfigDict(extra="forbid")

    device_Id: str = Field(..., min_length=1)
    status_code: Optional[str] = None
    status_state: Optional[str] = None
    status_description: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    voltage: Optional[str] = None
    last_updated: Optional[str] = None


class DeviceStatus(BaseModel):
    """A persisted device status record, including server-assigned fields."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    device_Id: str
    status_code: Optional[str] = None
    status_state: Optional[str] = None
    status_description: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    voltage: Optional[str] = None
    last_updated: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def to_graphql(self) -> Dict[str, Any]:
        """Serialize with the field names used on the GraphQL wire."""
        return self.model_dump(mode="json", by_alias=True)


class GraphQLRequest(BaseModel):
    """Body of a GraphQL POST request."""

    query: str = Field(..., min_length=1)
    variables: Dict[str, Any] = Field(default_factory=dict)
    operationName: Optional[str] = None


class GraphQLError(BaseModel):
    message: str
    errorType: Optional[str] = None


class IngestionResponse(BaseModel):
    """Result of one ingestion attempt, shaped like a function invocation response."""

    statusCode: int
    body: Any = None

    @classmethod
    def failure(cls, message: str) -> "IngestionResponse":
        return cls(statusCode=500, body={"error": message})


class LoginForm(BaseModel):
    """Fields submitted by the dashboard sign-in form."""

    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    preferred_username: str = Field(..., min_length=1, max_length=64)


class DeviceRow(BaseModel):
    """One rendered dashboard row."""

    device: DeviceStatus
    highlighted: bool = False
