"""Resolvers for the mock managed GraphQL endpoint.

Only the two operations used by this project are understood: the
``createDeviceStatus`` mutation and the ``listDeviceStatuses`` query. The
operation is picked by its root field name; selection sets are not evaluated
and resolvers always return every field of the record.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.schemas import CreateDeviceStatusInput, GraphQLError, GraphQLRequest
from datastore.mock_appsync import MockDeviceStatusTable

logger = logging.getLogger(__name__)

_ROOT_FIELD = re.compile(r"^\s*(mutation|query)\b[^{]*\{\s*(\w+)", re.DOTALL)


class ResolverError(Exception):
    def __init__(self, message: str, error_type: str) -> None:
        super().__init__(message)
        self.error_type = error_type


class MockAppSyncResolver:

    def __init__(self, table: MockDeviceStatusTable) -> None:
        self.table = table

    def execute(self, request: GraphQLRequest) -> Dict[str, Any]:
        try:
            field, data = self._resolve(request)
        except ResolverError as exc:
            logger.warning("GraphQL request rejected", extra={"reason": str(exc)})
            error = GraphQLError(message=str(exc), errorType=exc.error_type)
            return {"data": None, "errors": [error.model_dump()]}
        return {"data": {field: data}}

    def _resolve(self, request: GraphQLRequest) -> tuple[str, Any]:
        operation, field = self._root_field(request.query)
        if operation == "mutation" and field == "createDeviceStatus":
            return field, self._create_device_status(request.variables.get("input"))
        if operation == "query" and field == "listDeviceStatuses":
            items = [item.to_graphql() for item in self.table.list()]
            return field, {"items": items, "nextToken": None}
        raise ResolverError(
            f"Unsupported operation {operation} {field}", "UnsupportedOperation"
        )

    def _create_device_status(self, raw_input: Optional[Any]) -> Dict[str, Any]:
        if not isinstance(raw_input, dict):
            raise ResolverError("Variable 'input' is required", "ValidationError")
        try:
            item = CreateDeviceStatusInput.model_validate(raw_input)
        except ValidationError as exc:
            raise ResolverError(
                f"Invalid CreateDeviceStatusInput: {exc.errors()[0]['msg']}",
                "ValidationError",
            ) from exc
        record = self.table.create(item)
        logger.info(
            "Device status created",
            extra={"device_id": record.device_Id, "row_count": len(self.table.list())},
        )
        return record.to_graphql()

    @staticmethod
    def _root_field(query: str) -> tuple[str, str]:
        match = _ROOT_FIELD.match(query)
        if match is None:
            raise ResolverError("Unable to parse GraphQL document", "MalformedHttpRequestException")
        return match.group(1), match.group(2)
