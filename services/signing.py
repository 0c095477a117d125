"""SigV4 request signing backed by botocore's credential chain."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from botocore.session import get_session

logger = logging.getLogger(__name__)

APPSYNC_SERVICE = "appsync"


@dataclass(frozen=True)
class SignedRequest:
    """A transport-agnostic HTTP request descriptor."""

    method: str
    url: str
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_signed(self) -> bool:
        return "Authorization" in self.headers


class RequestSigner:
    """Signs request descriptors with AWS Signature Version 4.

    When ``credentials`` is omitted they are resolved lazily from the ambient
    botocore chain (environment, shared config, container or instance role).
    """

    def __init__(
        self,
        region: str,
        service: str = APPSYNC_SERVICE,
        credentials: Optional[Credentials] = None,
    ) -> None:
        self.region = region
        self.service = service
        self._credentials = credentials

    def sign(self, request: SignedRequest) -> SignedRequest:
        aws_request = AWSRequest(
            method=request.method,
            url=request.url,
            data=request.body,
            headers=dict(request.headers),
        )
        # Raises botocore.exceptions.NoCredentialsError when the chain is empty.
        SigV4Auth(self._resolve_credentials(), self.service, self.region).add_auth(aws_request)
        logger.debug(
            "Signed request",
            extra={"endpoint": request.url, "region": self.region},
        )
        return replace(request, headers={key: value for key, value in aws_request.headers.items()})

    def _resolve_credentials(self) -> Optional[Credentials]:
        if self._credentials is None:
            self._credentials = get_session().get_credentials()
        return self._credentials
