from __future__ import annotations

import pytest
from botocore.credentials import Credentials
from botocore.exceptions import NoCredentialsError

from services.signing import RequestSigner, SignedRequest


def _descriptor() -> SignedRequest:
    return SignedRequest(
        method="POST",
        url="https://example.appsync-api.ap-northeast-1.amazonaws.com/graphql",
        body=b'{"query": "query { listDeviceStatuses { items { id } } }"}',
        headers={
            "Content-Type": "application/json",
            "host": "example.appsync-api.ap-northeast-1.amazonaws.com",
        },
    )


def test_sign_adds_sigv4_headers_without_touching_body(credentials) -> None:
    signer = RequestSigner(region="ap-northeast-1", credentials=credentials)
    request = _descriptor()

    signed = signer.sign(request)

    authorization = signed.headers["Authorization"]
    assert authorization.startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
    assert "/ap-northeast-1/appsync/aws4_request" in authorization
    assert "host" in authorization.split("SignedHeaders=")[1]
    assert "X-Amz-Date" in signed.headers
    assert signed.is_signed
    assert not request.is_signed
    assert signed.body == request.body
    assert signed.headers["Content-Type"] == "application/json"


def test_sign_includes_session_token_when_present() -> None:
    signer = RequestSigner(
        region="us-east-1",
        credentials=Credentials("AKIDEXAMPLE", "secret", "session-token"),
    )

    signed = signer.sign(_descriptor())

    assert signed.headers["X-Amz-Security-Token"] == "session-token"
    assert "/us-east-1/appsync/aws4_request" in signed.headers["Authorization"]


def test_sign_is_deterministic_for_identical_requests(credentials) -> None:
    signer = RequestSigner(region="ap-northeast-1", credentials=credentials)

    first = signer.sign(_descriptor())
    second = signer.sign(_descriptor())

    if first.headers["X-Amz-Date"] == second.headers["X-Amz-Date"]:
        assert first.headers["Authorization"] == second.headers["Authorization"]


def test_sign_without_ambient_credentials_raises(monkeypatch) -> None:
    class EmptySession:
        def get_credentials(self) -> None:
            return None

    monkeypatch.setattr("services.signing.get_session", lambda: EmptySession())
    signer = RequestSigner(region="ap-northeast-1")

    with pytest.raises(NoCredentialsError):
        signer.sign(_descriptor())


def test_ambient_credentials_are_resolved_once(monkeypatch, credentials) -> None:
    calls = []

    class Session:
        def get_credentials(self) -> Credentials:
            calls.append(1)
            return credentials

    monkeypatch.setattr("services.signing.get_session", lambda: Session())
    signer = RequestSigner(region="ap-northeast-1")

    signer.sign(_descriptor())
    signer.sign(_descriptor())

    assert len(calls) == 1
