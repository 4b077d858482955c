"""
Data models for 1cart callback verification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping
from urllib.parse import urlsplit

import httpx


@dataclass
class IncomingRequest:
    """
    Inbound callback request as seen by the receiver.

    Attributes:
        method: HTTP method (POST is the only accepted one)
        url: Full request URL or just path + query
        headers: Request headers (case-insensitive lookup)
        body: Raw request body bytes
    """
    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | str = b"",
    ) -> "IncomingRequest":
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(method=method, url=url, headers=httpx.Headers(headers or {}), body=body)

    def header(self, name: str) -> str:
        """Header value, or an empty string when the header is absent."""
        return self.headers.get(name, "")

    @property
    def request_target(self) -> str:
        """Path and query of the URL, without scheme, host, port or user-info."""
        parts = urlsplit(self.url)
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"
        return target


class VerificationOutcome(Enum):
    """
    Result of a single callback verification.

    Each member carries the HTTP status code and plain-text body sent back
    to the platform.
    """
    METHOD_NOT_ALLOWED = (405, "HTTP METHOD ERROR")
    UNSUPPORTED_CONTENT_TYPE = (415, "CONTENT TYPE ERROR")
    INVALID_REQUEST_DATE = (400, "REQUEST DATE ERROR")
    INVALID_SIGNATURE = (401, "AUTHENTICATION ERROR")
    MALFORMED_BODY = (400, "BODY DECODING ERROR")
    UNEXPECTED_BODY_FORMAT = (400, "BODY FORMAT ERROR")
    INVALID_PAYLOAD = (400, "INVALID REQUEST DATA ERROR")
    PROCESSING_FAILED = (500, "PROCESSING ERROR")
    VERIFIED = (200, "OK")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class CallbackResponse:
    """
    Plain-text response returned to the callback sender.

    Attributes:
        outcome: Which verification step decided the response
        event: Event name, set once the payload has been validated
    """
    outcome: VerificationOutcome
    event: str | None = None

    @property
    def status_code(self) -> int:
        return self.outcome.status_code

    @property
    def body(self) -> str:
        return self.outcome.message

    @property
    def ok(self) -> bool:
        return self.outcome is VerificationOutcome.VERIFIED


@dataclass(frozen=True)
class Credentials:
    """
    API credentials shared with the platform.

    Attributes:
        client_id: Compared against the `keyId` signature parameter
        signing_key: HMAC secret used for callback signatures
    """
    client_id: str
    signing_key: str = field(repr=False)
