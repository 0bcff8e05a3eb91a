"""Shared request data types."""

import json
from dataclasses import dataclass, field
from typing import Any

MOCK_STATUS_CODE = 200
MOCK_BODY = b'{"mock":"success"}'
MOCK_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class BasicAuth:
    """Credentials for HTTP basic authentication."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class RequestOptions:
    """Declarative description of a single outgoing request.

    ``body`` may be raw (``bytes``, ``bytearray``, ``str``) or a structured
    value that is serialized according to ``content_type``. When
    ``response_target`` is set, the response body is decoded into it in place.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    content_type: str = ""
    response_target: Any = None
    basic_auth: BasicAuth | None = None


@dataclass(frozen=True)
class ApiResponse:
    """Response returned by the executor."""

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)
    header_values: dict[str, list[str]] = field(default_factory=dict)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of a header, matching the name case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


def mock_response() -> ApiResponse:
    """Build the fixed response returned in mock mode."""
    return ApiResponse(
        status_code=MOCK_STATUS_CODE,
        body=MOCK_BODY,
        headers={"Content-Type": MOCK_CONTENT_TYPE},
        header_values={"Content-Type": [MOCK_CONTENT_TYPE]},
    )
