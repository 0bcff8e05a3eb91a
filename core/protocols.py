"""Shared protocol definitions."""

from typing import Protocol


class TraceSink(Protocol):
    """Protocol for debug tracing of request/response exchanges."""

    def log_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
    ) -> None: ...
    def log_response(
        self,
        status_code: int,
        headers: dict[str, str],
        body: bytes,
    ) -> None: ...
