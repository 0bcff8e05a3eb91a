"""Header construction for outgoing requests and capture for responses."""

import base64
from collections.abc import Mapping

import httpx

from core.request_types import BasicAuth


def canonical_header_name(name: str) -> str:
    """Canonicalize a header name (``content-type`` -> ``Content-Type``)."""
    return "-".join(part.capitalize() for part in name.split("-"))


def basic_auth_value(auth: BasicAuth) -> str:
    """Encode credentials for the ``Authorization`` header."""
    token = base64.b64encode(f"{auth.username}:{auth.password}".encode("utf-8"))
    return f"Basic {token.decode('ascii')}"


class HeaderBuilder:
    """Build request headers and capture response headers."""

    def build_request_headers(
        self,
        content_type: str,
        custom: Mapping[str, str],
        basic_auth: BasicAuth | None = None,
    ) -> httpx.Headers:
        """Apply content type, then custom headers, then basic auth.

        Names match case-insensitively and the last write wins, so a custom
        ``Content-Type`` replaces the computed one.
        """
        headers = httpx.Headers()
        if content_type:
            headers["Content-Type"] = content_type
        for key, value in custom.items():
            headers[key] = value
        if basic_auth is not None:
            headers["Authorization"] = basic_auth_value(basic_auth)
        return headers

    def capture_response_headers(
        self,
        headers: httpx.Headers,
    ) -> tuple[dict[str, str], dict[str, list[str]]]:
        """Return (first value per name, all values per name)."""
        values: dict[str, list[str]] = {}
        for key, value in headers.multi_items():
            values.setdefault(canonical_header_name(key), []).append(value)
        first = {key: items[0] for key, items in values.items()}
        return first, values

    def flatten(self, headers: httpx.Headers) -> dict[str, str]:
        """Join repeated values with ``, `` for display."""
        return {canonical_header_name(key): value for key, value in headers.items()}
