"""Shared logging utilities."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"

SENSITIVE_HEADERS = {"authorization", "proxy-authorization", "cookie", "set-cookie"}
SENSITIVE_MARKERS = ("key", "token", "secret")


def write_request_log(
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None,
    *,
    redact: bool = True,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single outgoing request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "url": url,
        "headers": redact_headers(headers) if redact else headers,
        "body": body_text(body),
    }
    return _write_json(log_root / "requests", payload)


def write_response_log(
    status_code: int,
    headers: dict[str, str],
    body: bytes,
    *,
    redact: bool = True,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single incoming response log entry."""
    payload = {
        "timestamp": _utc_now(),
        "status_code": status_code,
        "headers": redact_headers(headers) if redact else headers,
        "body": body_text(body),
    }
    return _write_json(log_root / "responses", payload)


def body_text(body: bytes | None) -> str | None:
    if body is None:
        return None
    return body.decode("utf-8", errors="replace")


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if is_sensitive(key):
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return lowered in SENSITIVE_HEADERS or any(marker in lowered for marker in SENSITIVE_MARKERS)


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
