from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from fixture_app import create_fixture_app

from services.executor import RequestExecutor


class RecordingSink:
    """Trace sink that keeps every event in memory."""

    def __init__(self) -> None:
        self.requests: list[tuple] = []
        self.responses: list[tuple] = []

    def log_request(self, method, url, headers, body) -> None:
        self.requests.append((method, url, headers, body))

    def log_response(self, status_code, headers, body) -> None:
        self.responses.append((status_code, headers, body))


@pytest.fixture
def test_client():
    with TestClient(create_fixture_app()) as client:
        yield client


@pytest.fixture
def executor(test_client):
    return RequestExecutor(test_client)


@pytest.fixture
def recording_sink():
    return RecordingSink()
