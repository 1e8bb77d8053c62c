from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class ControlEndpoint:
    """Stands in for the voice platform's control URL and records every command."""

    def __init__(self, status_code: int = 200, text: str = "ok") -> None:
        self.status_code = status_code
        self.text = text
        self.requests: list[httpx.Request] = []

    @property
    def commands(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    def commands_to(self, url: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if str(r.url) == url]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.text)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def endpoint() -> ControlEndpoint:
    return ControlEndpoint()


@pytest.fixture()
def make_client(endpoint):
    """Build a TestClient around a fresh app with the given setting overrides."""

    from config.settings import Settings
    from main import create_app

    def _make(**overrides) -> TestClient:
        settings = Settings(_env_file=None, **overrides)
        return TestClient(create_app(settings, http_client=endpoint.client()))

    return _make


@pytest.fixture()
def client(make_client):
    with make_client(max_call_duration_seconds=60, cleanup_grace_seconds=30) as test_client:
        yield test_client
