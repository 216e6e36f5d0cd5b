"""Shared fixtures: a scripted Klaviyo API behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from klaviyo_admin.config import Settings, get_settings
from klaviyo_admin.main import app
from klaviyo_admin.services.klaviyo import KlaviyoClient, get_klaviyo_client

API_KEY = "pk_test"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeKlaviyo:
    """Route table keyed by (method, path); records every request it sees."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Responder]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: Any = None, text: str | None = None) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=body if body is not None else {})

        self.routes.setdefault((method, path), []).append(responder)

    def add_error(self, method: str, path: str, exc: Exception) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise exc

        self.routes.setdefault((method, path), []).append(responder)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"unscripted {request.method} {request.url.path}"})
        # Last scripted response repeats once the queue is down to one
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        return responder(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def client(self) -> KlaviyoClient:
        return KlaviyoClient(api_key=API_KEY, transport=httpx.MockTransport(self.handle))


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def fake_klaviyo() -> FakeKlaviyo:
    return FakeKlaviyo()


@pytest.fixture
def api(fake_klaviyo: FakeKlaviyo):
    """TestClient whose handlers talk to the fake Klaviyo API."""
    app.dependency_overrides[get_klaviyo_client] = fake_klaviyo.client
    app.dependency_overrides[get_settings] = lambda: Settings(klaviyo_api_key=API_KEY, _env_file=None)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_api(fake_klaviyo: FakeKlaviyo):
    """TestClient with no API key configured; fake_klaviyo must stay untouched."""
    app.dependency_overrides[get_settings] = lambda: Settings(klaviyo_api_key=None, _env_file=None)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
