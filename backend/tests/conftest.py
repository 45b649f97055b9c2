from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from subrelay.api.deps import get_http_client
from subrelay.core.config import settings
from subrelay.main import app


class FakeRemote:
    """URL -> response table served through httpx.MockTransport."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.calls: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        r = self.routes.get(url)
        if r is None:
            return httpx.Response(404, text="not found")
        if isinstance(r, Exception):
            raise r
        return r

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def api(remote: FakeRemote):
    async def _client():
        async with remote.client() as c:
            yield c

    app.dependency_overrides[get_http_client] = _client
    with TestClient(app) as tc:
        yield tc
    app.dependency_overrides.clear()


@pytest.fixture
def license_registry(remote: FakeRemote):
    doc = {
        "licenses": [
            {"key": "good", "status": "active", "expire": "2099-01-01T00:00:00Z", "limit_ip": [], "max_usage": 0, "used": 3},
            {"key": "paused", "status": "suspended", "expire": "2099-01-01T00:00:00Z"},
            {"key": "old", "status": "active", "expire": "2020-01-01"},
            {"key": "pinned", "status": "active", "expire": "2099-01-01", "limit_ip": ["9.9.9.9"]},
            {"key": "spent", "status": "active", "expire": "2099-01-01", "max_usage": 10, "used": 10},
        ]
    }
    remote.routes[settings.LICENSE_SOURCE_URL] = httpx.Response(200, json=doc)
    return doc
