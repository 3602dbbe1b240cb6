"""Shared pytest fixtures and configuration."""

import httpx
import pytest

from sacco_portal.app import PortalApp
from sacco_portal.config import Config
from sacco_portal.session import MemoryCredentialBackend

API_BASE = "http://sacco.test/api"

MEMBER = {
    "id": "1",
    "member_id": "MEM-1",
    "first_name": "Abebe",
    "middle_name": "Kebede",
    "last_name": "Tadesse",
    "phone": "+251911234567",
    "email": "abebe.tadesse@email.com",
    "status": "ACTIVE",
}


class StubBackend:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method, path, status=200, json=None):
        """Register a response. ``json`` may be a callable taking the request."""
        self.routes[(method.upper(), f"/api{path}")] = (status, json)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        status, body = route
        if callable(body):
            return body(request)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method, path):
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path == f"/api{path}"
        ]


@pytest.fixture
def backend():
    return StubBackend()


@pytest.fixture
def durable():
    return MemoryCredentialBackend("durable")


@pytest.fixture
def volatile():
    return MemoryCredentialBackend("volatile")


@pytest.fixture
def config():
    return Config(api_base_url=API_BASE, timeout=5.0, read_retries=1)


@pytest.fixture
def make_portal(tmp_path, backend, durable, volatile, config):
    """Factory for PortalApp instances sharing storage and the stub backend."""

    def factory() -> PortalApp:
        return PortalApp(
            config=config,
            data_dir=tmp_path,
            durable=durable,
            volatile=volatile,
            transport=backend.transport,
        )

    return factory


@pytest.fixture
def portal(make_portal):
    return make_portal()
