"""Shared fixtures: in-memory database, API client, Local Store and mock transports."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from campus_portal.client.local_store import LocalStore
from campus_portal.client.remote_api import RemoteApi
from campus_portal.client.storage import MemoryStorage
from campus_portal.database.config.connection_engine import declarativeBase, connection_engine
from campus_portal.database.helpers.transactionManagement import bind_engine
from campus_portal.main import create_app


def fast_hash(password: str) -> str:
    """Stand-in for bcrypt where only the presence of a hash matters."""
    return f"hashed:{password}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    bind_engine(engine)
    yield engine
    declarativeBase.metadata.drop_all(engine)
    engine.dispose()
    bind_engine(connection_engine)


@pytest.fixture
def api(engine):
    """TestClient over a fresh database; startup creates and seeds the tables."""
    with TestClient(create_app()) as client:
        yield client


@pytest.fixture
def store():
    return LocalStore(MemoryStorage(), hash_password=fast_hash)


def json_response(status: int, body=None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, content=json.dumps(body), headers={"content-type": "application/json"})


class RecordingHandler:
    """
    MockTransport handler that answers from a route table and records every request.

    Routes map ``"METHOD /path"`` to a response, an exception instance to raise,
    or a callable taking the request.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return json_response(404, {"error": "not found"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
async def remote(handler):
    client = RemoteApi(base_url="http://portal.test", transport=httpx.MockTransport(handler))
    yield client
    await client.aclose()
