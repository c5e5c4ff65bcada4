"""
Todo Service - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Every API test gets its own application instance, so todos
       and tokens never leak between tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── settings: Settings built from the test environment
    ├── uuid_generator: SequentialUUIDGenerator (ids ...0001, ...0002, ...)
    ├── memory_store: empty InMemoryTodoStore
    ├── ip_lookup: IPLookupService answering from an httpx.MockTransport
    ├── app: create_app() wired with the fixtures above
    ├── test_client: HTTPX AsyncClient talking to `app` in-process
    └── auth_headers: Authorization header for a freshly issued token
"""

import os

# Override settings for testing BEFORE any todo_service imports
os.environ["STORE_BACKEND"] = "memory"
os.environ["OAUTH_CLIENTS"] = "todo-web:todo-web-secret,cli:cli-secret"
os.environ["IP_LOOKUP_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import AsyncGenerator, Dict

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from todo_service.config import Settings
from todo_service.main import create_app
from todo_service.services.ip_lookup import IPLookupService
from todo_service.services.todo_store import InMemoryTodoStore
from todo_service.services.uuid_generator import SequentialUUIDGenerator

CLIENT_ID = "todo-web"
CLIENT_SECRET = "todo-web-secret"

LOOKUP_URL = "https://ip.test/{ip}/json"


def ipinfo_handler(request: httpx.Request) -> httpx.Response:
    """Fake ipinfo.io: answers for any address in the path."""
    ip = request.url.path.split("/")[1]
    return httpx.Response(
        200,
        json={
            "ip": ip,
            "city": "Mountain View",
            "region": "California",
            "country": "US",
            "org": "AS15169 Google LLC",
        },
    )


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def uuid_generator() -> SequentialUUIDGenerator:
    return SequentialUUIDGenerator()


@pytest.fixture
def memory_store() -> InMemoryTodoStore:
    return InMemoryTodoStore()


@pytest.fixture
def ip_lookup() -> IPLookupService:
    return IPLookupService(
        url_template=LOOKUP_URL,
        transport=httpx.MockTransport(ipinfo_handler),
    )


@pytest.fixture
def app(settings, memory_store, uuid_generator, ip_lookup):
    return create_app(
        settings,
        store=memory_store,
        uuid_generator=uuid_generator,
        ip_lookup=ip_lookup,
    )


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP client for API endpoint testing.

    Uses HTTPX's ASGITransport to call the FastAPI app directly, without
    starting a server.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_headers(test_client) -> Dict[str, str]:
    """Authorization header carrying a token issued to `todo-web`."""
    response = await test_client.post(
        "/auth", json={"clientId": CLIENT_ID, "clientSecret": CLIENT_SECRET}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
