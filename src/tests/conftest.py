"""
Shared test fixtures for Quire.
"""
from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from quire.api.main import create_app
from tests.fixtures.config import test_settings  # noqa: F401
from tests.fixtures.database import (  # noqa: F401
    test_database,
    test_manager,
    test_repository,
)


@pytest.fixture
def test_app(test_settings) -> Iterator[FastAPI]:  # noqa: F811
    """A fully wired app on its own temp database."""
    app = create_app(test_settings)

    yield app

    app.state.database.close()


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client talking to the app in-process."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sync_client(test_app: FastAPI) -> TestClient:
    """Blocking client for code that uses httpx.Client (the CLI)."""
    return TestClient(test_app)


@pytest.fixture
def sample_fields() -> dict:
    return {
        "title": "Node.js basics",
        "content": "An introduction to the Node.js runtime and its event loop.",
        "content_type": "markdown",
        "tags": "nodejs, tutorial",
        "metadata": {"author": "sam", "level": 1},
    }
