"""Shared pytest fixtures for API tests."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from searchhints.api.deps import get_image_cache, get_item_store, get_monitor, get_search_index
from searchhints.library import load_library
from searchhints.main import app
from searchhints.services.observability import CollaboratorMonitor
from searchhints.tests.utils import RecordingLibrary


@pytest.fixture()
def library() -> RecordingLibrary:
    return RecordingLibrary(load_library())


@pytest.fixture()
def monitor() -> CollaboratorMonitor:
    return CollaboratorMonitor(circuit_threshold=3, base_backoff_seconds=0.05, max_backoff_seconds=0.1)


@pytest_asyncio.fixture()
async def client(library: RecordingLibrary, monitor: CollaboratorMonitor) -> AsyncClient:
    app.dependency_overrides[get_search_index] = lambda: library
    app.dependency_overrides[get_image_cache] = lambda: library
    app.dependency_overrides[get_item_store] = lambda: library
    app.dependency_overrides[get_monitor] = lambda: monitor
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.clear()
