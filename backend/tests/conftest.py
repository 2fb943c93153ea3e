"""
Snippet Manager Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_storage: AsyncMock standing in for MongoStorage (repository unit tests)
    ├── fake_client: in-memory stand-in for AsyncIOMotorClient
    ├── storage: a connected MongoStorage backed by fake_client
    └── test_client: HTTPX AsyncClient bound to a fresh app using `storage`
"""

import os

# Settings are read at import time; set them BEFORE any snippet_manager import
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/?serverSelectionTimeoutMS=100"
os.environ["LOG_LEVEL"] = "WARNING"

from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from snippet_manager.storage import MongoStorage


# ══════════════════════════════════════════════════════════════════════════
# In-memory MongoDB doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return list(self._documents if length is None else self._documents[:length])


class FakeCollection:
    """
    Just enough of motor's AsyncIOMotorCollection for the snippet service:
    equality filters, `$set` updates, and find_one(sort=...).
    """

    def __init__(self):
        self.documents: List[Dict[str, Any]] = []

    @staticmethod
    def _matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
        return all(document.get(key) == value for key, value in filter.items())

    async def insert_one(self, document):
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    async def find_one(self, filter, sort=None):
        matches = [d for d in self.documents if self._matches(d, filter)]
        for key, direction in reversed(sort or []):
            matches.sort(key=lambda d: d[key], reverse=direction < 0)
        return dict(matches[0]) if matches else None

    def find(self, filter):
        return FakeCursor([dict(d) for d in self.documents if self._matches(d, filter)])

    async def update_one(self, filter, update):
        for document in self.documents:
            if self._matches(document, filter):
                changes = update.get("$set", {})
                modified = any(document.get(k) != v for k, v in changes.items())
                document.update(changes)
                return SimpleNamespace(matched_count=1, modified_count=int(modified))
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, filter):
        for index, document in enumerate(self.documents):
            if self._matches(document, filter):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeMotorClient:
    """Stand-in for AsyncIOMotorClient: client[db][collection] + admin.command."""

    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.collections: Dict[str, FakeCollection] = {}
        self.admin = SimpleNamespace(command=AsyncMock(return_value={"ok": 1.0}))
        self.closed = False

    def __getitem__(self, database_name: str):
        client = self

        class _Database:
            def __getitem__(self, collection_name: str) -> FakeCollection:
                key = f"{database_name}.{collection_name}"
                return client.collections.setdefault(key, FakeCollection())

        return _Database()

    def close(self):
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_storage():
    """
    Provides a mock storage adapter.

    Usage:
        async def test_get(mock_storage):
            mock_storage.find_one.return_value = {...}
            result = await SnippetRepository(mock_storage).get_by_name("hello")
    """
    storage = MagicMock(spec=MongoStorage)
    storage.insert_one = AsyncMock()
    storage.find_one = AsyncMock(return_value=None)
    storage.find_many = AsyncMock(return_value=[])
    storage.update_one = AsyncMock(return_value=(1, 1))
    storage.delete_one = AsyncMock(return_value=1)
    return storage


@pytest.fixture
def fake_client():
    return FakeMotorClient()


@pytest_asyncio.fixture
async def storage(fake_client):
    """A connected MongoStorage whose client is the in-memory fake."""
    adapter = MongoStorage(
        uri="mongodb://fake",
        database_name="Code-Snippet-Manager",
        collection_name="code-snippets",
        client_factory=lambda *args, **kwargs: fake_client,
    )
    await adapter.connect()
    yield adapter
    await adapter.disconnect()


@pytest.fixture
def fake_collection(fake_client, storage) -> FakeCollection:
    return fake_client.collections["Code-Snippet-Manager.code-snippets"]


@pytest_asyncio.fixture
async def test_client(storage):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan, so the connected storage is
    placed on app.state directly.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/code-snippets/")
            assert response.status_code == 200
    """
    from snippet_manager.main import LifecycleState, create_app

    app = create_app(storage=storage)
    app.state.lifecycle = LifecycleState.SERVING
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
