"""
MedWell Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The document store is replaced by an in-memory fake database and the
       completion provider by a fake; both are handed to create_app(), the
       same way production wires the real ones.

Fixtures (function-scoped):
    ├── fake_db: In-memory stand-in for the Mongo database
    ├── fake_llm: CompletionService that records calls and returns canned text
    ├── temp_storage: Temporary directory for file operations
    └── test_client: HTTPX AsyncClient bound to a fresh app
"""

import os
import tempfile

# Override settings for testing BEFORE any medwell imports
os.environ["MONGO_URI"] = "mongodb://localhost:27017"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="medwell_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from medwell.exceptions import CompletionServiceError
from medwell.services.llm_base import CompletionService


# ══════════════════════════════════════════════════════════════════════════
# In-memory document store
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class FakeInsertResult:
    inserted_id: ObjectId


@dataclass
class FakeDeleteResult:
    deleted_count: int


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        present = [d for d in self._docs if d.get(key) is not None]
        missing = [d for d in self._docs if d.get(key) is None]
        self._docs = sorted(present, key=lambda d: d[key], reverse=direction < 0) + missing
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        docs = [copy.deepcopy(d) for d in self._docs]
        return docs[:length] if length else docs


class FakeCollection:
    """Implements the subset of AsyncCollection the services call."""

    def __init__(self, name: str):
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check()
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query: Dict[str, Any]) -> FakeCursor:
        self._check()
        return FakeCursor([d for d in self.docs if _matches(d, query)])

    async def insert_one(self, doc: Dict[str, Any]) -> FakeInsertResult:
        self._check()
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return FakeInsertResult(doc["_id"])

    async def find_one_and_update(self, query, update, upsert=False, return_document=False):
        self._check()
        for doc in self.docs:
            if _matches(doc, query):
                before = copy.deepcopy(doc)
                doc.update(update.get("$set", {}))
                return copy.deepcopy(doc) if return_document else before
        if not upsert:
            return None
        new_doc = {"_id": ObjectId(), **query}
        new_doc.update(update.get("$setOnInsert", {}))
        new_doc.update(update.get("$set", {}))
        self.docs.append(new_doc)
        return copy.deepcopy(new_doc) if return_document else None

    async def find_one_and_delete(self, query):
        self._check()
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                return self.docs.pop(index)
        return None

    async def delete_one(self, query) -> FakeDeleteResult:
        self._check()
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return FakeDeleteResult(1)
        return FakeDeleteResult(0)

    async def create_index(self, keys, unique=False) -> str:
        return "_".join(f"{k}_{d}" for k, d in keys)


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))

    async def command(self, name: str) -> Dict[str, Any]:
        return {"ok": 1.0}


class FakeConnector:
    """Stands in for MongoConnector on app.state."""

    def __init__(self, database: FakeDatabase):
        self.database = database
        self.reachable = True
        self.index_specs: list = []
        self.connect_calls = 0
        self.close_calls = 0

    def register_indexes(self, specs) -> None:
        self.index_specs = list(specs)

    async def connect(self) -> None:
        self.connect_calls += 1

    async def ping(self) -> bool:
        return self.reachable

    async def close(self) -> None:
        self.close_calls += 1


# ══════════════════════════════════════════════════════════════════════════
# Completion provider
# ══════════════════════════════════════════════════════════════════════════

class FakeCompletionService(CompletionService):
    def __init__(self, reply: str = "Canned answer", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    @property
    def is_configured(self) -> bool:
        return True

    async def complete(self, messages, *, temperature, max_tokens, system_instruction=None) -> str:
        self.calls.append(
            {
                "messages": list(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
                "system_instruction": system_instruction,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply

    async def close(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def fake_llm():
    return FakeCompletionService()


@pytest.fixture
def failing_llm():
    return FakeCompletionService(error=CompletionServiceError("quota exceeded"))


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def make_client(fake_db, fake_llm):
    """Factory for clients bound to an app with the given (or default) fakes."""
    from medwell.main import create_app

    def _make(connector=None, completion_service=None, config=None) -> AsyncClient:
        app = create_app(
            config=config,
            connector=connector or FakeConnector(fake_db),
            completion_service=completion_service or fake_llm,
        )
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make


@pytest_asyncio.fixture
async def test_client(make_client):
    """
    HTTPX AsyncClient talking to a fresh app backed by fake_db and fake_llm.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    async with make_client() as client:
        yield client
