"""
Pytest configuration and shared fixtures for MDB_CONVERT tests.

This module provides:
- Mock Motor and PyMongo collection fixtures
- Fake cursors that count how many documents they produce
- A recording converter whose transforms can be inspected
"""

from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.collection import Collection

from mdb_convert import config as config_module
from mdb_convert.constants import (ENV_LOG_CALLS, ENV_MAX_METRICS,
                                   ENV_RECORD_METRICS)
from mdb_convert.converter import Converter
from mdb_convert.observability import metrics as metrics_module


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a MongoDB server")


# ============================================================================
# GLOBAL STATE
# ============================================================================


@pytest.fixture(autouse=True)
def clean_converter_state(monkeypatch):
    """Start every test with default configuration and empty metrics."""
    for key in (ENV_RECORD_METRICS, ENV_MAX_METRICS, ENV_LOG_CALLS):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.setattr(metrics_module, "_metrics_collector", None)
    yield


# ============================================================================
# FAKE CURSORS
# ============================================================================


class FakeCursor:
    """Synchronous cursor over a list, counting produced documents."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = list(documents)
        self._position = 0
        self.produced = 0
        self.closed = False
        self.sort_spec = None

    @property
    def alive(self) -> bool:
        return not self.closed and self._position < len(self._documents)

    def __iter__(self):
        return self

    def __next__(self) -> Dict[str, Any]:
        if not self.alive:
            raise StopIteration
        document = self._documents[self._position]
        self._position += 1
        self.produced += 1
        return document

    def next(self) -> Dict[str, Any]:
        return self.__next__()

    def sort(self, key, direction=1):
        self.sort_spec = (key, direction)
        return self

    def limit(self, limit: int):
        self._documents = self._documents[:limit]
        return self

    def __getitem__(self, index):
        if isinstance(index, slice):
            self._documents = self._documents[index]
            return self
        return self._documents[index]

    def clone(self) -> "FakeCursor":
        return FakeCursor(self._documents)

    def to_list(self, length=None) -> List[Dict[str, Any]]:
        documents = []
        for document in self:
            documents.append(document)
            if length is not None and len(documents) >= length:
                break
        return documents

    def close(self) -> None:
        self.closed = True


class FakeAsyncCursor:
    """Asynchronous (Motor-style) cursor over a list."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = list(documents)
        self._position = 0
        self.produced = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self.closed or self._position >= len(self._documents):
            raise StopAsyncIteration
        document = self._documents[self._position]
        self._position += 1
        self.produced += 1
        return document

    async def next(self) -> Dict[str, Any]:
        return await self.__anext__()

    def sort(self, key, direction=1):
        return self

    async def __aenter__(self) -> "FakeAsyncCursor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def to_list(self, length=None) -> List[Dict[str, Any]]:
        documents = []
        async for document in self:
            documents.append(document)
            if length is not None and len(documents) >= length:
                break
        return documents

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def stored_documents() -> List[Dict[str, Any]]:
    """Documents as they sit in the collection (stored shape)."""
    return [
        {"_id": i, "name": f"user{i}", "_schema": 2} for i in range(1, 6)
    ]


# ============================================================================
# CONVERTER FIXTURES
# ============================================================================


def _stamp_update(update: Dict[str, Any]) -> Dict[str, Any]:
    return {**update, "$set": {**update.get("$set", {}), "_schema": 2}}


@pytest.fixture
def converter() -> Converter:
    """
    Converter that stamps written documents with ``_schema`` and strips it on
    the way out. Each transform is a MagicMock so calls can be counted.
    """
    return Converter(
        pre_insert=MagicMock(side_effect=lambda doc: {**doc, "_schema": 2}),
        pre_update=MagicMock(side_effect=_stamp_update),
        pre_replace=MagicMock(side_effect=lambda doc: {**doc, "_schema": 2}),
        post_find=MagicMock(
            side_effect=lambda doc: {k: v for k, v in doc.items() if k != "_schema"}
        ),
        delete_filter=MagicMock(side_effect=lambda f: {"$and": [f, {"_schema": 2}]}),
    )


# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


@pytest.fixture
def mock_motor_collection(stored_documents) -> MagicMock:
    """Create a mock Motor collection."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "users"
    collection.find = MagicMock(side_effect=lambda *a, **k: FakeAsyncCursor(stored_documents))
    collection.find_one = AsyncMock(return_value=stored_documents[0])
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=["id1", "id2"]))
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.update_many = AsyncMock(return_value=MagicMock(modified_count=2))
    collection.replace_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))
    collection.find_one_and_delete = AsyncMock(return_value=stored_documents[0])
    collection.find_one_and_replace = AsyncMock(return_value=stored_documents[0])
    collection.find_one_and_update = AsyncMock(return_value=stored_documents[0])
    collection.count_documents = AsyncMock(return_value=5)
    collection.aggregate = MagicMock(return_value=FakeAsyncCursor(stored_documents))
    collection.create_index = AsyncMock(return_value="name_1")
    collection.drop_index = AsyncMock()
    return collection


@pytest.fixture
def mock_sync_collection(stored_documents) -> MagicMock:
    """Create a mock synchronous PyMongo collection."""
    collection = MagicMock(spec=Collection)
    collection.name = "users"
    collection.find = MagicMock(side_effect=lambda *a, **k: FakeCursor(stored_documents))
    collection.find_one = MagicMock(return_value=stored_documents[0])
    collection.insert_one = MagicMock(return_value=MagicMock(inserted_id="test_id"))
    collection.insert_many = MagicMock(return_value=MagicMock(inserted_ids=["id1", "id2"]))
    collection.update_one = MagicMock(return_value=MagicMock(modified_count=1))
    collection.replace_one = MagicMock(return_value=MagicMock(modified_count=1))
    collection.delete_one = MagicMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = MagicMock(return_value=MagicMock(deleted_count=2))
    collection.find_one_and_update = MagicMock(return_value=stored_documents[0])
    collection.count_documents = MagicMock(return_value=5)
    return collection


@pytest.fixture
def sync_cursor(stored_documents) -> FakeCursor:
    """A fresh synchronous fake cursor over ``stored_documents``."""
    return FakeCursor(stored_documents)


@pytest.fixture
def async_cursor(stored_documents) -> FakeAsyncCursor:
    """A fresh asynchronous fake cursor over ``stored_documents``."""
    return FakeAsyncCursor(stored_documents)


@pytest.fixture
def empty_async_cursor() -> FakeAsyncCursor:
    return FakeAsyncCursor([])
