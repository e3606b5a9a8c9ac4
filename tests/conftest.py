"""Pytest configuration and fixtures for corpus tool tests.

The store is tested against a small in-memory stand-in for the motor client
that understands the queries the corpus store issues.
"""
from __future__ import annotations

import copy
import re
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from corpus_tool.core.mongodb import MongoDB
from corpus_tool.main import app
from corpus_tool.schemas.document import DocumentFields
from corpus_tool.services.corpus_store import CorpusStore, get_corpus_store

_MISSING = object()


def _get_path(document: dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_path(document: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    target = document
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    for path, condition in query.items():
        value = _get_path(document, path)
        if isinstance(condition, dict) and "$regex" in condition:
            if not isinstance(value, str) or not re.search(condition["$regex"], value):
                return False
        elif value is _MISSING or value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]):
        self._documents = documents
        self._limit = 0

    def limit(self, limit: int) -> "FakeCursor":
        self._limit = limit
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        documents = self._documents
        for bound in (self._limit, length):
            if bound:
                documents = documents[:bound]
        return copy.deepcopy(documents)


class FakeCollection:
    """In-memory collection supporting the subset of motor used by the store."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self.unique_fields: set[str] = set()

    async def create_index(self, key: str, unique: bool = False) -> str:
        if unique:
            self.unique_fields.add(key)
        return f"{key}_1"

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for document in self.documents:
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        for field in self.unique_fields:
            value = _get_path(document, field)
            if any(_get_path(d, field) == value for d in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error: {field}")
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, query: dict[str, Any]) -> FakeCursor:
        return FakeCursor([d for d in self.documents if _matches(d, query)])

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        return_document: ReturnDocument = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        for document in self.documents:
            if not _matches(document, query):
                continue
            before = copy.deepcopy(document)
            for path, value in update.get("$set", {}).items():
                _set_path(document, path, copy.deepcopy(value))
            for path, amount in update.get("$inc", {}).items():
                current = _get_path(document, path)
                _set_path(document, path, (0 if current is _MISSING else current) + amount)
            for path, value in update.get("$push", {}).items():
                current = _get_path(document, path)
                items = [] if current is _MISSING else current
                items.append(copy.deepcopy(value))
                _set_path(document, path, items)
            return copy.deepcopy(document) if return_document == ReturnDocument.AFTER else before
        return None

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def aggregate(self, pipeline: list[dict[str, Any]]) -> FakeCursor:
        (stage,) = pipeline
        group = stage["$group"]
        if not self.documents:
            return FakeCursor([])

        result: dict[str, Any] = {"_id": None}
        for name, accumulator in group.items():
            if name == "_id":
                continue
            (operator, expression), = accumulator.items()
            if isinstance(expression, str):
                values = [_get_path(d, expression.lstrip("$")) for d in self.documents]
                values = [v for v in values if v is not _MISSING]
            else:
                values = [expression] * len(self.documents)
            if operator == "$sum":
                result[name] = sum(values)
            elif operator == "$avg":
                result[name] = sum(values) / len(values) if values else None
            elif operator == "$addToSet":
                result[name] = list(dict.fromkeys(values))
        return FakeCursor([result])


class FakeAdmin:
    def __init__(self, client: "FakeMotorClient"):
        self._client = client

    async def command(self, name: str) -> dict[str, Any]:
        if not self._client.available:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1.0}


class FakeMotorClient:
    def __init__(self, url: str, collections: dict[str, FakeCollection], available: bool = True, **kwargs: Any):
        self.url = url
        self.kwargs = kwargs
        self.available = available
        self.closed = False
        self.admin = FakeAdmin(self)
        self._collections = collections

    def __getitem__(self, database_name: str) -> "FakeDatabase":
        return FakeDatabase(self._collections)

    def close(self) -> None:
        self.closed = True


class FakeDatabase:
    def __init__(self, collections: dict[str, FakeCollection]):
        self._collections = collections

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())


class FakeClientFactory:
    """Callable standing in for AsyncIOMotorClient; records each client made."""

    def __init__(self, available: bool = True):
        self.available = available
        self.collections: dict[str, FakeCollection] = {}
        self.clients: list[FakeMotorClient] = []

    def __call__(self, url: str, **kwargs: Any) -> FakeMotorClient:
        client = FakeMotorClient(url, self.collections, available=self.available, **kwargs)
        self.clients.append(client)
        return client


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def mongo(client_factory: FakeClientFactory) -> MongoDB:
    return MongoDB(
        url="mongodb://localhost:27017/corpora",
        database_name="corpora",
        collection_name="text-corpus",
        client_factory=client_factory,
    )


@pytest.fixture
def store(mongo: MongoDB) -> CorpusStore:
    return CorpusStore(mongo)


@pytest.fixture
def collection(client_factory: FakeClientFactory) -> FakeCollection:
    """The collection the store writes to."""
    return FakeDatabase(client_factory.collections)["text-corpus"]


@pytest.fixture
def fields() -> DocumentFields:
    return DocumentFields(
        title="A Tale of Two Cities",
        author="Charles Dickens",
        content_type="book",
        content_text="It was the best of times,   it was the worst of times.",
        publisher="",
        isbn="  ",
        genre="Historical fiction",
        weighting=2,
    )


@pytest.fixture
def api_client(store: CorpusStore):
    app.dependency_overrides[get_corpus_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
