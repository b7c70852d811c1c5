"""In-memory fakes for MongoDB and the OpenAI-backed clients."""

from __future__ import annotations

import itertools
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterable, List, Optional

from pymongo.errors import OperationFailure

from inventory_seeder.models import Record


class FakeCollection:
    """In-memory stand-in for ``pymongo.collection.Collection``.

    With ``drop_delay_lists`` > 0 a dropped search index behaves like Atlas:
    it stays listed with status DELETING for that many more listings, and
    creating an index under its name fails with "Duplicate Index".
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.search_indexes: List[Dict[str, Any]] = []
        self.drop_indexes_calls = 0
        self.delete_many_calls = 0
        self.insert_error: Optional[Callable[[Dict[str, Any]], Optional[Exception]]] = None
        self.search_index_error: Optional[Exception] = None
        self.drop_delay_lists = 0
        self.list_search_indexes_calls = 0
        self._deleting: Dict[str, int] = {}
        self._ids = itertools.count(1)

    def insert_one(self, doc: Dict[str, Any]) -> SimpleNamespace:
        if self.insert_error is not None:
            exc = self.insert_error(doc)
            if exc is not None:
                raise exc
        stored = dict(doc)
        stored.setdefault("_id", next(self._ids))
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def delete_many(self, filter: Dict[str, Any]) -> SimpleNamespace:
        assert filter == {}
        self.delete_many_calls += 1
        deleted = len(self.docs)
        self.docs.clear()
        return SimpleNamespace(deleted_count=deleted)

    def count_documents(self, filter: Dict[str, Any]) -> int:
        assert filter == {}
        return len(self.docs)

    def drop_indexes(self) -> None:
        self.drop_indexes_calls += 1

    def list_search_indexes(self, name: Optional[str] = None) -> Iterable[Dict[str, Any]]:
        self.list_search_indexes_calls += 1
        listed = []
        for idx in self.search_indexes:
            if name is not None and idx["name"] != name:
                continue
            entry = dict(idx)
            if idx["name"] in self._deleting:
                entry["status"] = "DELETING"
            listed.append(entry)

        for pending in list(self._deleting):
            self._deleting[pending] -= 1
            if self._deleting[pending] <= 0:
                del self._deleting[pending]
                self._remove_search_index(pending)
        return iter(listed)

    def drop_search_index(self, name: str) -> None:
        if self.drop_delay_lists > 0:
            self._deleting[name] = self.drop_delay_lists
        else:
            self._remove_search_index(name)

    def _remove_search_index(self, name: str) -> None:
        self.search_indexes = [i for i in self.search_indexes if i["name"] != name]

    def create_search_index(self, model: Any) -> str:
        if self.search_index_error is not None:
            raise self.search_index_error
        name = model.document["name"]
        if any(i["name"] == name for i in self.search_indexes):
            raise OperationFailure(f"Duplicate Index: {name} already exists", code=68)
        self.search_indexes.append(dict(model.document))
        return name


class FakeDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}
        self.created: List[str] = []

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def list_collection_names(self, filter: Optional[Dict[str, Any]] = None) -> List[str]:
        names = list(self.created)
        if filter and "name" in filter:
            names = [n for n in names if n == filter["name"]]
        return names

    def create_collection(self, name: str) -> FakeCollection:
        if name in self.created:
            raise RuntimeError(f"collection {name} already exists")
        self.created.append(name)
        return self[name]


class FakeAdmin:
    def __init__(self) -> None:
        self.ping_error: Optional[Exception] = None

    def command(self, name: str) -> Dict[str, Any]:
        assert name == "ping"
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1}


class FakeMongoClient:
    def __init__(self) -> None:
        self.databases: Dict[str, FakeDatabase] = {}
        self.admin = FakeAdmin()
        self.close_calls = 0

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    def close(self) -> None:
        self.close_calls += 1


# ──────────────────────────────────────────────────────────────────────
# Fake generator / embedder
# ──────────────────────────────────────────────────────────────────────


class FakeGenerator:
    def __init__(self, records: List[Record], error: Optional[Exception] = None) -> None:
        self.records = records
        self.error = error
        self.calls: List[int] = []

    def generate_records(self, count: int) -> List[Record]:
        self.calls.append(count)
        if self.error is not None:
            raise self.error
        return list(self.records[:count])


class FakeEmbedder:
    """
    Deterministic 768-dim vectors; the first component is the text length so
    a stored vector can be matched back to its own text.
    """

    def __init__(
        self,
        dimensions: int = 768,
        fail_for: Iterable[str] = (),
        fail_times: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.dimensions = dimensions
        self.fail_for = set(fail_for)
        self.fail_times = fail_times
        self.error = error
        self.texts: List[str] = []
        self._failures = 0

    def embed_text(self, text: str) -> List[float]:
        self.texts.append(text)
        if any(text.startswith(f"{name} ") for name in self.fail_for):
            if self.fail_times is None or self._failures < self.fail_times:
                self._failures += 1
                raise self.error or RuntimeError("embedding quota exceeded")
        return [float(len(text))] + [0.0] * (self.dimensions - 1)
