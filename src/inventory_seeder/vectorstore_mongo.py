from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.operations import SearchIndexModel
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from inventory_seeder.config import Settings
from inventory_seeder.vector_io import EMBEDDING_KEY

log = logging.getLogger("inventory_seeder.store")


class SearchIndexStillListed(RuntimeError):
    """A dropped Atlas search index is still being deleted."""


class MongoVectorStore:
    """
    MongoDB Atlas collection holding inventory documents and their embeddings.

    Atlas deletes search indexes asynchronously; a dropped index stays listed
    (status DELETING) for a while and its name cannot be reused until it is gone.
    ``drop_all_indexes`` polls every ``index_poll_s`` seconds, at most
    ``index_drop_attempts`` times, until each dropped name is unlisted.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[MongoClient] = None,
        *,
        index_poll_s: float = 2.0,
        index_drop_attempts: int = 60,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if index_drop_attempts < 1:
            raise ValueError("index_drop_attempts must be >= 1")
        self._client = client if client is not None else MongoClient(settings.mongodb_uri)
        self.database_name = settings.mongodb_database
        self.collection_name = settings.mongodb_collection
        self.index_name = settings.vector_index_name
        self.index_poll_s = index_poll_s
        self.index_drop_attempts = index_drop_attempts
        self._sleep = sleep
        self._db = self._client[self.database_name]

    @property
    def collection(self) -> Collection:
        return self._db[self.collection_name]

    def ping(self) -> None:
        """Verify the connection works; raises on failure."""
        self._client.admin.command("ping")
        log.info("Connected to MongoDB")

    def ensure_collection(self) -> bool:
        """
        Create the collection if absent. Returns True if it was created.
        """
        existing = self._db.list_collection_names(filter={"name": self.collection_name})
        if self.collection_name in existing:
            log.info("'%s' collection already exists in '%s'", self.collection_name, self.database_name)
            return False

        self._db.create_collection(self.collection_name)
        log.info("Created '%s' collection in '%s'", self.collection_name, self.database_name)
        return True

    def search_index_names(self, name: Optional[str] = None) -> List[str]:
        """Names of listed search indexes, including ones still being deleted."""
        return [idx["name"] for idx in self.collection.list_search_indexes(name)]

    def _assert_search_index_gone(self, name: str) -> None:
        if name in self.search_index_names(name):
            raise SearchIndexStillListed(f"Search index {name} is still being deleted")

    def wait_for_search_index_drop(self, name: str) -> None:
        """
        Block until ``name`` is no longer listed. Raises SearchIndexStillListed
        once the poll budget is spent.
        """
        retrying = Retrying(
            retry=retry_if_exception_type(SearchIndexStillListed),
            wait=wait_fixed(self.index_poll_s),
            stop=stop_after_attempt(self.index_drop_attempts),
            sleep=self._sleep,
            reraise=True,
        )
        retrying(self._assert_search_index_gone, name)

    def drop_all_indexes(self) -> None:
        """
        Drop secondary indexes and every Atlas search index on the collection,
        then wait until the dropped search indexes are fully removed.
        """
        coll = self.collection
        coll.drop_indexes()
        dropped = []
        for idx in list(coll.list_search_indexes()):
            if idx.get("status") != "DELETING":
                log.info("Dropping search index %s", idx["name"])
                coll.drop_search_index(idx["name"])
            dropped.append(idx["name"])
        for name in dropped:
            log.info("Waiting for search index %s to be deleted", name)
            self.wait_for_search_index_drop(name)

    def create_vector_index(self, dimensions: int, similarity: str = "cosine") -> str:
        model = SearchIndexModel(
            definition={
                "fields": [
                    {
                        "type": "vector",
                        "path": EMBEDDING_KEY,
                        "numDimensions": dimensions,
                        "similarity": similarity,
                    }
                ]
            },
            name=self.index_name,
            type="vectorSearch",
        )
        return self.collection.create_search_index(model)

    def clear(self) -> int:
        """Delete every document in the collection."""
        res = self.collection.delete_many({})
        log.info("Cleared %d existing documents from '%s'", res.deleted_count, self.collection_name)
        return res.deleted_count

    def add_document(self, doc: Dict[str, Any]) -> Any:
        """Insert one document (metadata + text + embedding) in a single write."""
        return self.collection.insert_one(doc).inserted_id

    def count(self) -> int:
        return self.collection.count_documents({})

    def close(self) -> None:
        self._client.close()
        log.info("MongoDB connection closed")
