from __future__ import annotations

import logging

from inventory_seeder.vectorstore_mongo import MongoVectorStore

log = logging.getLogger("inventory_seeder.provision")


class IndexProvisioningError(RuntimeError):
    """Raised when the vector search index could not be recreated."""


def provision_store(
    store: MongoVectorStore,
    *,
    dimensions: int = 768,
    similarity: str = "cosine",
    strict: bool = True,
) -> bool:
    """
    Ensure the collection exists and carries exactly one vector search index.

    Collection errors always propagate. Index errors raise
    IndexProvisioningError when strict, otherwise they are logged and the
    run continues without a working index.
    Returns True if the index was created.
    """
    log.info("Setting up database and collection...")
    store.ensure_collection()

    try:
        store.drop_all_indexes()
        log.info("Creating vector search index %s (%d dims, %s)", store.index_name, dimensions, similarity)
        store.create_vector_index(dimensions, similarity)
    except Exception as e:
        if strict:
            raise IndexProvisioningError(f"Failed to create vector search index: {e}") from e
        log.error("Failed to create vector search index, continuing without it: %s", e)
        return False

    log.info("Successfully created vector search index")
    return True
