from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from inventory_seeder.config import Settings
from inventory_seeder.embeddings_client import EmbeddingsClient
from inventory_seeder.llm_client import LLMClient
from inventory_seeder.pipeline import (
    Embedder,
    IngestionPipeline,
    PipelineState,
    RecordGenerator,
    RunReport,
)
from inventory_seeder.provision import provision_store
from inventory_seeder.vectorstore_mongo import MongoVectorStore

log = logging.getLogger("inventory_seeder.ingest")


def provision_only(settings: Settings, store: Optional[MongoVectorStore] = None) -> bool:
    """
    Connect, ensure the collection and vector index exist, disconnect.
    """
    store = store if store is not None else MongoVectorStore(settings)
    try:
        store.ping()
        return provision_store(
            store,
            dimensions=settings.embedding_dimensions,
            strict=settings.strict_index,
        )
    finally:
        store.close()


def seed_database(
    settings: Settings,
    *,
    count: Optional[int] = None,
    batch_size: Optional[int] = None,
    pause_s: Optional[float] = None,
    embed_attempts: int = 3,
    stop_on_error: bool = True,
    store: Optional[MongoVectorStore] = None,
    generator: Optional[RecordGenerator] = None,
    embedder: Optional[Embedder] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunReport:
    """
    Seed the collection end-to-end: connect -> provision -> generate -> clear -> ingest.

    Errors are logged, never raised; the returned report carries the outcome.
    The connection is closed exactly once whatever happens.
    """
    report = RunReport()
    try:
        log.info("Connecting to MongoDB...")
        if store is None:
            store = MongoVectorStore(settings)
        store.ping()

        provision_store(
            store,
            dimensions=settings.embedding_dimensions,
            strict=settings.strict_index,
        )

        pipeline = IngestionPipeline(
            generator if generator is not None else LLMClient(settings),
            embedder if embedder is not None else EmbeddingsClient(settings),
            store,
            batch_size=batch_size if batch_size is not None else settings.batch_size,
            pause_s=pause_s if pause_s is not None else settings.batch_pause_ms / 1000.0,
            embed_attempts=embed_attempts,
            stop_on_error=stop_on_error,
            sleep=sleep,
        )
        report = pipeline.run(count if count is not None else settings.seed_item_count)

        if report.ok:
            log.info("Database seeding completed")
        else:
            log.error("Database seeding failed: %s", report.error)

    except Exception as e:
        log.exception("Error seeding database: %s", e)
        report.state = PipelineState.FAILED
        report.error = f"{type(e).__name__}: {e}"

    finally:
        if store is not None:
            store.close()

    return report
