from __future__ import annotations

import gc
import logging
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, TypeVar

from tenacity import Retrying, retry_if_not_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from inventory_seeder.embeddings_client import EmbeddingResponseError
from inventory_seeder.models import Record
from inventory_seeder.vector_io import record_to_vector_doc
from inventory_seeder.vector_text import build_embedding_text

log = logging.getLogger("inventory_seeder.pipeline")

T = TypeVar("T")

# Embedding errors raised straight away instead of retried
NON_RETRYABLE_EMBED_ERRORS = (ValueError, EmbeddingResponseError)


class RecordGenerator(Protocol):
    def generate_records(self, count: int) -> List[Record]: ...


class Embedder(Protocol):
    def embed_text(self, text: str) -> List[float]: ...


class DocumentSink(Protocol):
    def clear(self) -> int: ...

    def add_document(self, doc: Dict[str, Any]) -> Any: ...


class PipelineState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    CLEARING = "clearing"
    BATCHING = "batching"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ItemResult:
    item_id: str
    ok: bool
    error: Optional[str] = None


@dataclass
class BatchReport:
    number: int
    total: int
    results: List[ItemResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)


@dataclass
class RunReport:
    state: PipelineState = PipelineState.IDLE
    generated: int = 0
    processed: int = 0
    failed: int = 0
    batches: List[BatchReport] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE

    def as_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "generated": self.generated,
            "processed": self.processed,
            "failed": self.failed,
            "batch_sizes": [b.total for b in self.batches],
            "failed_items": [asdict(r) for b in self.batches for r in b.results if not r.ok],
            "error": self.error,
        }


def request_reclamation() -> None:
    """
    Best-effort hint to release memory between batches.
    """
    gc.collect()


def partition(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """
    Split items into consecutive batches of batch_size; the last may be shorter.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class IngestionPipeline:
    """
    Generate -> clear -> partition -> (summarize -> embed -> insert) per item,
    with a reclamation hint after each batch and a fixed pause between batches.

    Runs strictly sequentially. Every item is committed on its own, so a
    failure leaves earlier items in the collection.
    """

    def __init__(
        self,
        generator: RecordGenerator,
        embedder: Embedder,
        store: DocumentSink,
        *,
        batch_size: int = 3,
        pause_s: float = 1.0,
        embed_attempts: int = 3,
        retry_wait: Optional[wait_base] = None,
        stop_on_error: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        reclaim: Callable[[], Any] = request_reclamation,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if embed_attempts < 1:
            raise ValueError(f"embed_attempts must be >= 1, got {embed_attempts}")

        self.generator = generator
        self.embedder = embedder
        self.store = store
        self.batch_size = batch_size
        self.pause_s = pause_s
        self.embed_attempts = embed_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)
        self.stop_on_error = stop_on_error
        self._sleep = sleep
        self._reclaim = reclaim

    def _enter(self, report: RunReport, state: PipelineState) -> None:
        log.debug("Pipeline %s -> %s", report.state.value, state.value)
        report.state = state

    def _embed(self, text: str) -> List[float]:
        retrying = Retrying(
            retry=retry_if_not_exception_type(NON_RETRYABLE_EMBED_ERRORS),
            wait=self.retry_wait,
            stop=stop_after_attempt(self.embed_attempts),
            reraise=True,
        )
        return retrying(self.embedder.embed_text, text)

    def process_item(self, record: Record) -> ItemResult:
        """
        Summarize, embed and persist one record. The document is built only
        after the embedding succeeded, so nothing is written on failure.
        """
        try:
            text = build_embedding_text(record)
            vector = self._embed(text)
            self.store.add_document(record_to_vector_doc(record, vector, text))
        except Exception as e:
            log.exception("Failed to process record %s", record.item_id)
            return ItemResult(record.item_id, ok=False, error=f"{type(e).__name__}: {e}")

        log.info("Successfully processed & saved record: %s", record.item_id)
        return ItemResult(record.item_id, ok=True)

    def process_batch(self, batch: Sequence[Record], number: int) -> BatchReport:
        report = BatchReport(number=number, total=len(batch))
        for record in batch:
            result = self.process_item(record)
            report.results.append(result)
            if not result.ok and self.stop_on_error:
                break
        return report

    def run(self, count: int = 10) -> RunReport:
        """
        Execute one full seeding run and return its report. Never raises:
        any failure is recorded on the report with state FAILED.

        The pause only separates batches; there is none after the last one.
        """
        report = RunReport()
        try:
            self._enter(report, PipelineState.GENERATING)
            log.info("Generating synthetic data...")
            records = self.generator.generate_records(count)
            report.generated = len(records)
            log.info("Generated %d items", report.generated)

            # Only wipe existing data once the new set is fully validated
            self._enter(report, PipelineState.CLEARING)
            self.store.clear()

            batches = partition(records, self.batch_size)
            self._enter(report, PipelineState.BATCHING)

            for number, batch in enumerate(batches, start=1):
                log.info("Processing batch %d/%d", number, len(batches))
                batch_report = self.process_batch(batch, number)
                report.batches.append(batch_report)
                report.processed += batch_report.processed
                report.failed += batch_report.failed

                self._reclaim()

                if batch_report.failed and self.stop_on_error:
                    first = next(r for r in batch_report.results if not r.ok)
                    report.error = f"record {first.item_id}: {first.error}"
                    break

                if number < len(batches):
                    self._sleep(self.pause_s)

        except Exception as e:
            log.exception("Seeding run failed while %s", report.state.value)
            report.error = f"{type(e).__name__}: {e}"
            self._enter(report, PipelineState.FAILED)
            return report

        if report.failed:
            self._enter(report, PipelineState.FAILED)
            if report.error is None:
                report.error = f"{report.failed} record(s) failed"
        else:
            self._enter(report, PipelineState.DONE)

        log.info(
            "Ingestion finished: generated=%d processed=%d failed=%d",
            report.generated,
            report.processed,
            report.failed,
        )
        return report
