from __future__ import annotations

from typing import Any, Dict, List, Optional

from inventory_seeder.models import Record
from inventory_seeder.vector_text import build_embedding_text

TEXT_KEY = "embedding_text"
EMBEDDING_KEY = "embedding"


def record_to_vector_doc(
    record: Record,
    embedding: List[float],
    text: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Convert a record to the document persisted in MongoDB.
    Record fields are stored at the top level as metadata, next to the
    summary text and its embedding, so a single insert writes all three.
    """
    if text is None:
        text = build_embedding_text(record)
    if not embedding:
        raise ValueError(f"Refusing to store {record.item_id} without an embedding")

    doc = record.model_dump(mode="json")
    doc[TEXT_KEY] = text
    doc[EMBEDDING_KEY] = list(embedding)
    return doc
