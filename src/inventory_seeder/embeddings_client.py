from __future__ import annotations

import logging
from typing import List, Optional

from openai import OpenAI

from inventory_seeder.config import Settings

log = logging.getLogger("inventory_seeder.embeddings")


class EmbeddingResponseError(RuntimeError):
    """The provider answered, but not with a usable vector."""


class EmbeddingsClient:
    """
    Thin wrapper for generating fixed-size embeddings.
    Failures are surfaced to the caller; retry policy lives in the pipeline.
    """

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None) -> None:
        self._client = client or OpenAI(api_key=settings.openai_api_key)
        self._model = settings.openai_embedding_model
        self.dimensions = settings.embedding_dimensions

    def embed_text(self, text: str) -> List[float]:
        """
        Generate a single embedding vector for the given text.
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        log.debug("Embedding text (%d chars)", len(text))

        resp = self._client.embeddings.create(
            model=self._model,
            input=text,
            dimensions=self.dimensions,
        )

        try:
            vector = list(resp.data[0].embedding)
        except Exception as e:
            raise EmbeddingResponseError("Invalid embedding response") from e

        if len(vector) != self.dimensions:
            raise EmbeddingResponseError(f"Expected {self.dimensions}-dimensional embedding, got {len(vector)}")

        return vector
