import logging

import numpy as np

from docchat.core.exceptions import EmbeddingMismatchError
from docchat.core.models.document import SearchResult, VectorRecord
from docchat.core.strategies.distance import get_distance_metric

logger = logging.getLogger(__name__)


class InMemoryVectorStore:
    """Process-local vector store (tests, local experiments)."""

    def __init__(self, metric: str = "cosine"):
        self._metric = get_distance_metric(metric)
        self._records: list[VectorRecord] = []

    async def initialize(self) -> None:
        logger.debug(f"In-memory vector store ready (metric={self._metric.name})")

    async def add(self, record: VectorRecord) -> None:
        if self._records and len(record.vector) != len(self._records[0].vector):
            raise EmbeddingMismatchError(len(self._records[0].vector), len(record.vector))
        self._records.append(record)

    async def query(
        self, query_embedding: list[float], n_results: int = 5
    ) -> list[SearchResult]:
        if not self._records:
            return []

        vectors = np.asarray([r.vector for r in self._records], dtype=float)
        distances = self._metric.distances(np.asarray(query_embedding, dtype=float), vectors)
        # stable sort keeps insertion order among equal distances
        order = np.argsort(distances, kind="stable")[:n_results]

        return [
            SearchResult(
                id=self._records[i].id,
                content=self._records[i].content,
                metadata=dict(self._records[i].metadata),
                distance=float(distances[i]),
            )
            for i in order
        ]

    async def delete_by_source(self, source_id: str) -> int:
        kept = [r for r in self._records if r.metadata.get("source_id") != source_id]
        removed = len(self._records) - len(kept)
        self._records = kept
        return removed

    async def count(self) -> int:
        return len(self._records)

    async def dimension(self) -> int | None:
        return len(self._records[0].vector) if self._records else None

    async def embedding_model(self) -> str | None:
        return self._records[0].metadata.get("embedding_model") if self._records else None

    async def close(self) -> None:
        return None
