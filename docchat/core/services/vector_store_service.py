"""Vector store service - embeds chunks, writes them, answers similarity queries."""

import asyncio
import logging
import uuid

from ..exceptions import (
    ConfigurationError,
    DependencyError,
    EmbeddingMismatchError,
    EmbeddingServiceError,
)
from ..models.document import AddDocumentsReport, Chunk, SearchResult, VectorRecord
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol

logger = logging.getLogger(__name__)


class VectorStoreService:
    """Embedding-aware facade over a vector store backend."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        retries: int = 1,
        query_prefix: str = "query: ",
        passage_prefix: str = "passage: ",
    ):
        """Initialize vector store service.

        Args:
            embedder: Embedding service; the same model must be used for every write.
            vector_store: Storage backend.
            retries: Extra attempts per chunk after a dependency failure.
            query_prefix: Prefix for query texts (e5-style models).
            passage_prefix: Prefix for stored passages.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._retries = max(retries, 0)
        self._query_prefix = query_prefix
        self._passage_prefix = passage_prefix
        self._dimension: int | None = None
        self._stored_model: str | None = None

    async def initialize(self) -> None:
        await self._vector_store.initialize()

    async def close(self) -> None:
        await self._vector_store.close()

    async def _embed(self, text: str) -> list[float]:
        try:
            vector = await asyncio.to_thread(self._embedder.encode, text)
        except Exception as e:
            logger.error(f"Embedding failed ({self._embedder.model_name}): {e}")
            raise EmbeddingServiceError(details={"model": self._embedder.model_name}) from e
        return [float(v) for v in vector.tolist()]

    def _forget_stored_profile(self) -> None:
        self._dimension = None
        self._stored_model = None

    async def _check_compatibility(self, vector: list[float]) -> None:
        """Reject vectors from a model other than the one the store was built with."""
        if self._dimension is None:
            self._dimension = await self._vector_store.dimension()
            self._stored_model = await self._vector_store.embedding_model()
        if self._dimension is None:
            return
        if len(vector) != self._dimension:
            raise EmbeddingMismatchError(self._dimension, len(vector))
        model = self._embedder.model_name
        if self._stored_model is not None and self._stored_model != model:
            raise EmbeddingMismatchError(self._stored_model, model, field="model")

    async def _store_chunk(self, chunk: Chunk) -> str:
        vector = await self._embed(f"{self._passage_prefix}{chunk.text}")
        await self._check_compatibility(vector)

        record = VectorRecord(
            id=str(uuid.uuid4()),
            vector=vector,
            content=chunk.text,
            metadata={
                **chunk.metadata.to_dict(),
                "embedding_model": self._embedder.model_name,
            },
        )
        await self._vector_store.add(record)
        if self._dimension is None:
            self._dimension = len(vector)
            self._stored_model = self._embedder.model_name
        return record.id

    async def add_documents(self, chunks: list[Chunk]) -> AddDocumentsReport:
        """Embed and store chunks one record at a time.

        A chunk whose embedding or write fails is retried; chunks that still
        fail are listed in the report, never dropped silently.

        Args:
            chunks: Chunks to store.

        Returns:
            Report naming stored record ids and failed chunk indices.
        """
        report = AddDocumentsReport(total=len(chunks))

        for index, chunk in enumerate(chunks):
            for attempt in range(self._retries + 1):
                try:
                    report.stored_ids.append(await self._store_chunk(chunk))
                    break
                except DependencyError as e:
                    if attempt < self._retries:
                        logger.warning(
                            f"Chunk {index} failed (attempt {attempt + 1}), retrying: {e.message}"
                        )
                        continue
                    logger.error(f"Chunk {index} of {chunk.metadata.source_id} not stored: {e.message}")
                    report.failed.append((index, e.message))

        logger.info(
            f"Stored {len(report.stored_ids)}/{report.total} chunks"
            + (f", {len(report.failed)} failed" if report.failed else "")
        )
        return report

    async def similarity_search(self, query: str, k: int) -> list[SearchResult]:
        """Return up to k stored chunks closest to the query.

        Args:
            query: Search query.
            k: Maximum number of matches, must be positive.

        Returns:
            Matches ordered by ascending distance.
        """
        if k <= 0:
            raise ConfigurationError("k must be positive", details={"k": k})

        vector = await self._embed(f"{self._query_prefix}{query}")
        await self._check_compatibility(vector)
        results = await self._vector_store.query(query_embedding=vector, n_results=k)

        logger.info(f"Search: returned {len(results)}/{k} docs for '{query[:50]}...'")
        return results[:k]

    async def delete_source(self, source_id: str) -> int:
        removed = await self._vector_store.delete_by_source(source_id)
        # the store may now be empty and open to a different model
        self._forget_stored_profile()
        logger.info(f"Removed {removed} records of {source_id}")
        return removed

    async def count(self) -> int:
        return await self._vector_store.count()
