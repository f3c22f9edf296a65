"""Vector store protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.document import SearchResult, VectorRecord


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage backends.

    Implementations must create their schema on `initialize()` (idempotent),
    write each record atomically, and raise instead of returning empty
    results when the backing store is unreachable.
    """

    async def initialize(self) -> None:
        """Create collection/table/extensions if absent."""
        ...

    async def add(self, record: VectorRecord) -> None:
        """Persist one record atomically."""
        ...

    async def query(
        self,
        query_embedding: list[float],
        n_results: int = 5
    ) -> list[SearchResult]:
        """Search by embedding.

        Args:
            query_embedding: Query vector.
            n_results: Number of results to return.

        Returns:
            Results ordered by ascending distance, ties in insertion order.
        """
        ...

    async def delete_by_source(self, source_id: str) -> int:
        """Delete all records of a source; returns how many were removed."""
        ...

    async def count(self) -> int:
        """Get record count."""
        ...

    async def dimension(self) -> int | None:
        """Dimensionality of stored vectors, None while empty."""
        ...

    async def embedding_model(self) -> str | None:
        """`embedding_model` recorded on a stored vector, None while empty or unrecorded."""
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...
