"""Document domain models."""
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ChunkMetadata:
    """Where a chunk came from."""
    source_id: str
    page_number: int
    offset: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "page_number": self.page_number,
            "offset": self.offset,
        }


@dataclass(frozen=True)
class Chunk:
    """Document chunk for indexing."""
    text: str
    metadata: ChunkMetadata

    @property
    def end(self) -> int:
        return self.metadata.offset + len(self.text)


@dataclass(frozen=True)
class VectorRecord:
    """Row persisted in a vector store."""
    id: str
    vector: list[float]
    content: str
    metadata: dict[str, Any]


@dataclass
class SearchResult:
    """Search result from vector store."""
    id: str
    content: str
    metadata: dict[str, Any]
    distance: float

    @property
    def source(self) -> str:
        return self.metadata.get("source_id", "Unknown")

    def to_dict(self) -> dict[str, Any]:
        return {"page_content": self.content, "metadata": self.metadata}


@dataclass
class AddDocumentsReport:
    """Outcome of a batch write: which chunks were stored and which were not."""
    total: int
    stored_ids: list[str] = field(default_factory=list)
    failed: list[tuple[int, str]] = field(default_factory=list)  # (chunk index, error)

    @property
    def succeeded(self) -> bool:
        return not self.failed


@dataclass
class IngestResult:
    """Result of ingesting one document."""
    source_id: str
    pages: int
    chunks: int
    record_ids: list[str]
