"""Ingest service - document indexing."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from ..exceptions import (
    DocumentNotFoundError,
    DocumentUnreadableError,
    PartialIngestionError,
    UnsupportedDocumentError,
)
from ..models.document import Chunk, IngestResult
from ..protocols.document_loader import DocumentLoaderProtocol
from .chunker import TextChunker
from .vector_store_service import VectorStoreService

logger = logging.getLogger(__name__)


class IngestService:
    """Service for indexing documents into vector store.

    Ingestion never deduplicates: ingesting a document twice stores its chunks
    twice. Callers that want replace semantics pass `replace=True` (or call
    `remove`) to drop the earlier records of that source first.
    """

    def __init__(
        self,
        vector_store: VectorStoreService,
        chunker: TextChunker,
        loader: Optional[DocumentLoaderProtocol] = None,
        docs_path: str = "./docs",
    ):
        """Initialize ingest service.

        Args:
            vector_store: Vector store service.
            chunker: Text chunker applied to every page.
            loader: Page extractor; defaults to the composite PDF/DOCX/text loader.
            docs_path: Base directory for relative document locations.
        """
        self._vector_store = vector_store
        self._chunker = chunker
        self._docs_path = Path(docs_path)
        self._loader = loader

    @property
    def loader(self) -> DocumentLoaderProtocol:
        """Lazy load document loader."""
        if self._loader is None:
            from docchat.infrastructure.document_loaders import CompositeLoader

            self._loader = CompositeLoader()
        return self._loader

    def _resolve(self, location: str) -> Path:
        path = Path(location)
        if not path.is_absolute():
            path = self._docs_path / path
        return path.resolve()

    def _source_id(self, path: Path) -> str:
        try:
            return path.relative_to(self._docs_path.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def _chunk_pages(self, pages: list[str], source_id: str) -> list[Chunk]:
        chunks: list[Chunk] = []
        for page_number, page_text in enumerate(pages):
            if not page_text.strip():
                continue
            chunks.extend(
                self._chunker.chunk(page_text, source_id=source_id, page_number=page_number)
            )
        return chunks

    async def ingest(self, location: str, replace: bool = False) -> IngestResult:
        """Load, chunk, embed and store one document.

        Args:
            location: File path, absolute or relative to the docs directory.
            replace: Remove records previously stored for this source first.

        Returns:
            Ingest result with the stored record ids.

        Raises:
            DocumentNotFoundError: File is missing or unreadable.
            UnsupportedDocumentError: No loader for the file type.
            DocumentUnreadableError: File could not be parsed.
            PartialIngestionError: Some chunks could not be stored.
        """
        path = self._resolve(location)
        if not path.is_file() or not os.access(path, os.R_OK):
            logger.warning(f"Document not found: {location}")
            raise DocumentNotFoundError(location)

        if not self.loader.supports(path):
            raise UnsupportedDocumentError(location, getattr(self.loader, "extensions", []))

        try:
            pages = await asyncio.to_thread(self.loader.load_pages, path)
        except Exception as e:
            logger.error(f"Failed to load {path}: {e}")
            raise DocumentUnreadableError(location) from e

        source_id = self._source_id(path)
        chunks = self._chunk_pages(pages, source_id)

        if replace:
            await self._vector_store.delete_source(source_id)

        report = await self._vector_store.add_documents(chunks)
        if not report.succeeded:
            raise PartialIngestionError(source_id, report)

        logger.info(f"Indexed {source_id}: {len(pages)} pages, {len(chunks)} chunks")
        return IngestResult(
            source_id=source_id,
            pages=len(pages),
            chunks=len(chunks),
            record_ids=report.stored_ids,
        )

    async def remove(self, location: str) -> int:
        """Delete every record stored for a document."""
        return await self._vector_store.delete_source(self._source_id(self._resolve(location)))

    async def ingest_directory(self, replace: bool = False) -> list[IngestResult]:
        """Index every supported document under the docs directory.

        Returns:
            One result per indexed document.
        """
        if not self._docs_path.exists():
            logger.error(f"Docs path not found: {self._docs_path}")
            return []

        results = []
        for file_path in sorted(self._docs_path.rglob("*")):
            if not file_path.is_file() or not self.loader.supports(file_path):
                continue
            results.append(await self.ingest(str(file_path), replace=replace))

        logger.info(
            f"Indexing complete: {sum(r.chunks for r in results)} chunks from {len(results)} files"
        )
        return results
