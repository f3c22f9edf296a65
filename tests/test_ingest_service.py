import pytest

from docchat.core.exceptions import (
    ClientError,
    DependencyError,
    DocumentNotFoundError,
    PartialIngestionError,
    UnsupportedDocumentError,
)
from docchat.core.services.chunker import TextChunker
from docchat.core.services.ingest_service import IngestService
from docchat.core.services.vector_store_service import VectorStoreService

from .fakes import FlakyEmbedder


@pytest.fixture
def docs(tmp_path):
    (tmp_path / "handbook.txt").write_text(
        "Deployments run every Tuesday.\fThe on-call rotation is weekly.", encoding="utf-8"
    )
    (tmp_path / "gaps.txt").write_text("first page\f  \fthird page", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    return tmp_path


@pytest.fixture
def ingest_service(vector_store_service, chunker, docs):
    return IngestService(vector_store=vector_store_service, chunker=chunker, docs_path=str(docs))


class TestIngest:
    @pytest.mark.asyncio
    async def test_chunks_are_tagged_with_source_and_page(self, ingest_service, vector_store_service):
        result = await ingest_service.ingest("handbook.txt")

        assert result.source_id == "handbook.txt"
        assert result.pages == 2
        assert result.chunks == 2
        assert len(result.record_ids) == 2

        hits = await vector_store_service.similarity_search("on-call rotation weekly", 1)
        assert hits[0].metadata["source_id"] == "handbook.txt"
        assert hits[0].metadata["page_number"] == 1

    @pytest.mark.asyncio
    async def test_blank_pages_keep_page_numbering(self, ingest_service, vector_store_service):
        result = await ingest_service.ingest("gaps.txt")

        assert result.pages == 3
        assert result.chunks == 2
        hits = await vector_store_service.similarity_search("third page", 2)
        assert sorted(h.metadata["page_number"] for h in hits) == [0, 2]

    @pytest.mark.asyncio
    async def test_absolute_path_is_accepted(self, ingest_service, docs):
        result = await ingest_service.ingest(str(docs / "handbook.txt"))
        assert result.source_id == "handbook.txt"

    @pytest.mark.asyncio
    async def test_missing_file_is_client_error(self, ingest_service, vector_store_service):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            await ingest_service.ingest("missing.pdf")

        assert isinstance(exc_info.value, ClientError)
        assert exc_info.value.message == "File does not exist."
        assert exc_info.value.status_code == 404
        assert await vector_store_service.count() == 0

    @pytest.mark.asyncio
    async def test_unsupported_type_is_client_error(self, ingest_service):
        with pytest.raises(UnsupportedDocumentError) as exc_info:
            await ingest_service.ingest("image.png")
        assert ".pdf" in exc_info.value.details["supported"]

    @pytest.mark.asyncio
    async def test_ingesting_twice_duplicates_records(self, ingest_service, vector_store_service):
        await ingest_service.ingest("handbook.txt")
        await ingest_service.ingest("handbook.txt")
        assert await vector_store_service.count() == 4

    @pytest.mark.asyncio
    async def test_duplicates_rank_side_by_side(self, ingest_service, vector_store_service):
        first = await ingest_service.ingest("handbook.txt")
        second = await ingest_service.ingest("handbook.txt")

        hits = await vector_store_service.similarity_search("on-call rotation weekly", 4)

        assert len(hits) == 4
        distances = [h.distance for h in hits]
        assert distances == sorted(distances)
        for a, b in (hits[0:2], hits[2:4]):
            assert a.content == b.content
            assert a.distance == b.distance
            assert a.metadata["page_number"] == b.metadata["page_number"]
        assert hits[0].metadata["page_number"] == 1
        assert {h.id for h in hits} == set(first.record_ids) | set(second.record_ids)

    @pytest.mark.asyncio
    async def test_replace_drops_previous_records(self, ingest_service, vector_store_service):
        await ingest_service.ingest("handbook.txt")
        await ingest_service.ingest("gaps.txt")
        await ingest_service.ingest("handbook.txt", replace=True)
        assert await vector_store_service.count() == 4

    @pytest.mark.asyncio
    async def test_remove(self, ingest_service, vector_store_service):
        await ingest_service.ingest("handbook.txt")
        assert await ingest_service.remove("handbook.txt") == 2
        assert await vector_store_service.count() == 0

    @pytest.mark.asyncio
    async def test_partial_failure_is_reported(self, docs, memory_store):
        service = IngestService(
            vector_store=VectorStoreService(
                embedder=FlakyEmbedder(poison="rotation"), vector_store=memory_store, retries=0
            ),
            chunker=TextChunker(chunk_size=200, chunk_overlap=20),
            docs_path=str(docs),
        )

        with pytest.raises(PartialIngestionError) as exc_info:
            await service.ingest("handbook.txt")

        assert isinstance(exc_info.value, DependencyError)
        assert exc_info.value.details["failed"] == [1]
        assert exc_info.value.report.stored_ids
        assert await memory_store.count() == 1


class TestIngestDirectory:
    @pytest.mark.asyncio
    async def test_indexes_supported_files_only(self, ingest_service, vector_store_service):
        results = await ingest_service.ingest_directory()

        assert sorted(r.source_id for r in results) == ["gaps.txt", "handbook.txt"]
        assert await vector_store_service.count() == 4

    @pytest.mark.asyncio
    async def test_missing_directory_returns_nothing(self, vector_store_service, chunker, tmp_path):
        service = IngestService(
            vector_store=vector_store_service,
            chunker=chunker,
            docs_path=str(tmp_path / "absent"),
        )
        assert await service.ingest_directory() == []
