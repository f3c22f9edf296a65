import asyncio
import logging
import time
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter

from docchat.core.exceptions import StoreUnavailableError
from docchat.core.models.document import SearchResult, VectorRecord

logger = logging.getLogger(__name__)

# Insertion stamp kept in metadata to order equal distances
_SEQ_KEY = "_inserted_at"


class ChromaVectorStore:
    """Vector store using ChromaDB HTTP API."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "documents",
        metric: str = "cosine",
        pool_size: int = 10,
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 30.0,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            metric: hnsw space (cosine, l2, ip).
            pool_size: Max pooled HTTP connections; callers block when exhausted.
            tenant: Tenant name.
            database: Database name.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._metric = metric
        self._timeout = timeout
        self._collection_id: Optional[str] = None

        self._session = requests.Session()
        self._session.mount(
            "http://",
            HTTPAdapter(pool_connections=1, pool_maxsize=pool_size, pool_block=True),
        )

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Chroma request failed: {method} {url}: {e}")
            raise StoreUnavailableError(details={"backend": "chroma"}) from e
        return resp

    def _ensure_collection(self) -> str:
        """Get or create collection, return ID."""
        if self._collection_id:
            return self._collection_id

        for col in self._request("GET", self._collections_url).json():
            if col["name"] == self._collection_name:
                self._collection_id = col["id"]
                return self._collection_id

        resp = self._request(
            "POST",
            self._collections_url,
            json={
                "name": self._collection_name,
                "metadata": {"hnsw:space": self._metric},
                "get_or_create": True,
            },
        )
        self._collection_id = resp.json()["id"]
        logger.info(f"Created collection: {self._collection_name}")
        return self._collection_id

    def _add(self, record: VectorRecord) -> None:
        col_id = self._ensure_collection()
        self._request(
            "POST",
            f"{self._collections_url}/{col_id}/add",
            json={
                "ids": [record.id],
                "embeddings": [record.vector],
                "documents": [record.content],
                "metadatas": [{**record.metadata, _SEQ_KEY: time.time_ns()}],
            },
        )

    def _query(self, query_embedding: list[float], n_results: int) -> list[SearchResult]:
        col_id = self._ensure_collection()
        data = self._request(
            "POST",
            f"{self._collections_url}/{col_id}/query",
            json={
                "query_embeddings": [query_embedding],
                "n_results": n_results,
                "include": ["documents", "metadatas", "distances"],
            },
        ).json()

        hits: list[tuple[float, int, SearchResult]] = []
        if data.get("ids") and data["ids"][0]:
            for i in range(len(data["ids"][0])):
                metadata: dict[str, Any] = dict(data["metadatas"][0][i] or {})
                seq = metadata.pop(_SEQ_KEY, 0)
                distance = float(data["distances"][0][i])
                hits.append(
                    (
                        distance,
                        seq,
                        SearchResult(
                            id=data["ids"][0][i],
                            content=data["documents"][0][i],
                            metadata=metadata,
                            distance=distance,
                        ),
                    )
                )

        hits.sort(key=lambda h: (h[0], h[1]))
        return [h[2] for h in hits]

    def _delete_by_source(self, source_id: str) -> int:
        col_id = self._ensure_collection()
        ids = self._request(
            "POST",
            f"{self._collections_url}/{col_id}/get",
            json={"where": {"source_id": source_id}, "include": []},
        ).json().get("ids", [])
        if ids:
            self._request("POST", f"{self._collections_url}/{col_id}/delete", json={"ids": ids})
        return len(ids)

    def _count(self) -> int:
        col_id = self._ensure_collection()
        return int(self._request("GET", f"{self._collections_url}/{col_id}/count").json())

    def _sample(self) -> dict[str, Any]:
        col_id = self._ensure_collection()
        return self._request(
            "POST",
            f"{self._collections_url}/{col_id}/get",
            json={"limit": 1, "include": ["embeddings", "metadatas"]},
        ).json()

    def _dimension(self) -> int | None:
        embeddings = self._sample().get("embeddings") or []
        return len(embeddings[0]) if embeddings else None

    def _embedding_model(self) -> str | None:
        metadatas = self._sample().get("metadatas") or []
        return (metadatas[0] or {}).get("embedding_model") if metadatas else None

    async def initialize(self) -> None:
        await asyncio.to_thread(self._ensure_collection)

    async def add(self, record: VectorRecord) -> None:
        await asyncio.to_thread(self._add, record)

    async def query(
        self, query_embedding: list[float], n_results: int = 5
    ) -> list[SearchResult]:
        """Search by embedding."""
        return await asyncio.to_thread(self._query, query_embedding, n_results)

    async def delete_by_source(self, source_id: str) -> int:
        return await asyncio.to_thread(self._delete_by_source, source_id)

    async def count(self) -> int:
        """Get record count."""
        return await asyncio.to_thread(self._count)

    async def dimension(self) -> int | None:
        return await asyncio.to_thread(self._dimension)

    async def embedding_model(self) -> str | None:
        return await asyncio.to_thread(self._embedding_model)

    async def close(self) -> None:
        self._session.close()
        logger.info("Chroma HTTP pool closed")
