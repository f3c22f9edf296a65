"""Postgres + pgvector store on an asyncpg connection pool."""
import asyncio
import json
import logging
import re
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from docchat.core.exceptions import ConfigurationError, StoreUnavailableError
from docchat.core.models.document import SearchResult, VectorRecord

logger = logging.getLogger(__name__)

_OPERATORS = {
    "cosine": "<=>",
    "l2": "<->",
    "ip": "<#>",
}

_STORE_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
)


def _vector_literal(vector: list[float]) -> str:
    return "[" + ",".join(repr(float(v)) for v in vector) + "]"


class PgVectorStore:
    """Async pgvector client.

    The pool is created lazily on first use; `initialize()` also creates the
    uuid-ossp and vector extensions and the table when absent.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 5432,
        user: str = "postgres",
        password: str = "",
        database: str = "postgres",
        table_name: str = "docchat_chunks",
        metric: str = "cosine",
        min_size: int = 2,
        max_size: int = 10,
    ):
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", table_name):
            raise ConfigurationError(f"Invalid table name: {table_name}")
        if metric not in _OPERATORS:
            raise ConfigurationError(
                f"Unknown distance metric: {metric}", details={"valid": sorted(_OPERATORS)}
            )
        self._connect_kwargs = dict(
            host=host, port=port, user=user, password=password, database=database
        )
        self._table = table_name
        self._operator = _OPERATORS[metric]
        self._min_size = min_size
        self._max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None
        self._init_lock: Optional[asyncio.Lock] = None

    async def initialize(self) -> None:
        """Create pool and schema (idempotent)."""
        if self._pool is not None:
            return

        if self._init_lock is None:
            self._init_lock = asyncio.Lock()

        async with self._init_lock:
            if self._pool is not None:
                return

            try:
                pool = await asyncpg.create_pool(
                    **self._connect_kwargs,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=60,
                )
            except _STORE_ERRORS as e:
                logger.error(f"Failed to create Postgres pool: {e}")
                raise StoreUnavailableError(details={"backend": "pgvector"}) from e

            try:
                async with pool.acquire() as conn:
                    await self._ensure_schema(conn)
            except _STORE_ERRORS as e:
                await pool.close()
                logger.error(f"Failed to create pgvector schema: {e}")
                raise StoreUnavailableError(details={"backend": "pgvector"}) from e

            self._pool = pool
            logger.info(
                f"Postgres pool ready ({self._connect_kwargs['host']}:"
                f"{self._connect_kwargs['port']}/{self._connect_kwargs['database']}, "
                f"table={self._table})"
            )

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')
        await conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self._table} (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                vector VECTOR,
                content TEXT,
                metadata JSONB,
                seq BIGSERIAL
            )
            """
        )

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Scoped pool checkout; the connection goes back on every exit path."""
        await self.initialize()
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _STORE_ERRORS as e:
            logger.error(f"pgvector operation failed: {e}")
            raise StoreUnavailableError(details={"backend": "pgvector"}) from e

    async def add(self, record: VectorRecord) -> None:
        async with self._connection() as conn:
            await conn.execute(
                f"INSERT INTO {self._table} (id, vector, content, metadata) "
                f"VALUES ($1, $2::text::vector, $3, $4::jsonb)",
                uuid.UUID(record.id),
                _vector_literal(record.vector),
                record.content,
                json.dumps(record.metadata),
            )

    async def query(
        self, query_embedding: list[float], n_results: int = 5
    ) -> list[SearchResult]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"SELECT id, content, metadata, vector {self._operator} $1::text::vector AS distance "
                f"FROM {self._table} ORDER BY distance ASC, seq ASC LIMIT $2",
                _vector_literal(query_embedding),
                n_results,
            )

        return [
            SearchResult(
                id=str(row["id"]),
                content=row["content"],
                metadata=json.loads(row["metadata"]) if row["metadata"] else {},
                distance=float(row["distance"]),
            )
            for row in rows
        ]

    async def delete_by_source(self, source_id: str) -> int:
        async with self._connection() as conn:
            status = await conn.execute(
                f"DELETE FROM {self._table} WHERE metadata->>'source_id' = $1", source_id
            )
        # asyncpg returns the command tag, e.g. "DELETE 3"
        return int(status.split()[-1])

    async def count(self) -> int:
        async with self._connection() as conn:
            return await conn.fetchval(f"SELECT count(*) FROM {self._table}")

    async def dimension(self) -> int | None:
        async with self._connection() as conn:
            return await conn.fetchval(f"SELECT vector_dims(vector) FROM {self._table} LIMIT 1")

    async def embedding_model(self) -> str | None:
        async with self._connection() as conn:
            return await conn.fetchval(
                f"SELECT metadata->>'embedding_model' FROM {self._table} ORDER BY seq LIMIT 1"
            )

    async def close(self) -> None:
        """Close connection pool."""
        if self._pool is None:
            return
        try:
            await self._pool.close()
            logger.info("Postgres connection pool closed")
        finally:
            self._pool = None
            self._init_lock = None
