import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def is_resolved(self, interface: type) -> bool:
        """Whether a singleton for interface has been created."""
        return interface in self._singletons

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def _build_vector_store(settings: Settings):
    backend = settings.vector_store_backend

    if backend == "pgvector":
        from .infrastructure.vector_stores.pgvector_store import PgVectorStore

        return PgVectorStore(
            host=settings.postgres_host,
            port=settings.postgres_port,
            user=settings.postgres_user,
            password=settings.postgres_password,
            database=settings.postgres_db,
            table_name=settings.postgres_table,
            metric=settings.distance_metric,
            min_size=settings.postgres_pool_min,
            max_size=settings.postgres_pool_max,
        )
    if backend == "chroma":
        from .infrastructure.vector_stores.chroma_store import ChromaVectorStore

        return ChromaVectorStore(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
            metric=settings.distance_metric,
            pool_size=settings.chroma_pool_size,
        )
    if backend == "memory":
        from .infrastructure.vector_stores.memory_store import InMemoryVectorStore

        return InMemoryVectorStore(metric=settings.distance_metric)

    from .core.exceptions import ConfigurationError

    raise ConfigurationError(
        f"Unknown vector store backend: {backend}",
        details={"valid": ["pgvector", "chroma", "memory"]},
    )


def _build_tools(settings: Settings) -> list:
    tools = []
    if settings.tavily_api_key:
        from .infrastructure.tools.tavily_search import TavilySearchTool

        tools.append(
            TavilySearchTool(
                api_key=settings.tavily_api_key, max_results=settings.tavily_max_results
            )
        )
    else:
        logger.warning("TAVILY_API_KEY not set, agent runs without web search")
    return tools


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.agent_service import AgentExecutor
    from .core.services.chat_service import ChatService
    from .core.services.chunker import TextChunker
    from .core.services.ingest_service import IngestService
    from .core.services.prompt_service import PromptService, default_prompt_service
    from .core.services.vector_store_service import VectorStoreService
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )
    from .infrastructure.llm.openai_client import OpenAIClient

    container.register(
        EmbedderProtocol,
        lambda: SentenceTransformerEmbedder(settings.embedding_model),
        singleton=True,
    )

    container.register(
        VectorStoreProtocol,
        lambda: _build_vector_store(settings),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: OpenAIClient(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )

    container.register(PromptService, default_prompt_service, singleton=True)

    container.register(
        VectorStoreService,
        lambda: VectorStoreService(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            retries=settings.embedding_retries,
            query_prefix=settings.embedding_query_prefix,
            passage_prefix=settings.embedding_passage_prefix,
        ),
        singleton=True,
    )

    container.register(
        TextChunker,
        lambda: TextChunker(settings.chunk_size, settings.chunk_overlap),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            vector_store=container.resolve(VectorStoreService),
            chunker=container.resolve(TextChunker),
            docs_path=settings.docs_path,
        ),
        singleton=True,
    )

    container.register(
        ChatService,
        lambda: ChatService(
            llm=container.resolve(LLMProtocol),
            vector_store=container.resolve(VectorStoreService),
            prompts=container.resolve(PromptService),
            document_top_k=settings.document_chat_top_k,
        ),
        singleton=True,
    )

    container.register(
        AgentExecutor,
        lambda: AgentExecutor(
            llm=container.resolve(LLMProtocol),
            tools=_build_tools(settings),
            max_iterations=settings.agent_max_iterations,
            system_prompt=settings.agent_system_prompt,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container


async def init_resources() -> None:
    """Create the vector store schema and connection pool (idempotent)."""
    from .core.services.vector_store_service import VectorStoreService

    await container.resolve(VectorStoreService).initialize()


async def close_resources() -> None:
    """Release pooled connections held by the vector store."""
    from .core.services.vector_store_service import VectorStoreService

    if container.is_resolved(VectorStoreService):
        await container.resolve(VectorStoreService).close()
