from unittest.mock import AsyncMock, patch

import pytest

from docchat.config.settings import Settings
from docchat.container import (
    _build_vector_store,
    close_resources,
    configure_container,
    container,
    init_resources,
)
from docchat.core.exceptions import ConfigurationError
from docchat.core.services.agent_service import AgentExecutor
from docchat.core.services.chat_service import ChatService
from docchat.core.services.ingest_service import IngestService
from docchat.core.services.vector_store_service import VectorStoreService
from docchat.infrastructure.vector_stores.memory_store import InMemoryVectorStore
from docchat.infrastructure.vector_stores.pgvector_store import PgVectorStore


@pytest.fixture
def memory_settings():
    settings = Settings(vector_store_backend="memory", llm_api_key="test-key", tavily_api_key=None)
    yield settings
    container.reset()


def test_services_resolve_as_singletons(memory_settings):
    configure_container(memory_settings)

    assert container.resolve(ChatService) is container.resolve(ChatService)
    assert container.resolve(IngestService) is not None
    agent = container.resolve(AgentExecutor)
    assert agent.max_iterations == 5
    assert agent.tool_definitions() == []


@pytest.mark.asyncio
async def test_resources_lifecycle(memory_settings):
    configure_container(memory_settings)

    await close_resources()
    await init_resources()
    assert await container.resolve(VectorStoreService).count() == 0
    await close_resources()


@pytest.mark.asyncio
async def test_close_resources_closes_the_resolved_store(memory_settings):
    configure_container(memory_settings)
    store = container.resolve(VectorStoreService)

    with patch.object(store, "close", new=AsyncMock()) as close:
        await close_resources()

    close.assert_awaited_once()


@pytest.mark.asyncio
async def test_close_resources_skips_unresolved_store(memory_settings):
    configure_container(memory_settings)

    with patch.object(VectorStoreService, "close", new=AsyncMock()) as close:
        await close_resources()

    close.assert_not_awaited()


def test_vector_store_backends():
    assert isinstance(_build_vector_store(Settings(vector_store_backend="memory")), InMemoryVectorStore)
    assert isinstance(_build_vector_store(Settings(vector_store_backend="pgvector")), PgVectorStore)

    with pytest.raises(ConfigurationError):
        _build_vector_store(Settings(vector_store_backend="sqlite"))
