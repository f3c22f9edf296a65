"""Shared fixtures for docchat tests."""

import pytest

from docchat.core.services.chunker import TextChunker
from docchat.core.services.prompt_service import default_prompt_service
from docchat.core.services.vector_store_service import VectorStoreService
from docchat.infrastructure.vector_stores.memory_store import InMemoryVectorStore

from .fakes import HashEmbedder


@pytest.fixture
def embedder():
    return HashEmbedder()


@pytest.fixture
def memory_store():
    return InMemoryVectorStore()


@pytest.fixture
def vector_store_service(embedder, memory_store):
    return VectorStoreService(embedder=embedder, vector_store=memory_store)


@pytest.fixture
def chunker():
    return TextChunker(chunk_size=200, chunk_overlap=20)


@pytest.fixture
def prompts():
    return default_prompt_service()
