"""Core business services."""
from .agent_service import AgentExecutor
from .chat_service import ChatService
from .chunker import TextChunker
from .ingest_service import IngestService
from .prompt_service import PromptService
from .vector_store_service import VectorStoreService

__all__ = [
    "AgentExecutor",
    "ChatService",
    "TextChunker",
    "IngestService",
    "PromptService",
    "VectorStoreService",
]
