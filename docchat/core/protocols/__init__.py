"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .vector_store import VectorStoreProtocol
from .llm import LLMProtocol
from .document_loader import DocumentLoaderProtocol
from .tool import ToolProtocol

__all__ = [
    "EmbedderProtocol",
    "VectorStoreProtocol",
    "LLMProtocol",
    "DocumentLoaderProtocol",
    "ToolProtocol",
]
