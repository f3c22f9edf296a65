"""Domain models."""
from .document import (
    AddDocumentsReport,
    Chunk,
    ChunkMetadata,
    IngestResult,
    SearchResult,
    VectorRecord,
)
from .chat import ChatMessage, ChatHistory, Role
from .template import PromptTemplate
from .agent import AgentResult, AgentStep, CompletionResult, ToolCall

__all__ = [
    "AddDocumentsReport",
    "Chunk",
    "ChunkMetadata",
    "IngestResult",
    "SearchResult",
    "VectorRecord",
    "ChatMessage",
    "ChatHistory",
    "Role",
    "PromptTemplate",
    "AgentResult",
    "AgentStep",
    "CompletionResult",
    "ToolCall",
]
