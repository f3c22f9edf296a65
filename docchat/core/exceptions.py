"""Exception taxonomy for docchat.

Three kinds reach the boundary: ClientError (the caller can fix the request),
DependencyError (an external service failed; details are logged, never echoed)
and ConvergenceError (the agent ran out of iterations). ConfigurationError marks
programming errors that should never happen with a correct setup.
"""
from typing import Any, Dict, Optional


class DocChatError(Exception):
    """Base exception for all docchat errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for a transport response."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "status_code": self.status_code,
                "details": self.details,
            }
        }


# Client errors


class ClientError(DocChatError):
    """Bad or missing input."""

    def __init__(
        self,
        message: str = "Invalid request",
        status_code: int = 400,
        code: str = "CLIENT_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=status_code, code=code, details=details)


class DocumentNotFoundError(ClientError):
    def __init__(self, location: str):
        super().__init__(
            message="File does not exist.",
            status_code=404,
            code="DOCUMENT_NOT_FOUND",
            details={"location": location},
        )


class UnsupportedDocumentError(ClientError):
    def __init__(self, location: str, supported: list[str]):
        super().__init__(
            message="Unsupported document type.",
            code="UNSUPPORTED_DOCUMENT",
            details={"location": location, "supported": supported},
        )


class DocumentUnreadableError(ClientError):
    def __init__(self, location: str):
        super().__init__(
            message="Document could not be read.",
            code="DOCUMENT_UNREADABLE",
            details={"location": location},
        )


class InvalidConversationError(ClientError):
    def __init__(self, message: str = "Conversation must end with a user message."):
        super().__init__(message=message, code="INVALID_CONVERSATION")


# Dependency errors


class DependencyError(DocChatError):
    """An upstream service (embedding, completion, tool, storage) failed.

    The message passed in is kept on the instance for logs; `to_dict()` only
    exposes the generic public message.
    """

    public_message = "Upstream service failure"

    def __init__(
        self,
        message: str = "Upstream service failure",
        code: str = "DEPENDENCY_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=502, code=code, details=details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "message": self.public_message,
                "code": "DEPENDENCY_ERROR",
                "status_code": self.status_code,
                "details": {},
            }
        }


class EmbeddingServiceError(DependencyError):
    def __init__(self, message: str = "Embedding service failed", details=None):
        super().__init__(message, code="EMBEDDING_ERROR", details=details)


class CompletionServiceError(DependencyError):
    def __init__(self, message: str = "Completion service failed", model=None):
        super().__init__(
            message, code="COMPLETION_ERROR", details={"model": model} if model else None
        )


class ToolExecutionError(DependencyError):
    def __init__(self, tool_name: str, message: str = "Tool execution failed"):
        super().__init__(message, code="TOOL_ERROR", details={"tool_name": tool_name})


class StoreUnavailableError(DependencyError):
    def __init__(self, message: str = "Vector store unavailable", details=None):
        super().__init__(message, code="STORE_UNAVAILABLE", details=details)


class PartialIngestionError(DependencyError):
    """Some chunks of a document could not be stored."""

    def __init__(self, source_id: str, report):
        self.report = report
        super().__init__(
            f"Stored {len(report.stored_ids)} of {report.total} chunks for {source_id}",
            code="PARTIAL_INGESTION",
            details={
                "source_id": source_id,
                "stored": len(report.stored_ids),
                "failed": [index for index, _ in report.failed],
            },
        )


# Agent


class ConvergenceError(DocChatError):
    """Agent did not produce a final answer within its iteration budget."""

    def __init__(self, iterations: int):
        self.iterations = iterations
        super().__init__(
            message=f"Agent did not converge after {iterations} iterations",
            status_code=504,
            code="AGENT_DID_NOT_CONVERGE",
            details={"iterations": iterations},
        )


# Programming errors


class ConfigurationError(DocChatError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, code="CONFIGURATION_ERROR", details=details)


class ChunkingConfigError(ConfigurationError):
    pass


class TemplateError(ConfigurationError):
    pass


class EmbeddingMismatchError(ConfigurationError):
    """Vectors from a different embedding model than the stored ones."""

    def __init__(self, expected: Any, actual: Any, field: str = "dimension"):
        super().__init__(
            f"Embedding {field} does not match the vector store; re-index required",
            details={"field": field, "expected": expected, "actual": actual},
        )
