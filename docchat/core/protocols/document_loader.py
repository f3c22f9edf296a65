"""Document loader protocol for dependency injection."""
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class DocumentLoaderProtocol(Protocol):
    """Protocol for page-level text extraction."""

    def supports(self, file_path: Path) -> bool:
        ...

    def load_pages(self, file_path: Path) -> list[str]:
        """Extract text, one entry per page."""
        ...
