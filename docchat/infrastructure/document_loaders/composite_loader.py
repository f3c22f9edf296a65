import logging
from pathlib import Path

from .pdf_loader import PDFLoader
from .docx_loader import DocxLoader
from .text_loader import TextLoader

logger = logging.getLogger(__name__)


class CompositeLoader:
    """Dispatches on file extension to the PDF, DOCX and text loaders."""

    def __init__(self):
        self._by_extension = {
            ext: loader
            for loader in (PDFLoader(), DocxLoader(), TextLoader())
            for ext in loader.EXTENSIONS
        }

    @property
    def extensions(self) -> list[str]:
        return sorted(self._by_extension)

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self._by_extension

    def load_pages(self, file_path: Path) -> list[str]:
        """Extract page texts with the loader registered for the extension.

        Raises:
            ValueError: No loader supports the file type.
        """
        loader = self._by_extension.get(file_path.suffix.lower())
        if loader is None:
            raise ValueError(f"Unsupported document type: {file_path.suffix}")

        pages = loader.load_pages(file_path)
        logger.debug(f"Loaded {len(pages)} pages from {file_path.name}")
        return pages
