"""Page-level text extraction for indexed documents."""
from .composite_loader import CompositeLoader
from .docx_loader import DocxLoader
from .pdf_loader import PDFLoader
from .text_loader import PAGE_BREAK, TextLoader

__all__ = ["CompositeLoader", "DocxLoader", "PDFLoader", "TextLoader", "PAGE_BREAK"]
