from pathlib import Path

from docx import Document
from docx.text.paragraph import Paragraph


def _has_page_break(paragraph: Paragraph) -> bool:
    return bool(paragraph._p.xpath('.//w:br[@w:type="page"]'))


class DocxLoader:
    """Word documents; explicit page breaks start a new page."""

    EXTENSIONS = frozenset({".docx"})

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load_pages(self, file_path: Path) -> list[str]:
        pages: list[list[str]] = [[]]
        for paragraph in Document(file_path).paragraphs:
            text = paragraph.text.strip()
            if text:
                pages[-1].append(text)
            if _has_page_break(paragraph):
                pages.append([])
        return ["\n\n".join(paragraphs) for paragraphs in pages]
