from pathlib import Path

from pypdf import PdfReader


class PDFLoader:

    EXTENSIONS = frozenset({".pdf"})

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load_pages(self, file_path: Path) -> list[str]:
        # Empty pages stay in place so page indices match the document
        reader = PdfReader(file_path)
        return [(page.extract_text() or "").strip() for page in reader.pages]
