from pathlib import Path

PAGE_BREAK = "\f"


class TextLoader:
    """Plain text and Markdown; form feeds separate pages."""

    EXTENSIONS = frozenset({".txt", ".md", ".markdown"})

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load_pages(self, file_path: Path) -> list[str]:
        # utf-8-sig drops a leading BOM left by some editors
        text = file_path.read_text(encoding="utf-8-sig")
        return text.replace("\r\n", "\n").split(PAGE_BREAK)
