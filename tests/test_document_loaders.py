from pathlib import Path

import pytest
from docx import Document

from docchat.infrastructure.document_loaders import CompositeLoader, DocxLoader, TextLoader


def test_text_pages_split_on_form_feed(tmp_path):
    path = tmp_path / "notes.md"
    path.write_bytes("\ufeffpage one\r\nstill one\fpage two".encode("utf-8"))

    assert TextLoader().load_pages(path) == ["page one\nstill one", "page two"]


def test_docx_page_breaks_start_new_pages(tmp_path):
    path = tmp_path / "report.docx"
    doc = Document()
    doc.add_paragraph("Introduction")
    doc.add_paragraph("Scope")
    doc.add_page_break()
    doc.add_paragraph("Results")
    doc.save(path)

    assert DocxLoader().load_pages(path) == ["Introduction\n\nScope", "Results"]


def test_composite_dispatches_by_extension(tmp_path):
    loader = CompositeLoader()
    path = tmp_path / "README.TXT"
    path.write_text("hello", encoding="utf-8")

    assert loader.supports(path)
    assert loader.load_pages(path) == ["hello"]
    assert loader.extensions == [".docx", ".markdown", ".md", ".pdf", ".txt"]


def test_composite_rejects_unknown_extension():
    loader = CompositeLoader()
    assert not loader.supports(Path("slides.pptx"))
    with pytest.raises(ValueError):
        loader.load_pages(Path("slides.pptx"))
