from __future__ import annotations

import io
from types import SimpleNamespace

import pytest

from docshift.convert.adapters.pdf import WeasyPrintPdfWriter
from docshift.convert.adapters.slides import PptxSlideCodec
from docshift.convert.adapters.spreadsheet import OpenpyxlSpreadsheetCodec
from docshift.convert.adapters.wordprocessing import DocxWordProcessingCodec
from docshift.convert.capabilities import (
    default_capabilities,
    import_capability,
)
from docshift.convert.errors import DependencyError, EncodeError, ParseError
from docshift.convert.models import Slide

from fixtures import RecordingPdfWriter, xlsx_bytes


class _FailingDocument:
    def __init__(self, *, string, base_url):
        self.string = string

    def write_pdf(self):
        raise OSError("cairo unavailable")


class _EmptyDocument(_FailingDocument):
    def write_pdf(self):
        return b""


def _writer_with(document_cls) -> WeasyPrintPdfWriter:
    writer = WeasyPrintPdfWriter()
    writer.__dict__["_weasyprint"] = SimpleNamespace(HTML=document_cls)
    return writer


def test_pdf_writer_maps_renderer_failures():
    with pytest.raises(EncodeError, match="cairo unavailable"):
        _writer_with(_FailingDocument).write_html("<p>x</p>")


def test_pdf_writer_rejects_empty_output():
    with pytest.raises(EncodeError, match="no output"):
        _writer_with(_EmptyDocument).write_html("<p>x</p>")


def test_missing_library_names_the_distribution():
    with pytest.raises(DependencyError, match="pip install docshift_absent_lib"):
        import_capability("docshift_absent_lib")


def test_missing_attribute_is_a_dependency_error():
    with pytest.raises(DependencyError, match="'no_such_thing' attribute"):
        import_capability("json", "no_such_thing")


def test_default_capabilities_are_shared_and_overridable():
    first = default_capabilities()
    writer = RecordingPdfWriter()

    custom = first.with_overrides(pdf=writer)

    assert default_capabilities() is first
    assert custom.pdf is writer
    assert custom.images is first.images


def test_docx_writer_strips_xml_illegal_characters():
    from docx import Document

    data = DocxWordProcessingCodec().write_paragraphs(["ok\x00\x0bfine", ""])

    paragraphs = [p.text for p in Document(io.BytesIO(data)).paragraphs]
    assert paragraphs == ["okfine", ""]


def test_slide_extraction_skips_empty_frames():
    codec = PptxSlideCodec()
    deck = codec.write_slides(
        [Slide(title="Only title", text=""), Slide(title="Two", text="Body")]
    )

    assert codec.extract_text(deck) == "Only title\n\nTwo\nBody"


def test_spreadsheet_rows_are_padded_to_uniform_width():
    codec = OpenpyxlSpreadsheetCodec()

    rows = codec.read_rows(xlsx_bytes([["a"], ["b", "c", "d"]]))

    assert rows == [["a", None, None], ["b", "c", "d"]]


def test_spreadsheet_writer_coerces_cells():
    codec = OpenpyxlSpreadsheetCodec()

    data = codec.write_rows([["bell\x07", ["nested"]]])

    assert codec.read_rows(data) == [["bell", "['nested']"]]


def test_spreadsheet_rejects_non_workbook_bytes():
    with pytest.raises(ParseError, match="Could not read spreadsheet"):
        OpenpyxlSpreadsheetCodec().read_rows(b"plain text")
