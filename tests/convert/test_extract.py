from __future__ import annotations

import pytest

from docshift.convert.errors import ExtractionError
from docshift.convert.extract import extract_text
from docshift.convert.formats import FormatSpecifier as F
from docshift.convert.models import Slide

from fixtures import docx_bytes, xlsx_bytes


def test_docx_paragraph_text(capabilities):
    data = docx_bytes(["First paragraph", "Second paragraph"])

    text = extract_text(data, F.DOCX, filename="memo.docx", capabilities=capabilities)

    assert "First paragraph" in text
    assert "Second paragraph" in text


def test_xlsx_first_sheet_as_csv(capabilities):
    data = xlsx_bytes([["city", "pop"], ["Oslo", 709000]])

    text = extract_text(data, F.XLSX, capabilities=capabilities)

    assert text == "city,pop\r\nOslo,709000\r\n"


def test_pptx_text_frames(capabilities):
    deck = capabilities.slides.write_slides(
        [Slide(title="Agenda", text="Budget review"), Slide(title="Next", text="")]
    )

    text = extract_text(deck, F.PPTX, capabilities=capabilities)

    assert text.split("\n\n")[0] == "Agenda\nBudget review"
    assert "Next" in text


def test_container_detected_by_filename(capabilities):
    data = docx_bytes(["named by extension"])

    text = extract_text(
        data, F.TXT, filename="upload.docx", capabilities=capabilities
    )

    assert "named by extension" in text


def test_plain_text_uses_replacement_characters(capabilities):
    text = extract_text(b"caf\xe9 ok", F.TXT, capabilities=capabilities)

    assert text == "caf\ufffd ok"


@pytest.mark.parametrize("source", [F.DOCX, F.XLSX, F.PPTX])
def test_corrupt_containers_raise_extraction_error(capabilities, source):
    with pytest.raises(ExtractionError, match="Could not extract text"):
        extract_text(b"not a zip", source, capabilities=capabilities)
