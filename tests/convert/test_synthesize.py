from __future__ import annotations

import io
import re

from PIL import Image

from docshift.convert import synthesize
from docshift.convert.models import Slide

from fixtures import FAKE_PDF


def test_sanitize_drops_non_printable_characters():
    assert synthesize.sanitize_text("aéb\x00c\td\r\ne☃") == "abc\td\r\ne"


def test_wrap_lines_keeps_blank_lines_and_width():
    lines = synthesize.wrap_lines("short\n\n" + "word " * 40, width=30)

    assert lines[0] == "short"
    assert lines[1] == ""
    assert all(len(line) <= 30 for line in lines)


def test_five_hundred_words_paginate_across_pages():
    text = " ".join(f"word{n}" for n in range(500))

    pages = synthesize.layout_pdf_pages(text)

    assert len(pages) >= 2
    lines = [line for page in pages for line in page]
    assert " ".join(lines).split() == text.split()
    assert all(len(line) <= synthesize.WRAP_COLUMNS for line in lines)


def test_pagination_breaks_past_printable_height():
    text = "\n".join(f"line {n}" for n in range(100))

    pages = synthesize.layout_pdf_pages(text)

    assert [len(page) for page in pages] == [40, 40, 20]


def test_layout_strips_non_printable_characters():
    pages = synthesize.layout_pdf_pages("café \x07bell\n中文 done")

    for page in pages:
        for line in page:
            assert re.fullmatch(r"[\x20-\x7E\t]*", line)


def test_text_to_pdf_renders_one_section_per_page(capabilities, pdf_writer):
    text = "\n".join(f"row {n} <b>&" for n in range(45))

    data = synthesize.text_to_pdf(text, capabilities=capabilities)

    assert data == FAKE_PDF
    html = pdf_writer.last
    assert html.count('<section class="page">') == 2
    assert "row 0 &lt;b&gt;&amp;" in html
    assert "size: A4" in html


def test_text_to_docx_keeps_blank_paragraphs(capabilities):
    from docx import Document

    data = synthesize.text_to_docx("one\n\nthree", capabilities=capabilities)

    paragraphs = [p.text for p in Document(io.BytesIO(data)).paragraphs]
    assert paragraphs == ["one", "", "three"]


def test_table_to_xlsx_single_sheet(capabilities):
    from openpyxl import load_workbook

    data = synthesize.table_to_xlsx(
        [["h1", "h2"], ["a", 1]], capabilities=capabilities
    )

    workbook = load_workbook(io.BytesIO(data))
    assert workbook.sheetnames == ["Sheet1"]
    assert [list(r) for r in workbook.active.iter_rows(values_only=True)] == [
        ["h1", "h2"],
        ["a", 1],
    ]


def test_slides_to_pptx_titles_and_placeholder(capabilities):
    from pptx import Presentation

    deck = synthesize.slides_to_pptx(
        [Slide(title="", text="body only")], capabilities=capabilities
    )
    presentation = Presentation(io.BytesIO(deck))
    texts = [shape.text_frame.text for shape in presentation.slides[0].shapes]
    assert texts == ["Untitled Slide", "body only"]

    empty = Presentation(
        io.BytesIO(synthesize.slides_to_pptx([], capabilities=capabilities))
    )
    assert len(empty.slides) == 1
    assert empty.slides[0].shapes[0].text_frame.text == "Conversion Result"


def test_text_to_image_encodes_target(capabilities):
    data = synthesize.text_to_image(
        "hello\nworld", "image/png", capabilities=capabilities
    )

    image = Image.open(io.BytesIO(data))
    assert image.format == "PNG"
    assert image.size == (1240, 1754)


def test_text_to_docx_normalizes_crlf(capabilities):
    from docx import Document

    data = synthesize.text_to_docx("one\r\ntwo\r\n\r\nfour", capabilities=capabilities)

    paragraphs = [p.text for p in Document(io.BytesIO(data)).paragraphs]
    assert paragraphs == ["one", "two", "", "four"]
