"""Builders that turn recovered text, tables, and slide plans into files."""

from __future__ import annotations

import re
import textwrap
from html import escape
from typing import List, Sequence

from .capabilities import Capabilities
from .images import JPEG_QUALITY
from .models import Slide, StructuredTable

# A4 geometry in millimetres; text starts 10mm down and advances 7mm a line.
PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297
MARGIN_MM = 10
LINE_HEIGHT_MM = 7
FONT_SIZE_PT = 10
# Courier 10pt is 6pt per glyph, so 180mm of usable width holds 85 columns.
WRAP_COLUMNS = 85
IMAGE_WRAP_COLUMNS = 110

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")


def sanitize_text(text: str) -> str:
    """Keep printable ASCII plus newline, carriage return, and tab."""

    return _NON_PRINTABLE_RE.sub("", text)


def wrap_lines(text: str, width: int = WRAP_COLUMNS) -> List[str]:
    lines: List[str] = []
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    for paragraph in normalized.split("\n"):
        expanded = paragraph.expandtabs(4)
        if not expanded.strip():
            lines.append("")
            continue
        lines.extend(
            textwrap.wrap(
                expanded,
                width=width,
                replace_whitespace=False,
                break_long_words=True,
            )
        )
    return lines


def layout_pdf_pages(text: str) -> List[List[str]]:
    """Sanitize, wrap, and paginate ``text`` into lists of page lines."""

    pages: List[List[str]] = [[]]
    cursor = MARGIN_MM
    for line in wrap_lines(sanitize_text(text)):
        if cursor > PAGE_HEIGHT_MM - MARGIN_MM:
            pages.append([])
            cursor = MARGIN_MM
        pages[-1].append(line)
        cursor += LINE_HEIGHT_MM
    return pages


def render_pages_html(pages: Sequence[Sequence[str]]) -> str:
    """Render paginated lines as HTML with one forced break per page."""

    css = (
        f"@page {{ size: A4; margin: 0; }}\n"
        "body { margin: 0; }\n"
        f".page {{ padding: {MARGIN_MM}mm {MARGIN_MM}mm 0 {MARGIN_MM}mm; }}\n"
        ".page + .page { break-before: page; }\n"
        f".line {{ height: {LINE_HEIGHT_MM}mm; line-height: {LINE_HEIGHT_MM}mm; "
        f"font-family: Courier, monospace; font-size: {FONT_SIZE_PT}pt; "
        "white-space: pre; }\n"
    )
    sections = []
    for page in pages:
        body = "\n".join(
            f'<div class="line">{escape(line)}</div>' for line in page
        )
        sections.append(f'<section class="page">\n{body}\n</section>')
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<style>\n{css}</style></head>\n<body>\n"
        + "\n".join(sections)
        + "\n</body></html>\n"
    )


def text_to_pdf(text: str, *, capabilities: Capabilities) -> bytes:
    return capabilities.pdf.write_html(render_pages_html(layout_pdf_pages(text)))


def text_to_docx(text: str, *, capabilities: Capabilities) -> bytes:
    """One paragraph per line; blank lines stay as empty paragraphs."""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return capabilities.documents.write_paragraphs(normalized.split("\n"))


def table_to_xlsx(rows: StructuredTable, *, capabilities: Capabilities) -> bytes:
    return capabilities.spreadsheets.write_rows(rows)


def slides_to_pptx(
    slides: Sequence[Slide], *, capabilities: Capabilities
) -> bytes:
    return capabilities.slides.write_slides(slides)


def text_to_image(
    text: str, media_type: str, *, capabilities: Capabilities
) -> bytes:
    codec = capabilities.images
    lines = wrap_lines(sanitize_text(text), IMAGE_WRAP_COLUMNS)
    canvas = codec.render_text(lines)
    return codec.encode(canvas, media_type, quality=JPEG_QUALITY)


__all__ = [
    "LINE_HEIGHT_MM",
    "MARGIN_MM",
    "PAGE_HEIGHT_MM",
    "WRAP_COLUMNS",
    "layout_pdf_pages",
    "render_pages_html",
    "sanitize_text",
    "slides_to_pptx",
    "table_to_xlsx",
    "text_to_docx",
    "text_to_image",
    "text_to_pdf",
    "wrap_lines",
]
