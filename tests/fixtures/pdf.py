"""PDF writer double that keeps the HTML it was asked to render."""

from __future__ import annotations

from typing import List

FAKE_PDF = b"%PDF-1.7\n% docshift test document\n%%EOF\n"


class RecordingPdfWriter:
    def __init__(self) -> None:
        self.documents: List[str] = []

    def write_html(self, html: str) -> bytes:
        self.documents.append(html)
        return FAKE_PDF

    @property
    def last(self) -> str:
        return self.documents[-1]
