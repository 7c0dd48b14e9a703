"""Plain-text extraction used ahead of AI conversion."""

from __future__ import annotations

from .capabilities import Capabilities
from .errors import ExtractionError, ParseError
from .formats import FormatSpecifier, format_for_filename
from .tabular import table_to_csv


def extract_text(
    data: bytes,
    source: FormatSpecifier,
    *,
    filename: str = "",
    capabilities: Capabilities,
) -> str:
    """Return the text content of ``data`` for inclusion in an AI prompt.

    Word documents go through mammoth, spreadsheets contribute their first
    sheet as CSV, presentations their text frames; anything else is decoded
    as UTF-8 with replacement characters.
    """

    container = _container_for(source, filename)
    if container is FormatSpecifier.DOCX:
        return capabilities.documents.extract_text(data)
    if container is FormatSpecifier.XLSX:
        try:
            rows = capabilities.spreadsheets.read_rows(data)
        except ParseError as exc:
            raise ExtractionError("Could not extract text from file.") from exc
        return table_to_csv(rows)
    if container is FormatSpecifier.PPTX:
        return capabilities.slides.extract_text(data)
    return data.decode("utf-8", errors="replace")


def _container_for(source: FormatSpecifier, filename: str) -> FormatSpecifier:
    # Office containers are recognized by media type or by file extension.
    by_name = format_for_filename(filename) if filename else None
    for candidate in (source, by_name):
        if candidate in (
            FormatSpecifier.DOCX,
            FormatSpecifier.XLSX,
            FormatSpecifier.PPTX,
        ):
            return candidate
    return source


__all__ = ["extract_text"]
