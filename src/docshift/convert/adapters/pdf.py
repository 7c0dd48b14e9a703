"""WeasyPrint-backed PDF writer."""

from __future__ import annotations

from functools import cached_property
from types import ModuleType

from ..capabilities import import_capability
from ..errors import EncodeError


class WeasyPrintPdfWriter:
    """Render a self-contained HTML document to PDF bytes."""

    @cached_property
    def _weasyprint(self) -> ModuleType:
        return import_capability("weasyprint", "HTML")

    def write_html(self, html: str) -> bytes:
        document = self._weasyprint.HTML(string=html, base_url=".")
        try:
            pdf = document.write_pdf()
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Failed to write PDF: {exc}") from exc
        if not pdf:
            raise EncodeError("PDF writer produced no output.")
        return pdf


__all__ = ["WeasyPrintPdfWriter"]
