"""Capability seams for the codec libraries used by conversions.

Each format family is served by one adapter object that normalizes a third
party library into the narrow interface the pipeline expects. Adapters import
their library lazily on first use, and :func:`default_capabilities` builds the
set once per process. Tests and embedders swap any member by constructing
their own :class:`Capabilities`.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, replace
from functools import lru_cache
from types import ModuleType
from typing import Any, Optional, Protocol, Sequence

from .errors import DependencyError
from .models import Slide, StructuredTable

# module -> distribution name, used for install hints and diagnostics.
CAPABILITY_PACKAGES: dict[str, str] = {
    "PIL": "pillow",
    "openpyxl": "openpyxl",
    "mammoth": "mammoth",
    "docx": "python-docx",
    "pptx": "python-pptx",
    "weasyprint": "weasyprint",
    "openai": "openai",
}


class ImageCodec(Protocol):
    def decode(self, data: bytes) -> Any: ...

    def compose(self, image: Any, *, background: Optional[str]) -> Any: ...

    def encode(self, image: Any, media_type: str, *, quality: int) -> bytes: ...

    def render_text(self, lines: Sequence[str]) -> Any: ...


class SpreadsheetCodec(Protocol):
    def read_rows(self, data: bytes) -> StructuredTable: ...

    def write_rows(self, rows: StructuredTable) -> bytes: ...

    def reencode(self, data: bytes) -> bytes: ...


class WordProcessingCodec(Protocol):
    def extract_text(self, data: bytes) -> str: ...

    def write_paragraphs(self, lines: Sequence[str]) -> bytes: ...


class SlideCodec(Protocol):
    def extract_text(self, data: bytes) -> str: ...

    def write_slides(self, slides: Sequence[Slide]) -> bytes: ...


class PdfWriter(Protocol):
    def write_html(self, html: str) -> bytes: ...


@dataclass(frozen=True)
class Capabilities:
    """Adapters consulted by the transcoders, extractor, and synthesizers."""

    images: ImageCodec
    spreadsheets: SpreadsheetCodec
    documents: WordProcessingCodec
    slides: SlideCodec
    pdf: PdfWriter

    def with_overrides(self, **changes: Any) -> "Capabilities":
        return replace(self, **changes)


@lru_cache(maxsize=1)
def default_capabilities() -> Capabilities:
    """Return the process-wide adapter set backed by the real libraries."""

    from .adapters.imaging import PillowImageCodec
    from .adapters.pdf import WeasyPrintPdfWriter
    from .adapters.slides import PptxSlideCodec
    from .adapters.spreadsheet import OpenpyxlSpreadsheetCodec
    from .adapters.wordprocessing import DocxWordProcessingCodec

    return Capabilities(
        images=PillowImageCodec(),
        spreadsheets=OpenpyxlSpreadsheetCodec(),
        documents=DocxWordProcessingCodec(),
        slides=PptxSlideCodec(),
        pdf=WeasyPrintPdfWriter(),
    )


def import_capability(
    module: str, required_attribute: str | None = None
) -> ModuleType:
    """Import ``module`` or raise :class:`DependencyError` with a hint."""

    try:
        imported = importlib.import_module(module)
    except ImportError as exc:
        raise DependencyError(
            _missing_dependency_message(module.split(".", 1)[0])
        ) from exc
    except OSError as exc:
        # WeasyPrint raises OSError when its native libraries are missing.
        raise DependencyError(
            f"Dependency '{module}' is installed but failed to load: {exc}"
        ) from exc

    if required_attribute is not None and not hasattr(
        imported, required_attribute
    ):
        raise DependencyError(
            (
                f"Dependency '{module}' is installed but missing the "
                f"'{required_attribute}' attribute. Upgrade or reinstall the "
                "package."
            )
        )
    return imported


def _missing_dependency_message(module: str) -> str:
    package = CAPABILITY_PACKAGES.get(module, module)
    return (
        f"Optional dependency '{package}' is required for this conversion. "
        f"Install it with `pip install {package}`."
    )


__all__ = [
    "CAPABILITY_PACKAGES",
    "Capabilities",
    "ImageCodec",
    "PdfWriter",
    "SlideCodec",
    "SpreadsheetCodec",
    "WordProcessingCodec",
    "default_capabilities",
    "import_capability",
]
