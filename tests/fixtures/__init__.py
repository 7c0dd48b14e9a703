"""Shared test doubles and builders for the docshift test suite."""

from .chat import ChatClientFactory, ChatClientStub  # noqa: F401
from .pdf import FAKE_PDF, RecordingPdfWriter  # noqa: F401
from .workspace import (  # noqa: F401
    WorkspaceBuilder,
    docx_bytes,
    png_bytes,
    xlsx_bytes,
)

__all__ = [
    "ChatClientFactory",
    "ChatClientStub",
    "FAKE_PDF",
    "RecordingPdfWriter",
    "WorkspaceBuilder",
    "docx_bytes",
    "png_bytes",
    "xlsx_bytes",
]
