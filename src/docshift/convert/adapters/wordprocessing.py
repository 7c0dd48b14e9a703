"""DOCX text extraction (mammoth) and paragraph writing (python-docx)."""

from __future__ import annotations

import io
import re
import zipfile
from functools import cached_property
from types import ModuleType
from typing import Sequence

from ..capabilities import import_capability
from ..errors import EncodeError, ExtractionError

_XML_ILLEGAL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


class DocxWordProcessingCodec:
    @cached_property
    def _mammoth(self) -> ModuleType:
        return import_capability("mammoth", "extract_raw_text")

    @cached_property
    def _docx(self) -> ModuleType:
        return import_capability("docx", "Document")

    def extract_text(self, data: bytes) -> str:
        try:
            result = self._mammoth.extract_raw_text(io.BytesIO(data))
        except (zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
            raise ExtractionError(
                "Could not extract text from file."
            ) from exc
        value = getattr(result, "value", None)
        if not isinstance(value, str):
            raise ExtractionError("Could not extract text from file.")
        return value

    def write_paragraphs(self, lines: Sequence[str]) -> bytes:
        document = self._docx.Document()
        try:
            for line in lines:
                document.add_paragraph(_XML_ILLEGAL_RE.sub("", line))
            buffer = io.BytesIO()
            document.save(buffer)
        except (ValueError, OSError) as exc:
            raise EncodeError(f"Failed to write Word document: {exc}") from exc
        return buffer.getvalue()


__all__ = ["DocxWordProcessingCodec"]
