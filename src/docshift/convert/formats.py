"""Format registry: supported media types, targets, names, and extensions."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import Mapping, Optional

from .errors import UnsupportedPathError


class FormatSpecifier(Enum):
    """Canonical content types understood by the engine."""

    TXT = "text/plain"
    CSV = "text/csv"
    MD = "text/markdown"
    HTML = "text/html"
    XML = "text/xml"
    JSON = "application/json"
    PDF = "application/pdf"
    DOCX = (
        "application/vnd.openxmlformats-officedocument."
        "wordprocessingml.document"
    )
    XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    PPTX = (
        "application/vnd.openxmlformats-officedocument."
        "presentationml.presentation"
    )
    JPG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"

    @property
    def media_type(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: str) -> "FormatSpecifier":
        normalized = _normalize_media_type(value)
        for member in cls:
            if member.value == normalized:
                return member
        raise UnsupportedPathError(
            f"Unsupported media type '{value}'."
        )


F = FormatSpecifier

CONVERSION_MAP: Mapping[FormatSpecifier, tuple[FormatSpecifier, ...]] = {
    F.PDF: (F.DOCX, F.TXT, F.JPG, F.PNG, F.HTML, F.CSV, F.XLSX),
    F.DOCX: (F.PDF, F.TXT, F.PPTX, F.HTML, F.CSV, F.XLSX),
    F.PPTX: (F.PDF, F.DOCX, F.TXT),
    F.TXT: (F.PDF, F.DOCX, F.CSV, F.HTML, F.PPTX),
    F.CSV: (F.XLSX, F.PDF, F.JSON, F.XML),
    F.XLSX: (F.CSV, F.PDF, F.HTML),
    F.JPG: (F.PDF, F.DOCX, F.TXT, F.HTML),
    F.PNG: (F.PDF, F.DOCX, F.TXT, F.HTML),
    F.JSON: (F.CSV, F.XLSX),
    F.XML: (F.JSON, F.CSV, F.XLSX),
    F.HTML: (F.PDF, F.DOCX),
    F.MD: (F.HTML, F.TXT, F.PDF, F.DOCX),
    F.WEBP: (F.JPG, F.PNG),
}

DISPLAY_NAMES: Mapping[FormatSpecifier, str] = {
    F.TXT: "Text (TXT)",
    F.CSV: "CSV",
    F.MD: "Markdown",
    F.HTML: "HTML",
    F.XML: "XML",
    F.JSON: "JSON",
    F.PDF: "PDF Document",
    F.DOCX: "Word Doc (DOCX)",
    F.XLSX: "Excel Sheet (XLSX)",
    F.PPTX: "PowerPoint (PPT)",
    F.JPG: "JPEG Image",
    F.PNG: "PNG Image",
    F.WEBP: "WebP Image",
}

FILE_EXTENSIONS: Mapping[FormatSpecifier, str] = {
    F.TXT: ".txt",
    F.CSV: ".csv",
    F.MD: ".md",
    F.HTML: ".html",
    F.XML: ".xml",
    F.JSON: ".json",
    F.PDF: ".pdf",
    F.DOCX: ".docx",
    F.XLSX: ".xlsx",
    F.PPTX: ".pptx",
    F.JPG: ".jpg",
    F.PNG: ".png",
    F.WEBP: ".webp",
}

# Extra spellings accepted when resolving a format from a file name.
_EXTENSION_ALIASES: Mapping[str, FormatSpecifier] = {
    "jpeg": F.JPG,
    "htm": F.HTML,
    "markdown": F.MD,
    "text": F.TXT,
}

# Media-type spellings seen in the wild for the canonical specifiers.
_MEDIA_TYPE_ALIASES: Mapping[str, str] = {
    "image/jpg": F.JPG.value,
    "application/xml": F.XML.value,
    "text/x-markdown": F.MD.value,
    "application/csv": F.CSV.value,
}

_STRUCTURED_DATA: frozenset[FormatSpecifier] = frozenset({F.CSV, F.JSON, F.XLSX})
_OPAQUE_RASTER: frozenset[FormatSpecifier] = frozenset({F.JPG})


def allowed_targets(source: FormatSpecifier) -> tuple[FormatSpecifier, ...]:
    """Return the registry targets for ``source`` (empty when unknown)."""

    return CONVERSION_MAP.get(source, ())


def is_supported_pair(source: FormatSpecifier, target: FormatSpecifier) -> bool:
    return target in allowed_targets(source)


def display_name(fmt: FormatSpecifier) -> str:
    return DISPLAY_NAMES.get(fmt, fmt.value)


def file_extension(fmt: FormatSpecifier) -> str:
    return FILE_EXTENSIONS.get(fmt, "")


def is_image(fmt: FormatSpecifier) -> bool:
    return fmt.value.startswith("image/")


def is_structured_data(fmt: FormatSpecifier) -> bool:
    return fmt in _STRUCTURED_DATA


def is_ai_native(fmt: FormatSpecifier) -> bool:
    """Formats the AI service accepts as inline binary content."""

    return is_image(fmt) or fmt is F.PDF


def supports_transparency(fmt: FormatSpecifier) -> bool:
    return is_image(fmt) and fmt not in _OPAQUE_RASTER


def format_for_filename(filename: str) -> Optional[FormatSpecifier]:
    """Return the specifier implied by ``filename``'s extension, if any."""

    suffix = PurePath(filename).suffix.lower().lstrip(".")
    if not suffix:
        return None
    for fmt, extension in FILE_EXTENSIONS.items():
        if extension.lstrip(".") == suffix:
            return fmt
    return _EXTENSION_ALIASES.get(suffix)


def parse_format(value: str) -> FormatSpecifier:
    """Resolve a user-facing token (``pdf``, ``.docx``, a media type)."""

    candidate = value.strip()
    if "/" in candidate:
        return FormatSpecifier.from_value(candidate)
    token = candidate.lower().lstrip(".")
    for fmt in FormatSpecifier:
        if fmt.name.lower() == token:
            return fmt
    resolved = format_for_filename(f"file.{token}") if token else None
    if resolved is None:
        known = ", ".join(fmt.name.lower() for fmt in FormatSpecifier)
        raise UnsupportedPathError(
            f"Unknown format '{value}'. Expected one of: {known}."
        )
    return resolved


def resolve_format(
    media_type: Optional[str], filename: Optional[str] = None
) -> FormatSpecifier:
    """Resolve a declared media type, falling back to the file extension."""

    if media_type and media_type.strip():
        try:
            return FormatSpecifier.from_value(media_type)
        except UnsupportedPathError:
            if not filename:
                raise
    if filename:
        resolved = format_for_filename(filename)
        if resolved is not None:
            return resolved
    label = media_type or filename or "<unknown>"
    raise UnsupportedPathError(
        f"Input format not supported by engine: {label}"
    )


def _normalize_media_type(value: str) -> str:
    base = value.split(";", 1)[0].strip().lower()
    return _MEDIA_TYPE_ALIASES.get(base, base)


__all__ = [
    "CONVERSION_MAP",
    "DISPLAY_NAMES",
    "FILE_EXTENSIONS",
    "FormatSpecifier",
    "allowed_targets",
    "display_name",
    "file_extension",
    "format_for_filename",
    "is_ai_native",
    "is_image",
    "is_structured_data",
    "is_supported_pair",
    "parse_format",
    "resolve_format",
    "supports_transparency",
]
