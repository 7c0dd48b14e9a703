"""Public API of the conversion engine."""

from __future__ import annotations

from .ai import AISettings, OutputContract, convert_with_ai
from .capabilities import Capabilities, default_capabilities
from .dispatch import Route, choose_route, convert, convert_bytes
from .errors import (
    AuthError,
    ConversionError,
    DecodeError,
    DependencyError,
    EncodeError,
    ExtractionError,
    NetworkError,
    ParseError,
    ResourceLimitError,
    ServiceError,
    UnsupportedPathError,
)
from .formats import (
    FormatSpecifier,
    allowed_targets,
    display_name,
    file_extension,
    is_supported_pair,
    resolve_format,
)
from .models import ConversionRequest, ConversionResult, Slide
from .session import ConversionSession, ResultHandle, ResultHandleManager

__all__ = [
    "AISettings",
    "AuthError",
    "Capabilities",
    "ConversionError",
    "ConversionRequest",
    "ConversionResult",
    "ConversionSession",
    "DecodeError",
    "DependencyError",
    "EncodeError",
    "ExtractionError",
    "FormatSpecifier",
    "NetworkError",
    "OutputContract",
    "ParseError",
    "ResourceLimitError",
    "ResultHandle",
    "ResultHandleManager",
    "Route",
    "ServiceError",
    "Slide",
    "UnsupportedPathError",
    "allowed_targets",
    "choose_route",
    "convert",
    "convert_bytes",
    "convert_with_ai",
    "default_capabilities",
    "display_name",
    "file_extension",
    "is_supported_pair",
    "resolve_format",
]
