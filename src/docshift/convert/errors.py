"""Error taxonomy for the conversion engine."""

from __future__ import annotations


class ConversionError(RuntimeError):
    """Base class for every failure surfaced by a conversion."""


class UnsupportedPathError(ConversionError):
    """Raised when no conversion route handles the requested pair."""


class DecodeError(ConversionError):
    """Raised when source image bytes cannot be decoded."""


class EncodeError(ConversionError):
    """Raised when an output encoder rejects the operation."""


class ParseError(ConversionError):
    """Raised for malformed CSV, JSON, or spreadsheet input."""


class ExtractionError(ConversionError):
    """Raised when text cannot be pulled out of a container."""


class AuthError(ConversionError):
    """Raised when the AI credential is missing."""


class NetworkError(ConversionError):
    """Raised when the AI service cannot be reached."""


class ServiceError(ConversionError):
    """Raised when the AI service rejects or fails a request."""


class ResourceLimitError(ConversionError):
    """Raised when an input exceeds the configured size limit."""


class DependencyError(ConversionError):
    """Raised when a capability library is unavailable."""


__all__ = [
    "AuthError",
    "ConversionError",
    "DecodeError",
    "DependencyError",
    "EncodeError",
    "ExtractionError",
    "NetworkError",
    "ParseError",
    "ResourceLimitError",
    "ServiceError",
    "UnsupportedPathError",
]
