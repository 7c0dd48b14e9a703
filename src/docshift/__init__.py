"""docshift: route files between document, image, and data formats.

The engine lives in :mod:`docshift.convert`; call
``docshift.convert.convert`` or :func:`convert_bytes`.
"""

from __future__ import annotations

from .convert import (
    ConversionError,
    ConversionRequest,
    ConversionResult,
    FormatSpecifier,
    convert_bytes,
)

__all__ = [
    "ConversionError",
    "ConversionRequest",
    "ConversionResult",
    "FormatSpecifier",
    "convert_bytes",
]
