"""Value types shared by the conversion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import PurePath
from typing import List, Optional, Sequence, Union

from .formats import FormatSpecifier, file_extension

Cell = Optional[Union[str, int, float, bool, datetime, date, time]]
StructuredTable = List[List[Cell]]


@dataclass(frozen=True)
class ConversionRequest:
    """One user-initiated conversion of a single in-memory file."""

    data: bytes
    source: FormatSpecifier
    filename: str
    target: FormatSpecifier

    @property
    def size(self) -> int:
        return len(self.data)

    def output_filename(self) -> str:
        """Original base name with the target's extension."""

        stem = PurePath(self.filename).stem if self.filename else "converted"
        return f"{stem or 'converted'}{file_extension(self.target)}"


@dataclass(frozen=True)
class ConversionResult:
    """Binary payload produced by a conversion."""

    data: bytes
    media_type: str
    filename: str


@dataclass(frozen=True)
class Slide:
    title: str
    text: str


SlideDeckPlan = Sequence[Slide]


__all__ = [
    "Cell",
    "ConversionRequest",
    "ConversionResult",
    "Slide",
    "SlideDeckPlan",
    "StructuredTable",
]
