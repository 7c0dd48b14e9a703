"""Library adapters behind the capability seams."""

from .imaging import PillowImageCodec
from .pdf import WeasyPrintPdfWriter
from .slides import PptxSlideCodec
from .spreadsheet import OpenpyxlSpreadsheetCodec
from .wordprocessing import DocxWordProcessingCodec

__all__ = [
    "DocxWordProcessingCodec",
    "OpenpyxlSpreadsheetCodec",
    "PillowImageCodec",
    "PptxSlideCodec",
    "WeasyPrintPdfWriter",
]
