"""openpyxl-backed spreadsheet codec."""

from __future__ import annotations

import io
import zipfile
from datetime import date, datetime, time
from functools import cached_property
from types import ModuleType
from typing import Any

from ..capabilities import import_capability
from ..errors import EncodeError, ParseError
from ..models import Cell, StructuredTable

SHEET_TITLE = "Sheet1"

_SCALARS = (str, int, float, bool, datetime, date, time)


class OpenpyxlSpreadsheetCodec:
    """Read the first worksheet as rows and write rows as a workbook."""

    @cached_property
    def _openpyxl(self) -> ModuleType:
        return import_capability("openpyxl", "load_workbook")

    @cached_property
    def _illegal_chars(self) -> Any:
        cell_mod = import_capability("openpyxl.cell.cell", "ILLEGAL_CHARACTERS_RE")
        return cell_mod.ILLEGAL_CHARACTERS_RE

    def read_rows(self, data: bytes) -> StructuredTable:
        workbook = self._load(data, read_only=True)
        try:
            if not workbook.worksheets:
                raise ParseError("Workbook contains no worksheets.")
            sheet = workbook.worksheets[0]
            rows = [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()
        width = max((len(row) for row in rows), default=0)
        return [row + [None] * (width - len(row)) for row in rows]

    def write_rows(self, rows: StructuredTable) -> bytes:
        workbook = self._openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE
        try:
            for row in rows:
                sheet.append([self._coerce(value) for value in row])
        except (ValueError, TypeError) as exc:
            raise EncodeError(f"Failed to build spreadsheet: {exc}") from exc
        return self._save(workbook)

    def reencode(self, data: bytes) -> bytes:
        workbook = self._load(data, read_only=False, data_only=False)
        return self._save(workbook)

    def _load(
        self, data: bytes, *, read_only: bool, data_only: bool = True
    ) -> Any:
        openpyxl = self._openpyxl
        invalid = import_capability(
            "openpyxl.utils.exceptions", "InvalidFileException"
        ).InvalidFileException
        try:
            return openpyxl.load_workbook(
                io.BytesIO(data), read_only=read_only, data_only=data_only
            )
        except (
            zipfile.BadZipFile,
            invalid,
            KeyError,
            ValueError,
            TypeError,
            OSError,
        ) as exc:
            raise ParseError(f"Could not read spreadsheet: {exc}") from exc

    def _save(self, workbook: Any) -> bytes:
        buffer = io.BytesIO()
        try:
            workbook.save(buffer)
        except (OSError, ValueError, TypeError) as exc:
            raise EncodeError(f"Failed to write spreadsheet: {exc}") from exc
        return buffer.getvalue()

    def _coerce(self, value: Cell) -> Cell:
        if value is None:
            return None
        if isinstance(value, str):
            return self._illegal_chars.sub("", value)
        if isinstance(value, _SCALARS):
            return value
        return str(value)


__all__ = ["OpenpyxlSpreadsheetCodec", "SHEET_TITLE"]
