"""Deterministic conversions inside the CSV / JSON / XLSX family.

Everything funnels through a row-oriented :data:`StructuredTable`: JSON
documents are normalized into a dense table whose header is the union of all
object keys, CSV text is parsed with light type inference, and spreadsheets
are read through the injected :class:`SpreadsheetCodec`.
"""

from __future__ import annotations

import csv
import io
import json
import re
from datetime import date, datetime, time
from typing import Any, Dict, List, Sequence

from .capabilities import SpreadsheetCodec
from .errors import ParseError, UnsupportedPathError
from .formats import FormatSpecifier, is_structured_data
from .models import Cell, StructuredTable

EMPTY_HEADER = "__EMPTY"
SCALAR_COLUMN = "value"

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")
_BOOLEANS = {"true": True, "false": False}


def transcode_structured(
    data: bytes,
    source: FormatSpecifier,
    target: FormatSpecifier,
    *,
    codec: SpreadsheetCodec,
) -> bytes:
    """Convert ``data`` between two members of the structured-data family."""

    if not (is_structured_data(source) and is_structured_data(target)):
        raise UnsupportedPathError("Unsupported data conversion path.")

    if source is FormatSpecifier.JSON:
        table = json_to_table(data)
        if target is FormatSpecifier.CSV:
            return table_to_csv(table).encode("utf-8")
        if target is FormatSpecifier.XLSX:
            return codec.write_rows(table)
        raise UnsupportedPathError("Unsupported JSON conversion target.")

    if source is FormatSpecifier.XLSX and target is FormatSpecifier.XLSX:
        return codec.reencode(data)

    if source is FormatSpecifier.CSV:
        table = parse_csv(data)
    else:
        table = codec.read_rows(data)

    if target is FormatSpecifier.JSON:
        return records_to_json(table_to_records(table)).encode("utf-8")
    if target is FormatSpecifier.CSV:
        return table_to_csv(table).encode("utf-8")
    return codec.write_rows(table)


# ---------------------------------------------------------------- JSON input


def json_to_table(data: bytes) -> StructuredTable:
    """Parse JSON bytes into a dense table with a union-of-keys header."""

    try:
        payload = json.loads(_decode(data))
    except (ValueError, RecursionError) as exc:
        raise ParseError("Invalid JSON file.") from exc
    records = payload if isinstance(payload, list) else [payload]
    return records_to_table(records)


def records_to_table(records: Sequence[Any]) -> StructuredTable:
    header: List[str] = []
    seen: set[str] = set()
    for record in records:
        keys = record.keys() if isinstance(record, dict) else (SCALAR_COLUMN,)
        for key in keys:
            name = str(key)
            if name not in seen:
                seen.add(name)
                header.append(name)

    table: StructuredTable = [list(header)]
    for record in records:
        if isinstance(record, dict):
            lookup = {str(key): value for key, value in record.items()}
        else:
            lookup = {SCALAR_COLUMN: record}
        table.append([_json_cell(lookup.get(name)) for name in header])
    return table


def _json_cell(value: Any) -> Cell:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return value


# ----------------------------------------------------------------- CSV input


def parse_csv(data: bytes) -> StructuredTable:
    """Parse CSV bytes; numeric and boolean literals become typed cells."""

    reader = csv.reader(io.StringIO(_decode(data), newline=""))
    try:
        return [[coerce_csv_value(field) for field in row] for row in reader]
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV input: {exc}") from exc


def coerce_csv_value(raw: str) -> Cell:
    if raw == "":
        return None
    if _INT_RE.match(raw):
        try:
            return int(raw)
        except ValueError:
            # Past the interpreter's integer digit limit.
            return raw
    if _FLOAT_RE.match(raw):
        return float(raw)
    return _BOOLEANS.get(raw.lower(), raw)


# --------------------------------------------------------------------- output


def table_to_csv(table: StructuredTable) -> str:
    """Serialize rows per RFC 4180 (minimal quoting, CRLF records)."""

    width = max((len(row) for row in table), default=0)
    buffer = io.StringIO()
    writer = csv.writer(
        buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n"
    )
    for row in table:
        padded = list(row) + [None] * (width - len(row))
        writer.writerow([format_cell(value) for value in padded])
    return buffer.getvalue()


def table_to_records(table: StructuredTable) -> List[Dict[str, Cell]]:
    """Key each data row by the header row; blank rows are dropped."""

    if not table:
        return []
    width = max(len(row) for row in table)
    keys = _header_keys(table[0], width)
    records: List[Dict[str, Cell]] = []
    for row in table[1:]:
        cells = [_blank_to_none(value) for value in row]
        if all(value is None for value in cells):
            continue
        cells.extend([None] * (width - len(cells)))
        records.append(dict(zip(keys, cells)))
    return records


def records_to_json(records: Sequence[Dict[str, Cell]]) -> str:
    return json.dumps(
        list(records), indent=2, ensure_ascii=False, default=_json_default
    )


def format_cell(value: Cell) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _header_keys(header: Sequence[Cell], width: int) -> List[str]:
    keys: List[str] = []
    used: set[str] = set()
    counts: Dict[str, int] = {}
    for index in range(width):
        raw = header[index] if index < len(header) else None
        base = format_cell(raw) if _blank_to_none(raw) is not None else EMPTY_HEADER
        key = base
        count = counts.get(base, 0)
        while key in used:
            count += 1
            key = f"{base}_{count}"
        counts[base] = count
        used.add(key)
        keys.append(key)
    return keys


def _blank_to_none(value: Cell) -> Cell:
    if isinstance(value, str) and value == "":
        return None
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError("Input is not valid UTF-8 text.") from exc


__all__ = [
    "EMPTY_HEADER",
    "SCALAR_COLUMN",
    "coerce_csv_value",
    "format_cell",
    "json_to_table",
    "parse_csv",
    "records_to_json",
    "records_to_table",
    "table_to_csv",
    "table_to_records",
    "transcode_structured",
]
