"""
import_engine.sheet_reader - Decode an uploaded spreadsheet into text rows.

Responsibilities:
  • .xlsx via openpyxl (first worksheet, cached values only)
  • .csv fallback: BOM removal, strict UTF-8, header whitespace stripping
  • Cell → text normalisation shared by both paths
  • Row order preserved exactly; blank rows are yielded, not skipped
"""

from __future__ import annotations

import csv
import io
import zipfile
from datetime import date, datetime, time
from decimal import Decimal
from typing import BinaryIO, Iterator, Optional, Union
from xml.etree.ElementTree import ParseError

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

import config
from import_engine.errors import MalformedFileError

Row = list[Optional[str]]
Source = Union[bytes, BinaryIO]

# Everything openpyxl raises for a damaged package or damaged XML part.
# lxml parse errors also derive from SyntaxError.
_XLSX_ERRORS = (
    zipfile.BadZipFile, InvalidFileException, ParseError, SyntaxError,
    KeyError, IndexError, OSError, TypeError, ValueError, AttributeError,
)


def iter_rows(source: Source, filename: str | None = None) -> Iterator[Row]:
    """
    Yield every row of the first sheet as a list of text cells (None for
    empty cells).  The first row yielded is the header row.

    Raises MalformedFileError if the content cannot be decoded.
    """
    raw = _read_all(source)
    if not raw:
        raise MalformedFileError("Uploaded file is empty")

    if filename and filename.lower().endswith(".csv"):
        yield from _iter_csv(raw)
    else:
        yield from _iter_xlsx(raw)


def cell_text(value) -> Optional[str]:
    """Normalise one decoded cell to text, or None when empty."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    if isinstance(value, datetime):
        return value.strftime(config.DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(config.DATE_FORMAT)
    if isinstance(value, time):
        return value.isoformat()
    text = str(value)
    return text if text.strip() else None


# ── Private helpers ────────────────────────────────────────────────────

def _read_all(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    data = source.read()
    if isinstance(data, str):
        return data.encode("utf-8")
    return data or b""


def _iter_xlsx(raw: bytes) -> Iterator[Row]:
    try:
        wb = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except _XLSX_ERRORS as exc:
        raise MalformedFileError(f"Could not read spreadsheet: {exc}") from exc

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            raise MalformedFileError("Workbook has no worksheets")
        # Sheet XML is parsed lazily, so a damaged part surfaces mid-read
        values_iter = ws.iter_rows(values_only=True)
        while True:
            try:
                values = next(values_iter, None)
            except _XLSX_ERRORS as exc:
                raise MalformedFileError(f"Could not read worksheet: {exc}") from exc
            if values is None:
                break
            yield [cell_text(v) for v in values]
    finally:
        wb.close()


def _iter_csv(raw: bytes) -> Iterator[Row]:
    # Strip UTF-8 BOM
    if raw.startswith(b"\xef\xbb\xbf"):
        raw = raw[3:]
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedFileError(f"CSV is not valid UTF-8: {exc}") from exc

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        for idx, cells in enumerate(reader):
            if idx == 0:
                # Strip whitespace from every header
                cells = [c.strip() for c in cells]
            yield [c if c.strip() else None for c in cells]
    except csv.Error as exc:
        raise MalformedFileError(f"Could not parse CSV: {exc}") from exc
