"""
import_engine.errors - Exception taxonomy of an import run.

Fatal (abort the whole run, raised and converted by the importer):
    MalformedFileError, HeaderMismatchError, CommitError

Row-scoped (collected per row as RowIssue, never escape the engine):
    InvalidIdentifierError, RecordNotFoundError, EmptyRecordError,
    and the CellError family produced by type coercion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ImportEngineError(Exception):
    """Base class for every error the import engine knows about."""

    code = "import_error"


# ── Fatal ──────────────────────────────────────────────────────────────

class MalformedFileError(ImportEngineError):
    """The upload is not a decodable spreadsheet."""

    code = "malformed_file"


class HeaderMismatchError(ImportEngineError):
    """The header row does not fit the template's columns."""

    code = "header_mismatch"

    def __init__(self, message: str, unknown: list[str] | None = None,
                 missing: list[str] | None = None):
        super().__init__(message)
        self.unknown = unknown or []
        self.missing = missing or []


class CommitError(ImportEngineError):
    """Persistence failed after validation passed; everything was rolled back."""

    code = "commit_failed"


# ── Row-scoped ─────────────────────────────────────────────────────────

class RowError(ImportEngineError):
    """A problem confined to one data row."""

    code = "row_error"


class InvalidIdentifierError(RowError):
    code = "invalid_identifier"


class RecordNotFoundError(RowError):
    code = "record_not_found"


class EmptyRecordError(RowError):
    code = "empty_record"


class CellError(RowError):
    """A single cell failed type coercion or a required check."""

    code = "invalid_value"


class RequiredValueError(CellError):
    code = "required"


class InvalidNumberError(CellError):
    code = "invalid_number"


class InvalidDateError(CellError):
    code = "invalid_date"


class InvalidBooleanError(CellError):
    code = "invalid_boolean"


@dataclass(frozen=True)
class RowIssue:
    """A collected row-level error, as reported back to the caller."""

    row: int
    code: str
    message: str
    column: Optional[str] = None
    raw_value: Optional[str] = None

    @classmethod
    def from_error(cls, row: int, exc: RowError, column: Optional[str] = None,
                   raw_value: Optional[str] = None) -> "RowIssue":
        return cls(row=row, code=exc.code, message=str(exc),
                   column=column, raw_value=raw_value)

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "column": self.column,
            "code": self.code,
            "message": self.message,
        }
