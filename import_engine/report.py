"""
import_engine.report - Structured result of an import run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from import_engine.errors import ImportEngineError, RowIssue


class ImportState(str, Enum):
    READING = "reading"
    HEADER_VALIDATING = "header_validating"
    ROW_VALIDATING = "row_validating"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ABORTED_FILE = "aborted_file"
    ABORTED_HEADER = "aborted_header"
    ABORTED_VALIDATION = "aborted_validation"
    ABORTED_COMMIT = "aborted_commit"


@dataclass
class ImportResult:
    success: bool = False
    state: ImportState = ImportState.READING
    created_count: int = 0
    updated_count: int = 0
    deleted_count: int = 0
    skipped_count: int = 0
    import_batch_id: Optional[str] = None
    fatal: Optional[str] = None
    errors: list[dict] = field(default_factory=list)   # [{row, column, code, message}]

    @property
    def processed_count(self) -> int:
        return self.created_count + self.updated_count

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def add_issue(self, issue: RowIssue):
        self.errors.append(issue.to_dict())

    def abort(self, state: ImportState, exc: ImportEngineError, row: int = 0):
        """Record a fatal error: the single message is the whole report."""
        self.success = False
        self.state = state
        self.fatal = str(exc)
        self.errors = [{"row": row, "column": None, "code": exc.code, "message": str(exc)}]

    @property
    def summary(self) -> str:
        if self.fatal:
            return f"Import aborted: {self.fatal}"
        if not self.success:
            return f"Import failed with {self.error_count} errors. No changes made."

        parts = []
        if self.created_count:
            parts.append(f"{self.created_count} created")
        if self.updated_count:
            parts.append(f"{self.updated_count} updated")
        if self.deleted_count:
            parts.append(f"{self.deleted_count} deleted")
        if parts:
            return "Successfully synchronized: " + ", ".join(parts)
        return "Import completed - no changes needed"

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "state": self.state.value,
            "processed_count": self.processed_count,
            "created_count": self.created_count,
            "updated_count": self.updated_count,
            "deleted_count": self.deleted_count,
            "skipped_count": self.skipped_count,
            "import_batch_id": self.import_batch_id,
            "summary": self.summary,
            "errors": self.errors,
        }
