"""
import_engine.row_processor - Validate and resolve one data row.

Single-responsibility: given the raw cells of a row, decide whether it
creates a record, updates an existing one, or is skipped, and coerce its
cells.  Nothing is written here; the result is an immutable RowOutcome
handed to the committer once every row has been evaluated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from import_engine.coercion import coerce_cell, is_blank
from import_engine.errors import (
    EmptyRecordError,
    InvalidIdentifierError,
    RecordNotFoundError,
    RowIssue,
)
from import_engine.header_validator import HeaderMapping
from schema.columns import TemplateSchema

logger = logging.getLogger(__name__)

CREATE = "create"
UPDATE = "update"
SKIP = "skip"

# Bounded to 18 digits so every accepted id fits a signed 64-bit column
_ID_RE = re.compile(r"^\+?[0-9]{1,18}$")


@dataclass(frozen=True)
class RowOutcome:
    row: int
    action: str                                 # create / update / skip
    record_id: Optional[int] = None
    values: tuple[tuple[int, str], ...] = ()    # (column_id, canonical text)
    errors: tuple[RowIssue, ...] = ()


class RowReconciler:
    """
    Evaluates rows in file order.  Tracks identifiers already seen so a
    repeated __record_id can be reported in the log; both rows still apply.
    """

    def __init__(
        self,
        schema: TemplateSchema,
        mapping: HeaderMapping,
        record_exists: Callable[[int], bool],
    ):
        self.schema = schema
        self.mapping = mapping
        self._record_exists = record_exists
        self._seen_ids: dict[int, int] = {}     # record id → first row number

    def evaluate(self, row_number: int, cells: list[Optional[str]]) -> RowOutcome:
        if all(is_blank(c) for c in cells):
            return RowOutcome(row=row_number, action=SKIP)

        issues: list[RowIssue] = []
        action, record_id = self._resolve_target(row_number, cells, issues)

        values: list[tuple[int, str]] = []
        for idx, column in sorted(self.mapping.columns.items()):
            raw = _cell(cells, idx)
            value, err = coerce_cell(column, raw)
            if err is not None:
                issues.append(RowIssue.from_error(row_number, err,
                                                  column=column.name, raw_value=raw))
            elif value is not None:
                values.append((column.id, value))

        if action == CREATE and not values and not issues:
            issues.append(RowIssue.from_error(
                row_number, EmptyRecordError("At least one column must have data"),
            ))

        return RowOutcome(
            row=row_number,
            action=action,
            record_id=record_id,
            values=tuple(values),
            errors=tuple(issues),
        )

    # ── Private helpers ────────────────────────────────────────────────

    def _resolve_target(self, row_number: int, cells: list[Optional[str]],
                        issues: list[RowIssue]) -> tuple[str, Optional[int]]:
        """Return (action, record_id); appends identifier errors to *issues*."""
        if not self.mapping.has_id_column:
            return CREATE, None

        raw = _cell(cells, self.mapping.id_index)
        if is_blank(raw):
            return CREATE, None

        text = raw.strip()
        if not _ID_RE.match(text) or int(text) <= 0:
            issues.append(RowIssue.from_error(
                row_number,
                InvalidIdentifierError(f"Invalid record id {text!r}"),
                raw_value=raw,
            ))
            return UPDATE, None

        record_id = int(text)
        if not self._record_exists(record_id):
            issues.append(RowIssue.from_error(
                row_number,
                RecordNotFoundError(f"Record with ID {record_id} not found"),
                raw_value=raw,
            ))
            return UPDATE, record_id

        first = self._seen_ids.setdefault(record_id, row_number)
        if first != row_number:
            logger.warning(
                "Template %s: record %s targeted by rows %s and %s; later row wins",
                self.schema.template_id, record_id, first, row_number,
            )
        return UPDATE, record_id


def _cell(cells: list[Optional[str]], idx: int) -> Optional[str]:
    return cells[idx] if idx < len(cells) else None
