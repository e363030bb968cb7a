"""
import_engine.importer - Top-level orchestrator.

Coordinates sheet_reader → header_validator → row_processor → committer
and produces a structured ImportResult.  Validation of every row happens
before anything is written; the write phase is one transaction.
"""

from __future__ import annotations

import logging
import secrets
from typing import Iterator, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.engine import get_session
from db.models import DataRecord
from import_engine.committer import commit_outcomes
from import_engine.errors import CommitError, HeaderMismatchError, MalformedFileError
from import_engine.header_validator import validate_header
from import_engine.report import ImportResult, ImportState
from import_engine.row_processor import SKIP, RowReconciler
from import_engine.sheet_reader import Row, Source, iter_rows
from schema.columns import TemplateSchema, load_schema

logger = logging.getLogger(__name__)


def run_import(
    source: Source,
    template_id: int,
    *,
    filename: str | None = None,
    delete_missing: bool = False,
    session: Optional[Session] = None,
) -> ImportResult:
    """
    Import a spreadsheet into the records of one template.

    Parameters
    ----------
    source : raw .xlsx/.csv content (bytes or binary stream)
    template_id : template whose columns the header must match
    filename : used only to pick the decoder (".csv" → CSV, else xlsx)
    delete_missing : when the file has __record_id, delete template
                     records not referenced by any row
    session : reuse a caller-owned session instead of opening one.  Only
              the commit phase writes to it: on success it is committed
              (with any work the caller had pending), on a commit failure
              it is rolled back.  Aborts before that leave it untouched.

    Returns
    -------
    ImportResult; fatal problems are reported in it, never raised.
    Raises LookupError if the template does not exist.
    """
    own_session = session is None
    if own_session:
        session = get_session()

    try:
        return _run(session, source, template_id, filename, delete_missing)
    finally:
        if own_session:
            session.close()


def _run(session: Session, source: Source, template_id: int,
         filename: str | None, delete_missing: bool) -> ImportResult:
    schema = load_schema(session, template_id)
    logger.info("Import into template %s (%s) started", schema.template_id, schema.name)

    rows = iter_rows(source, filename)
    try:
        return _process(session, schema, rows, delete_missing)
    finally:
        rows.close()


def _process(session: Session, schema: TemplateSchema, rows: Iterator[Row],
             delete_missing: bool) -> ImportResult:
    result = ImportResult()
    template_id = schema.template_id

    # ── Reading + header ───────────────────────────────────────────────
    try:
        header = next(rows, None)
        if header is None:
            raise MalformedFileError("Spreadsheet has no header row")

        result.state = ImportState.HEADER_VALIDATING
        mapping = validate_header(header, schema)
    except MalformedFileError as exc:
        logger.warning("Template %s: unreadable upload: %s", template_id, exc)
        result.abort(ImportState.ABORTED_FILE, exc)
        return result
    except HeaderMismatchError as exc:
        logger.warning("Template %s: header rejected: %s", template_id, exc)
        result.abort(ImportState.ABORTED_HEADER, exc, row=1)
        return result

    # ── Validate every row ─────────────────────────────────────────────
    result.state = ImportState.ROW_VALIDATING
    existing_ids = set(session.scalars(
        select(DataRecord.id).where(DataRecord.template_id == schema.template_id)
    ))
    reconciler = RowReconciler(schema, mapping, existing_ids.__contains__)

    outcomes = []
    try:
        for row_number, cells in enumerate(rows, start=2):      # row 1 = header
            outcome = reconciler.evaluate(row_number, cells)
            if outcome.action == SKIP:
                result.skipped_count += 1
                continue
            outcomes.append(outcome)
            for issue in outcome.errors:
                result.add_issue(issue)
    except MalformedFileError as exc:
        logger.warning("Template %s: upload broke mid-read: %s", template_id, exc)
        result.abort(ImportState.ABORTED_FILE, exc)
        return result

    if result.errors:
        result.state = ImportState.ABORTED_VALIDATION
        logger.info("Template %s: %d row errors, nothing committed",
                    template_id, result.error_count)
        return result

    # ── Commit ─────────────────────────────────────────────────────────
    result.state = ImportState.COMMITTING
    batch_id = secrets.token_hex(8)
    try:
        stats = commit_outcomes(
            session, schema, outcomes,
            batch_id=batch_id,
            delete_missing=delete_missing and mapping.has_id_column,
        )
    except CommitError as exc:
        result.abort(ImportState.ABORTED_COMMIT, exc)
        return result

    result.success = True
    result.state = ImportState.COMMITTED
    result.import_batch_id = batch_id
    result.created_count = stats.created
    result.updated_count = stats.updated
    result.deleted_count = stats.deleted
    return result
