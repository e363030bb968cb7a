"""
import_engine.committer - Apply validated row outcomes in one transaction.

Only called once every row has been evaluated without errors.  Either
all creates/updates (and optional deletes) land, or none do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import DataRecord
from import_engine.errors import CommitError
from import_engine.row_processor import CREATE, UPDATE, RowOutcome
from schema.columns import TemplateSchema

logger = logging.getLogger(__name__)


@dataclass
class CommitStats:
    created: int = 0
    updated: int = 0
    deleted: int = 0


def commit_outcomes(
    session: Session,
    schema: TemplateSchema,
    outcomes: list[RowOutcome],
    *,
    batch_id: str,
    delete_missing: bool = False,
) -> CommitStats:
    """
    Persist *outcomes* atomically.

    Parameters
    ----------
    delete_missing : also delete template records that no row references
                     (only meaningful when the file carried __record_id)

    Raises CommitError after rolling back on any persistence failure.
    """
    if any(o.errors for o in outcomes):
        raise CommitError("Refusing to commit an import that has row errors")

    stats = CommitStats()
    try:
        if delete_missing:
            stats.deleted = _delete_unreferenced(session, schema, outcomes)

        for outcome in outcomes:
            if outcome.action == UPDATE:
                _apply_update(session, schema, outcome, batch_id)
                stats.updated += 1
            elif outcome.action == CREATE:
                _apply_create(session, schema, outcome, batch_id)
                stats.created += 1

        session.flush()
        session.commit()
    except CommitError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Import into template %s rolled back: %s", schema.template_id, exc)
        raise CommitError(f"Transaction failed: {exc}") from exc

    logger.info(
        "Template %s batch %s committed: %d created, %d updated, %d deleted",
        schema.template_id, batch_id, stats.created, stats.updated, stats.deleted,
    )
    return stats


# ── Private helpers ────────────────────────────────────────────────────

def _apply_update(session: Session, schema: TemplateSchema,
                  outcome: RowOutcome, batch_id: str) -> None:
    record = session.get(DataRecord, outcome.record_id)
    if record is None or record.template_id != schema.template_id:
        raise CommitError(
            f"Row {outcome.row}: record {outcome.record_id} disappeared during import"
        )
    for column_id, value in outcome.values:
        record.set_value(column_id, value)
    record.import_batch_id = batch_id


def _apply_create(session: Session, schema: TemplateSchema,
                  outcome: RowOutcome, batch_id: str) -> None:
    record = DataRecord(template_id=schema.template_id, import_batch_id=batch_id)
    for column_id, value in outcome.values:
        record.set_value(column_id, value)
    session.add(record)


def _delete_unreferenced(session: Session, schema: TemplateSchema,
                         outcomes: list[RowOutcome]) -> int:
    keep = {o.record_id for o in outcomes if o.action == UPDATE}
    stale = session.scalars(
        select(DataRecord).where(DataRecord.template_id == schema.template_id)
    ).all()
    deleted = 0
    for record in stale:
        if record.id not in keep:
            session.delete(record)
            deleted += 1
    session.flush()
    return deleted
