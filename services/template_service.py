"""
services.template_service - Template and column management.

All session management is the caller's responsibility (open before,
close/commit after).  This keeps the service testable and allows
the caller to batch multiple operations in one transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

import config
from db.models import DataRecord, ImportTemplate, TemplateColumn


class TemplateService:

    # ── Templates ──────────────────────────────────────────────────────

    @staticmethod
    def create(session: Session, name: str) -> ImportTemplate:
        name = (name or "").strip()
        if not name:
            raise ValueError("Template name is required")
        clash = session.scalar(select(ImportTemplate.id).where(ImportTemplate.name == name))
        if clash is not None:
            raise ValueError(f"Template {name!r} already exists")

        template = ImportTemplate(name=name)
        session.add(template)
        session.flush()
        return template

    @staticmethod
    def get(session: Session, template_id: int) -> Optional[ImportTemplate]:
        return session.get(ImportTemplate, template_id)

    @staticmethod
    def list_all(session: Session) -> list[ImportTemplate]:
        return list(session.scalars(select(ImportTemplate).order_by(ImportTemplate.name)))

    @staticmethod
    def records(session: Session, template: ImportTemplate) -> list[DataRecord]:
        return list(session.scalars(
            select(DataRecord)
            .where(DataRecord.template_id == template.id)
            .order_by(DataRecord.id)
        ))

    # ── Columns ────────────────────────────────────────────────────────

    @staticmethod
    def add_column(
        session: Session,
        template: ImportTemplate,
        *,
        name: str,
        data_type: str = "string",
        required: bool = False,
    ) -> TemplateColumn:
        """Append a column at the next free position."""
        name = (name or "").strip()
        if not name:
            raise ValueError("Column name is required")
        if name == config.RECORD_ID_HEADER:
            raise ValueError(f"{name!r} is reserved")
        if data_type not in config.DATA_TYPES:
            raise ValueError(f"Unknown data type {data_type!r}")
        if len(template.columns) >= config.MAX_TEMPLATE_COLUMNS:
            raise ValueError(
                f"Template already has {config.MAX_TEMPLATE_COLUMNS} columns"
            )
        if name in template.column_headers():
            raise ValueError(f"Column {name!r} already exists")

        max_pos = session.scalar(
            select(func.max(TemplateColumn.position))
            .where(TemplateColumn.template_id == template.id)
        ) or 0
        column = TemplateColumn(
            name=name,
            data_type=data_type,
            required=bool(required),
            position=max_pos + 1,
        )
        template.columns.append(column)
        session.flush()
        return column

    @staticmethod
    def remove_column(session: Session, template: ImportTemplate, position: int) -> bool:
        """Delete the column at *position* and close the gap.  False if absent."""
        column = next((c for c in template.columns if c.position == position), None)
        if column is None:
            return False

        template.columns.remove(column)
        session.flush()

        # Renumber one at a time to keep (template_id, position) unique
        for idx, col in enumerate(sorted(template.columns, key=lambda c: c.position), start=1):
            if col.position != idx:
                col.position = idx
                session.flush()
        return True
