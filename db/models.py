"""
db.models - SQLAlchemy ORM declarations.

Tables
------
import_templates    - one row per named template.
template_columns    - ordered, typed column definitions of a template
                      (position 1..5, unique per template).
data_records        - one imported row of a template.
data_record_values  - sparse key/value store keyed by (record, column).
                      Holds the coerced text of a cell; its semantic type
                      comes from the column's data_type at read time.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ImportTemplate(Base):
    __tablename__ = "import_templates"

    id   = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    columns = relationship(
        "TemplateColumn", back_populates="template",
        order_by="TemplateColumn.position",
        cascade="all, delete-orphan", lazy="selectin",
    )
    records = relationship(
        "DataRecord", back_populates="template",
        cascade="all, delete-orphan", lazy="select",
    )

    def column_headers(self) -> list[str]:
        return [c.name for c in self.columns]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }


class TemplateColumn(Base):
    __tablename__ = "template_columns"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer,
                         ForeignKey("import_templates.id", ondelete="CASCADE"),
                         nullable=False, index=True)
    name      = Column(String(200), nullable=False)
    data_type = Column(String(20), nullable=False, default="string")
    required  = Column(Boolean, nullable=False, default=False)
    position  = Column(Integer, nullable=False)

    template = relationship("ImportTemplate", back_populates="columns")

    __table_args__ = (
        UniqueConstraint("template_id", "position", name="uq_column_position"),
        {"sqlite_autoincrement": True},
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "data_type": self.data_type,
            "required": bool(self.required),
            "position": self.position,
        }


class DataRecord(Base):
    __tablename__ = "data_records"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer,
                         ForeignKey("import_templates.id", ondelete="CASCADE"),
                         nullable=False, index=True)
    import_batch_id = Column(String(32), index=True, nullable=True)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    template = relationship("ImportTemplate", back_populates="records")
    values = relationship(
        "DataRecordValue", back_populates="record",
        cascade="all, delete-orphan", lazy="selectin",
    )

    # SQLite must never hand out the id of a deleted record
    __table_args__ = {"sqlite_autoincrement": True}

    # ── Column-keyed accessors ─────────────────────────────────────────

    def value_for(self, column_id: int) -> str | None:
        for v in self.values:
            if v.column_id == column_id:
                return v.value
        return None

    def set_value(self, column_id: int, value: str) -> None:
        """Insert or overwrite the single Value of (self, column)."""
        for v in self.values:
            if v.column_id == column_id:
                v.value = value
                return
        self.values.append(DataRecordValue(column_id=column_id, value=value))

    def to_dict(self, columns=None, formatter=None) -> dict:
        d = {
            "id": self.id,
            "import_batch_id": self.import_batch_id,
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }
        if columns is not None:
            data = {}
            for col in columns:
                raw = self.value_for(col.id)
                if raw is None:
                    continue
                data[col.name] = formatter(raw, col.data_type) if formatter else raw
            d["values"] = data
        return d


class DataRecordValue(Base):
    __tablename__ = "data_record_values"

    id        = Column(Integer, primary_key=True, autoincrement=True)
    record_id = Column(Integer,
                       ForeignKey("data_records.id", ondelete="CASCADE"),
                       nullable=False, index=True)
    column_id = Column(Integer,
                       ForeignKey("template_columns.id", ondelete="CASCADE"),
                       nullable=False)
    value = Column(Text, nullable=False, default="")

    record = relationship("DataRecord", back_populates="values")

    __table_args__ = (
        UniqueConstraint("record_id", "column_id", name="uq_value_per_column"),
        Index("ix_value_lookup", "column_id", "record_id"),
    )
