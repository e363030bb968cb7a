"""
schema.columns - Immutable column descriptors resolved once per import run.

The import engine never touches ORM column objects directly: the template
is snapshotted into a TemplateSchema and passed by value into the header
validator, the row reconciler and the committer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

import config
from db.models import ImportTemplate


class SchemaError(ValueError):
    """Raised when a template's column set violates its invariants."""


@dataclass(frozen=True)
class ColumnSpec:
    id: int
    name: str
    data_type: str
    required: bool
    position: int


@dataclass(frozen=True)
class TemplateSchema:
    template_id: int
    name: str
    columns: tuple[ColumnSpec, ...]

    @classmethod
    def from_template(cls, template: ImportTemplate) -> "TemplateSchema":
        specs = tuple(
            ColumnSpec(
                id=c.id,
                name=c.name,
                data_type=c.data_type,
                required=bool(c.required),
                position=c.position,
            )
            for c in sorted(template.columns, key=lambda c: c.position)
        )
        schema = cls(template_id=template.id, name=template.name, columns=specs)
        schema.check()
        return schema

    def check(self) -> None:
        """Raise SchemaError if the column set is not well-formed."""
        if len(self.columns) > config.MAX_TEMPLATE_COLUMNS:
            raise SchemaError(
                f"Template {self.name!r} has {len(self.columns)} columns "
                f"(max {config.MAX_TEMPLATE_COLUMNS})"
            )
        positions = [c.position for c in self.columns]
        if positions != list(range(1, len(self.columns) + 1)):
            raise SchemaError(
                f"Template {self.name!r} column positions are not contiguous: {positions}"
            )
        seen: set[str] = set()
        for c in self.columns:
            if not c.name or not c.name.strip():
                raise SchemaError(f"Column at position {c.position} has no name")
            if c.name in seen:
                raise SchemaError(f"Duplicate column name {c.name!r}")
            if c.data_type not in config.DATA_TYPES:
                raise SchemaError(f"Column {c.name!r} has unknown type {c.data_type!r}")
            seen.add(c.name)

    # ── Lookup ─────────────────────────────────────────────────────────

    def by_name(self, name: str) -> Optional[ColumnSpec]:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    def required_columns(self) -> list[ColumnSpec]:
        return [c for c in self.columns if c.required]


def load_schema(session: Session, template_id: int) -> TemplateSchema:
    """Resolve a template into a TemplateSchema.  LookupError if missing."""
    template = session.get(ImportTemplate, template_id)
    if template is None:
        raise LookupError(f"Template {template_id} not found")
    return TemplateSchema.from_template(template)
