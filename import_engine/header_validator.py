"""
import_engine.header_validator - Match an uploaded header row to a template.

The header is dynamic: any subset of the template's columns may appear,
in any order, optionally preceded by the reserved record-id column.
Anything else aborts the import before a single data row is read.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Optional

import config
from import_engine.errors import HeaderMismatchError
from schema.columns import ColumnSpec, TemplateSchema


@dataclass(frozen=True)
class HeaderMapping:
    columns: dict[int, ColumnSpec]          # sheet column index → column
    id_index: Optional[int] = None          # index of __record_id, if present

    @property
    def has_id_column(self) -> bool:
        return self.id_index is not None


def validate_header(header: list[Optional[str]], schema: TemplateSchema) -> HeaderMapping:
    """
    Build the index → column mapping for *header*.

    Raises HeaderMismatchError on unknown, duplicated, misplaced or
    missing-required column names.
    """
    columns: dict[int, ColumnSpec] = {}
    id_index: Optional[int] = None
    unknown: list[str] = []
    duplicates: list[str] = []
    seen: set[str] = set()

    for idx, cell in enumerate(header):
        name = (cell or "").strip()
        if not name:
            continue

        if name == config.RECORD_ID_HEADER:
            if idx != 0:
                raise HeaderMismatchError(
                    f"{config.RECORD_ID_HEADER} must be the first column "
                    f"(found at column {idx + 1})"
                )
            id_index = idx
            continue

        spec = schema.by_name(name)
        if spec is None:
            unknown.append(name)
            continue
        if name in seen:
            duplicates.append(name)
            continue
        seen.add(name)
        columns[idx] = spec

    if unknown:
        raise HeaderMismatchError(
            "Unknown columns: " + ", ".join(_describe(n, schema) for n in unknown),
            unknown=unknown,
        )
    if duplicates:
        raise HeaderMismatchError("Duplicate columns: " + ", ".join(duplicates))

    missing = [c.name for c in schema.required_columns() if c.name not in seen]
    if missing:
        raise HeaderMismatchError(
            "Missing required columns: " + ", ".join(missing),
            missing=missing,
        )
    if not columns:
        raise HeaderMismatchError(
            f"Header contains none of the template columns ({', '.join(schema.names())})"
        )

    return HeaderMapping(columns=columns, id_index=id_index)


def suggest_column(name: str, schema: TemplateSchema) -> Optional[str]:
    """Closest template column name for a mistyped header, if any."""
    lowered = {n.lower(): n for n in schema.names()}
    match = difflib.get_close_matches(name.lower(), list(lowered), n=1, cutoff=0.7)
    return lowered[match[0]] if match else None


def _describe(name: str, schema: TemplateSchema) -> str:
    hint = suggest_column(name, schema)
    return f"{name!r} (did you mean {hint!r}?)" if hint else repr(name)
