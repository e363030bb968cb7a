"""
schema.formatting - Human-readable rendering of stored values.

Stored values are canonical text (see import_engine.coercion); this is
the reverse direction used by listings and exports.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

import config


def format_value(value: str | None, data_type: str) -> str:
    if value is None or value == "":
        return ""

    if data_type == "number":
        return _format_number(value)
    if data_type == "date":
        try:
            parsed = datetime.strptime(value, config.DATE_FORMAT)
        except ValueError:
            return value
        return parsed.strftime(config.DISPLAY_DATE_FORMAT)
    if data_type == "boolean":
        return "Yes" if value == "true" else "No"
    return str(value)


def _format_number(value: str) -> str:
    try:
        d = Decimal(value)
    except InvalidOperation:
        return value
    if not d.is_finite():
        return value
    return f"{d:,f}"
