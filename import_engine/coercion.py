"""
import_engine.coercion - Per-type conversion of raw cell text.

Each coercer takes non-blank text and returns the canonical text that is
stored in data_record_values, or raises a CellError subclass.
coerce_cell() wraps the table so callers always get (value, error).
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Optional

import config
from import_engine.errors import (
    CellError,
    InvalidBooleanError,
    InvalidDateError,
    InvalidNumberError,
    RequiredValueError,
)
from schema.columns import ColumnSpec

_NUMBER_RE = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")

TRUE_TOKENS = frozenset({"true", "yes", "y", "1"})
FALSE_TOKENS = frozenset({"false", "no", "n", "0"})


def is_blank(raw) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def coerce_string(text: str) -> str:
    return text.strip()


def coerce_number(text: str) -> str:
    cleaned = re.sub(r"[,\s]", "", text)
    if not _NUMBER_RE.match(cleaned):
        raise InvalidNumberError(f"Could not convert {text!r} to number")
    # Canonical form is built from the digit string; never via int() or a
    # Decimal context, both of which bound the number of digits.
    sign = "-" if cleaned.startswith("-") else ""
    whole, _, frac = cleaned.lstrip("+-").partition(".")
    whole = whole.lstrip("0") or "0"
    frac = frac.rstrip("0")
    if whole == "0" and not frac:
        return "0"
    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"


def coerce_date(text: str) -> str:
    text = text.strip()
    try:
        parsed = datetime.strptime(text, config.DATE_FORMAT)
    except ValueError:
        raise InvalidDateError(
            f"Could not convert {text!r} to date "
            f"(expected {datetime(2024, 1, 31).strftime(config.DATE_FORMAT)})"
        ) from None
    return parsed.strftime(config.DATE_FORMAT)


def coerce_boolean(text: str) -> str:
    token = text.strip().lower()
    if token in TRUE_TOKENS:
        return "true"
    if token in FALSE_TOKENS:
        return "false"
    raise InvalidBooleanError(
        f"Could not convert {text!r} to boolean. Use true/false, yes/no, or 1/0"
    )


# data_type → coercer
COERCERS: dict[str, Callable[[str], str]] = {
    "string":  coerce_string,
    "number":  coerce_number,
    "date":    coerce_date,
    "boolean": coerce_boolean,
}


def coerce_cell(column: ColumnSpec, raw: Optional[str]) -> tuple[Optional[str], Optional[CellError]]:
    """
    Convert one cell for *column*.

    Returns (value, None) on success, (None, None) for an optional blank
    cell and (None, error) otherwise.  Never raises.
    """
    if is_blank(raw):
        if column.required:
            return None, RequiredValueError(f"Required field {column.name!r} cannot be empty")
        return None, None

    coercer = COERCERS.get(column.data_type, coerce_string)
    try:
        return coercer(str(raw)), None
    except CellError as exc:
        return None, exc
