"""
import_engine - Spreadsheet import reconciliation pipeline.

Public API:
    run_import(source, template_id, filename=None, delete_missing=False) → ImportResult
"""

from import_engine.importer import run_import                    # noqa: F401
from import_engine.report import ImportResult, ImportState       # noqa: F401
