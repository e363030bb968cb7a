"""
api.routes_import - /api/v1/templates/{id}/import endpoint.

Accepts an .xlsx or .csv spreadsheet via multipart file upload.
"""

from pathlib import Path

from flask import request, jsonify

import config
from api import api_bp
from import_engine import run_import
from schema.columns import SchemaError


@api_bp.route("/templates/<int:template_id>/import", methods=["POST"])
def api_import_sheet(template_id: int):
    """
    POST /api/v1/templates/{id}/import?delete_missing=0|1

    Multipart: field name 'file'.
    200 with the import report on success, 422 when the import failed.
    """
    delete_missing = request.args.get("delete_missing", "0") == "1"

    f = request.files.get("file")
    if not f or not f.filename:
        return jsonify({"error": "no file in upload"}), 400

    ext = Path(f.filename).suffix.lower()
    if ext not in config.ALLOWED_EXTENSIONS:
        allowed = ", ".join(sorted(config.ALLOWED_EXTENSIONS))
        return jsonify({"error": f"unsupported file type {ext or '(none)'}; use {allowed}"}), 400

    try:
        report = run_import(f.stream, template_id,
                            filename=f.filename, delete_missing=delete_missing)
    except LookupError:
        return jsonify({"error": "not found"}), 404
    except SchemaError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(report.to_dict()), (200 if report.success else 422)
