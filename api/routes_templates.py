"""
api.routes_templates - /api/v1/templates CRUD endpoints.
"""

from flask import request, jsonify

from api import api_bp
from db import get_session
from schema.formatting import format_value
from services.template_service import TemplateService


@api_bp.route("/templates")
def list_templates():
    """GET /api/v1/templates"""
    session = get_session()
    try:
        return jsonify([t.to_dict() for t in TemplateService.list_all(session)])
    finally:
        session.close()


@api_bp.route("/templates", methods=["POST"])
def create_template():
    """POST /api/v1/templates  {"name": "..."}"""
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        template = TemplateService.create(session, data.get("name", ""))
        session.commit()
        return jsonify(template.to_dict()), 201
    except ValueError as e:
        session.rollback()
        return jsonify({"error": str(e)}), 400
    finally:
        session.close()


@api_bp.route("/templates/<int:template_id>")
def get_template(template_id: int):
    """GET /api/v1/templates/{id}"""
    session = get_session()
    try:
        template = TemplateService.get(session, template_id)
        if not template:
            return jsonify({"error": "not found"}), 404
        return jsonify(template.to_dict())
    finally:
        session.close()


@api_bp.route("/templates/<int:template_id>/columns", methods=["POST"])
def add_column(template_id: int):
    """POST /api/v1/templates/{id}/columns  {"name", "data_type", "required"}"""
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        template = TemplateService.get(session, template_id)
        if not template:
            return jsonify({"error": "not found"}), 404
        column = TemplateService.add_column(
            session, template,
            name=data.get("name", ""),
            data_type=data.get("data_type", "string"),
            required=bool(data.get("required", False)),
        )
        session.commit()
        return jsonify(column.to_dict()), 201
    except ValueError as e:
        session.rollback()
        return jsonify({"error": str(e)}), 400
    finally:
        session.close()


@api_bp.route("/templates/<int:template_id>/columns/<int:position>", methods=["DELETE"])
def remove_column(template_id: int, position: int):
    """DELETE /api/v1/templates/{id}/columns/{position}"""
    session = get_session()
    try:
        template = TemplateService.get(session, template_id)
        if not template or not TemplateService.remove_column(session, template, position):
            return jsonify({"error": "not found"}), 404
        session.commit()
        return jsonify(template.to_dict())
    finally:
        session.close()


@api_bp.route("/templates/<int:template_id>/records")
def list_records(template_id: int):
    """
    GET /api/v1/templates/{id}/records?formatted=0|1

    formatted=1 renders numbers, dates and booleans for display.
    """
    formatted = request.args.get("formatted", "0") == "1"
    session = get_session()
    try:
        template = TemplateService.get(session, template_id)
        if not template:
            return jsonify({"error": "not found"}), 404
        records = TemplateService.records(session, template)
        return jsonify({
            "template": template.to_dict(),
            "total": len(records),
            "records": [
                r.to_dict(columns=template.columns,
                          formatter=format_value if formatted else None)
                for r in records
            ],
        })
    finally:
        session.close()
