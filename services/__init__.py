"""
services - Business-logic layer sitting between API and DB.
"""

from services.template_service import TemplateService    # noqa: F401
