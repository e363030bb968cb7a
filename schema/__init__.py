"""
schema - Template schema model and value formatting.

Public API:
    columns.ColumnSpec / TemplateSchema / load_schema / SchemaError
    formatting.format_value
"""

from schema.columns import (                        # noqa: F401
    ColumnSpec,
    TemplateSchema,
    SchemaError,
    load_schema,
)
from schema.formatting import format_value          # noqa: F401
