"""Document rendering exports."""

from .markdown_renderer import (
    RenderError,
    anchor,
    builtin_template_names,
    load_template,
    render_document,
    table_cell,
    write_documents,
)

__all__ = [
    "RenderError",
    "anchor",
    "builtin_template_names",
    "load_template",
    "render_document",
    "table_cell",
    "write_documents",
]
