"""Document rendering and writing service."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import jinja2

from crdoc.model_building.model_contracts import DocumentModel

LOGGER = logging.getLogger(__name__)

BUILTIN_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
BUILTIN_TEMPLATE_SUFFIX = ".tmpl"

_ANCHOR_PATTERN = re.compile(r"[^a-z0-9]+")


class RenderError(Exception):
    """Raised when a template cannot be loaded or rendered."""


def builtin_template_names() -> list[str]:
    """Return the names of the templates shipped with crdoc."""
    return sorted(
        path.name
        for path in BUILTIN_TEMPLATE_DIR.iterdir()
        if path.is_file() and path.suffix == BUILTIN_TEMPLATE_SUFFIX
    )


def load_template(template: str) -> jinja2.Template:
    """Load a custom template file, or a built-in template by name.

    An existing file path wins over a built-in name, so a custom template can shadow a
    built-in one. Custom templates may include sibling files from their own directory.
    """
    candidate = Path(template)
    if candidate.is_file():
        loader = jinja2.FileSystemLoader(str(candidate.resolve().parent))
        name = candidate.name
    elif template in builtin_template_names():
        loader = jinja2.FileSystemLoader(str(BUILTIN_TEMPLATE_DIR))
        name = template
    else:
        available = ", ".join(builtin_template_names())
        raise RenderError(f"Template not found: {template} (built-in templates: {available})")

    try:
        return _environment(loader).get_template(name)
    except jinja2.TemplateError as exc:
        raise RenderError(f"Failed to load template {template}: {exc}") from exc


def render_document(document: DocumentModel, template: jinja2.Template) -> str:
    """Render one document model."""
    try:
        return template.render(document=document, metadata=document.metadata, kinds=document.kinds)
    except jinja2.TemplateError as exc:
        raise RenderError(f"Failed to render {document.name}: {exc}") from exc


def write_documents(
    documents: Sequence[DocumentModel], output_dir: Path | str, template: str
) -> list[Path]:
    """Render every document below ``output_dir`` and return the written paths."""
    loaded = load_template(template)
    destination_root = Path(output_dir)
    written: list[Path] = []
    for document in documents:
        destination = destination_root / document.name
        rendered = render_document(document, loaded)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(rendered, encoding="utf-8")
        LOGGER.debug("Wrote %s (%d kinds)", destination, len(document.kinds))
        written.append(destination)
    return written


def table_cell(value: object) -> str:
    """Make a value safe for a single Markdown table cell."""
    text = "" if value is None else str(value)
    lines = [line.strip() for line in text.strip().splitlines()]
    return "<br>".join(line for line in lines if line).replace("|", "\\|")


def anchor(value: object) -> str:
    """Return the heading anchor Markdown renderers derive from ``value``."""
    return _ANCHOR_PATTERN.sub("-", str(value).lower()).strip("-")


def _environment(loader: jinja2.BaseLoader) -> jinja2.Environment:
    environment = jinja2.Environment(
        loader=loader,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    environment.filters["table_cell"] = table_cell
    environment.filters["anchor"] = anchor
    return environment
