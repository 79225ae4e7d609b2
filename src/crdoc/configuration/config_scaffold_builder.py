"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "crdoc.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Configuration template for crdoc.
# Relative paths are resolved against the directory of this file.
# Command-line options (and CRDOC_* environment variables) override these values.

# File or directory containing CustomResourceDefinition manifests.
resources: "<REQUIRED>"
# Directory receiving one Markdown document per API group.
output: "<REQUIRED>"

# Built-in template name (markdown.tmpl, frontmatter.tmpl) or path to a custom template.
template: "markdown.tmpl"
# Table of contents selecting and ordering the documented kinds.
# toc: "<OPTIONAL>"

# Document versions that are not served (true) or leave them out (false).
include_unserved_versions: true
# Property order within each version: declaration or alphabetical.
field_order: "declaration"
# TOC entries matching no CRD: skip (log a warning) or error (fail the run).
toc_unmatched: "skip"

# Groups whose kinds are written to one document per kind instead of one per group.
routing: {}
#   example.com: "per-kind"

# Number of CRDs whose schemas are resolved concurrently.
max_workers: 4
"""


def build_placeholder_configuration() -> str:
    """Build a YAML configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
