"""Schema resolution errors."""

from __future__ import annotations

from collections.abc import Sequence


class SchemaError(Exception):
    """Raised for schema decoding, resolution or flattening failures."""

    def __init__(self, message: str, field_path: Sequence[str] = ()) -> None:
        self.message = message
        self.field_path = tuple(field_path)
        super().__init__(self._render())

    @property
    def location(self) -> str:
        """Return the dotted field path, or ``<root>`` for the schema root."""
        return format_field_path(self.field_path) or "<root>"

    def _render(self) -> str:
        return f"{self.location}: {self.message}"


class SchemaConflictError(SchemaError):
    """Raised when ``allOf`` branches declare incompatible types for one field."""


class UnresolvableTypeError(SchemaError):
    """Raised for malformed or unsupported schema shapes."""


def format_field_path(segments: Sequence[str]) -> str:
    """Join path segments with dots, attaching ``[]`` markers to their owner."""
    rendered = ""
    for segment in segments:
        if segment == "[]" or not rendered:
            rendered += segment
        else:
            rendered += f".{segment}"
    return rendered
