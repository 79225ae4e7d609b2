"""Schema projection service: raw schema mapping to documentation rows."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .field_flattener import flatten_fields
from .schema_decoding import decode_schema
from .schema_models import FieldEntry, FieldOrder
from .schema_walker import resolve_schema


def project_schema(
    raw_schema: Mapping[str, Any] | None,
    field_order: FieldOrder = FieldOrder.DECLARATION,
) -> list[FieldEntry]:
    """Decode, resolve and flatten one schema root; a missing schema has no rows."""
    if raw_schema is None:
        return []
    return flatten_fields(resolve_schema(decode_schema(raw_schema)), field_order)
