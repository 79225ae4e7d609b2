"""Schema management exports."""

from .field_flattener import flatten_fields
from .schema_decoding import decode_schema
from .schema_errors import SchemaConflictError, SchemaError, UnresolvableTypeError
from .schema_models import (
    AlternativesNode,
    AnyNode,
    ArrayNode,
    FieldEntry,
    FieldOrder,
    MapNode,
    NodeDocs,
    ObjectNode,
    PropertyNode,
    ResolvedNode,
    ScalarNode,
    SchemaNode,
    SelfReferenceNode,
)
from .schema_projection import project_schema
from .schema_walker import SchemaShape, classify_schema, merge_all_of, resolve_schema, type_label

__all__ = [
    "AlternativesNode",
    "AnyNode",
    "ArrayNode",
    "FieldEntry",
    "FieldOrder",
    "MapNode",
    "NodeDocs",
    "ObjectNode",
    "PropertyNode",
    "ResolvedNode",
    "ScalarNode",
    "SchemaNode",
    "SelfReferenceNode",
    "SchemaShape",
    "SchemaError",
    "SchemaConflictError",
    "UnresolvableTypeError",
    "classify_schema",
    "decode_schema",
    "flatten_fields",
    "merge_all_of",
    "project_schema",
    "resolve_schema",
    "type_label",
]
