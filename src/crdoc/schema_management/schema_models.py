"""Schema management entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldOrder(str, Enum):
    """Property iteration policy applied while flattening."""

    DECLARATION = "declaration"
    ALPHABETICAL = "alphabetical"


@dataclass(eq=False)
class SchemaNode:  # pylint: disable=too-many-instance-attributes
    """Decoded OpenAPI v3 schema fragment.

    Equality is object identity: two structurally equal fragments are still distinct nodes,
    which is what cycle detection keys on. ``origins`` lists the identities a synthetic
    (merged) node stands for on the resolution path; decoded nodes leave it empty.
    """

    type: str | None = None
    description: str = ""
    default: Any = None
    has_default: bool = False
    enum: tuple[Any, ...] = ()
    required: tuple[str, ...] = ()
    properties: tuple[tuple[str, SchemaNode], ...] = ()
    items: SchemaNode | None = None
    additional_properties: SchemaNode | bool | None = None
    all_of: tuple[SchemaNode, ...] = ()
    one_of: tuple[SchemaNode, ...] = ()
    any_of: tuple[SchemaNode, ...] = ()
    format: str | None = None
    constraints: Mapping[str, Any] = field(default_factory=dict)
    int_or_string: bool = False
    preserve_unknown_fields: bool = False
    embedded_resource: bool = False
    origins: frozenset[int] = frozenset()

    @property
    def identities(self) -> frozenset[int]:
        """Return the node identities used for re-entry detection."""
        return self.origins or frozenset({id(self)})

    def declares_shape(self) -> bool:
        """Return True when the node says something about its structural type."""
        return bool(
            self.type
            or self.properties
            or self.items is not None
            or self.additional_properties is not None
            or self.all_of
            or self.one_of
            or self.any_of
            or self.int_or_string
        )


@dataclass(frozen=True)
class NodeDocs:
    """Documentation attributes shared by every resolved node."""

    description: str = ""
    default: Any = None
    has_default: bool = False
    enum: tuple[Any, ...] = ()
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScalarNode:
    """Resolved string, integer, number or boolean."""

    docs: NodeDocs
    type_name: str


@dataclass(frozen=True)
class PropertyNode:
    """Named child of an object node."""

    name: str
    node: ResolvedNode
    required: bool


@dataclass(frozen=True)
class ObjectNode:
    """Resolved object with ordered properties."""

    docs: NodeDocs
    properties: tuple[PropertyNode, ...]


@dataclass(frozen=True)
class ArrayNode:
    """Resolved array; the item schema is resolved as well."""

    docs: NodeDocs
    items: ResolvedNode


@dataclass(frozen=True)
class MapNode:
    """Resolved object whose keys are free-form (``additionalProperties``)."""

    docs: NodeDocs
    values: ResolvedNode


@dataclass(frozen=True)
class AlternativesNode:
    """Resolved ``oneOf``/``anyOf``: alternative sub-schemas documented under one field."""

    docs: NodeDocs
    options: tuple[ResolvedNode, ...]


@dataclass(frozen=True)
class SelfReferenceNode:
    """Terminal marker for a node re-entered within its own resolution path."""

    docs: NodeDocs


@dataclass(frozen=True)
class AnyNode:
    """Node without type information; never expanded."""

    docs: NodeDocs


ResolvedNode = (
    ScalarNode
    | ObjectNode
    | ArrayNode
    | MapNode
    | AlternativesNode
    | SelfReferenceNode
    | AnyNode
)


@dataclass(frozen=True)
class FieldEntry:  # pylint: disable=too-many-instance-attributes
    """One documentation row produced by flattening a resolved schema."""

    path: str
    path_segments: tuple[str, ...]
    name: str
    depth: int
    parent_path: str | None
    type_label: str
    required: bool
    description: str
    default: str | None
    enum: tuple[str, ...]
    constraints: tuple[str, ...]
    variant: int | None
    has_children: bool
