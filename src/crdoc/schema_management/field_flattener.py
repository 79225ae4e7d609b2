"""Flattening of resolved schemas into documentation rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .schema_errors import SchemaConflictError, UnresolvableTypeError, format_field_path
from .schema_models import (
    AlternativesNode,
    AnyNode,
    ArrayNode,
    FieldEntry,
    FieldOrder,
    MapNode,
    ObjectNode,
    PropertyNode,
    ResolvedNode,
)
from .schema_walker import display_value, type_label

ARRAY_ITEM_SEGMENT = "[]"
MAP_VALUE_SEGMENT = "*"


def flatten_fields(
    resolved: ResolvedNode, field_order: FieldOrder = FieldOrder.DECLARATION
) -> list[FieldEntry]:
    """Return documentation rows in depth-first pre-order.

    The root object emits no row of its own; its properties are depth 0. Array items and
    map values emit no row either, their children hang off the owning field's row. A root
    whose alternatives are all objects contributes every option's properties, tagged with
    the option index.
    """
    if isinstance(resolved, AnyNode):
        return []
    if not _is_object_root(resolved):
        raise UnresolvableTypeError(
            f"schema root must be an object, got '{type_label(resolved)}'"
        )
    fields: list[FieldEntry] = []
    _flatten_children(
        resolved,
        segments=(),
        parent_path=None,
        depth=0,
        variant=None,
        variant_path=(),
        state=_FlattenState(field_order=field_order, fields=fields, seen=set()),
    )
    return fields


@dataclass
class _FlattenState:
    """Mutable collector shared across one flattening pass."""

    field_order: FieldOrder
    fields: list[FieldEntry]
    seen: set[tuple[str, tuple[int, ...]]]


def _flatten_children(
    node: ResolvedNode,
    *,
    segments: tuple[str, ...],
    parent_path: str | None,
    depth: int,
    variant: int | None,
    variant_path: tuple[int, ...],
    state: _FlattenState,
) -> None:
    if isinstance(node, ObjectNode):
        for prop in _ordered(node.properties, state.field_order):
            entry = _register_field(
                prop, segments, parent_path, depth, variant, variant_path, state
            )
            _flatten_children(
                prop.node,
                segments=entry.path_segments,
                parent_path=entry.path,
                depth=depth + 1,
                variant=variant,
                variant_path=variant_path,
                state=state,
            )
    elif isinstance(node, ArrayNode):
        _flatten_children(
            node.items,
            segments=(*segments, ARRAY_ITEM_SEGMENT),
            parent_path=parent_path,
            depth=depth,
            variant=variant,
            variant_path=variant_path,
            state=state,
        )
    elif isinstance(node, MapNode):
        _flatten_children(
            node.values,
            segments=(*segments, MAP_VALUE_SEGMENT),
            parent_path=parent_path,
            depth=depth,
            variant=variant,
            variant_path=variant_path,
            state=state,
        )
    elif isinstance(node, AlternativesNode):
        for index, option in enumerate(node.options):
            _flatten_children(
                option,
                segments=segments,
                parent_path=parent_path,
                depth=depth,
                variant=index,
                variant_path=(*variant_path, index),
                state=state,
            )


def _register_field(
    prop: PropertyNode,
    segments: tuple[str, ...],
    parent_path: str | None,
    depth: int,
    variant: int | None,
    variant_path: tuple[int, ...],
    state: _FlattenState,
) -> FieldEntry:
    path_segments = (*segments, prop.name)
    path = format_field_path(path_segments)
    # Keyed on every enclosing option index, not just the innermost one.
    if (path, variant_path) in state.seen:
        raise SchemaConflictError("duplicate flattened field", path_segments)
    state.seen.add((path, variant_path))

    docs = prop.node.docs
    entry = FieldEntry(
        path=path,
        path_segments=path_segments,
        name=prop.name,
        depth=depth,
        parent_path=parent_path,
        type_label=type_label(prop.node),
        required=prop.required,
        description=docs.description,
        default=display_value(docs.default) if docs.has_default else None,
        enum=tuple(display_value(value) for value in docs.enum),
        constraints=docs.notes,
        variant=variant,
        has_children=_has_rows(prop.node),
    )
    state.fields.append(entry)
    return entry


def _is_object_root(node: ResolvedNode) -> bool:
    if isinstance(node, AlternativesNode):
        return all(isinstance(option, ObjectNode) for option in node.options)
    return isinstance(node, ObjectNode)


def _has_rows(node: ResolvedNode) -> bool:
    if isinstance(node, ObjectNode):
        return bool(node.properties)
    if isinstance(node, ArrayNode):
        return _has_rows(node.items)
    if isinstance(node, MapNode):
        return _has_rows(node.values)
    if isinstance(node, AlternativesNode):
        return any(_has_rows(option) for option in node.options)
    return False


def _ordered(
    properties: Sequence[PropertyNode], field_order: FieldOrder
) -> Sequence[PropertyNode]:
    if field_order is FieldOrder.ALPHABETICAL:
        return sorted(properties, key=lambda prop: prop.name)
    return properties
