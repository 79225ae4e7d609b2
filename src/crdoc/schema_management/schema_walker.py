"""Schema resolution service.

Turns decoded schema nodes into resolved nodes with exactly one effective shape each.
Composite keywords are handled as two variants: ``allOf`` merges every branch into one
node, while ``oneOf``/``anyOf`` keep their typed branches as alternatives. Re-entry into a
node already on the current resolution path yields a self-reference marker.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import replace
from enum import Enum
from typing import Any

from .schema_errors import SchemaConflictError, UnresolvableTypeError
from .schema_models import (
    AlternativesNode,
    AnyNode,
    ArrayNode,
    MapNode,
    NodeDocs,
    ObjectNode,
    PropertyNode,
    ResolvedNode,
    ScalarNode,
    SchemaNode,
    SelfReferenceNode,
)

SCALAR_TYPES = frozenset({"string", "integer", "number", "boolean"})
KNOWN_TYPES = SCALAR_TYPES | {"object", "array"}
SELF_REFERENCE_LABEL = "self-reference"
ANY_LABEL = "any"


class SchemaShape(str, Enum):
    """Closed set of shapes a decoded node is classified into before resolution."""

    MERGE = "merge"
    ALTERNATIVES = "alternatives"
    OBJECT = "object"
    MAP = "map"
    ARRAY = "array"
    SCALAR = "scalar"
    ANY = "any"


def resolve_schema(
    node: SchemaNode,
    visited_path: set[int] | None = None,
    *,
    field_path: Sequence[str] = (),
) -> ResolvedNode:
    """Resolve a schema node and everything below it.

    Args:
      node: Decoded schema node.
      visited_path: Identities of the nodes on the current resolution path. Entries are
        added before descending and removed on return, so the set is unchanged afterwards.
      field_path: Path of ``node`` within its document, used for error context.

    Returns:
      The resolved node tree.

    Raises:
      SchemaConflictError: If ``allOf`` branches declare incompatible types.
      UnresolvableTypeError: If a node has an unsupported or malformed shape.
    """
    visited = visited_path if visited_path is not None else set()
    return _resolve(node, visited, tuple(field_path))


def classify_schema(node: SchemaNode, field_path: Sequence[str] = ()) -> SchemaShape:
    """Return the shape ``node`` resolves as."""
    if node.all_of:
        return SchemaShape.MERGE
    if node.int_or_string or any(branch.declares_shape() for branch in _alternatives(node)):
        return SchemaShape.ALTERNATIVES
    if node.type is None:
        if node.properties:
            return SchemaShape.OBJECT
        if node.additional_properties is not None:
            return SchemaShape.MAP
        if node.items is not None:
            return SchemaShape.ARRAY
        return SchemaShape.ANY
    if node.type not in KNOWN_TYPES:
        raise UnresolvableTypeError(f"unsupported type '{node.type}'", field_path)
    if node.type == "object":
        if node.additional_properties is not None and not node.properties:
            return SchemaShape.MAP
        return SchemaShape.OBJECT
    if node.properties:
        raise UnresolvableTypeError(
            f"properties declared on non-object type '{node.type}'", field_path
        )
    if node.type == "array":
        return SchemaShape.ARRAY
    return SchemaShape.SCALAR


def merge_all_of(node: SchemaNode, field_path: Sequence[str] = ()) -> SchemaNode:
    """Merge a node's own keywords with all of its ``allOf`` branches into one node."""
    path = tuple(field_path)
    participants = _merge_participants(node)

    declared_types = _unique(participant.type for participant in participants if participant.type)
    if len(declared_types) > 1:
        raise SchemaConflictError(
            f"allOf branches declare conflicting types: {', '.join(declared_types)}", path
        )
    merged_type = declared_types[0] if declared_types else None
    if merged_type not in (None, "object") and any(p.properties for p in participants):
        raise UnresolvableTypeError(
            f"allOf branch declares properties for non-object type '{merged_type}'", path
        )

    # Only the merged node's own identities join the resolution path.
    return SchemaNode(
        type=merged_type,
        description=next((p.description for p in participants if p.description), ""),
        default=next((p.default for p in participants if p.has_default), None),
        has_default=any(p.has_default for p in participants),
        enum=next((p.enum for p in participants if p.enum), ()),
        required=tuple(_unique(name for p in participants for name in p.required)),
        properties=_merge_properties(participants, path),
        items=_merge_optional(
            [p.items for p in participants if p.items is not None], (*path, "[]")
        ),
        additional_properties=_merge_additional_properties(participants, path),
        one_of=tuple(branch for p in participants for branch in p.one_of),
        any_of=tuple(branch for p in participants for branch in p.any_of),
        format=next((p.format for p in participants if p.format), None),
        constraints=_merge_constraints(participants),
        int_or_string=any(p.int_or_string for p in participants),
        preserve_unknown_fields=any(p.preserve_unknown_fields for p in participants),
        embedded_resource=any(p.embedded_resource for p in participants),
        origins=node.identities,
    )


def type_label(node: ResolvedNode) -> str:
    """Return the human-readable type label of a resolved node."""
    if isinstance(node, ScalarNode):
        return node.type_name
    if isinstance(node, ObjectNode):
        return "object"
    if isinstance(node, ArrayNode):
        return f"array of {_wrap_alternatives(node.items)}"
    if isinstance(node, MapNode):
        return f"map[string]{_wrap_alternatives(node.values)}"
    if isinstance(node, AlternativesNode):
        return " | ".join(_unique(type_label(option) for option in node.options))
    if isinstance(node, SelfReferenceNode):
        return SELF_REFERENCE_LABEL
    return ANY_LABEL


def display_value(value: Any) -> str:
    """Render a schema literal (default, enum member, constraint) as display text."""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, default=str)


def _resolve(node: SchemaNode, visited: set[int], path: tuple[str, ...]) -> ResolvedNode:
    if node.identities & visited:
        return SelfReferenceNode(docs=_docs(node))
    return _resolve_entered(node, visited, path)


def _resolve_entered(
    node: SchemaNode, visited: set[int], path: tuple[str, ...]
) -> ResolvedNode:
    entered = node.identities - visited
    visited.update(entered)
    try:
        return _resolve_shape(node, visited, path)
    finally:
        visited.difference_update(entered)


def _resolve_shape(node: SchemaNode, visited: set[int], path: tuple[str, ...]) -> ResolvedNode:
    shape = classify_schema(node, path)
    if shape is SchemaShape.MERGE:
        return _resolve_entered(merge_all_of(node, path), visited, path)
    if shape is SchemaShape.ALTERNATIVES:
        return _resolve_alternatives(node, visited, path)
    if shape is SchemaShape.OBJECT:
        required = set(node.required)
        return ObjectNode(
            docs=_docs(node),
            properties=tuple(
                PropertyNode(
                    name=name,
                    node=_resolve(child, visited, (*path, name)),
                    required=name in required,
                )
                for name, child in node.properties
            ),
        )
    if shape is SchemaShape.MAP:
        values = node.additional_properties
        return MapNode(
            docs=_docs(node),
            values=(
                _resolve(values, visited, (*path, "*"))
                if isinstance(values, SchemaNode)
                else AnyNode(docs=NodeDocs())
            ),
        )
    if shape is SchemaShape.ARRAY:
        return ArrayNode(
            docs=_docs(node),
            items=(
                _resolve(node.items, visited, (*path, "[]"))
                if node.items is not None
                else AnyNode(docs=NodeDocs())
            ),
        )
    if shape is SchemaShape.SCALAR and node.type is not None:
        return ScalarNode(docs=_docs(node), type_name=node.type)
    return AnyNode(docs=_docs(node))


def _resolve_alternatives(
    node: SchemaNode, visited: set[int], path: tuple[str, ...]
) -> ResolvedNode:
    typed_branches = [branch for branch in _alternatives(node) if branch.declares_shape()]
    if not typed_branches:
        return AlternativesNode(
            docs=_docs(node),
            options=(
                ScalarNode(docs=NodeDocs(), type_name="integer"),
                ScalarNode(docs=NodeDocs(), type_name="string"),
            ),
        )

    base = replace(
        node,
        description="",
        default=None,
        has_default=False,
        enum=(),
        one_of=(),
        any_of=(),
        int_or_string=False,
        origins=node.identities,
    )
    options: list[ResolvedNode] = []
    for branch in typed_branches:
        if branch.identities & visited:
            options.append(SelfReferenceNode(docs=_docs(branch)))
        elif base.declares_shape():
            combined = SchemaNode(
                all_of=(base, branch), origins=base.identities | branch.identities
            )
            options.append(_resolve_entered(merge_all_of(combined, path), visited, path))
        else:
            options.append(_resolve(branch, visited, path))
    return AlternativesNode(docs=_docs(node), options=tuple(options))


def _alternatives(node: SchemaNode) -> tuple[SchemaNode, ...]:
    return node.one_of + node.any_of


def _merge_participants(node: SchemaNode) -> list[SchemaNode]:
    participants: list[SchemaNode] = []
    seen: set[int] = set()

    def collect(current: SchemaNode) -> None:
        if id(current) in seen:
            return
        seen.add(id(current))
        participants.append(current)
        for branch in current.all_of:
            collect(branch)

    collect(node)
    return participants


def _merge_properties(
    participants: Sequence[SchemaNode], path: tuple[str, ...]
) -> tuple[tuple[str, SchemaNode], ...]:
    declared: dict[str, list[SchemaNode]] = {}
    for participant in participants:
        for name, child in participant.properties:
            candidates = declared.setdefault(name, [])
            if all(child is not existing for existing in candidates):
                candidates.append(child)
    return tuple(
        (name, _merge_candidates(candidates, (*path, name)))
        for name, candidates in declared.items()
    )


def _merge_optional(
    candidates: Sequence[SchemaNode], path: tuple[str, ...]
) -> SchemaNode | None:
    if not candidates:
        return None
    return _merge_candidates(candidates, path)


def _merge_candidates(candidates: Sequence[SchemaNode], path: tuple[str, ...]) -> SchemaNode:
    if len(candidates) == 1:
        return candidates[0]
    declared_types = _unique(candidate.type for candidate in candidates if candidate.type)
    if len(declared_types) > 1:
        raise SchemaConflictError(
            f"allOf branches declare conflicting types: {', '.join(declared_types)}", path
        )
    return SchemaNode(
        all_of=tuple(candidates),
        origins=frozenset().union(*(candidate.identities for candidate in candidates)),
    )


def _merge_additional_properties(
    participants: Sequence[SchemaNode], path: tuple[str, ...]
) -> SchemaNode | bool | None:
    schemas = [
        p.additional_properties
        for p in participants
        if isinstance(p.additional_properties, SchemaNode)
    ]
    if schemas:
        return _merge_optional(schemas, (*path, "*"))
    if any(p.additional_properties is True for p in participants):
        return True
    return None


def _merge_constraints(participants: Sequence[SchemaNode]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for participant in reversed(participants):
        merged.update(participant.constraints)
    return merged


def _docs(node: SchemaNode) -> NodeDocs:
    return NodeDocs(
        description=node.description.strip(),
        default=node.default,
        has_default=node.has_default,
        enum=node.enum,
        notes=tuple(_notes(node)),
    )


def _notes(node: SchemaNode) -> list[str]:
    notes = []
    if node.format:
        notes.append(f"format: {node.format}")
    notes.extend(f"{key}: {display_value(value)}" for key, value in node.constraints.items())
    if node.preserve_unknown_fields:
        notes.append("preserves unknown fields")
    if node.embedded_resource:
        notes.append("embedded resource")
    for keyword, branches in (("one of", node.one_of), ("any of", node.any_of)):
        validation_only = [branch for branch in branches if not branch.declares_shape()]
        if validation_only:
            described = " | ".join(_describe_validation(branch) for branch in validation_only)
            notes.append(f"{keyword}: {described}")
    return notes


def _describe_validation(branch: SchemaNode) -> str:
    parts = []
    if branch.required:
        parts.append(f"required [{', '.join(branch.required)}]")
    if branch.format:
        parts.append(f"format: {branch.format}")
    parts.extend(f"{key}: {display_value(value)}" for key, value in branch.constraints.items())
    if branch.enum:
        parts.append(f"enum [{', '.join(display_value(value) for value in branch.enum)}]")
    return ", ".join(parts) or "{}"


def _wrap_alternatives(node: ResolvedNode) -> str:
    label = type_label(node)
    if isinstance(node, AlternativesNode) and " | " in label:
        return f"({label})"
    return label


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))
