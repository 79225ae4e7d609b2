"""Decoding of raw OpenAPI v3 mappings into schema nodes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .schema_errors import UnresolvableTypeError
from .schema_models import SchemaNode

CONSTRAINT_KEYS = (
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "minProperties",
    "maxProperties",
    "nullable",
)


def decode_schema(raw: Any) -> SchemaNode:
    """Decode a raw schema mapping, keeping shared and recursive fragments shared."""
    return _SchemaDecoder().decode(raw, ())


class _SchemaDecoder:
    """Single-use decoder; memoizes nodes by the identity of their raw mapping."""

    def __init__(self) -> None:
        self._decoded: dict[int, SchemaNode] = {}

    def decode(self, raw: Any, path: tuple[str, ...]) -> SchemaNode:
        if not isinstance(raw, Mapping):
            raise UnresolvableTypeError("schema node must be a mapping", path)
        existing = self._decoded.get(id(raw))
        if existing is not None:
            return existing

        node = SchemaNode()
        self._decoded[id(raw)] = node
        node.type = _optional_type(raw.get("type"), path)
        node.description = _optional_text(raw.get("description"), "description", path)
        node.has_default = "default" in raw
        node.default = raw.get("default")
        node.enum = tuple(_optional_list(raw.get("enum"), "enum", path))
        node.required = _required_names(raw.get("required"), path)
        node.properties = self._properties(raw.get("properties"), path)
        node.items = self._items(raw.get("items"), path)
        node.additional_properties = self._additional_properties(
            raw.get("additionalProperties"), path
        )
        node.all_of = self._branches(raw.get("allOf"), "allOf", path)
        node.one_of = self._branches(raw.get("oneOf"), "oneOf", path)
        node.any_of = self._branches(raw.get("anyOf"), "anyOf", path)
        node.format = _optional_text(raw.get("format"), "format", path) or None
        node.constraints = {key: raw[key] for key in CONSTRAINT_KEYS if key in raw}
        node.int_or_string = bool(raw.get("x-kubernetes-int-or-string", False))
        node.preserve_unknown_fields = bool(raw.get("x-kubernetes-preserve-unknown-fields", False))
        node.embedded_resource = bool(raw.get("x-kubernetes-embedded-resource", False))
        return node

    def _properties(
        self, value: Any, path: tuple[str, ...]
    ) -> tuple[tuple[str, SchemaNode], ...]:
        if value is None:
            return ()
        if not isinstance(value, Mapping):
            raise UnresolvableTypeError("properties must be a mapping", path)
        decoded = []
        for name, child in value.items():
            if not isinstance(name, str):
                raise UnresolvableTypeError(f"property name {name!r} must be a string", path)
            decoded.append((name, self.decode(child, (*path, name))))
        return tuple(decoded)

    def _items(self, value: Any, path: tuple[str, ...]) -> SchemaNode | None:
        if value is None:
            return None
        if isinstance(value, Sequence) and not isinstance(value, str):
            raise UnresolvableTypeError("tuple-typed array items are not supported", path)
        return self.decode(value, (*path, "[]"))

    def _additional_properties(
        self, value: Any, path: tuple[str, ...]
    ) -> SchemaNode | bool | None:
        if value is None or value is False:
            return None
        if value is True:
            return True
        return self.decode(value, (*path, "*"))

    def _branches(
        self, value: Any, keyword: str, path: tuple[str, ...]
    ) -> tuple[SchemaNode, ...]:
        if value is None:
            return ()
        if not isinstance(value, Sequence) or isinstance(value, str):
            raise UnresolvableTypeError(f"{keyword} must be a list of schemas", path)
        return tuple(
            self.decode(branch, (*path, f"{keyword}[{index}]"))
            for index, branch in enumerate(value)
        )


def _optional_type(value: Any, path: tuple[str, ...]) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise UnresolvableTypeError(f"type must be a string, got {value!r}", path)
    return value


def _optional_text(value: Any, key: str, path: tuple[str, ...]) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise UnresolvableTypeError(f"{key} must be a string", path)
    return value


def _optional_list(value: Any, key: str, path: tuple[str, ...]) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise UnresolvableTypeError(f"{key} must be a list", path)
    return list(value)


def _required_names(value: Any, path: tuple[str, ...]) -> tuple[str, ...]:
    names = _optional_list(value, "required", path)
    for name in names:
        if not isinstance(name, str):
            raise UnresolvableTypeError("required entries must be strings", path)
    return tuple(dict.fromkeys(names))
