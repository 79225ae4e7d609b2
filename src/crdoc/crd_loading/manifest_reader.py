"""CRD manifest loading service."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .crd_models import CRDVersion, CustomResourceDefinition

LOGGER = logging.getLogger(__name__)

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")
CRD_KIND = "CustomResourceDefinition"
CRD_API_GROUP = "apiextensions.k8s.io"


class DecodeError(Exception):
    """Raised when an input document cannot be decoded."""


class CRDDecodeError(DecodeError):
    """Raised when a CRD manifest is malformed."""


def load_crds(resources_path: Path | str) -> list[CustomResourceDefinition]:
    """Load every CRD from a manifest file or a directory tree of manifests.

    Directories are walked recursively; files are read in sorted path order so repeated
    runs see the CRDs in the same order.
    """
    path = Path(resources_path)
    if not path.exists():
        raise CRDDecodeError(f"Resources path not found: {path}")
    if path.is_file():
        files = [path]
    else:
        files = sorted(
            candidate
            for candidate in path.rglob("*")
            if candidate.is_file() and candidate.suffix.lower() in MANIFEST_SUFFIXES
        )

    crds: list[CustomResourceDefinition] = []
    for manifest_path in files:
        crds.extend(read_manifest_file(manifest_path))
    LOGGER.debug("Loaded %d CRDs from %d manifest files under %s", len(crds), len(files), path)
    return crds


def read_manifest_file(manifest_path: Path | str) -> list[CustomResourceDefinition]:
    """Decode all CRD documents of one YAML or JSON manifest file."""
    path = Path(manifest_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CRDDecodeError(f"Failed to read manifest {path}: {exc}") from exc
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise CRDDecodeError(f"Failed to parse manifest {path}: {exc}") from exc

    crds = []
    for index, document in enumerate(_expand_lists(documents)):
        if document is None:
            continue
        if not isinstance(document, Mapping):
            raise CRDDecodeError(f"{path}: document {index} must be a mapping.")
        if document.get("kind") != CRD_KIND:
            LOGGER.debug("Skipping %s document %d of kind %r", path, index, document.get("kind"))
            continue
        crds.append(decode_crd(document, source_path=path))
    return crds


def decode_crd(
    document: Mapping[str, Any], *, source_path: Path | None = None
) -> CustomResourceDefinition:
    """Decode one CustomResourceDefinition document (``v1`` or ``v1beta1``)."""
    label = str(source_path) if source_path else "<manifest>"
    api_version = document.get("apiVersion")
    if not isinstance(api_version, str) or not api_version.startswith(f"{CRD_API_GROUP}/"):
        raise CRDDecodeError(f"{label}: unsupported apiVersion {api_version!r}.")

    spec = _require_mapping(document.get("spec"), "spec", label)
    group = _require_non_empty_string(spec.get("group"), "spec.group", label)
    names = _require_mapping(spec.get("names"), "spec.names", label)
    kind = _require_non_empty_string(names.get("kind"), "spec.names.kind", label)
    plural = _optional_string(names.get("plural"), "spec.names.plural", label)
    scope = _optional_string(spec.get("scope"), "spec.scope", label)

    return CustomResourceDefinition(
        group=group,
        kind=kind,
        plural=plural or kind.lower(),
        scope=scope or "Namespaced",
        versions=_decode_versions(spec, label),
        source_path=source_path,
    )


def _expand_lists(documents: Sequence[Any]) -> Iterator[Any]:
    for document in documents:
        if isinstance(document, Mapping) and document.get("kind") == "List":
            items = document.get("items") or []
            if not isinstance(items, Sequence) or isinstance(items, str):
                raise CRDDecodeError("List document items must be a list.")
            yield from items
        else:
            yield document


def _decode_versions(spec: Mapping[str, Any], label: str) -> tuple[CRDVersion, ...]:
    shared_schema = _schema_root(spec.get("validation"), "spec.validation", label)
    raw_versions = spec.get("versions")
    if raw_versions is None:
        name = _require_non_empty_string(spec.get("version"), "spec.version", label)
        return (CRDVersion(name=name, served=True, storage=True, schema=shared_schema),)
    if not isinstance(raw_versions, Sequence) or isinstance(raw_versions, str):
        raise CRDDecodeError(f"{label}: spec.versions must be a list.")
    if not raw_versions:
        raise CRDDecodeError(f"{label}: spec.versions must not be empty.")

    versions: list[CRDVersion] = []
    seen_names: set[str] = set()
    for index, item in enumerate(raw_versions):
        field_prefix = f"spec.versions[{index}]"
        entry = _require_mapping(item, field_prefix, label)
        name = _require_non_empty_string(entry.get("name"), f"{field_prefix}.name", label)
        if name in seen_names:
            raise CRDDecodeError(f"{label}: duplicate version '{name}'.")
        seen_names.add(name)
        schema = _schema_root(entry.get("schema"), f"{field_prefix}.schema", label)
        versions.append(
            CRDVersion(
                name=name,
                served=_optional_bool(entry.get("served"), True, f"{field_prefix}.served", label),
                storage=_optional_bool(
                    entry.get("storage"), False, f"{field_prefix}.storage", label
                ),
                schema=schema if schema is not None else shared_schema,
                deprecated=_optional_bool(
                    entry.get("deprecated"), False, f"{field_prefix}.deprecated", label
                ),
                deprecation_warning=_optional_string(
                    entry.get("deprecationWarning"), f"{field_prefix}.deprecationWarning", label
                ),
            )
        )
    return tuple(versions)


def _schema_root(value: Any, field_name: str, label: str) -> Mapping[str, Any] | None:
    if value is None:
        return None
    validation = _require_mapping(value, field_name, label)
    root = validation.get("openAPIV3Schema")
    if root is None:
        return None
    return _require_mapping(root, f"{field_name}.openAPIV3Schema", label)


def _require_mapping(value: Any, field_name: str, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise CRDDecodeError(f"{label}: {field_name} must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str, label: str) -> str:
    if not isinstance(value, str):
        raise CRDDecodeError(f"{label}: {field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise CRDDecodeError(f"{label}: {field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str, label: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CRDDecodeError(f"{label}: {field_name} must be a string.")
    return value.strip() or None


def _optional_bool(value: Any, default: bool, field_name: str, label: str) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise CRDDecodeError(f"{label}: {field_name} must be a boolean.")
    return value
