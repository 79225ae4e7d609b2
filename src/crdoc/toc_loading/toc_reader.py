"""Table-of-contents loading service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from crdoc.crd_loading.manifest_reader import DecodeError

from .toc_models import DocumentMetadata, TableOfContents, TOCEntry


class TOCDecodeError(DecodeError):
    """Raised when the table-of-contents file is malformed."""


def load_table_of_contents(toc_path: Path | str) -> TableOfContents:
    """Load a TOC file of the form ``{metadata: {...}, groups: [{group, version, kinds}]}``."""
    path = Path(toc_path)
    if not path.exists():
        raise TOCDecodeError(f"Table of contents not found: {path}")
    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise TOCDecodeError(f"Failed to parse table of contents {path}: {exc}") from exc
    return parse_table_of_contents(parsed)


def parse_table_of_contents(parsed: Any) -> TableOfContents:
    """Build a table of contents from an already decoded document."""
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise TOCDecodeError("Table of contents root must be a mapping.")

    metadata = _parse_metadata(parsed.get("metadata"))
    groups = parsed.get("groups") or []
    if not isinstance(groups, Sequence) or isinstance(groups, str):
        raise TOCDecodeError("groups must be a list.")

    entries: list[TOCEntry] = []
    for group_index, raw_group in enumerate(groups):
        label = f"groups[{group_index}]"
        group_section = _require_mapping(raw_group, label)
        group = _require_non_empty_string(group_section.get("group"), f"{label}.group")
        group_version = _optional_string(group_section.get("version"), f"{label}.version")
        kinds = group_section.get("kinds") or []
        if not isinstance(kinds, Sequence) or isinstance(kinds, str):
            raise TOCDecodeError(f"{label}.kinds must be a list.")
        for kind_index, raw_kind in enumerate(kinds):
            entries.append(
                _parse_kind(
                    raw_kind,
                    f"{label}.kinds[{kind_index}]",
                    group=group,
                    group_version=group_version,
                    position=len(entries),
                )
            )
    return TableOfContents(metadata=metadata, entries=tuple(entries))


def _parse_kind(
    value: Any, label: str, *, group: str, group_version: str | None, position: int
) -> TOCEntry:
    if isinstance(value, str):
        kind = _require_non_empty_string(value, label)
        return TOCEntry(group=group, kind=kind, version=group_version, position=position)
    section = _require_mapping(value, label)
    kind = _require_non_empty_string(section.get("name"), f"{label}.name")
    version = _optional_string(section.get("version"), f"{label}.version")
    description = _optional_string(section.get("description"), f"{label}.description")
    return TOCEntry(
        group=group,
        kind=kind,
        version=version or group_version,
        description=description,
        position=position,
    )


def _parse_metadata(value: Any) -> DocumentMetadata:
    if value is None:
        return DocumentMetadata()
    section = _require_mapping(value, "metadata")
    weight = section.get("weight")
    if weight is not None and (isinstance(weight, bool) or not isinstance(weight, int)):
        raise TOCDecodeError("metadata.weight must be an integer.")
    return DocumentMetadata(
        title=_optional_string(section.get("title"), "metadata.title"),
        weight=weight,
        description=_optional_string(section.get("description"), "metadata.description"),
    )


def _require_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TOCDecodeError(f"{field_name} must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise TOCDecodeError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise TOCDecodeError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TOCDecodeError(f"{field_name} must be a string.")
    return value.strip() or None
