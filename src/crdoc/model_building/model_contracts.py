"""Documentation model entities handed to rendering."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from crdoc.schema_management.schema_models import FieldEntry
from crdoc.toc_loading.toc_models import DocumentMetadata, TOCEntry


@dataclass(frozen=True)
class VersionUnit:
    """One declared API version of one CRD with its flattened fields."""

    name: str
    served: bool
    storage: bool
    fields: tuple[FieldEntry, ...]
    description: str = ""
    deprecated: bool = False
    deprecation_warning: str | None = None

    @property
    def top_level_fields(self) -> tuple[FieldEntry, ...]:
        """Return the rows without a parent row."""
        return tuple(entry for entry in self.fields if entry.parent_path is None)

    def children_of(self, entry: FieldEntry) -> tuple[FieldEntry, ...]:
        """Return the direct child rows of ``entry`` in flattened order."""
        return tuple(candidate for candidate in self.fields if candidate.parent_path == entry.path)


@dataclass(frozen=True)
class KindUnit:
    """One CRD kind and its versions."""

    group: str
    kind: str
    plural: str
    scope: str
    versions: tuple[VersionUnit, ...]
    description: str = ""

    @property
    def key(self) -> tuple[str, str]:
        """Return the ``(group, kind)`` pair identifying the CRD."""
        return (self.group, self.kind)


@dataclass(frozen=True)
class DocumentModel:
    """Ordered kinds destined for one rendered document."""

    group: str
    name: str
    kinds: tuple[KindUnit, ...]
    metadata: DocumentMetadata = DocumentMetadata()


@dataclass(frozen=True)
class BuildFailure:
    """A CRD excluded from the model because one of its schemas could not be resolved."""

    group: str
    kind: str
    version: str
    field_path: str
    message: str
    source_path: Path | None = None

    def describe(self) -> str:
        """Return a one-line description locating the offending manifest."""
        location = f" ({self.source_path})" if self.source_path else ""
        return (
            f"{self.group}/{self.version}/{self.kind}{location} at {self.field_path}: "
            f"{self.message}"
        )


@dataclass(frozen=True)
class DocumentBuildResult:
    """Documents built for one run plus the TOC entries that selected nothing."""

    documents: tuple[DocumentModel, ...]
    unmatched_entries: tuple[TOCEntry, ...] = ()
