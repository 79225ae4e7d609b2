"""Table-of-contents entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentMetadata:
    """Front-matter attributes shared by every rendered document."""

    title: str | None = None
    weight: int | None = None
    description: str | None = None


@dataclass(frozen=True)
class TOCEntry:
    """Selects one kind (optionally one version) and fixes its position in the output."""

    group: str
    kind: str
    version: str | None = None
    description: str | None = None
    position: int = 0

    @property
    def selector(self) -> str:
        """Return ``group/kind`` or ``group/version/kind`` for messages."""
        if self.version:
            return f"{self.group}/{self.version}/{self.kind}"
        return f"{self.group}/{self.kind}"


@dataclass(frozen=True)
class TableOfContents:
    """Ordered TOC entries plus document metadata."""

    metadata: DocumentMetadata
    entries: tuple[TOCEntry, ...]

    def entries_for_group(self, group: str) -> tuple[TOCEntry, ...]:
        """Return the entries selecting ``group``, in file order."""
        return tuple(entry for entry in self.entries if entry.group == group)
