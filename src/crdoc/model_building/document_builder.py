"""Document model building service.

Kinds are grouped per API group. Without a table of contents a document lists every kind of
its group by case-insensitive kind name; with one, it lists exactly the kinds the entries
select, in entry order.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import replace

from crdoc.configuration.runtime_settings import (
    BuildOptions,
    RoutingStrategy,
    UnmatchedTOCPolicy,
)
from crdoc.toc_loading.toc_models import DocumentMetadata, TableOfContents, TOCEntry

from .model_contracts import DocumentBuildResult, DocumentModel, KindUnit

LOGGER = logging.getLogger(__name__)


class TOCLookupError(Exception):
    """Raised when table-of-contents entries match no CRD and the policy is ``error``."""

    def __init__(self, entries: Sequence[TOCEntry]) -> None:
        self.entries = tuple(entries)
        selectors = ", ".join(entry.selector for entry in self.entries)
        super().__init__(f"Table of contents entries match no CRD: {selectors}")


class DocumentModelBuilder:
    """Collects the kind units of one API group into one document model.

    The builder is append-only: units are never revisited once added, and ``build`` is a pure
    function of what was added, so calling it repeatedly yields equal models.
    """

    def __init__(
        self,
        group: str,
        *,
        name: str | None = None,
        toc_entries: Sequence[TOCEntry] | None = None,
        metadata: DocumentMetadata | None = None,
    ) -> None:
        self.group = group
        self.name = name or document_name(group)
        self._toc_entries = tuple(toc_entries) if toc_entries is not None else None
        self._metadata = metadata or DocumentMetadata()
        self._units: list[KindUnit] = []

    def add(self, unit: KindUnit) -> None:
        """Append one kind unit of this builder's group."""
        if unit.group != self.group:
            raise ValueError(f"Kind {unit.kind} belongs to {unit.group}, not {self.group}.")
        self._units.append(unit)

    def build(self) -> DocumentModel:
        """Return the ordered document model."""
        kinds, _ = self._select()
        return DocumentModel(
            group=self.group, name=self.name, kinds=kinds, metadata=self._metadata
        )

    def unmatched_entries(self) -> tuple[TOCEntry, ...]:
        """Return this group's TOC entries that select no added unit."""
        _, unmatched = self._select()
        return unmatched

    def _select(self) -> tuple[tuple[KindUnit, ...], tuple[TOCEntry, ...]]:
        if self._toc_entries is None:
            return tuple(sorted(self._units, key=lambda unit: unit.kind.casefold())), ()
        kinds: list[KindUnit] = []
        unmatched: list[TOCEntry] = []
        for entry in self._toc_entries:
            selected = _select_for_entry(self._units, entry)
            if selected is None:
                unmatched.append(entry)
            else:
                kinds.append(selected)
        return tuple(kinds), tuple(unmatched)


def build_group_document(
    units: Iterable[KindUnit],
    group: str,
    toc_entries: Sequence[TOCEntry] | None = None,
    *,
    metadata: DocumentMetadata | None = None,
) -> DocumentModel:
    """Build the document of one API group from its kind units."""
    builder = DocumentModelBuilder(group, toc_entries=toc_entries, metadata=metadata)
    for unit in units:
        builder.add(unit)
    return builder.build()


def build_documents(
    units: Sequence[KindUnit],
    *,
    toc: TableOfContents | None = None,
    options: BuildOptions | None = None,
    failed_kinds: Collection[tuple[str, str]] = (),
) -> DocumentBuildResult:
    """Partition kind units into documents, one per group or per kind as routed.

    Args:
      units: Kind units in input order; ties in kind-name ordering keep this order.
      toc: Optional table of contents filtering and ordering the kinds.
      options: Routing and unmatched-entry policy.
      failed_kinds: ``(group, kind)`` pairs that failed to build; TOC entries selecting
        them are not reported as unmatched.

    Raises:
      TOCLookupError: If entries match nothing and the policy is ``error``.
    """
    resolved_options = options or BuildOptions()
    metadata = toc.metadata if toc else DocumentMetadata()
    units_by_group: dict[str, list[KindUnit]] = {}
    for unit in units:
        units_by_group.setdefault(unit.group, []).append(unit)

    documents: list[DocumentModel] = []
    unmatched: list[TOCEntry] = []
    for group in sorted(units_by_group):
        builder = DocumentModelBuilder(
            group,
            toc_entries=toc.entries_for_group(group) if toc else None,
            metadata=metadata,
        )
        for unit in units_by_group[group]:
            builder.add(unit)
        unmatched.extend(builder.unmatched_entries())
        document = builder.build()
        if not document.kinds:
            LOGGER.debug("Skipping document %s: no kinds selected", document.name)
            continue
        if resolved_options.routing_for(group) is RoutingStrategy.PER_KIND:
            documents.extend(_split_per_kind(document))
        else:
            documents.append(document)

    if toc:
        unmatched.extend(entry for entry in toc.entries if entry.group not in units_by_group)
    failed = set(failed_kinds)
    reported = sorted(
        (entry for entry in unmatched if (entry.group, entry.kind) not in failed),
        key=lambda entry: entry.position,
    )
    _apply_unmatched_policy(reported, resolved_options.toc_unmatched)
    return DocumentBuildResult(documents=tuple(documents), unmatched_entries=tuple(reported))


def document_name(group: str, kind: str | None = None) -> str:
    """Return the relative output path of a group document or a per-kind document."""
    group_slug = group.replace(".", "-")
    if kind is None:
        return f"{group_slug}.md"
    return f"{group_slug}/{kind.lower()}.md"


def _select_for_entry(units: Sequence[KindUnit], entry: TOCEntry) -> KindUnit | None:
    for unit in units:
        if unit.kind != entry.kind:
            continue
        if entry.version is None:
            selected = unit
        else:
            versions = tuple(version for version in unit.versions if version.name == entry.version)
            if not versions:
                continue
            selected = replace(unit, versions=versions)
        if entry.description:
            selected = replace(selected, description=entry.description)
        return selected
    return None


def _split_per_kind(document: DocumentModel) -> list[DocumentModel]:
    kinds_by_name: dict[str, list[KindUnit]] = {}
    for unit in document.kinds:
        kinds_by_name.setdefault(unit.kind, []).append(unit)
    return [
        DocumentModel(
            group=document.group,
            name=document_name(document.group, kind),
            kinds=tuple(kinds),
            metadata=document.metadata,
        )
        for kind, kinds in kinds_by_name.items()
    ]


def _apply_unmatched_policy(entries: Sequence[TOCEntry], policy: UnmatchedTOCPolicy) -> None:
    if not entries:
        return
    if policy is UnmatchedTOCPolicy.ERROR:
        raise TOCLookupError(entries)
    for entry in entries:
        LOGGER.warning("Table of contents entry %s matches no CRD; skipping", entry.selector)
