"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from crdoc.model_building.model_contracts import BuildFailure, KindUnit
from crdoc.toc_loading.toc_models import TOCEntry


@dataclass(frozen=True)
class KindBuildResults:
    """Fan-in of the per-CRD builds, in CRD input order."""

    units: tuple[KindUnit, ...]
    failures: tuple[BuildFailure, ...]


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    written_paths: tuple[Path, ...]
    failures: tuple[BuildFailure, ...] = ()
    unmatched_entries: tuple[TOCEntry, ...] = ()

    @property
    def succeeded(self) -> bool:
        """Return True when every CRD was documented."""
        return not self.failures
