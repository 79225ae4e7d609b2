"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from crdoc.schema_management.schema_models import FieldOrder

DEFAULT_TEMPLATE = "markdown.tmpl"
DEFAULT_MAX_WORKERS = 4


class UnmatchedTOCPolicy(str, Enum):
    """What happens to a TOC entry that selects no CRD."""

    SKIP = "skip"
    ERROR = "error"


class RoutingStrategy(str, Enum):
    """How the CRDs of one API group are partitioned into documents."""

    PER_GROUP = "per-group"
    PER_KIND = "per-kind"


@dataclass(frozen=True)
class BuildOptions:
    """Options consumed by the documentation model builder."""

    include_unserved_versions: bool = True
    field_order: FieldOrder = FieldOrder.DECLARATION
    toc_unmatched: UnmatchedTOCPolicy = UnmatchedTOCPolicy.SKIP
    routing: Mapping[str, RoutingStrategy] = field(default_factory=dict)

    def routing_for(self, group: str) -> RoutingStrategy:
        """Return the routing strategy configured for ``group``."""
        return self.routing.get(group, RoutingStrategy.PER_GROUP)


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate for one documentation run."""

    resources: Path
    output: Path
    template: str = DEFAULT_TEMPLATE
    toc: Path | None = None
    build: BuildOptions = field(default_factory=BuildOptions)
    max_workers: int = DEFAULT_MAX_WORKERS
