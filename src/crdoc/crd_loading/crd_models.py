"""CRD loading entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CRDVersion:
    """One declared version of a CustomResourceDefinition."""

    name: str
    served: bool
    storage: bool
    schema: Mapping[str, Any] | None
    deprecated: bool = False
    deprecation_warning: str | None = None


@dataclass(frozen=True)
class CustomResourceDefinition:
    """Typed view of a CustomResourceDefinition manifest."""

    group: str
    kind: str
    plural: str
    scope: str
    versions: tuple[CRDVersion, ...]
    source_path: Path | None = None

    @property
    def name(self) -> str:
        """Return the conventional ``<plural>.<group>`` resource name."""
        return f"{self.plural}.{self.group}"
