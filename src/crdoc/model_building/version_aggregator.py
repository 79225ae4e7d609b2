"""Version/kind aggregation service: one CRD to one kind unit."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from crdoc.configuration.runtime_settings import BuildOptions
from crdoc.crd_loading.crd_models import CRDVersion, CustomResourceDefinition
from crdoc.schema_management import SchemaError, project_schema

from .model_contracts import BuildFailure, KindUnit, VersionUnit

LOGGER = logging.getLogger(__name__)


class KindBuildError(Exception):
    """Raised when one version schema of a CRD cannot be documented."""

    def __init__(self, crd: CustomResourceDefinition, version: str, cause: SchemaError) -> None:
        self.failure = BuildFailure(
            group=crd.group,
            kind=crd.kind,
            version=version,
            field_path=cause.location,
            message=cause.message,
            source_path=crd.source_path,
        )
        super().__init__(self.failure.describe())


def aggregate_kind(
    crd: CustomResourceDefinition, options: BuildOptions | None = None
) -> KindUnit:
    """Build the kind unit of one CRD, one version unit per declared version.

    Versions keep their declaration order. Versions that are not served are kept and marked
    unless ``options.include_unserved_versions`` is false.

    Raises:
      KindBuildError: If any version schema fails to resolve; the whole CRD is abandoned.
    """
    resolved_options = options or BuildOptions()
    versions: list[VersionUnit] = []
    for version in crd.versions:
        if not version.served and not resolved_options.include_unserved_versions:
            LOGGER.debug("Dropping unserved version %s of %s/%s", version.name, crd.group, crd.kind)
            continue
        versions.append(_build_version(crd, version, resolved_options))

    return KindUnit(
        group=crd.group,
        kind=crd.kind,
        plural=crd.plural,
        scope=crd.scope,
        versions=tuple(versions),
        description=_kind_description(crd),
    )


def _build_version(
    crd: CustomResourceDefinition, version: CRDVersion, options: BuildOptions
) -> VersionUnit:
    try:
        fields = project_schema(version.schema, options.field_order)
    except SchemaError as exc:
        raise KindBuildError(crd, version.name, exc) from exc
    return VersionUnit(
        name=version.name,
        served=version.served,
        storage=version.storage,
        fields=tuple(fields),
        description=_root_description(version.schema),
        deprecated=version.deprecated,
        deprecation_warning=version.deprecation_warning,
    )


def _kind_description(crd: CustomResourceDefinition) -> str:
    if not crd.versions:
        return ""
    storage = next((version for version in crd.versions if version.storage), crd.versions[0])
    return _root_description(storage.schema)


def _root_description(schema: Mapping[str, Any] | None) -> str:
    if schema is None:
        return ""
    description = schema.get("description")
    return description.strip() if isinstance(description, str) else ""
