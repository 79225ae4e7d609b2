"""Documentation model building exports."""

from .document_builder import (
    DocumentModelBuilder,
    TOCLookupError,
    build_documents,
    build_group_document,
    document_name,
)
from .model_contracts import (
    BuildFailure,
    DocumentBuildResult,
    DocumentModel,
    KindUnit,
    VersionUnit,
)
from .version_aggregator import KindBuildError, aggregate_kind

__all__ = [
    "BuildFailure",
    "DocumentBuildResult",
    "DocumentModel",
    "KindUnit",
    "VersionUnit",
    "DocumentModelBuilder",
    "KindBuildError",
    "TOCLookupError",
    "aggregate_kind",
    "build_documents",
    "build_group_document",
    "document_name",
]
