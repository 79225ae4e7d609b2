"""Documentation run use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from crdoc.configuration.runtime_settings import BuildOptions, Configuration
from crdoc.crd_loading import CustomResourceDefinition, DecodeError, load_crds
from crdoc.document_rendering import RenderError, write_documents
from crdoc.model_building import (
    BuildFailure,
    KindBuildError,
    KindUnit,
    TOCLookupError,
    aggregate_kind,
    build_documents,
)
from crdoc.toc_loading import load_table_of_contents

from .run_contracts import KindBuildResults, RunOutcome

LOGGER = logging.getLogger(__name__)

KindAggregator = Callable[[CustomResourceDefinition, BuildOptions], KindUnit]


class RunExecutionError(Exception):
    """Raised when a documentation run cannot be completed."""


def execute_documentation_run(
    configuration: Configuration,
    *,
    aggregator: KindAggregator = aggregate_kind,
) -> RunOutcome:
    """Execute one documentation run and return the run outcome.

    CRDs whose schemas fail to resolve are left out of the documents and reported in
    ``RunOutcome.failures``; every other kind is still written.
    """
    try:
        crds = load_crds(configuration.resources)
        toc = load_table_of_contents(configuration.toc) if configuration.toc else None
    except DecodeError as exc:
        raise RunExecutionError(str(exc)) from exc

    results = aggregate_kinds(
        crds,
        configuration.build,
        max_workers=configuration.max_workers,
        aggregator=aggregator,
    )
    for failure in results.failures:
        LOGGER.warning("Excluding %s", failure.describe())

    try:
        build = build_documents(
            results.units,
            toc=toc,
            options=configuration.build,
            failed_kinds={(failure.group, failure.kind) for failure in results.failures},
        )
        configuration.output.mkdir(parents=True, exist_ok=True)
        written = write_documents(build.documents, configuration.output, configuration.template)
    except (TOCLookupError, RenderError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc

    return RunOutcome(
        written_paths=tuple(written),
        failures=results.failures,
        unmatched_entries=build.unmatched_entries,
    )


def aggregate_kinds(
    crds: Sequence[CustomResourceDefinition],
    options: BuildOptions,
    *,
    max_workers: int,
    aggregator: KindAggregator = aggregate_kind,
) -> KindBuildResults:
    """Build every CRD concurrently; results keep CRD input order."""
    futures: list[Future[KindUnit | BuildFailure]] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for crd in crds:
            futures.append(executor.submit(_aggregate_isolated, aggregator, crd, options))
        outcomes = [future.result() for future in futures]

    return KindBuildResults(
        units=tuple(outcome for outcome in outcomes if isinstance(outcome, KindUnit)),
        failures=tuple(outcome for outcome in outcomes if isinstance(outcome, BuildFailure)),
    )


def _aggregate_isolated(
    aggregator: KindAggregator, crd: CustomResourceDefinition, options: BuildOptions
) -> KindUnit | BuildFailure:
    try:
        return aggregator(crd, options)
    except KindBuildError as exc:
        return exc.failure
