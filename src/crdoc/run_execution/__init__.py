"""Run execution domain exports."""

from .documentation_run_use_case import (
    RunExecutionError,
    aggregate_kinds,
    execute_documentation_run,
)
from .run_contracts import KindBuildResults, RunOutcome

__all__ = [
    "KindBuildResults",
    "RunOutcome",
    "RunExecutionError",
    "aggregate_kinds",
    "execute_documentation_run",
]
