"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration, per_kind_routing
from .runtime_settings import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_TEMPLATE,
    BuildOptions,
    Configuration,
    RoutingStrategy,
    UnmatchedTOCPolicy,
)

__all__ = [
    "BuildOptions",
    "Configuration",
    "RoutingStrategy",
    "UnmatchedTOCPolicy",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_TEMPLATE",
    "ConfigurationError",
    "load_configuration",
    "per_kind_routing",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
