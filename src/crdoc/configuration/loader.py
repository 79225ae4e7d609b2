"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from crdoc.schema_management.schema_models import FieldOrder

from .runtime_settings import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_TEMPLATE,
    BuildOptions,
    Configuration,
    RoutingStrategy,
    UnmatchedTOCPolicy,
)

_EnumT = TypeVar("_EnumT", bound=Enum)

_KNOWN_KEYS = frozenset(
    {
        "resources",
        "output",
        "template",
        "toc",
        "include_unserved_versions",
        "field_order",
        "toc_unmatched",
        "routing",
        "max_workers",
    }
)


class ConfigurationError(Exception):
    """Raised when the configuration is invalid."""


def load_configuration(
    config_path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Configuration:
    """Load the optional configuration file and apply command-line overrides.

    Args:
      config_path: YAML configuration file; relative paths inside it resolve against the
        file's directory. ``None`` means overrides only.
      overrides: Values taken from the command line or environment. ``None`` values are
        ignored; ``routing`` entries are merged over the file's routing table.

    Returns:
      The validated configuration.

    Raises:
      ConfigurationError: If the file is missing or unparsable, or a value is invalid.
    """
    file_values: Mapping[str, Any] = {}
    base_path = Path.cwd()
    if config_path is not None:
        path = Path(config_path)
        file_values = _read_configuration_file(path)
        base_path = path.resolve().parent

    cli_values = {key: value for key, value in (overrides or {}).items() if value is not None}
    unknown = sorted(set(file_values) - _KNOWN_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    resources = _resolve_setting_path("resources", file_values, cli_values, base_path)
    output = _resolve_setting_path("output", file_values, cli_values, base_path)
    if resources is None:
        raise ConfigurationError("resources is required.")
    if output is None:
        raise ConfigurationError("output is required.")

    return Configuration(
        resources=resources,
        output=output,
        template=_resolve_template(file_values, cli_values, base_path),
        toc=_resolve_setting_path("toc", file_values, cli_values, base_path),
        build=BuildOptions(
            include_unserved_versions=_require_bool(
                _pick("include_unserved_versions", file_values, cli_values, True),
                "include_unserved_versions",
            ),
            field_order=_require_enum(
                _pick("field_order", file_values, cli_values, FieldOrder.DECLARATION.value),
                FieldOrder,
                "field_order",
            ),
            toc_unmatched=_require_enum(
                _pick("toc_unmatched", file_values, cli_values, UnmatchedTOCPolicy.SKIP.value),
                UnmatchedTOCPolicy,
                "toc_unmatched",
            ),
            routing={
                **_parse_routing(file_values.get("routing")),
                **_parse_routing(cli_values.get("routing")),
            },
        ),
        max_workers=_require_positive_int(
            _pick("max_workers", file_values, cli_values, DEFAULT_MAX_WORKERS), "max_workers"
        ),
    )


def _read_configuration_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")
    return parsed


def _pick(
    key: str, file_values: Mapping[str, Any], cli_values: Mapping[str, Any], default: Any
) -> Any:
    if key in cli_values:
        return cli_values[key]
    value = file_values.get(key)
    return default if value is None else value


def _resolve_setting_path(
    key: str, file_values: Mapping[str, Any], cli_values: Mapping[str, Any], base_path: Path
) -> Path | None:
    if key in cli_values:
        return Path(_require_non_empty_string(cli_values[key], key))
    value = file_values.get(key)
    if value is None:
        return None
    return _resolve_path(base_path, _require_non_empty_string(value, key))


def _resolve_template(
    file_values: Mapping[str, Any], cli_values: Mapping[str, Any], base_path: Path
) -> str:
    if "template" in cli_values:
        return _require_non_empty_string(cli_values["template"], "template")
    value = file_values.get("template")
    if value is None:
        return DEFAULT_TEMPLATE
    template = _require_non_empty_string(value, "template")
    candidate = _resolve_path(base_path, template)
    return str(candidate) if candidate.is_file() else template


def _parse_routing(value: Any) -> dict[str, RoutingStrategy]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError("routing must be a mapping of API group to strategy.")
    routing = {}
    for group, strategy in value.items():
        group_name = _require_non_empty_string(group, "routing group")
        routing[group_name] = _require_enum(strategy, RoutingStrategy, f"routing.{group_name}")
    return routing


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_enum(value: Any, enum_type: type[_EnumT], field_name: str) -> _EnumT:
    if isinstance(value, enum_type):
        return value
    allowed = ", ".join(str(member.value) for member in enum_type)
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be one of: {allowed}.")
    try:
        return enum_type(value.strip().lower())
    except ValueError as exc:
        raise ConfigurationError(f"{field_name} must be one of: {allowed}.") from exc


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if isinstance(value, Path):
        value = str(value)
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value


def per_kind_routing(groups: Sequence[str]) -> dict[str, str]:
    """Build a routing override that sends every listed group to per-kind documents."""
    return {group: RoutingStrategy.PER_KIND.value for group in groups}
