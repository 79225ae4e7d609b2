"""Configuration loader tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from crdoc.configuration import ConfigurationError, load_configuration, per_kind_routing
from crdoc.configuration.runtime_settings import RoutingStrategy, UnmatchedTOCPolicy
from crdoc.schema_management import FieldOrder


def _write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "crdoc.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_overrides_only_use_defaults() -> None:
    configuration = load_configuration(overrides={"resources": "crds", "output": "docs"})

    assert configuration.resources == Path("crds")
    assert configuration.output == Path("docs")
    assert configuration.template == "markdown.tmpl"
    assert configuration.toc is None
    assert configuration.build.include_unserved_versions is True
    assert configuration.build.field_order is FieldOrder.DECLARATION
    assert configuration.build.toc_unmatched is UnmatchedTOCPolicy.SKIP
    assert configuration.build.routing_for("example.com") is RoutingStrategy.PER_GROUP
    assert configuration.max_workers == 4


def test_file_values_resolve_relative_to_the_file(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        "resources: crds\n"
        "output: out/docs\n"
        "toc: toc.yaml\n"
        "include_unserved_versions: false\n"
        "field_order: alphabetical\n"
        "toc_unmatched: error\n"
        "routing:\n"
        "  example.com: per-kind\n"
        "max_workers: 2\n",
    )

    configuration = load_configuration(config_path)

    assert configuration.resources == (tmp_path / "crds").resolve()
    assert configuration.output == (tmp_path / "out" / "docs").resolve()
    assert configuration.toc == (tmp_path / "toc.yaml").resolve()
    assert configuration.build.include_unserved_versions is False
    assert configuration.build.field_order is FieldOrder.ALPHABETICAL
    assert configuration.build.toc_unmatched is UnmatchedTOCPolicy.ERROR
    assert configuration.build.routing_for("example.com") is RoutingStrategy.PER_KIND
    assert configuration.max_workers == 2


def test_command_line_values_win_and_none_values_are_ignored(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        "resources: crds\noutput: docs\nfield_order: alphabetical\n"
        "routing:\n  example.com: per-kind\n",
    )

    configuration = load_configuration(
        config_path,
        {
            "output": "elsewhere",
            "field_order": None,
            "toc_unmatched": "error",
            "routing": per_kind_routing(["tools.example.io"]),
        },
    )

    assert configuration.resources == (tmp_path / "crds").resolve()
    assert configuration.output == Path("elsewhere")
    assert configuration.build.field_order is FieldOrder.ALPHABETICAL
    assert configuration.build.toc_unmatched is UnmatchedTOCPolicy.ERROR
    assert configuration.build.routing == {
        "example.com": RoutingStrategy.PER_KIND,
        "tools.example.io": RoutingStrategy.PER_KIND,
    }


def test_template_file_next_to_configuration_is_resolved(tmp_path: Path) -> None:
    (tmp_path / "custom.tmpl").write_text("{{ document.group }}", encoding="utf-8")
    config_path = _write_config(
        tmp_path, "resources: crds\noutput: docs\ntemplate: custom.tmpl\n"
    )

    configuration = load_configuration(config_path)

    assert configuration.template == str((tmp_path / "custom.tmpl").resolve())


def test_builtin_template_name_is_kept_as_is(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path, "resources: crds\noutput: docs\ntemplate: frontmatter.tmpl\n"
    )

    assert load_configuration(config_path).template == "frontmatter.tmpl"


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("output: docs\n", "resources is required"),
        ("resources: crds\n", "output is required"),
        ("resources: crds\noutput: docs\nbogus: 1\n", "Unknown configuration keys: bogus"),
        ("resources: crds\noutput: docs\nfield_order: random\n", "field_order must be one of"),
        ("resources: crds\noutput: docs\nmax_workers: 0\n", "greater than zero"),
        ("resources: crds\noutput: docs\nrouting: [a]\n", "routing must be a mapping"),
        ("resources: crds\noutput: docs\ninclude_unserved_versions: maybe\n", "boolean"),
        ("- resources\n", "root must be a mapping"),
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, text: str, message: str) -> None:
    config_path = _write_config(tmp_path, text)

    with pytest.raises(ConfigurationError, match=message):
        load_configuration(config_path)


def test_missing_configuration_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
        load_configuration(tmp_path / "missing.yaml")
