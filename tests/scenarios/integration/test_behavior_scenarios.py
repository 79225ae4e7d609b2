"""Scenario-style integration tests for core documentation behaviors."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from crdoc.cli import cli
from crdoc.configuration.runtime_settings import BuildOptions, UnmatchedTOCPolicy
from crdoc.crd_loading import decode_crd, load_crds
from crdoc.model_building import TOCLookupError, aggregate_kind, build_documents
from crdoc.schema_management import (
    ObjectNode,
    SchemaConflictError,
    SchemaNode,
    SelfReferenceNode,
    project_schema,
    resolve_schema,
)
from crdoc.toc_loading import parse_table_of_contents


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _crd(kind: str, schema: dict | None = None) -> dict:
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "spec": {
            "group": "example.com",
            "names": {"kind": kind},
            "versions": [
                {
                    "name": "v1",
                    "served": True,
                    "storage": True,
                    "schema": {"openAPIV3Schema": schema or {"type": "object"}},
                }
            ],
        },
    }


def test_given_name_and_tags_schema_when_flattening_then_two_rows_are_produced() -> None:
    fields = project_schema(
        {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
        }
    )

    assert [(field.path, field.type_label, field.required) for field in fields] == [
        ("name", "string", True),
        ("tags", "array of string", False),
    ]


def test_given_recursive_schema_when_resolving_then_walk_terminates_with_marker() -> None:
    node = SchemaNode(type="object")
    node.properties = (("self", node),)

    resolved = resolve_schema(node)

    assert isinstance(resolved, ObjectNode)
    assert isinstance(resolved.properties[0].node, SelfReferenceNode)


def test_given_conflicting_all_of_branches_when_resolving_then_conflict_names_the_field() -> None:
    with pytest.raises(SchemaConflictError) as excinfo:
        project_schema(
            {
                "type": "object",
                "properties": {
                    "spec": {
                        "allOf": [
                            {"properties": {"replicas": {"type": "integer"}}},
                            {"properties": {"replicas": {"type": "string"}}},
                        ]
                    }
                },
            }
        )

    assert excinfo.value.location == "spec.replicas"


def test_given_exclusive_spec_fields_when_aggregating_then_each_option_is_documented() -> None:
    schema = {
        "type": "object",
        "properties": {
            "spec": {
                "type": "object",
                "properties": {"a": {"type": "string"}, "b": {"type": "string"}},
            }
        },
        "oneOf": [
            {"properties": {"spec": {"required": ["a"]}}},
            {"properties": {"spec": {"required": ["b"]}}},
        ],
    }

    unit = aggregate_kind(decode_crd(_crd("Exclusive", schema)))

    fields = unit.versions[0].fields
    assert [(field.path, field.variant) for field in fields if field.required] == [
        ("spec.a", 0),
        ("spec.b", 1),
    ]


def test_given_toc_listing_c_then_a_when_building_then_b_is_excluded() -> None:
    units = [aggregate_kind(decode_crd(_crd(kind))) for kind in ("A", "B", "C")]
    toc = parse_table_of_contents({"groups": [{"group": "example.com", "kinds": ["C", "A"]}]})

    result = build_documents(units, toc=toc)

    assert [[unit.kind for unit in document.kinds] for document in result.documents] == [
        ["C", "A"]
    ]


def test_given_no_toc_when_building_then_kinds_sort_case_insensitively() -> None:
    units = [aggregate_kind(decode_crd(_crd(kind))) for kind in ("Zebra", "apple")]

    result = build_documents(units)

    assert [unit.kind for unit in result.documents[0].kinds] == ["apple", "Zebra"]


def test_given_unmatched_toc_entry_when_policy_is_error_then_build_fails() -> None:
    units = [aggregate_kind(decode_crd(_crd("Widget")))]
    toc = parse_table_of_contents(
        {"groups": [{"group": "example.com", "kinds": ["Widget", "Missing"]}]}
    )

    with pytest.raises(TOCLookupError):
        build_documents(
            units, toc=toc, options=BuildOptions(toc_unmatched=UnmatchedTOCPolicy.ERROR)
        )


def test_given_same_crds_when_building_twice_then_models_are_identical() -> None:
    crds = load_crds(_project_root() / "samples" / "crds")

    first = build_documents([aggregate_kind(crd) for crd in crds])
    second = build_documents([aggregate_kind(crd) for crd in crds])

    assert first == second


def test_given_samples_and_toc_when_generating_then_document_matches_reference_layout(
    tmp_path: Path,
) -> None:
    runner = CliRunner()
    samples = _project_root() / "samples"
    output_dir = tmp_path / "docs"

    result = runner.invoke(
        cli,
        [
            "generate",
            "-r",
            str(samples / "crds"),
            "-o",
            str(output_dir),
            "-c",
            str(samples / "toc.yaml"),
        ],
    )

    assert result.exit_code == 0
    lines = (output_dir / "example-com.md").read_text(encoding="utf-8").splitlines()
    assert lines[:4] == [
        "# example.com API Reference",
        "",
        "- [Widget](#widget)",
        "- [Gadget](#gadget)",
    ]
    selector_row = (
        "| `spec.selector` | map[string]string | no | Labels selecting the widget's parts. |"
    )
    assert selector_row in lines
    assert "| `spec.parts[].name` | string | yes |  |" in lines
    sprocket = (output_dir / "tools-example-io.md").read_text(encoding="utf-8")
    assert "| `spec.teeth` | integer | yes |  |" in sprocket
    assert "| `source.url` (option 2) | string | no |  |" in sprocket


def test_given_module_invocation_when_requesting_help_then_commands_are_listed() -> None:
    result = subprocess.run(
        [sys.executable, "-m", "crdoc", "--help"],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0
    assert "generate" in result.stdout
    assert "list-templates" in result.stdout
