"""Document model builder tests."""

from __future__ import annotations

import logging

import pytest
from crdoc.configuration.runtime_settings import (
    BuildOptions,
    RoutingStrategy,
    UnmatchedTOCPolicy,
)
from crdoc.model_building import (
    DocumentModelBuilder,
    KindUnit,
    TOCLookupError,
    VersionUnit,
    build_documents,
    build_group_document,
    document_name,
)
from crdoc.toc_loading import DocumentMetadata, TableOfContents, TOCEntry


def _unit(kind: str, group: str = "example.com", versions: tuple[str, ...] = ("v1",)) -> KindUnit:
    return KindUnit(
        group=group,
        kind=kind,
        plural=f"{kind.lower()}s",
        scope="Namespaced",
        versions=tuple(
            VersionUnit(name=name, served=True, storage=index == 0, fields=())
            for index, name in enumerate(versions)
        ),
        description=f"{kind} resource.",
    )


def _toc(*entries: TOCEntry, metadata: DocumentMetadata | None = None) -> TableOfContents:
    return TableOfContents(metadata=metadata or DocumentMetadata(), entries=entries)


def _kinds(document) -> list[str]:
    return [unit.kind for unit in document.kinds]


def test_without_toc_kinds_are_sorted_case_insensitively() -> None:
    document = build_group_document([_unit("Zebra"), _unit("apple"), _unit("Mango")], "example.com")

    assert _kinds(document) == ["apple", "Mango", "Zebra"]
    assert document.name == "example-com.md"


def test_without_toc_equal_names_keep_input_order() -> None:
    first = _unit("widget", versions=("v1",))
    second = _unit("Widget", versions=("v2",))

    document = build_group_document([first, second], "example.com")

    assert document.kinds == (first, second)


def test_toc_selects_exactly_its_entries_in_order() -> None:
    toc = _toc(
        TOCEntry(group="example.com", kind="C", position=0),
        TOCEntry(group="example.com", kind="A", position=1),
    )

    result = build_documents([_unit("A"), _unit("B"), _unit("C")], toc=toc)

    assert [_kinds(document) for document in result.documents] == [["C", "A"]]
    assert result.unmatched_entries == ()


def test_toc_version_narrows_versions_and_description_overrides() -> None:
    toc = _toc(
        TOCEntry(
            group="example.com",
            kind="Widget",
            version="v2",
            description="Curated description.",
            position=0,
        )
    )

    result = build_documents([_unit("Widget", versions=("v1", "v2"))], toc=toc)

    (document,) = result.documents
    (widget,) = document.kinds
    assert [version.name for version in widget.versions] == ["v2"]
    assert widget.description == "Curated description."


def test_toc_entry_with_unknown_version_is_unmatched() -> None:
    toc = _toc(TOCEntry(group="example.com", kind="Widget", version="v9", position=0))

    result = build_documents([_unit("Widget")], toc=toc)

    assert result.documents == ()
    assert [entry.selector for entry in result.unmatched_entries] == ["example.com/v9/Widget"]


def test_unmatched_entries_are_skipped_with_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    toc = _toc(
        TOCEntry(group="example.com", kind="Missing", position=0),
        TOCEntry(group="example.com", kind="Widget", position=1),
        TOCEntry(group="absent.io", kind="Other", position=2),
    )

    with caplog.at_level(logging.WARNING):
        result = build_documents([_unit("Widget")], toc=toc)

    assert [_kinds(document) for document in result.documents] == [["Widget"]]
    assert [entry.kind for entry in result.unmatched_entries] == ["Missing", "Other"]
    assert "example.com/Missing" in caplog.text
    assert "absent.io/Other" in caplog.text


def test_unmatched_entries_fail_under_error_policy() -> None:
    toc = _toc(
        TOCEntry(group="example.com", kind="Missing", position=0),
        TOCEntry(group="example.com", kind="Gone", position=1),
    )
    options = BuildOptions(toc_unmatched=UnmatchedTOCPolicy.ERROR)

    with pytest.raises(TOCLookupError) as excinfo:
        build_documents([_unit("Widget")], toc=toc, options=options)

    assert [entry.kind for entry in excinfo.value.entries] == ["Missing", "Gone"]
    assert "example.com/Missing, example.com/Gone" in str(excinfo.value)


def test_entries_selecting_failed_kinds_are_not_reported() -> None:
    toc = _toc(TOCEntry(group="example.com", kind="Broken", position=0))
    options = BuildOptions(toc_unmatched=UnmatchedTOCPolicy.ERROR)

    result = build_documents(
        [_unit("Widget")], toc=toc, options=options, failed_kinds={("example.com", "Broken")}
    )

    assert result.unmatched_entries == ()
    assert result.documents == ()


def test_documents_are_built_per_group_in_group_order() -> None:
    units = [_unit("Sprocket", group="tools.example.io"), _unit("Widget"), _unit("Gadget")]

    result = build_documents(units)

    assert [(document.name, _kinds(document)) for document in result.documents] == [
        ("example-com.md", ["Gadget", "Widget"]),
        ("tools-example-io.md", ["Sprocket"]),
    ]


def test_per_kind_routing_writes_one_document_per_kind() -> None:
    options = BuildOptions(routing={"example.com": RoutingStrategy.PER_KIND})
    units = [_unit("Widget"), _unit("Gadget"), _unit("Sprocket", group="tools.example.io")]

    result = build_documents(units, options=options)

    assert [document.name for document in result.documents] == [
        "example-com/gadget.md",
        "example-com/widget.md",
        "tools-example-io.md",
    ]


def test_toc_metadata_is_attached_to_every_document() -> None:
    metadata = DocumentMetadata(title="Reference", weight=10)
    toc = _toc(
        TOCEntry(group="example.com", kind="Widget", position=0),
        TOCEntry(group="tools.example.io", kind="Sprocket", position=1),
        metadata=metadata,
    )

    result = build_documents(
        [_unit("Widget"), _unit("Sprocket", group="tools.example.io")], toc=toc
    )

    assert [document.metadata for document in result.documents] == [metadata, metadata]


def test_builder_is_append_only_and_repeatable() -> None:
    builder = DocumentModelBuilder("example.com")
    builder.add(_unit("Widget"))
    builder.add(_unit("Gadget"))

    assert builder.build() == builder.build()
    with pytest.raises(ValueError, match="belongs to tools.example.io"):
        builder.add(_unit("Sprocket", group="tools.example.io"))


def test_document_names() -> None:
    assert document_name("example.com") == "example-com.md"
    assert document_name("example.com", "Widget") == "example-com/widget.md"
