"""Tests for DocC metadata parsing and rewriting."""

from __future__ import annotations

from notespub.content.directives import parse_arguments, parse_page, set_contributors


def test_parse_page_reads_metadata_block(sample_note: str) -> None:
    page = parse_page("WWDC24/meet-swift-testing.md", sample_note)

    assert page.title == "Meet Swift Testing"
    assert page.metadata is not None
    assert page.metadata.title_heading == "WWDC24"
    assert page.metadata.page_kind == "sampleCode"
    assert page.metadata.call_to_action is not None
    assert page.metadata.call_to_action.url == "https://developer.apple.com/wwdc24/10179"
    assert page.metadata.call_to_action.purpose == "link"
    assert page.metadata.call_to_action.label == "Watch Video (22 min)"
    assert page.metadata.contributors == ["alice"]
    assert "@Metadata" not in page.body
    assert page.body.startswith("Introducing Swift Testing")


def test_parse_page_unwraps_symbol_titles() -> None:
    page = parse_page("WWDCNotes.md", "# ``WWDCNotes``\n\nSession notes.\n")

    assert page.title == "WWDCNotes"
    assert page.metadata is None


def test_parse_page_keeps_unknown_directives() -> None:
    text = "# Page\n\n@Metadata {\n   @PageImage(purpose: icon, source: \"logo\")\n}\n"

    page = parse_page("page.md", text)

    assert page.metadata is not None
    assert page.metadata.extra == ['@PageImage(purpose: icon, source: "logo")']


def test_parse_arguments_handles_quoted_commas() -> None:
    arguments = parse_arguments('url: "https://x.test/a,b", purpose: download, label: "A, B"')

    assert arguments == {"url": "https://x.test/a,b", "purpose": "download", "label": "A, B"}


def test_set_contributors_replaces_existing_block(sample_note: str) -> None:
    updated = set_contributors(sample_note, ["alice", "bob"])

    assert "      @GitHubUser(alice)\n      @GitHubUser(bob)\n   }\n}" in updated
    assert '@TitleHeading("WWDC24")' in updated
    assert updated.endswith("\n")
    page = parse_page("page.md", updated)
    assert page.metadata is not None
    assert page.metadata.contributors == ["alice", "bob"]
    assert page.metadata.page_kind == "sampleCode"


def test_set_contributors_is_stable_for_same_list(sample_note: str) -> None:
    assert set_contributors(sample_note, ["alice"]) == sample_note


def test_set_contributors_adds_block_inside_existing_metadata() -> None:
    text = "# Page\n\nAbstract.\n\n@Metadata {\n   @TitleHeading(\"WWDC23\")\n}\n\n## Notes\n"

    updated = set_contributors(text, ["carol"])

    assert updated == (
        "# Page\n\nAbstract.\n\n@Metadata {\n"
        "   @TitleHeading(\"WWDC23\")\n"
        "   @Contributors {\n"
        "      @GitHubUser(carol)\n"
        "   }\n"
        "}\n\n## Notes\n"
    )


def test_set_contributors_creates_metadata_after_abstract() -> None:
    text = "# Title\n\nAbstract line.\n\n## Overview\n\nBody.\n"

    updated = set_contributors(text, ["alice"])

    assert updated == (
        "# Title\n\nAbstract line.\n\n"
        "@Metadata {\n"
        "   @Contributors {\n"
        "      @GitHubUser(alice)\n"
        "   }\n"
        "}\n\n"
        "## Overview\n\nBody.\n"
    )
