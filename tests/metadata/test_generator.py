"""Tests for contributor attribution."""

from __future__ import annotations

from notespub.metadata.generator import MetadataGenerator

PAGE = "WWDC24/meet-swift-testing.md"
HISTORY_PATH = f"Sources/WWDCNotes/WWDCNotes.docc/{PAGE}"


def test_generate_merges_history_into_existing_contributors(
    catalog_builder, sample_note: str, fake_github
) -> None:
    catalog_builder.write({PAGE: sample_note, "WWDC23/untouched.md": "# Untouched\n\nAbstract.\n"})
    client = fake_github(
        authors={HISTORY_PATH: ["carol", "alice"]},
        names={"alice": "Alice Appleseed"},
    )
    generator = MetadataGenerator(client)

    records = generator.generate(catalog_builder.catalog, repo_root=catalog_builder.root)

    by_page = {record.page: record for record in records}
    assert [c.login for c in by_page[PAGE].contributors] == ["alice", "carol"]
    assert by_page[PAGE].contributors[0].display_name == "Alice Appleseed"
    assert by_page[PAGE].contributors[1].display_name == "carol"
    assert by_page[PAGE].changed is True
    assert by_page["WWDC23/untouched.md"].contributors == []
    assert by_page["WWDC23/untouched.md"].changed is False
    assert "@Metadata" not in catalog_builder.read("WWDC23/untouched.md")

    text = catalog_builder.read(PAGE)
    assert "      @GitHubUser(alice)\n      @GitHubUser(carol)\n" in text
    assert HISTORY_PATH in client.history_calls


def test_generate_writes_contributor_pages(catalog_builder, sample_note: str, fake_github) -> None:
    catalog_builder.write({PAGE: sample_note})
    client = fake_github(authors={HISTORY_PATH: ["bob"]}, names={"bob": "Bob"})

    MetadataGenerator(client).generate(catalog_builder.catalog, repo_root=catalog_builder.root)

    alice = catalog_builder.read("Contributors/alice.md")
    bob = catalog_builder.read("Contributors/bob.md")
    assert alice.startswith("# alice\n")
    assert bob.startswith("# Bob\n")
    assert "- <doc:meet-swift-testing>" in bob
    assert "[@bob](https://github.com/bob)" in bob


def test_generate_is_idempotent(catalog_builder, sample_note: str, fake_github) -> None:
    catalog_builder.write({PAGE: sample_note})
    client = fake_github(authors={HISTORY_PATH: ["alice", "bob"]})
    generator = MetadataGenerator(client)

    generator.generate(catalog_builder.catalog, repo_root=catalog_builder.root)
    first_page = catalog_builder.read(PAGE)
    first_profile = catalog_builder.read("Contributors/bob.md")

    records = generator.generate(catalog_builder.catalog, repo_root=catalog_builder.root)

    assert all(record.changed is False for record in records)
    assert catalog_builder.read(PAGE) == first_page
    assert catalog_builder.read("Contributors/bob.md") == first_profile
    assert [record.page for record in records] == [PAGE]


def test_generate_removes_stale_contributor_pages(catalog_builder, fake_github) -> None:
    catalog_builder.write(
        {
            "WWDC24/a.md": "# A\n\nAbstract.\n",
            "Contributors/departed.md": "# Departed\n",
        }
    )
    client = fake_github(authors={"Sources/WWDCNotes/WWDCNotes.docc/WWDC24/a.md": ["dave"]})

    MetadataGenerator(client).generate(catalog_builder.catalog, repo_root=catalog_builder.root)

    contributors = catalog_builder.catalog / "Contributors"
    assert sorted(path.name for path in contributors.iterdir()) == ["dave.md"]
    assert "@GitHubUser(dave)" in catalog_builder.read("WWDC24/a.md")
