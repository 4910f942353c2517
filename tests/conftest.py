from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Dict, List, Mapping

import pytest

from notespub.config import NotesPubConfig, load_config

CATALOG = "Sources/WWDCNotes/WWDCNotes.docc"

SAMPLE_NOTE = """
# Meet Swift Testing

Introducing Swift Testing: a new package for testing your code using Swift.

@Metadata {
   @TitleHeading("WWDC24")
   @PageKind(sampleCode)
   @CallToAction(url: "https://developer.apple.com/wwdc24/10179", purpose: link, label: "Watch Video (22 min)")
   @Contributors {
      @GitHubUser(alice)
   }
}

## Key takeaways

- Expressive APIs with `@Test` and `#expect`
"""


class CatalogBuilder:
    """Writes a throwaway repository holding a note catalog."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.catalog = self.root / CATALOG
        self.catalog.mkdir(parents=True)

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the catalog."""
        self._write(self.catalog, files)

    def write_root(self, files: Mapping[str, str | bytes]) -> None:
        """Write `path -> contents` entries relative to the repository root."""
        self._write(self.root, files)

    def read(self, relative: str) -> str:
        return (self.catalog / relative).read_text(encoding="utf-8")

    def config(self, environ: Mapping[str, str] | None = None) -> NotesPubConfig:
        return load_config(self.root, environ=environ or {})

    @staticmethod
    def _write(base: Path, files: Mapping[str, str | bytes]) -> None:
        for relative, content in files.items():
            path = base / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")


class FakeGitHubClient:
    """Stands in for the REST client with canned commit authors and profiles."""

    def __init__(
        self,
        authors: Mapping[str, List[str]] | None = None,
        names: Mapping[str, str] | None = None,
    ) -> None:
        self.authors = dict(authors or {})
        self.names = dict(names or {})
        self.history_calls: List[str] = []
        self.user_calls: List[str] = []

    def commit_authors(self, path: str) -> List[str]:
        self.history_calls.append(path)
        return list(self.authors.get(path, []))

    def user(self, login: str) -> Dict[str, object]:
        self.user_calls.append(login)
        return {
            "login": login,
            "name": self.names.get(login),
            "avatar_url": f"https://avatars.example.com/{login}",
        }


@pytest.fixture
def catalog_builder(tmp_path: Path) -> CatalogBuilder:
    """Provide a reusable catalog builder rooted at the pytest tmp_path."""
    return CatalogBuilder(tmp_path)


@pytest.fixture
def sample_note() -> str:
    return textwrap.dedent(SAMPLE_NOTE).lstrip("\n")


@pytest.fixture
def fake_github():
    """Return the fake client class so tests can seed authors per path."""
    return FakeGitHubClient
