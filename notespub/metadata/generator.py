"""Contributor attribution for session notes."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence

from ..content.directives import set_contributors
from ..content.scanner import ContentScanner
from ..logging import get_logger
from ..models import ContentPage, Contributor, MetadataRecord
from .github import GitHubClient


class MetadataGenerator:
    """Refreshes ``@Contributors`` blocks and per-contributor pages."""

    def __init__(
        self,
        client: GitHubClient,
        *,
        contributors_dir: str = "Contributors",
        exclude_paths: Sequence[str] | None = None,
    ) -> None:
        self.client = client
        self.contributors_dir = contributors_dir
        excluded = list(exclude_paths or [])
        if contributors_dir not in excluded:
            excluded.append(contributors_dir)
        self.scanner = ContentScanner(exclude_paths=excluded)
        self.logger = get_logger("metadata")

    def generate(self, catalog: Path, *, repo_root: Path | None = None) -> List[MetadataRecord]:
        """Attribute every page in ``catalog`` and return the resolved records."""
        catalog = Path(catalog).resolve()
        repo_root = Path(repo_root).resolve() if repo_root is not None else catalog
        pages = self.scanner.scan(catalog)
        self.logger.info("Generating metadata for %d pages", len(pages))

        contributions: Dict[str, List[ContentPage]] = {}
        records: List[MetadataRecord] = []
        for page in pages:
            page_file = catalog / page.path
            history_path = _relative_to(page_file, repo_root)
            discovered = self.client.commit_authors(history_path)
            existing = list(page.metadata.contributors) if page.metadata else []
            merged = existing + [login for login in discovered if login not in existing]

            changed = False
            if merged and merged != existing:
                original = page_file.read_text(encoding="utf-8")
                updated = set_contributors(original, merged)
                if updated != original:
                    page_file.write_text(updated, encoding="utf-8")
                    changed = True
                    self.logger.debug("Updated contributors for %s: %s", page.path, ", ".join(merged))

            for login in merged:
                contributions.setdefault(login, []).append(page)
            records.append(
                MetadataRecord(
                    page=page.path,
                    contributors=[self._contributor(login) for login in merged],
                    changed=changed,
                )
            )

        self._write_contributor_pages(catalog, contributions)
        updated_count = sum(1 for record in records if record.changed)
        self.logger.info(
            "Metadata generated: %d pages, %d updated, %d contributors",
            len(records),
            updated_count,
            len(contributions),
        )
        return records

    def _contributor(self, login: str) -> Contributor:
        profile = self.client.user(login)
        name = profile.get("name")
        avatar = profile.get("avatar_url")
        return Contributor(
            login=login,
            name=name if isinstance(name, str) and name.strip() else None,
            avatar_url=avatar if isinstance(avatar, str) else None,
        )

    def _write_contributor_pages(
        self, catalog: Path, contributions: Dict[str, List[ContentPage]]
    ) -> None:
        directory = catalog / self.contributors_dir
        expected = {f"{login}.md" for login in contributions}
        if directory.is_dir():
            for stale in sorted(directory.glob("*.md")):
                if stale.name not in expected:
                    stale.unlink()
                    self.logger.debug("Removed stale contributor page %s", stale.name)
        if not contributions:
            return

        directory.mkdir(parents=True, exist_ok=True)
        for login in sorted(contributions):
            target = directory / f"{login}.md"
            content = render_contributor_page(self._contributor(login), contributions[login])
            if target.exists() and target.read_text(encoding="utf-8") == content:
                continue
            target.write_text(content, encoding="utf-8")


def render_contributor_page(contributor: Contributor, pages: Sequence[ContentPage]) -> str:
    """Render the landing page listing a contributor's notes."""
    lines = [
        f"# {contributor.display_name}",
        "",
        f"Session notes contributed by [@{contributor.login}](https://github.com/{contributor.login}).",
        "",
        "@Metadata {",
        "   @PageKind(article)",
        "}",
        "",
        "## Notes",
        "",
    ]
    for page in sorted(pages, key=lambda item: item.path):
        lines.append(f"- <doc:{Path(page.path).stem}>")
    return "\n".join(lines) + "\n"


def _relative_to(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = ["MetadataGenerator", "render_contributor_page"]
