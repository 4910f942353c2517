"""Discovery of session notes inside a documentation catalog."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from ..logging import get_logger
from ..models import ContentPage
from .directives import parse_page

_EXCLUDED_DIRS = {
    ".git",
    ".build",
    ".swiftpm",
    ".venv",
    "__pycache__",
    "Resources",
}

_PAGE_SUFFIX = ".md"


class ContentScanner:
    """Walks a catalog and parses every note page it finds."""

    def __init__(self, exclude_paths: Sequence[str] | None = None) -> None:
        self.exclude_paths = list(exclude_paths or [])
        self.logger = get_logger("scanner")

    def scan(self, catalog: Path | str) -> List[ContentPage]:
        """Return the pages below ``catalog`` in stable path order."""
        root = Path(catalog).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Content catalog not found: {root}")

        pages: List[ContentPage] = []
        for path in self.iter_page_paths(root):
            rel_path = path.relative_to(root).as_posix()
            text = path.read_text(encoding="utf-8")
            try:
                pages.append(parse_page(rel_path, text))
            except ValueError as exc:
                raise ValueError(f"{rel_path}: {exc}") from exc
        pages.sort(key=lambda page: page.path)
        self.logger.debug("Scanned %d pages under %s", len(pages), root)
        return pages

    def iter_page_paths(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in _EXCLUDED_DIRS
                and not name.startswith(".")
                and not self._is_excluded((current / name).relative_to(root).as_posix())
            )
            for filename in sorted(filenames):
                if not filename.endswith(_PAGE_SUFFIX):
                    continue
                rel_path = (current / filename).relative_to(root).as_posix()
                if self._is_excluded(rel_path):
                    continue
                yield current / filename

    def _is_excluded(self, rel_path: str) -> bool:
        for pattern in self.exclude_paths:
            cleaned = pattern.rstrip("/")
            if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
                return True
        return False


__all__ = ["ContentScanner"]
