"""Content catalog helpers."""

from .directives import parse_page, render_metadata, set_contributors
from .scanner import ContentScanner

__all__ = ["ContentScanner", "parse_page", "render_metadata", "set_contributors"]
