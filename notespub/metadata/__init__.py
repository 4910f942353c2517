"""Contributor metadata generation."""

from .generator import MetadataGenerator, render_contributor_page
from .github import ApiRequest, ApiResponse, GitHubClient, MetadataError

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "GitHubClient",
    "MetadataError",
    "MetadataGenerator",
    "render_contributor_page",
]
