"""Minimal GitHub REST client used for contributor attribution."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..logging import get_logger

_LINK_NEXT_RE = re.compile(r'<(?P<url>[^>]+)>\s*;\s*rel="next"')
_PER_PAGE = 100


class MetadataError(RuntimeError):
    """Raised when contributor metadata cannot be resolved."""


@dataclass
class ApiRequest:
    """A single authenticated GET against the API."""

    url: str
    token: Optional[str]
    timeout: float


@dataclass
class ApiResponse:
    """Decoded JSON body plus the pagination cursor, if any."""

    payload: object
    next_url: Optional[str] = None


class GitHubClient:
    """Reads commit history and user profiles for a repository."""

    def __init__(
        self,
        repository: str,
        *,
        token: str | None,
        api_url: str = "https://api.github.com",
        request_timeout: float = 30.0,
        transport: Callable[[ApiRequest], ApiResponse] | None = None,
    ) -> None:
        if not repository or "/" not in repository:
            raise MetadataError(f"Repository must be given as 'owner/name', got {repository!r}")
        self.repository = repository
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport or self._urllib_transport
        self._users: Dict[str, dict] = {}
        self.logger = get_logger("github")

    def commit_authors(self, path: str) -> List[str]:
        """Return GitHub logins that committed to ``path``, oldest first."""
        query = urlencode({"path": path, "per_page": _PER_PAGE})
        url: Optional[str] = f"{self.api_url}/repos/{self.repository}/commits?{query}"
        newest_first: List[str] = []
        while url:
            response = self._get(url)
            if not isinstance(response.payload, list):
                raise MetadataError(f"Unexpected commits payload for {path}")
            for commit in response.payload:
                login = _commit_login(commit)
                if login:
                    newest_first.append(login)
            url = response.next_url

        authors: List[str] = []
        for login in reversed(newest_first):
            if login not in authors:
                authors.append(login)
        self.logger.debug("Resolved %d authors for %s", len(authors), path)
        return authors

    def user(self, login: str) -> dict:
        """Return the public profile for ``login`` (cached per client)."""
        if login not in self._users:
            response = self._get(f"{self.api_url}/users/{quote(login)}")
            if not isinstance(response.payload, dict):
                raise MetadataError(f"Unexpected user payload for {login}")
            self._users[login] = response.payload
        return self._users[login]

    def _get(self, url: str) -> ApiResponse:
        return self._transport(ApiRequest(url=url, token=self.token, timeout=self.request_timeout))

    @staticmethod
    def _urllib_transport(request: ApiRequest) -> ApiResponse:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "notespub",
        }
        if request.token:
            headers["Authorization"] = f"Bearer {request.token}"
        http_request = Request(request.url, headers=headers, method="GET")

        try:
            with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
                link = response.headers.get("Link", "")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise MetadataError(
                f"GitHub API request failed with status {exc.code}: {message}"
            ) from exc
        except URLError as exc:
            raise MetadataError(f"GitHub API request failed: {exc.reason}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise MetadataError("GitHub API returned invalid JSON") from exc
        return ApiResponse(payload=payload, next_url=parse_next_link(link))


def parse_next_link(header: str | None) -> Optional[str]:
    """Extract the ``rel="next"`` URL from a Link header."""
    if not header:
        return None
    match = _LINK_NEXT_RE.search(header)
    return match.group("url") if match else None


def _commit_login(commit: object) -> Optional[str]:
    if not isinstance(commit, dict):
        return None
    author = commit.get("author")
    if not isinstance(author, dict):
        return None
    login = author.get("login")
    if not isinstance(login, str) or not login:
        return None
    if author.get("type") == "Bot" or login.endswith("[bot]"):
        return None
    return login


__all__ = [
    "ApiRequest",
    "ApiResponse",
    "GitHubClient",
    "MetadataError",
    "parse_next_link",
]
