"""Git publishing utilities."""

from __future__ import annotations

import base64
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List
from urllib.parse import urlsplit

from ..logging import get_logger

# `git ls-remote --exit-code` exits with 2 when no ref matched.
_NO_MATCHING_REFS = 2


class PublishError(RuntimeError):
    """Raised when the hosting branch cannot be updated."""


def auth_config(url: str, token: str | None) -> List[str]:
    """Return ``-c`` options that send ``token`` to the host serving ``url``.

    The header is scoped to that host and only passed on the command line, so
    it never lands in a config file. Non-HTTP remotes get no options.
    """
    if not token:
        return []
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return []
    host = parts.hostname if parts.port is None else f"{parts.hostname}:{parts.port}"
    basic = base64.b64encode(f"x-access-token:{token}".encode("utf-8")).decode("ascii")
    return ["-c", f"http.{parts.scheme}://{host}/.extraheader=AUTHORIZATION: basic {basic}"]


class Publisher:
    """Replaces the contents of a hosting branch with a built site."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("publisher")

    def publish_directory(
        self,
        repo_path: str | Path,
        folder: str | Path,
        *,
        branch: str = "gh-pages",
        remote: str = "origin",
        repository_url: str | None = None,
        message: str = "Deploy session notes",
        token: str | None = None,
    ) -> bool:
        """Push ``folder`` as the full contents of ``branch``.

        Returns ``False`` when the branch already holds exactly these files,
        so publishing the same tree twice leaves no new commit behind.
        ``token`` authenticates the clone and push against HTTP remotes.
        """
        repo = Path(repo_path)
        source = Path(folder)
        if not source.is_absolute():
            source = repo / source
        if not source.is_dir():
            raise PublishError(f"Publish folder does not exist: {source}")

        url = repository_url or self._remote_url(repo, remote)
        auth = auth_config(url, token)

        with tempfile.TemporaryDirectory(prefix="notespub-") as scratch:
            checkout = Path(scratch) / "site"
            self._checkout_branch(url, branch, checkout, auth)
            self._replace_contents(checkout, source)

            self._git(["git", "add", "--all"], cwd=checkout)
            status = self._git(["git", "status", "--porcelain"], cwd=checkout, capture_output=True)
            if not status.strip():
                self.logger.info("Branch %s already up to date", branch)
                return False

            env = os.environ.copy()
            env.setdefault("GIT_AUTHOR_NAME", "notespub")
            env.setdefault("GIT_AUTHOR_EMAIL", "notespub@users.noreply.github.com")
            env.setdefault("GIT_COMMITTER_NAME", env["GIT_AUTHOR_NAME"])
            env.setdefault("GIT_COMMITTER_EMAIL", env["GIT_AUTHOR_EMAIL"])

            self._git(["git", "commit", "-m", message], cwd=checkout, env=env)
            self._git(
                ["git", *auth, "push", "origin", f"HEAD:refs/heads/{branch}"],
                cwd=checkout,
                capture_output=True,
            )
        self.logger.info("Published %s to branch %s", source, branch)
        return True

    # ------------------------------------------------------------------
    # Helpers

    def _remote_url(self, repo: Path, remote: str) -> str:
        if not (repo / ".git").exists():
            raise PublishError(f"{repo} is not a git repository; set publish.repository_url")
        url = self._git(["git", "remote", "get-url", remote], cwd=repo, capture_output=True).strip()
        if not url:
            raise PublishError(f"Remote {remote!r} has no URL")
        return url

    def _branch_exists(self, url: str, branch: str, cwd: Path, auth: List[str]) -> bool:
        args = ["git", *auth, "ls-remote", "--exit-code", "--heads", url, branch]
        try:
            self._run(args, cwd=cwd, capture_output=True)
        except subprocess.CalledProcessError as exc:
            if exc.returncode == _NO_MATCHING_REFS:
                return False
            raise self._error(args, exc) from exc
        return True

    def _checkout_branch(self, url: str, branch: str, checkout: Path, auth: List[str]) -> None:
        if self._branch_exists(url, branch, checkout.parent, auth):
            self._git(
                [
                    "git",
                    *auth,
                    "clone",
                    "--depth",
                    "1",
                    "--single-branch",
                    "--branch",
                    branch,
                    url,
                    str(checkout),
                ],
                cwd=checkout.parent,
                capture_output=True,
            )
            checkout.mkdir(parents=True, exist_ok=True)
            return
        self.logger.info("Branch %s not found on remote; starting it from scratch", branch)
        checkout.mkdir(parents=True)
        self._git(["git", "init", "--quiet"], cwd=checkout)
        self._git(["git", "symbolic-ref", "HEAD", f"refs/heads/{branch}"], cwd=checkout)
        self._git(["git", "remote", "add", "origin", url], cwd=checkout)

    @staticmethod
    def _replace_contents(checkout: Path, source: Path) -> None:
        for entry in checkout.iterdir():
            if entry.name == ".git":
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        shutil.copytree(source, checkout, dirs_exist_ok=True, ignore=shutil.ignore_patterns(".git"))

    def _git(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        args = list(args)
        try:
            return self._run(args, cwd=cwd, env=env, capture_output=capture_output)
        except subprocess.CalledProcessError as exc:
            raise self._error(args, exc) from exc

    @staticmethod
    def _error(args: List[str], exc: subprocess.CalledProcessError) -> PublishError:
        # Drop `-c key=value` pairs so credentials never reach logs or messages.
        visible: List[str] = []
        skip = False
        for arg in args:
            if skip:
                skip = False
                continue
            if arg == "-c":
                skip = True
                continue
            visible.append(arg)
        stderr = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
        detail = f": {stderr}" if stderr else ""
        return PublishError(
            f"`{' '.join(visible[:3])}` failed with exit code {exc.returncode}{detail}"
        )

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, env=env, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


__all__ = ["PublishError", "Publisher", "auth_config"]
