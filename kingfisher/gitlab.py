"""Listing repositories through the GitLab REST API."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import quote, urlsplit

import requests

__all__ = [
    "DEFAULT_API_URL",
    "TOKEN_ENV_VAR",
    "GitLabRepoType",
    "GitLabUserNotFound",
    "RepoSpecifiers",
    "enumerate_repo_urls",
    "list_repositories",
]

DEFAULT_API_URL = "https://gitlab.com/"
TOKEN_ENV_VAR = "KF_GITLAB_TOKEN"

_USER_AGENT = "kingfisher"
_TIMEOUT = 60

Progress = Callable[[int], None]


class GitLabRepoType(enum.Enum):
    """Which repositories to list."""

    ALL = "all"
    OWNER = "owner"
    MEMBER = "member"

    def __str__(self) -> str:
        return self.value


class GitLabUserNotFound(LookupError):
    """Raised when a GitLab username matches no user."""


@dataclass
class RepoSpecifiers:
    """Which GitLab users' and groups' repositories to list."""

    user: list[str] = field(default_factory=list)
    group: list[str] = field(default_factory=list)
    all_groups: bool = False
    repo_filter: GitLabRepoType = GitLabRepoType.ALL

    def is_empty(self) -> bool:
        """True if no source of repositories is specified."""
        return not self.user and not self.group and not self.all_groups


class _Client:
    def __init__(self, api_url: str, ignore_certs: bool) -> None:
        host = urlsplit(api_url).hostname
        if not host:
            raise ValueError("GitLab URL must contain a host")
        self._base = f"https://{host}/api/v4"
        self.session = requests.Session()
        self.session.headers["User-Agent"] = _USER_AGENT
        token = os.environ.get(TOKEN_ENV_VAR)
        if token is not None:
            self.session.headers["PRIVATE-TOKEN"] = token
        self.session.verify = not ignore_certs

    def get(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        response = self.session.get(f"{self._base}{path}", params=params, timeout=_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self.session.close()


def enumerate_repo_urls(
    specifiers: RepoSpecifiers,
    api_url: str = DEFAULT_API_URL,
    ignore_certs: bool = False,
    progress: Progress | None = None,
) -> list[str]:
    """Return the sorted, de-duplicated HTTP clone URLs of the specified projects.

    ``progress``, if given, is called with ``1`` after each user or group.
    Raises :class:`GitLabUserNotFound` for unknown users and
    :class:`requests.HTTPError` when the API reports an error.
    """
    client = _Client(api_url, ignore_certs)
    urls: set[str] = set()
    try:
        for username in specifiers.user:
            hits = client.get("/users", {"username": username})
            if not hits:
                raise GitLabUserNotFound(f"GitLab user `{username}` not found")
            user_id = hits[0]["id"]
            projects = client.get(f"/users/{user_id}/projects")
            urls.update(project["http_url_to_repo"] for project in projects)
            if progress is not None:
                progress(1)

        if specifiers.all_groups:
            groups = client.get("/groups")
        else:
            groups = [
                found
                for name in specifiers.group
                for found in client.get("/groups", {"search": name})
            ]

        for group in groups:
            group_id = quote(str(group["id"]), safe="")
            projects = client.get(f"/groups/{group_id}/projects")
            urls.update(project["http_url_to_repo"] for project in projects)
            if progress is not None:
                progress(1)
    finally:
        client.close()
    return sorted(urls)


class _StderrProgress:
    def __init__(self, message: str) -> None:
        self._message = message
        self._count = 0
        sys.stderr.write(f"{message}\n")

    def __call__(self, increment: int) -> None:
        self._count += increment
        sys.stderr.write(f"\r{self._message} ({self._count})")
        sys.stderr.flush()

    def finish(self) -> None:
        if self._count:
            sys.stderr.write("\n")
            sys.stderr.flush()


def list_repositories(
    api_url: str,
    ignore_certs: bool,
    progress_enabled: bool,
    users: list[str],
    groups: list[str],
    all_groups: bool,
    repo_filter: GitLabRepoType,
) -> None:
    """Print the clone URL of each matching project, one per line."""
    specifiers = RepoSpecifiers(
        user=list(users), group=list(groups), all_groups=all_groups, repo_filter=repo_filter
    )
    reporter = _StderrProgress("Fetching repositories") if progress_enabled else None
    try:
        repo_urls = enumerate_repo_urls(specifiers, api_url, ignore_certs, reporter)
    finally:
        if reporter is not None:
            reporter.finish()
    for url in repo_urls:
        print(url)