"""Listing repositories through the GitHub REST API."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
from urllib.parse import quote

import requests

__all__ = [
    "DEFAULT_API_URL",
    "TOKEN_ENV_VAR",
    "GitHubRepoType",
    "GitCloneMode",
    "GitHistoryMode",
    "RepoSpecifiers",
    "enumerate_repo_urls",
    "list_repositories",
]

DEFAULT_API_URL = "https://api.github.com/"
TOKEN_ENV_VAR = "KF_GITHUB_TOKEN"

_USER_AGENT = "kingfisher"
_PER_PAGE = 100
_TIMEOUT = 60

Progress = Callable[[int], None]


class _KebabEnum(enum.Enum):
    def __str__(self) -> str:
        return self.value


class GitHubRepoType(_KebabEnum):
    """Which repositories to list: all, sources only, or forks only."""

    ALL = "all"
    SOURCE = "source"
    FORK = "fork"

    @classmethod
    def _missing_(cls, value: object) -> GitHubRepoType | None:
        if isinstance(value, str):
            lowered = value.lower()
            if lowered == "forks":
                return cls.FORK
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def user_type(self) -> str:
        """The ``type`` parameter used when listing a user's repositories."""
        return {
            GitHubRepoType.ALL: "all",
            GitHubRepoType.SOURCE: "owner",
            GitHubRepoType.FORK: "member",
        }[self]

    @property
    def org_type(self) -> str:
        """The ``type`` parameter used when listing an organization's repositories."""
        return {
            GitHubRepoType.ALL: "all",
            GitHubRepoType.SOURCE: "sources",
            GitHubRepoType.FORK: "forks",
        }[self]


class GitCloneMode(_KebabEnum):
    """How to clone Git repositories."""

    BARE = "bare"
    MIRROR = "mirror"


class GitHistoryMode(_KebabEnum):
    """Whether to scan a repository's Git history."""

    FULL = "full"
    NONE = "none"


@dataclass
class RepoSpecifiers:
    """Which GitHub users' and organizations' repositories to list."""

    user: list[str] = field(default_factory=list)
    organization: list[str] = field(default_factory=list)
    all_organizations: bool = False
    repo_filter: GitHubRepoType = GitHubRepoType.SOURCE

    def is_empty(self) -> bool:
        """True if no source of repositories is specified."""
        return not self.user and not self.organization and not self.all_organizations


def _make_session(ignore_certs: bool) -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = _USER_AGENT
    session.headers["Accept"] = "application/vnd.github+json"
    token = os.environ.get(TOKEN_ENV_VAR, "")
    if token:
        session.headers["Authorization"] = f"token {token}"
    session.verify = not ignore_certs
    return session


def _paginate(
    session: requests.Session, url: str, params: dict[str, Any]
) -> Iterator[dict[str, Any]]:
    next_url: str | None = url
    next_params: dict[str, Any] | None = params
    while next_url:
        response = session.get(next_url, params=next_params, timeout=_TIMEOUT)
        response.raise_for_status()
        yield from response.json()
        next_url = response.links.get("next", {}).get("url")
        next_params = None


def enumerate_repo_urls(
    specifiers: RepoSpecifiers,
    api_url: str = DEFAULT_API_URL,
    ignore_certs: bool = False,
    progress: Progress | None = None,
) -> list[str]:
    """Return the sorted, de-duplicated clone URLs of the specified repositories.

    ``progress``, if given, is called with ``1`` after each user or organization.
    Raises :class:`requests.HTTPError` when the API reports an error.
    """
    base = api_url.rstrip("/")
    repo_filter = GitHubRepoType(specifiers.repo_filter)
    urls: set[str] = set()
    with _make_session(ignore_certs) as session:
        for username in specifiers.user:
            params = {
                "type": repo_filter.user_type,
                "sort": "created",
                "direction": "desc",
                "per_page": _PER_PAGE,
            }
            repos = _paginate(session, f"{base}/users/{quote(username, safe='')}/repos", params)
            urls.update(repo["clone_url"] for repo in repos)
            if progress is not None:
                progress(1)

        if specifiers.all_organizations:
            orgs = [
                org["login"]
                for org in _paginate(session, f"{base}/organizations", {"per_page": _PER_PAGE})
            ]
        else:
            orgs = list(specifiers.organization)

        for org_name in orgs:
            params = {
                "type": repo_filter.org_type,
                "sort": "created",
                "direction": "desc",
                "per_page": _PER_PAGE,
            }
            repos = _paginate(session, f"{base}/orgs/{quote(org_name, safe='')}/repos", params)
            urls.update(repo["clone_url"] for repo in repos)
            if progress is not None:
                progress(1)
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
    orgs: list[str],
    all_orgs: bool,
    repo_filter: GitHubRepoType,
) -> None:
    """Print the clone URL of each matching repository, one per line."""
    specifiers = RepoSpecifiers(
        user=list(users),
        organization=list(orgs),
        all_organizations=all_orgs,
        repo_filter=repo_filter,
    )
    reporter = _StderrProgress("Fetching repositories") if progress_enabled else None
    try:
        repo_urls = enumerate_repo_urls(specifiers, api_url, ignore_certs, reporter)
    finally:
        if reporter is not None:
            reporter.finish()
    for url in repo_urls:
        print(url)