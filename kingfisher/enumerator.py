"""Walking the filesystem to find files and directories to scan."""

from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, ClassVar, Iterator, Sequence, Union

from kingfisher.options import ContentFilteringArgs

__all__ = [
    "FileResult",
    "DirectoryResult",
    "EnumeratorFileResult",
    "FoundInput",
    "IgnoreMatcher",
    "FilesystemEnumerator",
]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResult:
    """A regular file found during enumeration."""

    path: Path
    num_bytes: int
    extract_archives: bool
    extraction_depth: int


@dataclass(frozen=True)
class DirectoryResult:
    """A directory found during enumeration."""

    path: Path


@dataclass(frozen=True)
class EnumeratorFileResult:
    """A file produced by an enumerator rather than the filesystem walk."""

    path: Path


FoundInput = Union[FileResult, DirectoryResult, EnumeratorFileResult]


def _translate_glob(glob: str) -> str:
    parts: list[str] = []
    i = 0
    n = len(glob)
    while i < n:
        if glob.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif glob.startswith("/**", i) and i + 3 == n:
            parts.append("/.*")
            i += 3
        elif glob.startswith("**", i):
            parts.append(".*")
            i += 2
        elif glob[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif glob[i] == "?":
            parts.append("[^/]")
            i += 1
        elif glob[i] == "[":
            close = glob.find("]", i + 2)
            if close == -1:
                parts.append(re.escape("["))
                i += 1
                continue
            body = glob[i + 1:close]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append("[" + body.replace("\\", "\\\\") + "]")
            i = close + 1
        elif glob[i] == "\\" and i + 1 < n:
            parts.append(re.escape(glob[i + 1]))
            i += 2
        else:
            parts.append(re.escape(glob[i]))
            i += 1
    return "".join(parts)


@dataclass(frozen=True)
class _Pattern:
    regex: re.Pattern[str]
    negated: bool
    dir_only: bool


class IgnoreMatcher:
    """Path matcher for gitignore-style patterns; the last matching pattern wins."""

    def __init__(self) -> None:
        self._patterns: list[_Pattern] = []

    def add_file(self, path: str | os.PathLike[str]) -> None:
        """Read patterns from the file at ``path``; raises ``OSError`` if unreadable."""
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        for line in text.splitlines():
            self.add_line(line)

    def add_line(self, line: str) -> None:
        """Add one gitignore-style pattern line; blanks and comments are skipped."""
        line = line.rstrip("\r")
        stripped = line.rstrip(" ")
        if stripped.endswith("\\") and len(stripped) < len(line):
            stripped += " "
        line = stripped
        if not line or line.startswith("#"):
            return
        negated = False
        if line.startswith("!"):
            negated = True
            line = line[1:]
        elif line.startswith(("\\!", "\\#")):
            line = line[1:]
        dir_only = line.endswith("/")
        if dir_only:
            line = line.rstrip("/")
        if not line:
            return
        anchored = "/" in line
        line = line.lstrip("/")
        body = _translate_glob(line)
        prefix = "" if anchored or line.startswith("**") else "(?:.*/)?"
        regex = re.compile(f"^{prefix}{body}$", re.DOTALL)
        self._patterns.append(_Pattern(regex, negated, dir_only))

    def is_ignored(self, relative: str, is_dir: bool) -> bool:
        """Whether ``relative`` (a ``/``-separated path) is ignored."""
        ignored = False
        for pattern in self._patterns:
            if pattern.dir_only and not is_dir:
                continue
            if pattern.regex.match(relative):
                ignored = not pattern.negated
        return ignored

    def __len__(self) -> int:
        return len(self._patterns)


EntryFilter = Callable[[Path], bool]


@dataclass
class FilesystemEnumerator:
    """Enumerates files and directories under the given inputs."""

    DEFAULT_ENUMERATE_GIT_HISTORY: ClassVar[bool] = True
    DEFAULT_FOLLOW_LINKS: ClassVar[bool] = False
    DEFAULT_MAX_FILESIZE: ClassVar[int] = 100 * 1024 * 1024

    inputs: Sequence[str | os.PathLike[str]]
    max_file_size: int | None = DEFAULT_MAX_FILESIZE
    follow_links: bool = DEFAULT_FOLLOW_LINKS
    collect_git_metadata: bool = True
    enumerate_git_history: bool = DEFAULT_ENUMERATE_GIT_HISTORY
    extract_archives: bool = True
    extraction_depth: int = 2
    no_dedup: bool = False
    ignore: IgnoreMatcher = field(default_factory=IgnoreMatcher, repr=False)
    _filters: list[EntryFilter] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if not self.inputs:
            raise ValueError("No inputs provided")
        self.inputs = [Path(p) for p in self.inputs]

    @classmethod
    def from_content_filtering(
        cls,
        inputs: Sequence[str | os.PathLike[str]],
        filtering: ContentFilteringArgs,
        *,
        commit_metadata: bool = True,
        no_dedup: bool = False,
    ) -> FilesystemEnumerator:
        """Build an enumerator configured from content-filtering options."""
        enumerator = cls(
            inputs,
            max_file_size=filtering.max_file_size_bytes(),
            collect_git_metadata=commit_metadata,
            extract_archives=not filtering.no_extract_archives,
            extraction_depth=filtering.extraction_depth,
            no_dedup=no_dedup,
        )
        for ignore_file in filtering.ignore:
            enumerator.add_ignore(ignore_file)
        return enumerator

    def add_ignore(self, path: str | os.PathLike[str]) -> None:
        """Load gitignore-style patterns from ``path``; raises ``OSError`` if unreadable."""
        self.ignore.add_file(path)

    def filter_entry(self, predicate: EntryFilter) -> None:
        """Skip entries (and, for directories, their contents) for which ``predicate`` is false."""
        self._filters.append(predicate)

    def _file_too_big(self, size: int) -> bool:
        return self.max_file_size is not None and size > self.max_file_size

    def run(self) -> Iterator[FoundInput]:
        """Yield a result for every file and directory found, in a stable order."""
        for root in self.inputs:
            yield from self._walk(Path(root))

    def _walk(self, root: Path) -> Iterator[FoundInput]:
        visited: set[tuple[int, int]] = set()
        stack = [root]
        while stack:
            path = stack.pop()
            try:
                info = os.stat(path) if self.follow_links else os.lstat(path)
            except OSError as exc:
                _log.debug("Skipping %s: %s", path, exc)
                continue
            is_dir = stat.S_ISDIR(info.st_mode)
            if path != root:
                relative = path.relative_to(root).as_posix()
                if self.ignore.is_ignored(relative, is_dir):
                    continue
                if not all(predicate(path) for predicate in self._filters):
                    continue

            if stat.S_ISREG(info.st_mode):
                if self._file_too_big(info.st_size):
                    _log.debug("Skipping %s: size %d too big", path, info.st_size)
                    continue
                yield FileResult(
                    path=path,
                    num_bytes=info.st_size,
                    extract_archives=self.extract_archives,
                    extraction_depth=self.extraction_depth,
                )
            elif is_dir:
                key = (info.st_dev, info.st_ino)
                if self.follow_links:
                    if key in visited:
                        _log.debug("Skipping %s: symlink loop", path)
                        continue
                    visited.add(key)
                yield DirectoryResult(path=path)
                try:
                    with os.scandir(path) as entries:
                        children = sorted(entry.name for entry in entries)
                except OSError as exc:
                    _log.debug("Skipping contents of %s: %s", path, exc)
                    continue
                stack.extend(path / name for name in reversed(children))
            elif stat.S_ISLNK(info.st_mode):
                continue
            else:
                _log.debug("Unhandled type for %s", path)