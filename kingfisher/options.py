"""Option sets shared by the commands: global, content filtering, output and rules."""

from __future__ import annotations

import contextlib
import enum
import logging
import math
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterator

__all__ = [
    "TRACE",
    "Mode",
    "GlobalArgs",
    "ContentFilteringArgs",
    "ConfidenceLevel",
    "ReportOutputFormat",
    "RulesListOutputFormat",
    "OutputArgs",
    "RuleSpecifierArgs",
    "default_scan_jobs",
]

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_DEFAULT_MAX_FILE_SIZE_BYTES = 25 * 1024 * 1024
_U64_MAX = 2**64 - 1


class Mode(enum.Enum):
    """Whether a feature is on, off, or decided by the terminal."""

    AUTO = "auto"
    NEVER = "never"
    ALWAYS = "always"

    def __str__(self) -> str:
        return self.value


@dataclass
class GlobalArgs:
    """Arguments that apply to every command."""

    verbose: int = 0
    quiet: bool = False
    ignore_certs: bool = False
    rlimit_nofile: int = 16384
    color: Mode = Mode.AUTO
    progress: Mode = Mode.AUTO

    def __post_init__(self) -> None:
        if self.quiet:
            self.progress = Mode.NEVER

    def use_color(self, stream: IO) -> bool:
        """Whether to colour output written to ``stream``."""
        if self.color is Mode.NEVER:
            return False
        if self.color is Mode.ALWAYS:
            return True
        return stream.isatty()

    def use_progress(self) -> bool:
        """Whether to show progress bars on standard error."""
        if self.progress is Mode.NEVER:
            return False
        if self.progress is Mode.ALWAYS:
            return True
        return sys.stderr.isatty()

    def log_level(self) -> int:
        """The logging level implied by ``quiet`` and ``verbose``."""
        if self.quiet or self.verbose <= 0:
            return logging.INFO
        if self.verbose == 1:
            return logging.DEBUG
        return TRACE


@dataclass
class ContentFilteringArgs:
    """Which content to skip or extract."""

    max_file_size_mb: float = 25.0
    ignore: list[Path] = field(default_factory=list)
    no_extract_archives: bool = False
    extraction_depth: int = 2
    no_binary: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.extraction_depth <= 25:
            raise ValueError(f"extraction depth {self.extraction_depth} is not in 1..=25")

    def max_file_size_bytes(self) -> int:
        """The maximum file size in bytes; negative sizes fall back to 25 MB."""
        mb = self.max_file_size_mb
        if mb < 0:
            return _DEFAULT_MAX_FILE_SIZE_BYTES
        if math.isnan(mb):
            return 0
        size = mb * 1024.0 * 1024.0
        if math.isinf(size) or size >= _U64_MAX:
            return _U64_MAX
        return int(size)


class _OrderedEnum(enum.Enum):
    def _rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() < other._rank()

    def __le__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() <= other._rank()

    def __gt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() > other._rank()

    def __ge__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rank() >= other._rank()

    def __str__(self) -> str:
        return self.value


class ConfidenceLevel(_OrderedEnum):
    """Minimum confidence for reported findings."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReportOutputFormat(_OrderedEnum):
    """Formats for scan reports."""

    PRETTY = "pretty"
    JSON = "json"
    JSONL = "jsonl"
    BSON = "bson"
    SARIF = "sarif"


class RulesListOutputFormat(_OrderedEnum):
    """Formats for listing rules."""

    PRETTY = "pretty"
    JSON = "json"


@dataclass
class OutputArgs:
    """Where output goes and in which format."""

    output: Path | None = None
    format: enum.Enum = ReportOutputFormat.PRETTY

    @contextlib.contextmanager
    def open_writer(self) -> Iterator[IO[str]]:
        """Yield a text stream: the output file if one was given, else standard output."""
        if self.output is None:
            yield sys.stdout
            sys.stdout.flush()
            return
        with open(self.output, "w", encoding="utf-8") as handle:
            yield handle

    def has_output(self) -> bool:
        return self.output is not None


@dataclass
class RuleSpecifierArgs:
    """Which rules to load and enable."""

    rules_path: list[Path] = field(default_factory=list)
    rule: list[str] = field(default_factory=lambda: ["all"])
    load_builtins: bool = True


def _total_ram_gb() -> float | None:
    sysconf = getattr(os, "sysconf", None)
    if sysconf is None:
        return None
    try:
        page_size = sysconf("SC_PAGE_SIZE")
        pages = sysconf("SC_PHYS_PAGES")
    except (ValueError, OSError):
        return None
    if page_size <= 0 or pages <= 0:
        return None
    return page_size * pages / 1024.0 / 1024.0 / 1024.0


def default_scan_jobs() -> int:
    """Default number of parallel scan jobs: CPU count, capped at one per 4 GB of RAM."""
    cpu_count = os.cpu_count()
    if not cpu_count:
        return 1
    ram_gb = _total_ram_gb()
    if ram_gb is None:
        return cpu_count
    max_cores = int(max(math.ceil(ram_gb / 4.0), 1.0))
    return min(max(cpu_count, 1), max_cores)