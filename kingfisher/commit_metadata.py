"""Git commit metadata and Git timestamps."""

from __future__ import annotations

import email.utils
import re
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

__all__ = ["GitTime", "CommitMetadata", "parse_signature_time"]

_RAW_TIME_RE = re.compile(r"^(-?\d+) ([+-])(\d{2})(\d{2})$")
_UNIX_SECONDS_RE = re.compile(r"^-?\d+$")
_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True, order=True)
class GitTime:
    """A Git timestamp: seconds since the epoch and a UTC offset in seconds."""

    seconds: int
    offset: int = 0

    @classmethod
    def parse(cls, text: str) -> GitTime:
        """Parse a Git timestamp.

        Accepts the raw ``<seconds> <+hhmm>`` form, bare Unix seconds,
        ISO 8601 and RFC 2822 dates. Raises ``ValueError`` otherwise.
        """
        stripped = text.strip()
        raw = _RAW_TIME_RE.match(stripped)
        if raw:
            seconds, sign, hours, minutes = raw.groups()
            offset = int(hours) * 3600 + int(minutes) * 60
            return cls(int(seconds), -offset if sign == "-" else offset)
        if _UNIX_SECONDS_RE.match(stripped):
            return cls(int(stripped), 0)
        parsed = _parse_iso(stripped) or _parse_rfc2822(stripped)
        if parsed is None:
            raise ValueError(f"unrecognised Git timestamp: {text!r}")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        utcoffset = parsed.utcoffset()
        offset = int(utcoffset.total_seconds()) if utcoffset is not None else 0
        return cls(int(parsed.timestamp()), offset)

    def __str__(self) -> str:
        sign = "-" if self.offset < 0 else "+"
        hours, rest = divmod(abs(self.offset), 3600)
        return f"{self.seconds} {sign}{hours:02d}{rest // 60:02d}"


def _parse_iso(text: str) -> datetime | None:
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def _parse_rfc2822(text: str) -> datetime | None:
    try:
        return email.utils.parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


_EPOCH = GitTime(0, 0)


def parse_signature_time(raw: bytes | str) -> GitTime:
    """Parse a signature timestamp, falling back to the Unix epoch on any error."""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            return _EPOCH
    else:
        text = raw
    try:
        return GitTime.parse(text)
    except ValueError:
        return _EPOCH


def _normalize_object_id(value: str) -> str:
    if len(value) != 40 or not all(ch in _HEX_DIGITS for ch in value):
        raise ValueError(f"expected a 40-character hex object id, got {value!r}")
    return value.lower()


def _as_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


@dataclass(frozen=True)
class CommitMetadata:
    """Metadata about a Git commit."""

    commit_id: str
    committer_name: bytes
    committer_email: bytes
    committer_timestamp: GitTime

    def __post_init__(self) -> None:
        object.__setattr__(self, "commit_id", _normalize_object_id(self.commit_id))
        object.__setattr__(self, "committer_name", _as_bytes(self.committer_name))
        object.__setattr__(self, "committer_email", _as_bytes(self.committer_email))

    def to_dict(self) -> dict[str, str]:
        """Serialise to a JSON-compatible mapping; names are decoded lossily."""
        return {
            "commit_id": self.commit_id,
            "committer_name": self.committer_name.decode("utf-8", errors="replace"),
            "committer_email": self.committer_email.decode("utf-8", errors="replace"),
            "committer_timestamp": str(self.committer_timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommitMetadata:
        """Build from a mapping produced by :meth:`to_dict`."""
        try:
            commit_id = data["commit_id"]
            name = data["committer_name"]
            mail = data["committer_email"]
            timestamp = data["committer_timestamp"]
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from None
        for key, value in (
            ("commit_id", commit_id),
            ("committer_name", name),
            ("committer_email", mail),
            ("committer_timestamp", timestamp),
        ):
            if not isinstance(value, str):
                raise ValueError(f"field {key!r} must be a string")
        return cls(
            commit_id=commit_id,
            committer_name=name,
            committer_email=mail,
            committer_timestamp=GitTime.parse(timestamp),
        )