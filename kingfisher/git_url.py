"""HTTPS Git repository URLs without credentials, query or fragment."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from urllib.parse import urlsplit

__all__ = ["GitUrl", "GitUrlError", "GIT_URL_ERROR_MESSAGE"]

GIT_URL_ERROR_MESSAGE = (
    "only https URLs without credentials, query parameters, or fragment identifiers "
    "are supported"
)

_SINGLE_DOTS = frozenset({".", "%2e"})
_DOUBLE_DOTS = frozenset({"..", ".%2e", "%2e.", "%2e%2e"})
_DEFAULT_HTTPS_PORT = 443


class GitUrlError(ValueError):
    """Raised for URLs that are not acceptable Git URLs."""

    def __init__(self) -> None:
        super().__init__(GIT_URL_ERROR_MESSAGE)


def _normalize_segments(path: str) -> tuple[str, ...]:
    raw = path.replace("\\", "/").lstrip("/").split("/") if path else [""]
    result: list[str] = []
    last = len(raw) - 1
    for position, segment in enumerate(raw):
        lowered = segment.lower()
        if lowered in _DOUBLE_DOTS:
            if result:
                result.pop()
            if position == last:
                result.append("")
        elif lowered in _SINGLE_DOTS:
            if position == last:
                result.append("")
        else:
            result.append(segment)
    return tuple(result) or ("",)


@dataclass(frozen=True, order=True)
class GitUrl:
    """An HTTPS URL of a Git repository."""

    url: str
    host: str = field(compare=False)
    port: int | None = field(compare=False)
    segments: tuple[str, ...] = field(compare=False)

    @classmethod
    def parse(cls, text: str) -> GitUrl:
        """Parse and validate ``text``; raises :class:`GitUrlError` if unacceptable."""
        cleaned = text.strip().replace("\t", "").replace("\n", "").replace("\r", "")
        if "?" in cleaned or "#" in cleaned:
            raise GitUrlError()
        try:
            parts = urlsplit(cleaned)
            port = parts.port
        except ValueError:
            raise GitUrlError() from None
        if parts.scheme.lower() != "https" or "@" in parts.netloc:
            raise GitUrlError()
        host = parts.hostname
        if not host:
            raise GitUrlError()
        if port == _DEFAULT_HTTPS_PORT:
            port = None
        segments = _normalize_segments(parts.path)
        if ".." in segments:
            raise GitUrlError()
        authority = f"[{host}]" if ":" in host else host
        if port is not None:
            authority = f"{authority}:{port}"
        url = f"https://{authority}/" + "/".join(segments)
        return cls(url=url, host=host, port=port, segments=segments)

    def to_path(self) -> PurePosixPath:
        """Turn the URL into a relative path: scheme, host[:port], then path segments."""
        host = self.host if self.port is None else f"{self.host}:{self.port}"
        return PurePosixPath("https", host, *self.segments)

    def __str__(self) -> str:
        return self.url