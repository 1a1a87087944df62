"""Git blobs, their ids, appearances and metadata."""

from __future__ import annotations

import hashlib
import os
import threading
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Generic, TypeVar

from kingfisher.commit_metadata import CommitMetadata

__all__ = ["BlobId", "Blob", "BlobAppearance", "BlobIdMap", "BlobMetadata"]

V = TypeVar("V")

_ID_LENGTH = 20


@dataclass(frozen=True, order=True)
class BlobId:
    """A 20-byte SHA-1 blob id, computed the way Git does."""

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != _ID_LENGTH:
            raise ValueError(f"blob id must be {_ID_LENGTH} bytes, got {len(self.digest)}")
        object.__setattr__(self, "digest", bytes(self.digest))

    @classmethod
    def compute(cls, data: bytes) -> BlobId:
        """Compute the Git blob id of ``data``."""
        hasher = hashlib.sha1(f"blob {len(data)}\0".encode("ascii"))
        hasher.update(data)
        return cls(hasher.digest())

    @classmethod
    def from_hex(cls, text: str) -> BlobId:
        """Parse a hex-encoded blob id; raises ``ValueError`` if invalid."""
        try:
            digest = bytes.fromhex(text)
        except ValueError:
            raise ValueError(f"invalid hex blob id: {text!r}") from None
        return cls(digest)

    @classmethod
    def zero(cls) -> BlobId:
        """Return the all-zero blob id."""
        return cls(bytes(_ID_LENGTH))

    def hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"BlobId({self.hex()})"


@dataclass
class Blob:
    """A blob's id together with its contents."""

    id: BlobId
    data: bytes

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> Blob:
        """Read the file at ``path`` and compute its blob id."""
        with open(path, "rb") as handle:
            data = handle.read()
        return cls(BlobId.compute(data), data)

    @classmethod
    def from_bytes(cls, data: bytes) -> Blob:
        data = bytes(data)
        return cls(BlobId.compute(data), data)

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class BlobAppearance:
    """Where a blob was seen: the commit and the path it was given."""

    commit_metadata: CommitMetadata
    path: bytes

    def path_as_path(self) -> PurePath:
        """Return the path; raises ``UnicodeDecodeError`` if it is not UTF-8."""
        return PurePath(self.path.decode("utf-8"))


class BlobIdMap(Generic[V]):
    """A thread-safe map keyed by blob id, sharded on the first id byte."""

    _SHARDS = 256

    def __init__(self) -> None:
        self._locks = [threading.Lock() for _ in range(self._SHARDS)]
        self._maps: list[dict[BlobId, V]] = [{} for _ in range(self._SHARDS)]

    def insert(self, blob_id: BlobId, value: V) -> V | None:
        """Map ``blob_id`` to ``value``, returning the previous value if any."""
        idx = blob_id.digest[0]
        with self._locks[idx]:
            shard = self._maps[idx]
            old = shard.get(blob_id)
            shard[blob_id] = value
            return old

    def get(self, blob_id: BlobId) -> V | None:
        idx = blob_id.digest[0]
        with self._locks[idx]:
            return self._maps[idx].get(blob_id)

    def __contains__(self, blob_id: Any) -> bool:
        if not isinstance(blob_id, BlobId):
            return False
        idx = blob_id.digest[0]
        with self._locks[idx]:
            return blob_id in self._maps[idx]

    def __len__(self) -> int:
        total = 0
        for lock, shard in zip(self._locks, self._maps):
            with lock:
                total += len(shard)
        return total

    def is_empty(self) -> bool:
        return len(self) == 0


@dataclass(frozen=True)
class BlobMetadata:
    """Metadata about a blob."""

    id: BlobId
    num_bytes: int
    mime_essence: str | None = None
    charset: str | None = None
    language: str | None = field(default=None)

    def num_megabytes(self) -> float:
        """Size in megabytes, rounded to three decimal places."""
        return float(f"{self.num_bytes / 1_048_576.0:.3f}")