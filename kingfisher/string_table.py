"""Interning of byte strings into one contiguous buffer."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["Symbol", "BytesTable"]


@dataclass(frozen=True, order=True)
class Symbol:
    """A half-open range ``[start, end)`` into a :class:`BytesTable` buffer."""

    start: int
    end: int

    def to_range(self) -> range:
        return range(self.start, self.end)


@dataclass
class BytesTable:
    """Interns byte strings, handing out a :class:`Symbol` for each distinct value."""

    _storage: bytearray = field(default_factory=bytearray, repr=False)
    _mapping: dict[bytes, Symbol] = field(default_factory=dict, repr=False)

    def get_or_intern(self, value: bytes) -> Symbol:
        """Return the symbol for ``value``, storing it first if it is new."""
        key = bytes(value)
        symbol = self._mapping.get(key)
        if symbol is None:
            start = len(self._storage)
            self._storage.extend(key)
            symbol = Symbol(start, len(self._storage))
            self._mapping[key] = symbol
        return symbol

    def resolve(self, symbol: Symbol) -> bytes:
        """Return the bytes that ``symbol`` refers to."""
        return bytes(self._storage[symbol.start:symbol.end])

    def __len__(self) -> int:
        return len(self._mapping)