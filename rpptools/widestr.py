"""A mutable string of UTF-16 code units."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator
from functools import total_ordering
from typing import Union

from rpptools import algo

_TextLike = Union["WideString", str, bytes, Iterable[int]]


def _units_of(value: _TextLike) -> list[int]:
    if isinstance(value, WideString):
        return list(value._units)
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("utf-8")
    if isinstance(value, str):
        raw = value.encode("utf-16-le", "surrogatepass")
        return list(struct.unpack(f"<{len(raw) // 2}H", raw))
    units = [int(u) for u in value]
    if any(not 0 <= u <= 0xFFFF for u in units):
        raise ValueError("code units must be in range 0..0xFFFF")
    return units


@total_ordering
class WideString:
    """Text stored as UTF-16 code units, compared unit by unit."""

    __hash__ = None  # mutable

    def __init__(self, value: _TextLike = "") -> None:
        self._units = _units_of(value)

    @classmethod
    def from_utf16(cls, data: bytes) -> WideString:
        """Build from little-endian UTF-16 bytes."""
        if len(data) % 2:
            raise ValueError("UTF-16 data must have an even length")
        return cls(struct.unpack(f"<{len(data) // 2}H", bytes(data)))

    def to_utf16(self) -> bytes:
        """Little-endian UTF-16 bytes."""
        return struct.pack(f"<{len(self._units)}H", *self._units)

    def to_utf8(self) -> bytes:
        """UTF-8 bytes."""
        return str(self).encode("utf-8", "surrogatepass")

    def to_int(self) -> int:
        """The text read as a decimal integer."""
        return int(str(self))

    def __str__(self) -> str:
        return self.to_utf16().decode("utf-16-le", "surrogatepass")

    def __repr__(self) -> str:
        return f"WideString({str(self)!r})"

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[int]:
        return iter(self._units)

    def __getitem__(self, index: int | slice) -> int | WideString:
        if isinstance(index, slice):
            return WideString(self._units[index])
        return self._units[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (WideString, str)):
            return self._units == _units_of(other)
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, (WideString, str)):
            return self._units < _units_of(other)
        return NotImplemented

    def __add__(self, other: WideString | str | int) -> WideString:
        if isinstance(other, int):
            return WideString([*self._units, other])
        if isinstance(other, (WideString, str)):
            return WideString(self._units + _units_of(other))
        return NotImplemented

    def __radd__(self, other: str) -> WideString:
        if isinstance(other, str):
            return WideString(_units_of(other) + self._units)
        return NotImplemented

    def get(self, index: int) -> int:
        """Code unit at ``index``, or 0 when out of range."""
        return self._units[index] if 0 <= index < len(self._units) else 0

    def top(self) -> int:
        """Last code unit, or 0 when empty."""
        return self._units[-1] if self._units else 0

    def bottom(self) -> int:
        """First code unit, or 0 when empty."""
        return self._units[0] if self._units else 0

    def is_number(self) -> bool:
        """True when non-empty and made only of ASCII digits."""
        return bool(self._units) and all(ord("0") <= u <= ord("9") for u in self._units)

    def find(self, sub: WideString | str, start: int = 0) -> int:
        """Index of ``sub`` at or after ``start``, else len(self)."""
        return algo.find_sub(self._units, _units_of(sub), start)

    def find_last(self, unit: int | str) -> int:
        """Index of the last occurrence of a code unit, else len(self)."""
        if isinstance(unit, str):
            units = _units_of(unit)
            if len(units) != 1:
                raise ValueError("expected a single code unit")
            unit = units[0]
        return algo.find_last(self._units, unit)

    def insert(self, pos: int, other: WideString | str) -> None:
        """Insert ``other`` before position ``pos``."""
        if not 0 <= pos <= len(self._units):
            raise IndexError("insert position out of range")
        self._units[pos:pos] = _units_of(other)

    def erase(self, begin: int, end: int | None = None) -> None:
        """Remove units ``begin`` up to ``end`` (one unit when ``end`` is omitted)."""
        if end is None:
            end = begin + 1
        if not 0 <= begin <= end <= len(self._units):
            raise IndexError("erase range out of range")
        del self._units[begin:end]