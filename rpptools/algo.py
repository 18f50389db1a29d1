"""Sequence helpers: binary search, in-place quicksort, searching and splitting.

Searches follow one convention: when nothing is found they return
``len(seq)`` rather than a negative index.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableSequence, Sequence
from itertools import islice
from typing import Any


def find_sorted(seq: Sequence[Any], item: Any) -> int:
    """Binary search a sorted sequence; index of an equal element or len(seq)."""
    left, right = 0, len(seq) - 1
    while left <= right:
        mid = (left + right) // 2
        value = seq[mid]
        if value < item:
            left = mid + 1
        elif item < value:
            right = mid - 1
        else:
            return mid
    return len(seq)


def _bounds(seq: Sequence[Any], begin: int, end: int) -> tuple[int, int]:
    if end <= 0:
        end = len(seq)
    if begin < 0:
        begin = 0
    return begin, end


def reverse_range(seq: MutableSequence[Any], begin: int = 0, end: int = 0) -> None:
    """Reverse ``seq[begin:end]`` in place; an ``end`` of 0 or less means the end."""
    begin, end = _bounds(seq, begin, end)
    if begin < end:
        seq[begin:end] = seq[begin:end][::-1]


def quicksort(seq: MutableSequence[Any], begin: int = 0, end: int = 0) -> None:
    """Sort ``seq[begin:end]`` in place using ``<=`` (Lomuto partition)."""
    begin, end = _bounds(seq, begin, end)
    pending = [(begin, end - 1)]
    while pending:
        left, right = pending.pop()
        if left >= right:
            continue
        pivot = seq[right]
        store = left
        for j in range(left, right):
            if seq[j] <= pivot:
                seq[store], seq[j] = seq[j], seq[store]
                store += 1
        seq[store], seq[right] = seq[right], seq[store]
        pending.append((store + 1, right))
        pending.append((left, store - 1))


def find_sub(seq: Sequence[Any], pattern: Sequence[Any], start: int = 0) -> int:
    """Index of the first occurrence of ``pattern`` at or after ``start``, else len(seq)."""
    size, width = len(seq), len(pattern)
    if width == 0 or start >= size:
        return size
    first = pattern[0]
    for i in range(max(start, 0), size - width + 1):
        if seq[i] != first:
            continue
        if all(a == b for a, b in zip(islice(seq, i, i + width), pattern)):
            return i
    return size


def find_last(seq: Sequence[Any], item: Any) -> int:
    """Index of the last element equal to ``item``, else len(seq)."""
    return next(
        (i for i in reversed(range(len(seq))) if seq[i] == item),
        len(seq),
    )


def _as_pattern(seq: Sequence[Any], sep: Any) -> Sequence[Any]:
    if isinstance(seq, str):
        return sep
    if isinstance(seq, (bytes, bytearray)):
        return bytes([sep]) if isinstance(sep, int) else sep
    if isinstance(sep, (list, tuple)):
        return sep
    return (sep,)


def _pieces(seq: Sequence[Any], sep: Any, start: int, keep_empty: bool) -> Iterator[Any]:
    pattern = _as_pattern(seq, sep)
    size, width = len(seq), len(pattern)
    start = max(start, 0)
    while start < size:
        pos = find_sub(seq, pattern, start)
        if pos >= size:
            break
        piece = seq[start:pos]
        if keep_empty or piece:
            yield piece
        start = pos + width
    tail = seq[start:]
    if keep_empty or tail:
        yield tail


def split(seq: Sequence[Any], sep: Any, start: int = 0) -> list[Any]:
    """Split ``seq`` on ``sep`` (a sub-sequence or one element), dropping empty pieces."""
    return list(_pieces(seq, sep, start, keep_empty=False))


def split_keep_empty(seq: Sequence[Any], sep: Any, start: int = 0) -> list[Any]:
    """Split ``seq`` on ``sep`` keeping empty pieces."""
    return list(_pieces(seq, sep, start, keep_empty=True))