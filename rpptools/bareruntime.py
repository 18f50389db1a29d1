"""Runtime pieces for a machine without an operating system.

Decimal formatting and parsing, a page-granular first-fit heap and a
text-mode screen laid out as character/colour byte pairs.
"""

from __future__ import annotations

from rpptools.arith import wrap32, wrap_u32

BITMAP_BASE = 16777216
VIDEO_BASE = 0xB8000
DEFAULT_COLOUR = 0x0A
_HEADER = 4


def format_int(n: int) -> str:
    """Decimal text of a signed integer."""
    return str(int(n))


def format_uint(n: int) -> str:
    """Decimal text of a 32-bit unsigned integer."""
    return str(wrap_u32(n))


def parse_int(text: str) -> int:
    """Read decimal digits, with an optional leading '-', as a 32-bit int.

    Characters are not checked: each contributes its distance from '0'.
    """
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    total = sum((ord(c) - ord("0")) * 10**i for i, c in enumerate(reversed(digits)))
    return wrap32(-total if negative else total)


def scan(text: str, fmt: str) -> int:
    """Parse ``text`` by ``fmt``; only ``%d`` is understood."""
    if fmt != "%d":
        raise ValueError(f"unknown format {fmt!r}")
    return parse_int(text)


class PageHeap:
    """First-fit allocator handing out whole pages.

    A byte map with one entry per page sits at :data:`BITMAP_BASE`; the pages
    follow it. Each block starts with a 4-byte header holding its size.
    """

    def __init__(self, pages: int = 16 * 1024, page_size: int = 4096) -> None:
        if pages <= 0 or page_size <= 0:
            raise ValueError("pages and page_size must be positive")
        self.pages = pages
        self.page_size = page_size
        self.bitmap = bytearray(pages)
        self.data_base = BITMAP_BASE + pages
        self._sizes: dict[int, int] = {}

    @property
    def used_pages(self) -> int:
        return sum(self.bitmap)

    def _page_count(self, size: int) -> int:
        return -(-(size + _HEADER) // self.page_size)

    def malloc(self, size: int) -> int | None:
        """Address of a new block of ``size`` bytes, or None when full."""
        if size < 0:
            raise ValueError("size must not be negative")
        count = self._page_count(size)
        for page in range(self.pages - count + 1):
            if any(self.bitmap[page:page + count]):
                continue
            self.bitmap[page:page + count] = b"\x01" * count
            header = self.data_base + self.page_size * page
            self._sizes[header] = size
            return header + _HEADER
        return None

    def free(self, address: int) -> None:
        """Release a block returned by :meth:`malloc`."""
        header = address - _HEADER
        try:
            size = self._sizes.pop(header)
        except KeyError:
            raise ValueError(f"address {address:#x} was not allocated") from None
        page = (header - self.data_base) // self.page_size
        count = self._page_count(size)
        self.bitmap[page:page + count] = bytes(count)


class TextScreen:
    """Text-mode video memory: two bytes per cell, character then colour."""

    def __init__(self, rows: int = 25, cols: int = 80) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError("rows and cols must be positive")
        self.rows = rows
        self.cols = cols
        self.buffer = bytearray(rows * cols * 2)

    def address(self, pos: int) -> int:
        """Video-memory address of cell ``pos``."""
        return VIDEO_BASE + 2 * pos

    def put(self, pos: int, ch: int | str, colour: int = DEFAULT_COLOUR) -> None:
        """Write one character byte and its colour at cell ``pos``."""
        if not 0 <= pos < self.rows * self.cols:
            raise IndexError(f"cell {pos} is off the screen")
        code = ord(ch) if isinstance(ch, str) else int(ch)
        if not 0 <= code <= 0xFF:
            raise ValueError("character must fit in one byte")
        self.buffer[2 * pos] = code
        self.buffer[2 * pos + 1] = colour & 0xFF

    def text(self, row: int, col: int, s: str | bytes) -> None:
        """Write ``s`` from (row, col) onward, running into following rows."""
        data = s.encode("utf-8") if isinstance(s, str) else bytes(s)
        start = row * self.cols + col
        for offset, code in enumerate(data):
            self.put(start + offset, code)

    def row_text(self, row: int) -> str:
        """Characters of one row; cells never written read as spaces."""
        if not 0 <= row < self.rows:
            raise IndexError(f"row {row} is off the screen")
        cells = self.buffer[2 * row * self.cols:2 * (row + 1) * self.cols:2]
        return bytes(cells).replace(b"\0", b" ").decode("latin-1")