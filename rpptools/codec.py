"""Conversions between GBK, UTF-8 and UTF-16 (little endian) byte strings."""

from __future__ import annotations

_UTF16 = "utf-16-le"


def is_utf8_lead3(byte: int) -> bool:
    """True for a byte that starts a three-byte UTF-8 sequence."""
    return 0xE0 <= byte <= 0xEF


def is_utf8_lead2(byte: int) -> bool:
    """True for a byte that starts a two-byte UTF-8 sequence."""
    return 0xC0 <= byte <= 0xDF


def _convert(data: bytes, source: str, target: str) -> bytes:
    return bytes(data).decode(source).encode(target)


def gbk_to_utf8(data: bytes) -> bytes:
    """Re-encode GBK bytes as UTF-8."""
    return _convert(data, "gbk", "utf-8")


def gbk_to_utf16(data: bytes) -> bytes:
    """Re-encode GBK bytes as UTF-16."""
    return _convert(data, "gbk", _UTF16)


def utf8_to_gbk(data: bytes) -> bytes:
    """Re-encode UTF-8 bytes as GBK."""
    return _convert(data, "utf-8", "gbk")


def utf8_to_utf16(data: bytes) -> bytes:
    """Re-encode UTF-8 bytes as UTF-16."""
    return _convert(data, "utf-8", _UTF16)


def utf16_to_gbk(data: bytes) -> bytes:
    """Re-encode UTF-16 bytes as GBK."""
    return _convert(data, _UTF16, "gbk")


def utf16_to_utf8(data: bytes) -> bytes:
    """Re-encode UTF-16 bytes as UTF-8."""
    return _convert(data, _UTF16, "utf-8")