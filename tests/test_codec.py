import pytest

from rpptools.codec import (
    gbk_to_utf16,
    gbk_to_utf8,
    is_utf8_lead2,
    is_utf8_lead3,
    utf16_to_gbk,
    utf16_to_utf8,
    utf8_to_gbk,
    utf8_to_utf16,
)

TEXTS = ["", "abc", "中文测试", "mixed 汉字 text"]


def test_utf16_format():
    assert utf8_to_utf16(b"A") == b"A\x00"


def test_gbk_known_bytes():
    assert utf8_to_gbk("中".encode("utf-8")) == b"\xd6\xd0"


@pytest.mark.parametrize("text", TEXTS)
def test_utf8_utf16_round_trip(text):
    raw = text.encode("utf-8")
    wide = utf8_to_utf16(raw)
    assert len(wide) % 2 == 0
    assert utf16_to_utf8(wide) == raw


@pytest.mark.parametrize("text", TEXTS)
def test_gbk_round_trips(text):
    raw = text.encode("utf-8")
    gbk = utf8_to_gbk(raw)
    assert gbk_to_utf8(gbk) == raw
    assert gbk_to_utf16(gbk) == utf8_to_utf16(raw)
    assert utf16_to_gbk(utf8_to_utf16(raw)) == gbk


def test_lead_bytes():
    assert is_utf8_lead3("中".encode("utf-8")[0])
    assert not is_utf8_lead2("中".encode("utf-8")[0])
    assert is_utf8_lead2("é".encode("utf-8")[0])
    assert not is_utf8_lead3(ord("a"))
    assert not is_utf8_lead2(ord("a"))


def test_lead_byte_bounds():
    assert is_utf8_lead3(0xE0) and is_utf8_lead3(0xEF)
    assert not is_utf8_lead3(0xF0) and not is_utf8_lead3(0xDF)
    assert is_utf8_lead2(0xC0) and is_utf8_lead2(0xDF)
    assert not is_utf8_lead2(0xBF) and not is_utf8_lead2(0xE0)


def test_invalid_input_raises():
    with pytest.raises(UnicodeDecodeError):
        gbk_to_utf8(b"\xff")
    with pytest.raises(UnicodeDecodeError):
        utf16_to_utf8(b"A\x00B")
    with pytest.raises(UnicodeDecodeError):
        utf8_to_utf16(b"\xff")