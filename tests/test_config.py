import pytest

from rpptools.config import (
    ConfigError,
    MatchRule,
    parse_conf,
    parse_keys,
    parse_match,
    parse_operators,
)

BOM = b"\xff\xfe"


def utf16_lines(*entries):
    return BOM + "\r\n".join(entries).encode("utf-16-le")


def test_parse_keys():
    assert parse_keys("import\r\ninclude\r\n") == ["import", "include"]
    assert parse_keys(b"a\r\nb") == ["a", "b"]


def test_parse_keys_empty():
    with pytest.raises(ConfigError):
        parse_keys("")


def test_parse_operators():
    ops = parse_operators(utf16_lines("+", "1", "*", "2"))
    assert ops == {"+": 1, "*": 2}
    assert list(ops) == ["+", "*"]


def test_parse_operators_needs_bom():
    with pytest.raises(ConfigError):
        parse_operators("+\r\n1".encode("utf-16-le"))
    with pytest.raises(ConfigError):
        parse_operators(b"\xff")


def test_parse_operators_missing_priority():
    with pytest.raises(ConfigError):
        parse_operators(utf16_lines("+", "1", "*"))


def test_parse_conf_values_and_expressions():
    assert parse_conf("stack\r\n1024*4\r\nflag\r\n1\r\n") == [1024 * 4, 1]


def test_parse_conf_bad_expression():
    with pytest.raises(ConfigError):
        parse_conf("stack\r\n(1+\r\n")


def test_parse_conf_empty():
    with pytest.raises(ConfigError):
        parse_conf("only a label\r\n")


def test_parse_match_wildcards():
    text = "mov @1 , @2\r\n\r\nmov @2 , @1\r\n\r\n"
    rules = parse_match(text, ["@", ","])
    assert rules == [
        MatchRule(
            src=[["mov", "@1", ",", "@2"]],
            dst=[["mov", "@2", ",", "@1"]],
        )
    ]


def test_parse_match_quotes_and_double_at():
    text = 'push "abc"\r\nadd @@ , @n\r\n\r\nnop\r\n\r\n'
    rules = parse_match(text, ["@", ","])
    assert rules[0].src == [["push", "abc"], ["add", "@@", ",", "@n"]]
    assert rules[0].dst == [["nop"]]


def test_parse_match_incomplete_block_ignored():
    text = "a\r\n\r\nb\r\n\r\nc\r\n"
    rules = parse_match(text, [])
    assert len(rules) == 1
    assert rules[0].src == [["a"]]
    assert rules[0].dst == [["b"]]