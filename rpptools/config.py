"""Readers for the compiler's keyword, operator, setting and peephole-rule files."""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Iterable

from rpptools import algo, arith
from rpptools.consteval import ConstEvalError, evaluate
from rpptools.lexer import LexError, token_values, tokenize

LINE_END = "\r\n"
UTF16_BOM = b"\xff\xfe"
CONST_OPERATORS = ("+", "-", "*", "/", "(", ")")
_UTF16_LINE_END = "\r\n".encode("utf-16-le")


class ConfigError(ValueError):
    """Raised when a configuration file is malformed."""


@dataclass
class MatchRule:
    """A peephole rule: instructions to find and instructions to put instead."""

    src: list[list[str]] = field(default_factory=list)
    dst: list[list[str]] = field(default_factory=list)


def _text(data: str | bytes) -> str:
    return bytes(data).decode("utf-8") if isinstance(data, (bytes, bytearray)) else data


def _is_digits(value: str) -> bool:
    return bool(value) and all("0" <= c <= "9" for c in value)


def parse_keys(text: str | bytes) -> list[str]:
    """Keywords, one per CRLF-terminated line."""
    keys = algo.split(_text(text), LINE_END)
    if not keys:
        raise ConfigError("can't read key file")
    return keys


def parse_operators(data: bytes) -> dict[str, int]:
    """Operators and their priorities from a UTF-16 file with byte-order mark.

    Each operator line is followed by a line holding its priority.
    """
    data = bytes(data)
    if len(data) < 2 or not data.startswith(UTF16_BOM):
        raise ConfigError("can't read optr file: not UTF-16 text")
    operators: list[str] = []
    priorities: dict[str, int] = {}
    for piece in algo.split(data[2:], _UTF16_LINE_END):
        try:
            entry = piece.decode("utf-16-le")
        except UnicodeDecodeError as exc:
            raise ConfigError("can't read optr file") from exc
        if _is_digits(entry):
            if not operators:
                raise ConfigError("can't read optr file: priority before operator")
            priorities[operators[-1]] = int(entry)
        else:
            operators.append(entry)
    if not operators or len(operators) != len(priorities):
        raise ConfigError("can't read optr file: operator without priority")
    return {op: priorities[op] for op in operators}


def parse_conf(text: str | bytes) -> list[int]:
    """Setting values: every second line, unsigned, expressions evaluated."""
    lines = algo.split(_text(text), LINE_END)
    values: list[int] = []
    for value in lines[1::2]:
        if _is_digits(value):
            values.append(arith.wrap_u32(int(value)))
            continue
        try:
            result = evaluate(tokenize(value, CONST_OPERATORS))
        except (LexError, ConstEvalError) as exc:
            raise ConfigError(f"can't read conf value {value!r}") from exc
        values.append(arith.wrap_u32(result))
    if not values:
        raise ConfigError("can't read conf file")
    return values


def _instructions(lines: list[str], operators: Iterable[str]) -> list[list[str]]:
    result = []
    for line in lines:
        try:
            words = token_values(tokenize(line, operators))
        except LexError as exc:
            raise ConfigError(f"can't read match line {line!r}") from exc
        merged: list[str] = []
        pending_at = False
        for word in words:
            if pending_at:
                merged[-1] += word
                pending_at = False
            elif word == "@":
                merged.append(word)
                pending_at = True
            elif word.startswith('"'):
                merged.append(word[1:-1] if len(word) >= 2 and word.endswith('"') else word[1:])
            else:
                merged.append(word)
        result.append(merged)
    return result


def parse_match(text: str | bytes, operators: Iterable[str]) -> list[MatchRule]:
    """Peephole rules: blank-line separated blocks, source then replacement.

    ``@`` joined with the following word marks a wildcard; quoted words lose
    their quotes. A block not followed by a blank line is ignored.
    """
    ops = list(operators)
    lines = algo.split_keep_empty(_text(text), LINE_END)
    rules: list[MatchRule] = []
    current = MatchRule()
    start = 0
    for i, line in enumerate(lines):
        if line:
            continue
        block = lines[start:i]
        if not current.src:
            current.src = _instructions(block, ops)
        elif not current.dst:
            current.dst = _instructions(block, ops)
            rules.append(current)
            current = MatchRule()
        start = i + 1
    return rules