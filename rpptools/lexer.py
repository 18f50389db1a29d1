"""Tokenizer for source text: words, numbers, strings and operators."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

IMPORT_KEYWORDS = frozenset({"import", "include"})
STRING_TYPE = "rstr"
OPEN_PAREN = "("
CLOSE_PAREN = ")"


@dataclass(frozen=True)
class Token:
    """One word of the source with the line it starts on."""

    value: str
    line: int


class LexError(ValueError):
    """Raised on malformed source text."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.message = message
        self.line = line


def _is_alpha(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_wide(c: str) -> bool:
    return 0x80 <= ord(c) <= 0xFFFF


def _is_ident_start(c: str) -> bool:
    return _is_alpha(c) or c == "_" or _is_wide(c)


def _is_ident_char(c: str) -> bool:
    return _is_ident_start(c) or _is_digit(c)


def _operator_length(text: str, i: int, ops: frozenset[str], longest: int) -> int:
    for length in range(min(longest, len(text) - i), 0, -1):
        if text[i:i + length] in ops:
            return length
    return 0


def _skip_block_comment(text: str, i: int, line: int) -> tuple[int, int]:
    """Index after a nested /* */ comment starting at ``i`` and the new line."""
    n = len(text)
    k = i + 2
    depth = 1
    while k + 1 < n:
        if text[k] == "\n":
            line += 1
        pair = text[k:k + 2]
        if pair == "/*":
            depth += 1
        if pair == "*/":
            depth -= 1
        if depth == 0:
            return k + 2, line
        k += 1
    raise LexError("miss */", line)


def _closing_quote(text: str, i: int, quote: str) -> int | None:
    n = len(text)
    k = i + 1
    while k < n:
        c = text[k]
        if c == "\\":
            if k + 1 < n and text[k + 1] == "x" and k + 3 < n:
                k += 3
            elif k + 1 < n:
                k += 1
            k += 1
            continue
        if c == quote:
            return k
        k += 1
    return None


def _add_string(tokens: list[Token], value: str, line: int) -> None:
    if tokens and tokens[-1].value in IMPORT_KEYWORDS:
        tokens.append(Token(value, line))
        return
    tokens.extend(
        Token(v, line) for v in (STRING_TYPE, OPEN_PAREN, value, CLOSE_PAREN)
    )


def tokenize(text: str | bytes, operators: Iterable[str]) -> list[Token]:
    """Split source text into tokens.

    Comments are dropped, operators match longest first, and single-quoted
    or ``\\\\`` raw strings become a double-quoted string wrapped in a string
    constructor call unless they follow ``import`` or ``include``.
    Newlines inside a double- or single-quoted string are not counted.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    nul = text.find("\0")
    if nul >= 0:
        text = text[:nul]
    ops = frozenset(op for op in operators if op)
    longest = max(map(len, ops), default=0)
    tokens: list[Token] = []
    line = 1
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""
        if ch == "/" and nxt == "*":
            i, line = _skip_block_comment(text, i, line)
            continue
        if ch == "/" and nxt == "/":
            newline = text.find("\n", i + 2)
            if newline < 0:
                return tokens
            line += 1
            i = newline + 1
            continue
        length = _operator_length(text, i, ops, longest)
        if length:
            tokens.append(Token(text[i:i + length], line))
            i += length
        elif _is_ident_start(ch):
            j = i + 1
            while j < n and _is_ident_char(text[j]):
                j += 1
            tokens.append(Token(text[i:j], line))
            i = j
        elif _is_digit(ch):
            j = i + 1
            while j < n and (_is_digit(text[j]) or _is_alpha(text[j]) or text[j] == "_"):
                j += 1
            tokens.append(Token(text[i:j], line))
            i = j
        elif ch in "\"'":
            end = _closing_quote(text, i, ch)
            if end is None:
                raise LexError(f"miss {ch}", line)
            if ch == '"':
                tokens.append(Token(text[i:end + 1], line))
            else:
                _add_string(tokens, '"' + text[i + 1:end] + '"', line)
            i = end + 1
        elif ch == "\n":
            line += 1
            i += 1
        elif ch == "\\" and nxt == "\\":
            j = i + 2
            while j < n and text[j] not in "\r\n":
                j += 1
            _add_string(tokens, '"' + text[i + 2:j] + '"', line)
            if j >= n:
                return tokens
            if text[j] == "\n":
                line += 1
            i = j + 1
        elif ch == "`":
            if not nxt:
                raise LexError("miss `", line)
            code = nxt.encode("utf-8", "surrogatepass")[0]
            tokens.append(Token(str(code), line))
            i += 2
        else:
            i += 1
    return tokens


def token_values(tokens: Iterable[Token]) -> list[str]:
    """The text of each token."""
    return [token.value for token in tokens]