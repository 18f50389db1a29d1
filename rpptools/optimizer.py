"""Peephole optimisation of assembled instructions.

An instruction is a list of words such as ``["add", "esp", ",", "4"]``.
Runs of additions and subtractions of constants to the same target are
folded into one. Rule-based rewriting replaces instruction sequences that
match a rule's source pattern with its replacement.

In a pattern, ``@@`` matches any word and ``@n`` matches any number. In a
replacement, ``@<digit>`` stands for the word captured by the pattern's
wildcard of that index, counted in order of appearance.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

ADD = "add"
SUB = "sub"
NOP = "nop"
COMMA = ","
ANY_WORD = "@@"
ANY_NUMBER = "@n"
WILDCARD = "@"


class OptimizeError(ValueError):
    """Raised when a rule's replacement refers to a missing wildcard."""


@dataclass
class Rule:
    """A rewrite rule: the instructions to find and those to put instead."""

    src: list[list[str]] = field(default_factory=list)
    dst: list[list[str]] = field(default_factory=list)


def _is_number(word: str) -> bool:
    return bool(word) and all("0" <= c <= "9" for c in word)


def _leading_int(word: str) -> int:
    digits = ""
    for c in word:
        if not "0" <= c <= "9":
            break
        digits += c
    return int(digits) if digits else 0


def _is_add_sub(words: Sequence[str]) -> bool:
    return (
        len(words) == 4
        and words[0] in (ADD, SUB)
        and words[2] == COMMA
        and _is_number(words[3])
    )


def fold_add_sub(
    instrs: Iterable[Sequence[str]], drop_nop: bool = False
) -> list[list[str]]:
    """Fold consecutive constant add/sub on one target into a single instruction.

    A run that sums to zero disappears. With ``drop_nop`` lone ``nop``
    instructions are removed as well.
    """
    words = [list(w) for w in instrs]
    result: list[list[str]] = []
    i = 0
    while i < len(words):
        current = words[i]
        if _is_add_sub(current):
            j = i + 1
            while j < len(words) and _is_add_sub(words[j]) and words[j][1] == current[1]:
                j += 1
            total = sum(
                int(w[3]) if w[0] == ADD else -int(w[3]) for w in words[i:j]
            )
            if total:
                op = ADD if total > 0 else SUB
                result.append([op, current[1], current[2], str(abs(total))])
            i = j
            continue
        if not (drop_nop and current == [NOP]):
            result.append(current)
        i += 1
    return result


def match_instr(item: Sequence[str], pick: Sequence[str]) -> bool:
    """True when instruction ``item`` fits pattern ``pick`` word for word."""
    if len(item) != len(pick):
        return False
    for word, pattern in zip(item, pick):
        if pattern == ANY_WORD:
            continue
        if pattern == ANY_NUMBER and _is_number(word):
            continue
        if pattern != word:
            return False
    return True


def substitute(
    items: Sequence[Sequence[str]],
    src: Sequence[Sequence[str]],
    dst: Sequence[Sequence[str]],
) -> list[list[str]]:
    """The replacement ``dst`` with wildcards filled from the matched ``items``."""
    captured = [
        item_word
        for item, pattern in zip(items, src)
        for item_word, pattern_word in zip(item, pattern)
        if pattern_word.startswith(WILDCARD)
    ]
    result: list[list[str]] = []
    for instr in dst:
        out = []
        for word in instr:
            if word.startswith(WILDCARD):
                index = _leading_int(word[1:])
                if index >= len(captured):
                    raise OptimizeError(
                        f"replacement {word!r} refers to a missing wildcard"
                    )
                word = captured[index]
            out.append(word)
        result.append(out)
    return result


def apply_rules(
    instrs: Iterable[Sequence[str]], rules: Iterable[Rule]
) -> list[list[str]]:
    """Rewrite ``instrs`` with the first matching rule at each position.

    Rules are tried in order; rules with an empty source are ignored.
    """
    words = [list(w) for w in instrs]
    active = [rule for rule in rules if rule.src]
    result: list[list[str]] = []
    i = 0
    while i < len(words):
        for rule in active:
            length = len(rule.src)
            if i + length > len(words):
                continue
            window = words[i:i + length]
            if all(match_instr(item, pick) for item, pick in zip(window, rule.src)):
                result.extend(substitute(window, rule.src, rule.dst))
                i += length
                break
        else:
            result.append(words[i])
            i += 1
    return result