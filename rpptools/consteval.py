"""Evaluation of constant integer expressions with + - * / and brackets."""

from __future__ import annotations

from collections.abc import Iterable

from rpptools import arith
from rpptools.lexer import Token

MAX_DEPTH = 150
OPERATORS = ("+", "-", "*", "/")
_PRIORITY = {"+": 1, "-": 1, "*": 2, "/": 2}
_END = None


class ConstEvalError(ValueError):
    """Raised when a constant expression cannot be evaluated."""


def _is_number(value: object) -> bool:
    return isinstance(value, str) and bool(value) and all("0" <= c <= "9" for c in value)


def is_const_token(value: str) -> bool:
    """True for a token that may appear in a constant expression."""
    return _is_number(value) or value in ("(", ")", *OPERATORS)


def _precedes(top: str | None, current: str | None) -> bool:
    if top is _END:
        return False
    if current is _END:
        return True
    return _PRIORITY[top] >= _PRIORITY[current]


def _matching_paren(src: list, left: int) -> int | None:
    depth = 0
    for k in range(left, len(src)):
        if src[k] == "(":
            depth += 1
        elif src[k] == ")":
            depth -= 1
            if depth == 0:
                return k
    return None


def _calc(first: int, second: int, theta: str) -> int:
    if theta == "+":
        return arith.add32(first, second)
    if theta == "-":
        return arith.sub32(first, second)
    if theta == "*":
        return arith.mul32(first, second)
    if second == 0:
        raise ConstEvalError("const eval calc error: division by zero")
    return arith.div32(first, second)


def _evaluate(tokens: list[str], level: int) -> int:
    if level > MAX_DEPTH:
        raise ConstEvalError("const eval level overflow")
    level += 1
    src: list = [*tokens, _END]
    operators: list = [_END]
    operands: list[int] = []
    i = 0
    while i < len(src):
        tok = src[i]
        if tok is _END and operators[-1] is _END:
            break
        if _is_number(tok):
            operands.append(arith.wrap32(int(tok)))
            i += 1
        elif tok == "(":
            right = _matching_paren(src, i)
            if right is None:
                raise ConstEvalError("const eval miss )")
            operands.append(_evaluate(src[i + 1:right], level))
            i = right + 1
        elif tok == ")":
            raise ConstEvalError("const eval unbalanced )")
        elif tok is _END or tok in _PRIORITY:
            if not _precedes(operators[-1], tok):
                operators.append(tok)
                i += 1
                continue
            theta = operators.pop()
            if not operands:
                raise ConstEvalError("const eval miss operand")
            second = operands.pop()
            if not operands:
                if theta == "-":
                    second = arith.neg32(second)
                elif theta != "+":
                    raise ConstEvalError("const eval miss operand")
                operands.append(second)
                continue
            operands.append(_calc(operands.pop(), second, theta))
        else:
            i += 1
    if len(operands) != 1:
        raise ConstEvalError("const eval left no single result")
    return operands[0]


def evaluate(tokens: Iterable[str | Token]) -> int:
    """Value of a constant expression given as tokens, as a 32-bit int.

    A leading sign applies only where no left operand exists; tokens that are
    neither numbers, brackets nor operators are ignored.
    """
    values = [t.value if isinstance(t, Token) else t for t in tokens]
    return _evaluate(values, 0)