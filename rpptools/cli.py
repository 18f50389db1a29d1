"""Command line entry: argument parsing and the token listing of a source file."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rpptools.config import ConfigError, parse_operators
from rpptools.lexer import LexError, tokenize

MODE_RVM = "rvm"
MODE_JIT = "jit"
MODE_WIN = "win"
MODE_GRUB = "grub"
DEFAULT_MAIN = Path("example") / "1.h"
OPERATOR_FILE = Path("rinf") / "optr.txt"
MAX_SOURCE_SIZE = 200 * 1024 * 1024

_FLAG_MODES = {"-jit": MODE_JIT, "-win": MODE_WIN, "-grub": MODE_GRUB}


@dataclass
class Options:
    """What the command line asks for."""

    mode: str = MODE_RVM
    name: str = ""
    pre_mode: bool = False
    pack_mode: bool = False


class _Failure(Exception):
    pass


def split_params(text: str) -> list[str]:
    """Split a command line on spaces; double quotes group words together.

    An unterminated quote runs to the end of the text.
    """
    parts: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == '"':
            j = text.find('"', i + 1)
            j = n if j < 0 else j
            parts.append(text[i + 1:j])
            i = j + 1
        elif c == " ":
            i += 1
        else:
            j = text.find(" ", i)
            j = n if j < 0 else j
            parts.append(text[i:j])
            i = j + 1
    return parts


def parse_args(argv: Optional[Sequence[str]] = None) -> Options:
    """Options from the arguments after the program name.

    With two or more arguments a leading ``-jit``, ``-win``, ``-grub``,
    ``-pack`` or ``-pre`` selects the mode and the second names the file;
    otherwise the first argument names the file.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    options = Options()
    if len(args) >= 2:
        flag = args[0]
        options.name = args[1]
        if flag in _FLAG_MODES:
            options.mode = _FLAG_MODES[flag]
        elif flag == "-pack":
            options.mode = MODE_JIT
            options.pack_mode = True
        elif flag == "-pre":
            options.pre_mode = True
        else:
            options.name = args[0]
    elif args:
        options.name = args[0]
    return options


def _decode_source(data: bytes) -> str:
    if data.startswith(b"\xff\xfe") or data.startswith(b"\xfe\xff"):
        return data.decode("utf-16")
    if data.startswith(b"\xef\xbb\xbf"):
        return data[3:].decode("utf-8")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("gbk")


def _read_operators(base: Path) -> list[str]:
    path = base / OPERATOR_FILE
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise _Failure(f"can't read optr file {path}") from exc
    try:
        return list(parse_operators(data))
    except ConfigError as exc:
        raise _Failure(f"can't read optr file {path}: {exc}") from exc


def _read_main(path: Path) -> str:
    if path.suffix == ".rp" or not path.is_file():
        raise _Failure(f"can't read main file {path}")
    if path.stat().st_size > MAX_SOURCE_SIZE:
        raise _Failure(f"can't read main file {path}: too large")
    data = path.read_bytes()
    if not data:
        raise _Failure(f"can't read main file {path}: empty")
    try:
        return _decode_source(data)
    except UnicodeDecodeError as exc:
        raise _Failure(f"can't read main file {path}: bad encoding") from exc


def _write_listing(path: Path, text: str, operators: list[str]) -> Path:
    try:
        tokens = tokenize(text, operators)
    except LexError as exc:
        raise _Failure(f"pre process error: {exc}") from exc
    out = path.with_suffix(".txt")
    listing = "".join(f"{t.line} {t.value}\r\n" for t in tokens)
    out.write_bytes(listing.encode("utf-8"))
    return out


def _run(options: Options, base: Path) -> int:
    name = options.name
    if not name and options.mode == MODE_RVM:
        name = str(base / DEFAULT_MAIN)
    if not name:
        raise _Failure("no main file given")
    path = Path(name.replace("\\", "/"))
    if not path.is_absolute():
        path = base / path
    path = path.resolve()
    operators = _read_operators(base)
    text = _read_main(path)
    if options.pre_mode:
        _write_listing(path, text, operators)
        return 0
    if options.pack_mode:
        raise _Failure("packing into an executable is not available")
    raise _Failure(f"the {options.mode} back end is not available")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command; with ``-pre`` write the token listing beside the file.

    The listing has one ``<line> <token>`` entry per CRLF-terminated line.
    Operators are read from ``rinf/optr.txt`` under the current directory.
    Returns 0 on success and 1 on failure.
    """
    options = parse_args(argv)
    try:
        return _run(options, Path.cwd())
    except _Failure as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())