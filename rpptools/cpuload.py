"""Keep the processor busy with threads computing Fibonacci numbers."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from collections.abc import Sequence
from typing import Optional, TextIO


def fib(n: int) -> int:
    """Fibonacci number by plain recursion, with fib(0) == fib(1) == 1."""
    if n <= 1:
        return 1
    return fib(n - 1) + fib(n - 2)


def worker(n: int = 43, repeat: int = 10000, out: Optional[TextIO] = None) -> None:
    """Compute and print ``fib(n)`` ``repeat`` times."""
    stream = out if out is not None else sys.stdout
    for _ in range(repeat):
        print(fib(n), file=stream, flush=True)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cpuload", description=__doc__)
    parser.add_argument("--threads", type=int, default=10, help="worker threads")
    parser.add_argument("--n", type=int, default=43, help="Fibonacci index")
    parser.add_argument("--repeat", type=int, default=10000, help="results per thread")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to spin before stopping; spins forever when omitted",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the workers, then spin; with --duration, stop and wait for them."""
    args = _parser().parse_args(argv)
    if args.threads < 0 or args.repeat < 0:
        raise SystemExit("cpuload: --threads and --repeat must not be negative")
    out = sys.stdout
    threads = [
        threading.Thread(target=worker, args=(args.n, args.repeat, out), daemon=True)
        for _ in range(args.threads)
    ]
    for thread in threads:
        thread.start()
    deadline = None if args.duration is None else time.monotonic() + args.duration
    while deadline is None or time.monotonic() < deadline:
        pass
    for thread in threads:
        thread.join()
    return 0