# rpptools

Building blocks for the RPP language toolchain, in plain Python with no
third-party dependencies.

## Modules

- `rpptools.lexer` – `tokenize(text, operators)` splits source text into
  `Token`s (value and line), driven by an operator table; operators match
  longest first, comments are dropped, single-quoted and `\\` raw strings are
  wrapped as `rstr ( "..." )` unless they follow `import` or `include`.
  Malformed text raises `LexError`. `token_values` gives the token texts.
- `rpptools.consteval` – `evaluate(tokens)` computes a constant 32-bit integer
  expression with `+ - * /`, brackets and leading signs; failures raise
  `ConstEvalError`. `is_const_token` tells whether a token may appear in one.
- `rpptools.config` – readers for the keyword list (`parse_keys`), the UTF-16
  operator/priority table (`parse_operators`), the settings file
  (`parse_conf`) and peephole rules (`parse_match`, giving `MatchRule`s).
  Malformed input raises `ConfigError`.
- `rpptools.optimizer` – `fold_add_sub` merges runs of constant `add`/`sub`
  on the same target; `apply_rules` rewrites instruction sequences with
  `Rule`s, using `match_instr` and `substitute` (`@@` any word, `@n` any
  number, `@<digit>` a captured word). A bad reference raises `OptimizeError`.
- `rpptools.vm` – a 32-bit register machine: `Machine` runs a list of
  `Instruction`s (`Op` plus `Operand`s of `Kind` immediate, register or
  `[register + offset]`) over a little-endian `Memory` that is also the stack,
  with `Registers` for state. Undefined instructions raise `VMError`.
- `rpptools.arith` – two's-complement 32/64-bit arithmetic, shifts and logical
  operators; `rpptools.scalars` – `ushort`, `short` and `double` conversions.
- `rpptools.algo` – binary search, in-place quicksort, reversal, sub-sequence
  search and splitting; searches return `len(seq)` when nothing is found.
- `rpptools.paths` – `/`-separated path helpers and `walk_bfs`, a breadth-first
  directory walk returning `DirEntry` items.
- `rpptools.widestr` – `WideString`, a mutable string of UTF-16 code units.
- `rpptools.codec` – GBK / UTF-8 / UTF-16LE byte conversions and UTF-8 lead
  byte tests.
- `rpptools.bareruntime` – pieces for a machine without an operating system:
  decimal formatting and parsing (`format_int`, `format_uint`, `parse_int`,
  `scan`), a page-granular first-fit `PageHeap` and a text-mode `TextScreen`.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
rpptools -pre FILE
```

reads the operator table from `rinf/optr.txt` under the current directory
(UTF-16 with byte-order mark), tokenizes `FILE` and writes a listing beside it
with the suffix `.txt`: one `<line> <token>` entry per CRLF-terminated line.
It exits with 0 on success and 1 on failure, with the reason on standard error.

The other forms, `rpptools FILE` and `rpptools -jit|-win|-grub|-pack FILE`,
are parsed but end with an error: see below.

```
rpptools-cpuload [--threads N] [--n N] [--repeat N] [--duration SECONDS]
```

starts worker threads (10 by default) that each print `fib(43)` 10000 times,
and spins the main thread; without `--duration` it spins forever.

## Library examples

```python
from rpptools import algo, arith, optimizer
from rpptools.vm import Instruction, Machine, Op, Operand

algo.split("321;1343;fj242i;12", ";", 0)
# ['321', '1343', 'fj242i', '12']

arith.add32(0x7FFFFFFF, 1)          # -2147483648

optimizer.fold_add_sub([["add", "esp", ",", "4"], ["sub", "esp", ",", "8"]])
# [['sub', 'esp', ',', '4']]

program = [
    Instruction(Op.MOV, Operand.reg("eax"), Operand.imm(6)),
    Instruction(Op.IMUL, Operand.reg("eax"), Operand.imm(7)),
    Instruction(Op.HALT),
]
Machine(program).run().eax          # 42
```

## What the package does not do

- It does not compile or run RPP programs from source: there is no class
  extraction, template expansion or code generation, so the command line only
  produces token listings, and packing a program into an executable is not
  available.
- The virtual machine has no built-in external calls: a `calle` instruction
  succeeds only when a handler is passed to `Machine` as `externals`.
- There is no keyed dictionary type and no binary file access layer; use
  Python's `dict` and file objects.