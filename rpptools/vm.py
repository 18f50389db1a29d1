"""A small register machine that runs lists of assembled instructions.

The machine has eight 32-bit general registers, a flat little-endian
memory that doubles as the stack, and an instruction pointer that indexes
the program list. A call pushes the index of the following instruction as
its return address. Operands are immediates, registers or memory
addressed as ``[register + offset]``. Comparison instructions leave 0 or 1
in ``ebx``, which the conditional jumps test.
"""

from __future__ import annotations

import math
import operator
import struct
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rpptools import arith

POINTER_SIZE = 4
DEFAULT_STACK_SIZE = 1024 * 1024
REGISTER_NAMES = ("eax", "ebx", "ecx", "edx", "esi", "edi", "esp", "ebp")


class VMError(RuntimeError):
    """Raised when the machine meets an instruction it cannot execute."""


class Kind(Enum):
    """How an operand is read."""

    IMM = "imm"
    REG = "reg"
    ADDR = "addr"


class Op(Enum):
    """Instruction mnemonics."""

    MOV = "mov"
    MOV1 = "mov1"
    MOV8 = "mov8"
    LEA = "lea"

    ADD = "add"
    SUB = "sub"
    IMUL = "imul"
    IDIV = "idiv"
    IMOD = "imod"
    UDIV = "udiv"
    UMOD = "umod"

    BAND = "band"
    BOR = "bor"
    BXOR = "bxor"
    BNOT = "bnot"
    BSHL = "bshl"
    BSHR = "bshr"
    BSAR = "bsar"

    CESB = "cesb"
    CNESB = "cnesb"
    CGSB = "cgsb"
    CGESB = "cgesb"
    CLSB = "clsb"
    CLESB = "clesb"
    UCGSB = "ucgsb"
    UCGESB = "ucgesb"
    UCLSB = "uclsb"
    UCLESB = "uclesb"

    ADD8 = "add8"
    SUB8 = "sub8"
    IMUL8 = "imul8"
    IDIV8 = "idiv8"
    IMOD8 = "imod8"
    CGSB8 = "cgsb8"
    CLSB8 = "clsb8"

    FADD8 = "fadd8"
    FSUB8 = "fsub8"
    FMUL8 = "fmul8"
    FDIV8 = "fdiv8"
    FCGSB8 = "fcgsb8"
    FCLSB8 = "fclsb8"

    PUSH = "push"
    POP = "pop"
    CALL = "call"
    RET = "ret"
    JMP = "jmp"
    JEBXZ = "jebxz"
    JEBXNZ = "jebxnz"
    CALLE = "calle"
    HALT = "halt"
    NOP = "nop"


@dataclass(frozen=True)
class Operand:
    """An immediate, a register, or the memory at ``register + val``."""

    kind: Kind
    register: Optional[str] = None
    val: int = 0

    def __post_init__(self) -> None:
        if self.kind is Kind.IMM:
            if self.register is not None:
                raise ValueError("an immediate operand has no register")
        elif self.register not in REGISTER_NAMES:
            raise ValueError(f"unknown register {self.register!r}")

    @classmethod
    def imm(cls, value: int) -> Operand:
        return cls(Kind.IMM, None, int(value))

    @classmethod
    def reg(cls, name: str) -> Operand:
        return cls(Kind.REG, name, 0)

    @classmethod
    def addr(cls, name: str, offset: int = 0) -> Operand:
        return cls(Kind.ADDR, name, int(offset))


@dataclass(frozen=True)
class Instruction:
    """One instruction with up to two operands."""

    op: Op
    first: Optional[Operand] = None
    second: Optional[Operand] = None


@dataclass
class Registers:
    """Register file; general registers hold unsigned 32-bit values."""

    eax: int = 0
    ebx: int = 0
    ecx: int = 0
    edx: int = 0
    esi: int = 0
    edi: int = 0
    esp: int = 0
    ebp: int = 0
    eip: int = 0


class Memory:
    """Flat little-endian byte memory."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("memory size must be positive")
        self.size = size
        self.data = bytearray(size)

    def _check(self, address: int, width: int) -> int:
        if not 0 <= address <= self.size - width:
            raise VMError(f"memory access at {address:#x} out of range")
        return address

    def _read(self, fmt: str, address: int):
        self._check(address, struct.calcsize(fmt))
        return struct.unpack_from(fmt, self.data, address)[0]

    def _write(self, fmt: str, address: int, value) -> None:
        self._check(address, struct.calcsize(fmt))
        struct.pack_into(fmt, self.data, address, value)

    def read_int(self, address: int) -> int:
        return self._read("<i", address)

    def write_int(self, address: int, value: int) -> None:
        self._write("<I", address, arith.wrap_u32(value))

    def read_uint(self, address: int) -> int:
        return self._read("<I", address)

    def read_byte(self, address: int) -> int:
        return self._read("<B", address)

    def write_byte(self, address: int, value: int) -> None:
        self._write("<B", address, value & 0xFF)

    def read_int64(self, address: int) -> int:
        return self._read("<q", address)

    def write_int64(self, address: int, value: int) -> None:
        self._write("<Q", address, value & 0xFFFFFFFFFFFFFFFF)

    def read_double(self, address: int) -> float:
        return self._read("<d", address)

    def write_double(self, address: int, value: float) -> None:
        self._write("<d", address, float(value))

    def read_cstring(self, address: int) -> bytes:
        """Bytes from ``address`` up to (not including) the next NUL."""
        self._check(address, 1)
        end = self.data.find(0, address)
        if end < 0:
            raise VMError(f"unterminated string at {address:#x}")
        return bytes(self.data[address:end])

    def write_bytes(self, address: int, data: bytes) -> None:
        payload = bytes(data)
        self._check(address, len(payload))
        self.data[address:address + len(payload)] = payload


def _udiv(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    return a // b


def _umod(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    return a % b


def _fdiv(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


_SIGNED_ARITH = {
    Op.ADD: arith.add32,
    Op.SUB: arith.sub32,
    Op.IMUL: arith.mul32,
    Op.IDIV: arith.div32,
    Op.IMOD: arith.mod32,
    Op.BSAR: arith.sar32,
}
_UNSIGNED_ARITH = {
    Op.BAND: operator.and_,
    Op.BOR: operator.or_,
    Op.BXOR: operator.xor,
    Op.BSHL: arith.shl32,
    Op.BSHR: arith.shr32,
    Op.UDIV: _udiv,
    Op.UMOD: _umod,
}
_SIGNED_CMP = {
    Op.CESB: operator.eq,
    Op.CNESB: operator.ne,
    Op.CGSB: operator.gt,
    Op.CGESB: operator.ge,
    Op.CLSB: operator.lt,
    Op.CLESB: operator.le,
}
_UNSIGNED_CMP = {
    Op.UCGSB: operator.gt,
    Op.UCGESB: operator.ge,
    Op.UCLSB: operator.lt,
    Op.UCLESB: operator.le,
}
_INT64_ARITH = {
    Op.ADD8: arith.add64,
    Op.SUB8: arith.sub64,
    Op.IMUL8: arith.mul64,
    Op.IDIV8: arith.div64,
    Op.IMOD8: arith.mod64,
}
_INT64_CMP = {Op.CGSB8: operator.gt, Op.CLSB8: operator.lt}
_FLOAT_ARITH = {
    Op.FADD8: operator.add,
    Op.FSUB8: operator.sub,
    Op.FMUL8: operator.mul,
    Op.FDIV8: _fdiv,
}
_FLOAT_CMP = {Op.FCGSB8: operator.gt, Op.FCLSB8: operator.lt}

ExternalHandler = Callable[["Machine", int], bool]


class Machine:
    """Executes a program held as a list of :class:`Instruction`.

    ``externals`` handles ``calle`` instructions: it is called with the
    machine and the call index and returns False for an unknown index.
    """

    def __init__(
        self,
        program: Iterable[Instruction],
        stack_size: int = DEFAULT_STACK_SIZE,
        externals: Optional[ExternalHandler] = None,
    ) -> None:
        self.program = list(program)
        self.memory = Memory(stack_size)
        self.regs = Registers(esp=stack_size)
        self.externals = externals
        self.halted = False

    # -- stack -------------------------------------------------------------

    def push(self, value: int) -> None:
        """Push a 32-bit value."""
        self.regs.esp = arith.wrap_u32(self.regs.esp - POINTER_SIZE)
        self.memory.write_int(self.regs.esp, value)

    def pop(self) -> int:
        """Pop a 32-bit value, returned unsigned."""
        value = self.memory.read_uint(self.regs.esp)
        self.regs.esp = arith.wrap_u32(self.regs.esp + POINTER_SIZE)
        return value

    # -- operands ----------------------------------------------------------

    def _address(self, operand: Operand) -> int:
        base = getattr(self.regs, operand.register)
        return arith.wrap_u32(base + operand.val)

    def _load_u(self, operand: Operand) -> int:
        if operand.kind is Kind.IMM:
            return arith.wrap_u32(operand.val)
        if operand.kind is Kind.REG:
            return arith.wrap_u32(getattr(self.regs, operand.register))
        return self.memory.read_uint(self._address(operand))

    def _load(self, operand: Operand) -> int:
        return arith.wrap32(self._load_u(operand))

    def _store(self, operand: Operand, value: int) -> None:
        if operand.kind is Kind.REG:
            setattr(self.regs, operand.register, arith.wrap_u32(value))
        elif operand.kind is Kind.ADDR:
            self.memory.write_int(self._address(operand), value)
        else:
            raise VMError("cannot store into an immediate")

    @staticmethod
    def _undefined(ins: Instruction) -> VMError:
        return VMError(f"undefined ins: {ins.op.value}")

    def _two(self, ins: Instruction) -> tuple[Operand, Operand]:
        first, second = ins.first, ins.second
        if first is None or second is None or first.kind is Kind.IMM:
            raise self._undefined(ins)
        return first, second

    def _two_addr(self, ins: Instruction) -> tuple[int, int]:
        first, second = self._two(ins)
        if first.kind is not Kind.ADDR or second.kind is not Kind.ADDR:
            raise self._undefined(ins)
        return self._address(first), self._address(second)

    def _one(self, ins: Instruction, allow_imm: bool = True) -> Operand:
        first = ins.first
        if first is None or ins.second is not None:
            raise self._undefined(ins)
        if not allow_imm and first.kind is Kind.IMM:
            raise self._undefined(ins)
        return first

    # -- execution ---------------------------------------------------------

    def step(self) -> bool:
        """Execute one instruction; False once the machine has halted."""
        if self.halted:
            return False
        eip = self.regs.eip
        if not 0 <= eip < len(self.program):
            raise VMError(f"instruction pointer {eip} outside the program")
        ins = self.program[eip]
        try:
            return self._execute(ins, eip)
        except ZeroDivisionError as exc:
            raise VMError(f"division by zero at instruction {eip}") from exc

    def _execute(self, ins: Instruction, eip: int) -> bool:
        op = ins.op
        regs = self.regs
        mem = self.memory

        if op is Op.HALT:
            if ins.first is not None:
                raise self._undefined(ins)
            self.halted = True
            return False
        if op in (Op.JMP, Op.JEBXZ, Op.JEBXNZ):
            target = self._one(ins)
            jump = op is Op.JMP or (op is Op.JEBXNZ) == bool(regs.ebx)
            regs.eip = self._load_u(target) if jump else eip + 1
            return True
        if op is Op.CALL:
            target = self._one(ins)
            self.push(eip + 1)
            regs.eip = self._load_u(target)
            return True
        if op is Op.RET:
            self._ret(ins)
            return True

        if op is Op.NOP:
            if ins.first is not None:
                raise self._undefined(ins)
        elif op is Op.MOV:
            dst, src = self._two(ins)
            self._store(dst, self._load_u(src))
        elif op is Op.MOV1:
            dst, src = self._two_addr(ins)
            mem.write_byte(dst, mem.read_byte(src))
        elif op is Op.MOV8:
            dst, src = self._two_addr(ins)
            mem.write_int64(dst, mem.read_int64(src))
        elif op is Op.LEA:
            dst, src = self._two(ins)
            if src.kind is not Kind.ADDR:
                raise self._undefined(ins)
            self._store(dst, self._address(src))
        elif op in _SIGNED_ARITH:
            dst, src = self._two(ins)
            self._store(dst, _SIGNED_ARITH[op](self._load(dst), self._load(src)))
        elif op in _UNSIGNED_ARITH:
            dst, src = self._two(ins)
            self._store(dst, _UNSIGNED_ARITH[op](self._load_u(dst), self._load_u(src)))
        elif op in _SIGNED_CMP:
            dst, src = self._two(ins)
            regs.ebx = int(_SIGNED_CMP[op](self._load(dst), self._load(src)))
        elif op in _UNSIGNED_CMP:
            dst, src = self._two(ins)
            regs.ebx = int(_UNSIGNED_CMP[op](self._load_u(dst), self._load_u(src)))
        elif op in _INT64_ARITH:
            dst, src = self._two_addr(ins)
            mem.write_int64(dst, _INT64_ARITH[op](mem.read_int64(dst), mem.read_int64(src)))
        elif op in _INT64_CMP:
            dst, src = self._two_addr(ins)
            regs.ebx = int(_INT64_CMP[op](mem.read_int64(dst), mem.read_int64(src)))
        elif op in _FLOAT_ARITH:
            dst, src = self._two_addr(ins)
            mem.write_double(dst, _FLOAT_ARITH[op](mem.read_double(dst), mem.read_double(src)))
        elif op in _FLOAT_CMP:
            dst, src = self._two_addr(ins)
            regs.ebx = int(_FLOAT_CMP[op](mem.read_double(dst), mem.read_double(src)))
        elif op is Op.BNOT:
            target = self._one(ins, allow_imm=False)
            self._store(target, ~self._load(target))
        elif op is Op.PUSH:
            source = self._one(ins)
            regs.esp = arith.wrap_u32(regs.esp - POINTER_SIZE)
            mem.write_int(regs.esp, self._load_u(source))
        elif op is Op.POP:
            target = self._one(ins, allow_imm=False)
            self._store(target, mem.read_uint(regs.esp))
            regs.esp = arith.wrap_u32(regs.esp + POINTER_SIZE)
        elif op is Op.CALLE:
            index = self._one(ins)
            if index.kind is not Kind.IMM:
                raise self._undefined(ins)
            if self.externals is None or not self.externals(self, index.val):
                raise VMError(f"undefined external call {index.val}")
        else:
            raise self._undefined(ins)
        regs.eip = eip + 1
        return True

    def _ret(self, ins: Instruction) -> None:
        regs = self.regs
        if ins.second is not None:
            raise self._undefined(ins)
        regs.eip = self.memory.read_uint(regs.esp)
        first = ins.first
        if first is None:
            regs.esp = arith.wrap_u32(regs.esp + POINTER_SIZE)
        elif first.kind is Kind.ADDR:
            regs.esp = arith.wrap_u32(regs.esp + POINTER_SIZE)
            regs.esp = arith.wrap_u32(regs.esp + self._load(first))
        else:
            regs.esp = arith.wrap_u32(regs.esp + POINTER_SIZE + self._load(first))

    def run(self) -> Registers:
        """Run until ``halt``; the final registers."""
        while self.step():
            pass
        return self.regs