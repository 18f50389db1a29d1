import math

import pytest

from rpptools import arith
from rpptools.vm import (
    Instruction,
    Kind,
    Machine,
    Memory,
    Op,
    Operand,
    VMError,
)

I = Operand.imm
R = Operand.reg
A = Operand.addr


def ins(op, first=None, second=None):
    return Instruction(op, first, second)


def run(program, stack_size=256, externals=None):
    machine = Machine(program, stack_size, externals)
    machine.run()
    return machine


# -- memory -----------------------------------------------------------------

def test_memory_int_round_trip_and_unsigned_view():
    mem = Memory(16)
    mem.write_int(4, -5)
    assert mem.read_int(4) == -5
    assert mem.read_uint(4) == arith.wrap_u32(-5)


def test_memory_int64_and_double_round_trip():
    mem = Memory(32)
    mem.write_int64(0, -(2**40) - 3)
    mem.write_double(8, 2.75)
    assert mem.read_int64(0) == -(2**40) - 3
    assert mem.read_double(8) == 2.75


def test_memory_byte_write_keeps_low_bits():
    mem = Memory(4)
    mem.write_byte(1, 0x1AB)
    assert mem.read_byte(1) == 0xAB


def test_memory_cstring():
    mem = Memory(16)
    mem.write_bytes(2, b"abc\0xyz")
    assert mem.read_cstring(2) == b"abc"


def test_memory_unterminated_cstring():
    mem = Memory(4)
    mem.write_bytes(0, b"abcd")
    with pytest.raises(VMError):
        mem.read_cstring(0)


@pytest.mark.parametrize("address", [-1, 13, 100])
def test_memory_out_of_range(address):
    with pytest.raises(VMError):
        Memory(16).read_int(address)


# -- operands ----------------------------------------------------------------

def test_operand_rejects_unknown_register():
    with pytest.raises(ValueError):
        Operand.reg("xyz")


def test_operand_constructors():
    operand = Operand.addr("esp", 8)
    assert (operand.kind, operand.register, operand.val) == (Kind.ADDR, "esp", 8)


# -- execution ---------------------------------------------------------------

def test_mov_immediate_then_halt():
    machine = run([ins(Op.MOV, R("eax"), I(7)), ins(Op.HALT)])
    assert machine.regs.eax == 7
    assert machine.halted
    assert machine.step() is False


@pytest.mark.parametrize("a,b", [(3, 4), (0x7FFFFFFF, 1), (-10, 3)])
def test_signed_add_wraps(a, b):
    machine = run([
        ins(Op.MOV, R("eax"), I(a)),
        ins(Op.ADD, R("eax"), I(b)),
        ins(Op.HALT),
    ])
    assert machine.regs.eax == arith.wrap_u32(arith.add32(a, b))


@pytest.mark.parametrize("a,b", [(7, 2), (-7, 2), (7, -2)])
def test_idiv_and_imod_truncate(a, b):
    machine = run([
        ins(Op.MOV, R("eax"), I(a)),
        ins(Op.MOV, R("ecx"), I(a)),
        ins(Op.IDIV, R("eax"), I(b)),
        ins(Op.IMOD, R("ecx"), I(b)),
        ins(Op.HALT),
    ])
    assert arith.wrap32(machine.regs.eax) == arith.div32(a, b)
    assert arith.wrap32(machine.regs.ecx) == arith.mod32(a, b)


def test_division_by_zero_is_an_error():
    machine = Machine([ins(Op.MOV, R("eax"), I(1)), ins(Op.IDIV, R("eax"), I(0))], 64)
    with pytest.raises(VMError):
        machine.run()


def test_push_pop_round_trip_keeps_stack_balanced():
    machine = run([
        ins(Op.PUSH, I(1234)),
        ins(Op.POP, R("edx")),
        ins(Op.HALT),
    ])
    assert machine.regs.edx == 1234
    assert machine.regs.esp == 256


def test_machine_push_pop_helpers():
    machine = Machine([], 64)
    machine.push(-1)
    assert machine.regs.esp == 60
    assert machine.pop() == arith.wrap_u32(-1)
    assert machine.regs.esp == 64


def test_call_and_ret_with_argument_cleanup():
    program = [
        ins(Op.PUSH, I(9)),
        ins(Op.CALL, I(4)),
        ins(Op.HALT),
        ins(Op.NOP),
        ins(Op.MOV, R("eax"), A("esp", 4)),
        ins(Op.RET, I(4)),
    ]
    machine = run(program)
    assert machine.regs.eax == 9
    assert machine.regs.esp == 256
    assert machine.regs.eip == 2


def test_plain_ret_returns_to_caller():
    program = [
        ins(Op.CALL, I(2)),
        ins(Op.HALT),
        ins(Op.MOV, R("ebx"), I(5)),
        ins(Op.RET),
    ]
    machine = run(program)
    assert machine.regs.ebx == 5
    assert machine.regs.esp == 256


def test_counting_loop_sums():
    n = 10
    program = [
        ins(Op.MOV, R("ecx"), I(n)),
        ins(Op.MOV, R("eax"), I(0)),
        ins(Op.ADD, R("eax"), R("ecx")),
        ins(Op.SUB, R("ecx"), I(1)),
        ins(Op.CGSB, R("ecx"), I(0)),
        ins(Op.JEBXNZ, I(2)),
        ins(Op.HALT),
    ]
    machine = run(program)
    assert machine.regs.eax == sum(range(1, n + 1))
    assert machine.regs.ecx == 0


def test_jebxz_jumps_only_on_zero():
    program = [
        ins(Op.MOV, R("ebx"), I(0)),
        ins(Op.JEBXZ, I(3)),
        ins(Op.MOV, R("eax"), I(99)),
        ins(Op.HALT),
    ]
    machine = run(program)
    assert machine.regs.eax == 0


def test_unsigned_and_signed_compare_differ():
    machine = run([
        ins(Op.MOV, R("eax"), I(-1)),
        ins(Op.UCGSB, R("eax"), I(1)),
        ins(Op.MOV, R("edx"), R("ebx")),
        ins(Op.CGSB, R("eax"), I(1)),
        ins(Op.HALT),
    ])
    assert machine.regs.edx == 1
    assert machine.regs.ebx == 0


def test_arithmetic_and_logical_shift_right():
    machine = run([
        ins(Op.MOV, R("eax"), I(-8)),
        ins(Op.MOV, R("ecx"), I(-8)),
        ins(Op.BSAR, R("eax"), I(1)),
        ins(Op.BSHR, R("ecx"), I(1)),
        ins(Op.HALT),
    ])
    assert machine.regs.eax == arith.wrap_u32(arith.sar32(-8, 1))
    assert machine.regs.ecx == arith.shr32(-8, 1)


def test_bnot_inverts_register():
    value = 0x0F0F
    machine = run([ins(Op.MOV, R("esi"), I(value)), ins(Op.BNOT, R("esi")), ins(Op.HALT)])
    assert machine.regs.esi == arith.wrap_u32(~value)


def test_lea_computes_address():
    base, offset = 40, 12
    machine = run([
        ins(Op.MOV, R("esi"), I(base)),
        ins(Op.LEA, R("eax"), A("esi", offset)),
        ins(Op.HALT),
    ])
    assert machine.regs.eax == base + offset


def test_mov_to_memory_and_back():
    machine = run([
        ins(Op.MOV, R("esi"), I(16)),
        ins(Op.MOV, A("esi", 4), I(-3)),
        ins(Op.MOV, R("eax"), A("esi", 4)),
        ins(Op.HALT),
    ])
    assert machine.memory.read_int(20) == -3
    assert machine.regs.eax == arith.wrap_u32(-3)


def test_int64_multiply_in_memory():
    a, b = 2**33 + 5, -(2**31) - 7
    machine = Machine([
        ins(Op.MOV, R("esi"), I(0)),
        ins(Op.IMUL8, A("esi"), A("esi", 8)),
        ins(Op.HALT),
    ], 64)
    machine.memory.write_int64(0, a)
    machine.memory.write_int64(8, b)
    machine.run()
    assert machine.memory.read_int64(0) == arith.mul64(a, b)


def test_float_add_and_compare():
    a, b = 1.5, 2.25
    machine = Machine([
        ins(Op.MOV, R("esi"), I(0)),
        ins(Op.FADD8, A("esi"), A("esi", 8)),
        ins(Op.FCGSB8, A("esi"), A("esi", 8)),
        ins(Op.HALT),
    ], 64)
    machine.memory.write_double(0, a)
    machine.memory.write_double(8, b)
    machine.run()
    assert machine.memory.read_double(0) == a + b
    assert machine.regs.ebx == 1


def test_float_divide_by_zero_is_infinite():
    machine = Machine([
        ins(Op.MOV, R("esi"), I(0)),
        ins(Op.FDIV8, A("esi"), A("esi", 8)),
        ins(Op.HALT),
    ], 64)
    machine.memory.write_double(0, 3.0)
    machine.memory.write_double(8, 0.0)
    machine.run()
    result = machine.memory.read_double(0)
    assert math.isinf(result) and result > 0


def test_mov1_copies_one_byte():
    machine = Machine([
        ins(Op.MOV, R("esi"), I(0)),
        ins(Op.MOV1, A("esi", 8), A("esi")),
        ins(Op.HALT),
    ], 64)
    machine.memory.write_int(0, 0x11223344)
    machine.run()
    assert machine.memory.read_int(8) == 0x44


@pytest.mark.parametrize("program", [
    [ins(Op.MOV1, R("eax"), R("ebx"))],
    [ins(Op.POP, I(1))],
    [ins(Op.LEA, R("eax"), I(3))],
    [ins(Op.MOV, I(1), R("eax"))],
    [ins(Op.ADD, R("eax"))],
    [ins(Op.FADD8, R("eax"), A("esp"))],
])
def test_undefined_forms_raise(program):
    with pytest.raises(VMError):
        Machine(program, 64).run()


def test_running_off_the_program_is_an_error():
    with pytest.raises(VMError):
        Machine([ins(Op.NOP)], 64).run()


def test_external_call_dispatch():
    seen = []

    def handler(machine, index):
        seen.append(index)
        machine.regs.eax = index
        return True

    machine = run([ins(Op.CALLE, I(42)), ins(Op.HALT)], externals=handler)
    assert seen == [42]
    assert machine.regs.eax == 42


def test_unknown_external_call_raises():
    with pytest.raises(VMError):
        run([ins(Op.CALLE, I(3)), ins(Op.HALT)], externals=lambda m, i: False)
    with pytest.raises(VMError):
        run([ins(Op.CALLE, I(3)), ins(Op.HALT)])