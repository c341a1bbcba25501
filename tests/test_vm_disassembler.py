from __future__ import annotations

import pytest

from bungie_luac.chunk.prototype import Instruction
from bungie_luac.exceptions import UnknownOpcodeError
from bungie_luac.vm.disassembler import (
    Operand,
    OperandClass,
    decode_instruction,
    decode_instructions,
    decode_operands,
    decode_word,
    extract_opcode,
)
from bungie_luac.vm.opcodes import ArgMode, ArgModeA, OpFormat, OpModes, OpcodeTable
from tests.fixtures.chunk_builder_fixture import (
    OP_A_ONLY,
    OP_JMP,
    OP_LOADK,
    OP_MOVE,
    OP_OFFSETS,
    OP_RK,
    encode_wide,
    encode_word,
)

REG = OperandClass.REGISTER
CONST = OperandClass.CONSTANT
NUM = OperandClass.NUMBER

RK_C = OpModes(OpFormat.IABC, ArgModeA.UNUSED, ArgMode.UNUSED, ArgMode.REGISTER_OR_CONSTANT)
RK_B = OpModes(OpFormat.IABC, ArgModeA.UNUSED, ArgMode.REGISTER_OR_CONSTANT, ArgMode.UNUSED)
SBX = OpModes(OpFormat.IASBX, ArgModeA.UNUSED, ArgMode.OFFSET, ArgMode.UNUSED)


def test_opcode_is_top_seven_bits() -> None:
    assert extract_opcode(0xFFFFFFFF) == 0x7F
    assert extract_opcode(0x02000000) == 1
    assert extract_opcode(0x01FFFFFF) == 0


@pytest.mark.parametrize("field", [0x00, 0x01, 0x7F, 0x80, 0xFE, 0xFF])
def test_register_or_constant_low_range_is_register(field: int) -> None:
    operands = decode_operands(field << 8, RK_C)
    assert operands[1] == Operand(REG, field)


@pytest.mark.parametrize(
    "field, expected",
    [(0x100, 0x00), (0x150, 0x50), (0x1AB, 0xAB), (0x1FF, 0xFF)],
)
def test_register_or_constant_high_range_is_constant(field: int, expected: int) -> None:
    operands = decode_operands(field << 8, RK_C)
    assert operands[1] == Operand(CONST, expected)


def test_register_or_constant_covers_whole_range() -> None:
    for field in range(0x200):
        operand = decode_operands(field << 17, RK_B)[1]
        if field < 0x100:
            assert operand == Operand(REG, field)
        else:
            assert operand == Operand(CONST, field & 0xFF)


@pytest.mark.parametrize(
    "bx, expected",
    [(0x10000, 1), (0xFFFF, 0), (0, -65535), (0x1FFFF, 0x10000)],
)
def test_signed_bx_bias(bx: int, expected: int) -> None:
    operands = decode_operands(bx << 8, SBX)
    assert operands == (Operand(NUM, 0), Operand(NUM, expected))


def test_unsigned_bx_constant() -> None:
    modes = OpModes(OpFormat.IABX, ArgModeA.REGISTER, ArgMode.CONSTANT)
    operands = decode_operands(encode_wide(1, a=3, bx=0x1ABCD), modes)
    assert operands == (Operand(REG, 3), Operand(CONST, 0x1ABCD))


def test_unsigned_bx_number_for_other_modes() -> None:
    modes = OpModes(OpFormat.IABX, ArgModeA.REGISTER, ArgMode.REGISTER)
    operands = decode_operands(encode_wide(1, a=0, bx=7), modes)
    assert operands[1] == Operand(NUM, 7)


def test_wide_formats_ignore_c_mode() -> None:
    modes = OpModes(OpFormat.IABX, ArgModeA.REGISTER, ArgMode.CONSTANT, ArgMode.REGISTER)
    assert len(decode_operands(encode_wide(1, bx=2), modes)) == 2


def test_wide_format_with_unused_b_only_has_a() -> None:
    modes = OpModes(OpFormat.IASBX, ArgModeA.REGISTER, ArgMode.UNUSED)
    assert decode_operands(0xFFFFFFFF, modes) == (Operand(REG, 0xFF),)


@pytest.mark.parametrize(
    "mode, shift, raw_field, expected",
    [
        (ArgMode.NUMBER, 8, 0x1FF, Operand(NUM, 0xFF)),
        (ArgMode.OFFSET, 8, 0x1FF, Operand(NUM, 0x1FF)),
        (ArgMode.REGISTER, 8, 0x1FF, Operand(REG, 0xFF)),
        (ArgMode.CONSTANT, 8, 0x1FF, Operand(CONST, 0xFF)),
        (ArgMode.NUMBER, 17, 0x0AB, Operand(NUM, 0xAB)),
        (ArgMode.REGISTER, 17, 0x0AB, Operand(REG, 0xAB)),
        (ArgMode.CONSTANT, 17, 0x0AB, Operand(CONST, 0xAB)),
    ],
)
def test_abc_field_widths(mode: ArgMode, shift: int, raw_field: int, expected: Operand) -> None:
    if shift == 17:
        modes = OpModes(OpFormat.IABC, ArgModeA.UNUSED, mode, ArgMode.UNUSED)
    else:
        modes = OpModes(OpFormat.IABC, ArgModeA.UNUSED, ArgMode.UNUSED, mode)
    assert decode_operands(raw_field << shift, modes)[1] == expected


def test_b_offset_view_reaches_opcode_bit() -> None:
    modes = OpModes(OpFormat.IABC, ArgModeA.UNUSED, ArgMode.OFFSET, ArgMode.UNUSED)
    raw = (1 << 25) | (0x23 << 17)
    assert decode_operands(raw, modes)[1] == Operand(NUM, 0x123)


def test_operand_order_is_a_b_c() -> None:
    modes = OpModes(OpFormat.IABC, ArgModeA.REGISTER, ArgMode.REGISTER, ArgMode.CONSTANT)
    operands = decode_operands(encode_word(OP_RK, a=1, b=2, c=3), modes)
    assert operands == (Operand(REG, 1), Operand(REG, 2), Operand(CONST, 3))


def test_unused_a_mode_is_number() -> None:
    modes = OpModes(OpFormat.IABC, ArgModeA.UNUSED)
    assert decode_operands(0x2A, modes) == (Operand(NUM, 0x2A),)


def test_decode_instruction_view(mode_table: OpcodeTable) -> None:
    raw = encode_word(OP_MOVE, a=4, b=9)
    decoded = decode_instruction(raw, mode_table.lookup(OP_MOVE), index=7)

    assert decoded.index == 7
    assert decoded.raw == raw
    assert decoded.opcode == OP_MOVE
    assert decoded.mnemonic == "MOVE"
    assert decoded.operands == (Operand(REG, 4), Operand(REG, 9))
    assert decoded.render() == "MOVE       R4 R9"


def test_decode_word_uses_table(mode_table: OpcodeTable) -> None:
    decoded = decode_word(encode_word(OP_RK, a=0, b=1, c=0x105), mode_table)
    assert [str(op) for op in decoded.operands] == ["R0", "R1", "K5"]

    jump = decode_word(encode_wide(OP_JMP, bx=0xFFFF - 3), mode_table)
    assert jump.operands[1] == Operand(NUM, -3)

    load = decode_word(encode_wide(OP_LOADK, a=2, bx=17), mode_table)
    assert load.operands == (Operand(REG, 2), Operand(CONST, 17))

    close = decode_word(encode_word(OP_A_ONLY, a=6, b=0xFF, c=0x1FF), mode_table)
    assert close.operands == (Operand(REG, 6),)

    setlist = decode_word(encode_word(OP_OFFSETS, a=1, b=0x12, c=0x1FF), mode_table)
    assert setlist.operands == (Operand(NUM, 1), Operand(NUM, 0x12), Operand(NUM, 0xFF))


def test_unknown_opcode(mode_table: OpcodeTable) -> None:
    with pytest.raises(UnknownOpcodeError) as excinfo:
        decode_word(encode_word(0x40), mode_table)
    assert excinfo.value.opcode == 0x40


def test_decode_instructions_indexes(mode_table: OpcodeTable) -> None:
    words = [encode_word(OP_MOVE, a=1, b=2), encode_word(OP_A_ONLY, a=3)]
    decoded = decode_instructions([Instruction(word) for word in words], mode_table)
    assert [inst.index for inst in decoded] == [0, 1]
    assert [inst.mnemonic for inst in decoded] == ["MOVE", "CLOSE"]
