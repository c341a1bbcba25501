"""Instruction operand decoder.

Each 32-bit instruction word packs a 7-bit opcode in its top bits and up to
three operands below it::

    31       25 24      17 16       8 7        0
    +----------+----------+----------+---------+
    |  opcode  |    B     |    C     |    A    |   iABC
    +----------+----------+----------+---------+
    |  opcode  |      Bx / sBx       |    A    |   iABx / iAsBx
    +----------+---------------------+---------+

C is 9 bits wide.  B is 8 bits wide, so its 9-bit view (``RegisterOrConstant``
and ``Offset`` modes) also takes the lowest opcode bit.  The combined Bx field
is 17 bits wide and sBx is re-biased by ``0xFFFF`` rather than by the field
maximum.

The decoder is pure: it never consults the constant pool or register count,
so out-of-range indices are left for consumers to judge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Tuple

from .opcodes import ArgMode, ArgModeA, OpFormat, OpModes, OpcodeTable

if TYPE_CHECKING:  # pragma: no cover - used only for type checkers
    from ..chunk.prototype import FunctionPrototype, Instruction

LOGGER = logging.getLogger(__name__)

OPCODE_SHIFT = 25
OPCODE_MASK = 0x7F
A_MASK = 0xFF
B_SHIFT = 17
C_SHIFT = 8
BX_SHIFT = 8
BYTE_FIELD_MASK = 0xFF
WIDE_FIELD_MASK = 0x1FF
CONSTANT_FLAG = 0x100
BX_MASK = 0x1FFFF
SBX_BIAS = 0xFFFF


class OperandClass(Enum):
    NUMBER = "number"
    REGISTER = "register"
    CONSTANT = "constant"


@dataclass(frozen=True)
class Operand:
    kind: OperandClass
    value: int

    def as_dict(self) -> Dict[str, object]:
        return {"class": self.kind.value, "value": self.value}

    def __str__(self) -> str:
        if self.kind is OperandClass.REGISTER:
            return f"R{self.value}"
        if self.kind is OperandClass.CONSTANT:
            return f"K{self.value}"
        return str(self.value)


@dataclass(frozen=True)
class DecodedInstruction:
    """Derived view of one instruction word."""

    index: int
    raw: int
    opcode: int
    modes: OpModes
    operands: Tuple[Operand, ...]

    @property
    def mnemonic(self) -> Optional[str]:
        return self.modes.name

    def as_dict(self) -> Dict[str, object]:
        return {
            "index": self.index,
            "raw": self.raw,
            "opcode": self.opcode,
            "mnemonic": self.mnemonic,
            "format": self.modes.format.value,
            "operands": [operand.as_dict() for operand in self.operands],
        }

    def render(self) -> str:
        name = self.mnemonic or f"OP_{self.opcode}"
        args = " ".join(str(operand) for operand in self.operands)
        return f"{name:<10} {args}".rstrip()


@dataclass
class DecodedPrototype:
    """Decoded instruction stream for one prototype, mirroring the tree."""

    prototype: "FunctionPrototype"
    instructions: List[DecodedInstruction] = field(default_factory=list)
    children: List["DecodedPrototype"] = field(default_factory=list)

    def walk(self) -> Iterator["DecodedPrototype"]:
        yield self
        for child in self.children:
            yield from child.walk()


def extract_opcode(raw: int) -> int:
    return (raw >> OPCODE_SHIFT) & OPCODE_MASK


def _decode_bc(raw: int, shift: int, mode: ArgMode) -> Operand:
    if mode is ArgMode.OFFSET:
        return Operand(OperandClass.NUMBER, (raw >> shift) & WIDE_FIELD_MASK)
    if mode is ArgMode.REGISTER_OR_CONSTANT:
        value = (raw >> shift) & WIDE_FIELD_MASK
        if value < CONSTANT_FLAG:
            return Operand(OperandClass.REGISTER, value)
        # The ninth bit only flags a constant index.
        return Operand(OperandClass.CONSTANT, value & BYTE_FIELD_MASK)

    value = (raw >> shift) & BYTE_FIELD_MASK
    if mode is ArgMode.REGISTER:
        return Operand(OperandClass.REGISTER, value)
    if mode is ArgMode.CONSTANT:
        return Operand(OperandClass.CONSTANT, value)
    return Operand(OperandClass.NUMBER, value)


def decode_operands(raw: int, modes: OpModes) -> Tuple[Operand, ...]:
    """Return the operand list of ``raw`` under the addressing ``modes``."""

    raw &= 0xFFFFFFFF
    a_kind = OperandClass.REGISTER if modes.a is ArgModeA.REGISTER else OperandClass.NUMBER
    operands: List[Operand] = [Operand(a_kind, raw & A_MASK)]

    if modes.format is OpFormat.IABC:
        for shift, mode in ((B_SHIFT, modes.b), (C_SHIFT, modes.c)):
            if mode is not ArgMode.UNUSED:
                operands.append(_decode_bc(raw, shift, mode))
    elif modes.b is not ArgMode.UNUSED:
        value = (raw >> BX_SHIFT) & BX_MASK
        if modes.format is OpFormat.IASBX:
            value -= SBX_BIAS
        kind = OperandClass.CONSTANT if modes.b is ArgMode.CONSTANT else OperandClass.NUMBER
        operands.append(Operand(kind, value))

    return tuple(operands)


def decode_instruction(raw: int, modes: OpModes, *, index: int = 0) -> DecodedInstruction:
    """Decode one instruction word with an already resolved descriptor."""

    return DecodedInstruction(
        index=index,
        raw=raw & 0xFFFFFFFF,
        opcode=extract_opcode(raw),
        modes=modes,
        operands=decode_operands(raw, modes),
    )


def decode_word(raw: int, table: OpcodeTable, *, index: int = 0) -> DecodedInstruction:
    """Look up the opcode of ``raw`` in ``table`` and decode it."""

    return decode_instruction(raw, table.lookup(extract_opcode(raw)), index=index)


def decode_instructions(
    instructions: Iterable["Instruction"], table: OpcodeTable
) -> List[DecodedInstruction]:
    return [decode_word(inst.raw, table, index=index) for index, inst in enumerate(instructions)]


def decode_prototype_tree(root: "FunctionPrototype", table: OpcodeTable) -> DecodedPrototype:
    """Decode every instruction of ``root`` and its descendants, depth-first.

    The structural tree is left untouched; the result is a parallel tree of
    :class:`DecodedPrototype` nodes.
    """

    decoded = DecodedPrototype(
        prototype=root,
        instructions=decode_instructions(root.instructions, table),
    )
    LOGGER.debug(
        "decoded %d instruction(s) of prototype at 0x%X",
        len(decoded.instructions),
        root.source_offset,
    )
    decoded.children = [decode_prototype_tree(child, table) for child in root.children]
    return decoded


__all__ = [
    "BX_MASK",
    "DecodedInstruction",
    "DecodedPrototype",
    "Operand",
    "OperandClass",
    "SBX_BIAS",
    "decode_instruction",
    "decode_instructions",
    "decode_operands",
    "decode_prototype_tree",
    "decode_word",
    "extract_opcode",
]
