"""Opcode metadata and the instruction operand decoder."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - used only for type checkers
    from bungie_luac.vm.disassembler import (
        DecodedInstruction,
        DecodedPrototype,
        Operand,
        OperandClass,
        decode_instruction,
        decode_prototype_tree,
    )
    from bungie_luac.vm.opcodes import (
        ArgMode,
        ArgModeA,
        OpFormat,
        OpModes,
        OpcodeTable,
        default_opcode_table,
        load_opcode_table,
    )

__all__ = [
    "ArgMode",
    "ArgModeA",
    "DecodedInstruction",
    "DecodedPrototype",
    "OpFormat",
    "OpModes",
    "OpcodeTable",
    "Operand",
    "OperandClass",
    "decode_instruction",
    "decode_prototype_tree",
    "default_opcode_table",
    "load_opcode_table",
]

_DISASSEMBLER_NAMES = {
    "DecodedInstruction",
    "DecodedPrototype",
    "Operand",
    "OperandClass",
    "decode_instruction",
    "decode_prototype_tree",
}


def __getattr__(name: str) -> Any:
    if name in _DISASSEMBLER_NAMES:
        from bungie_luac.vm import disassembler as _disassembler

        return getattr(_disassembler, name)
    if name in __all__:
        from bungie_luac.vm import opcodes as _opcodes

        return getattr(_opcodes, name)
    raise AttributeError(name)
