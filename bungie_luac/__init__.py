"""Decoder for big-endian, Lua 5.1 derived compiled script containers.

Simple usage::

    from bungie_luac import load_chunk

    chunk = load_chunk("scripts/init.luac")
    for node in chunk.decoded.walk():
        for inst in node.instructions:
            print(inst.render())

A custom addressing-mode table can be supplied through
:class:`DecoderOptions`::

    from bungie_luac import DecoderOptions, load_opcode_table, parse_chunk

    options = DecoderOptions(opcode_table=load_opcode_table("engine_ops.yaml"))
    chunk = parse_chunk(data, options)
"""

from __future__ import annotations

from .chunk import Chunk, FunctionPrototype, load_chunk, parse_chunk
from .config import DecoderOptions, load_options
from .exceptions import (
    BadMagicError,
    ChunkDecodeError,
    MisalignedSectionError,
    TruncatedError,
    UnknownConstantTagError,
    UnknownOpcodeError,
    UnsupportedFormatError,
    UnsupportedVersionError,
)
from .vm.disassembler import DecodedInstruction, Operand, OperandClass, decode_instruction
from .vm.opcodes import OpcodeTable, OpModes, default_opcode_table, load_opcode_table

__all__ = [
    "BadMagicError",
    "Chunk",
    "ChunkDecodeError",
    "DecodedInstruction",
    "DecoderOptions",
    "FunctionPrototype",
    "MisalignedSectionError",
    "OpModes",
    "OpcodeTable",
    "Operand",
    "OperandClass",
    "TruncatedError",
    "UnknownConstantTagError",
    "UnknownOpcodeError",
    "UnsupportedFormatError",
    "UnsupportedVersionError",
    "decode_instruction",
    "default_opcode_table",
    "load_chunk",
    "load_opcode_table",
    "load_options",
    "parse_chunk",
]

__version__ = "0.1.0"
