"""Top level container decoding: header, type pool, prototype tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from ..config import DecoderOptions
from ..io.loader import read_chunk_bytes
from ..io.reader import Buffer, ByteReader
from ..vm.disassembler import DecodedPrototype, decode_prototype_tree
from .constants import TypeConstant, read_type_constants
from .header import Header, read_header
from .prototype import FunctionPrototype, count_instructions, count_prototypes, read_prototype

LOGGER = logging.getLogger(__name__)


@dataclass
class Chunk:
    """Fully decoded container."""

    header: Header
    type_constants: List[TypeConstant]
    root: FunctionPrototype
    decoded: DecodedPrototype
    size: int = 0
    trailing_bytes: int = 0

    def prototypes(self) -> Iterator[FunctionPrototype]:
        return self.root.walk()

    @property
    def prototype_count(self) -> int:
        return count_prototypes(self.root)

    @property
    def instruction_count(self) -> int:
        return count_instructions(self.root)


def read_structure(reader: ByteReader, options: Optional[DecoderOptions] = None):
    """Read header, type pool and prototype tree without decoding operands."""

    header = read_header(reader)
    type_constants = read_type_constants(reader)
    root = read_prototype(reader, is_root=True, options=options)
    return header, type_constants, root


def parse_chunk(data: Buffer, options: Optional[DecoderOptions] = None) -> Chunk:
    """Decode ``data`` into a :class:`Chunk`.

    Structural reading finishes for the whole tree before any instruction is
    decoded.  The first error raised by any layer propagates unchanged.
    """

    opts = options or DecoderOptions()
    reader = ByteReader(data)
    header, type_constants, root = read_structure(reader, opts)
    decoded = decode_prototype_tree(root, opts.resolve_opcode_table())

    trailing = reader.remaining
    if trailing:
        LOGGER.warning("%d trailing byte(s) after the root prototype at 0x%X", trailing, reader.position)

    chunk = Chunk(
        header=header,
        type_constants=type_constants,
        root=root,
        decoded=decoded,
        size=len(reader),
        trailing_bytes=trailing,
    )
    LOGGER.info(
        "decoded chunk: %d type constant(s), %d prototype(s), %d instruction(s)",
        len(type_constants),
        chunk.prototype_count,
        chunk.instruction_count,
    )
    return chunk


def load_chunk(path: Union[str, Path], options: Optional[DecoderOptions] = None) -> Chunk:
    return parse_chunk(read_chunk_bytes(path), options)


def summarise(chunk: Chunk) -> Dict[str, object]:
    return {
        "version": chunk.header.version,
        "format": chunk.header.format,
        "type_constants": len(chunk.type_constants),
        "prototypes": chunk.prototype_count,
        "instructions": chunk.instruction_count,
        "trailing_bytes": chunk.trailing_bytes,
    }


__all__ = ["Chunk", "load_chunk", "parse_chunk", "read_structure", "summarise"]
