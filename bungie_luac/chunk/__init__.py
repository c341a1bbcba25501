"""Record level decoders for the compiled script container."""

from __future__ import annotations

from .constants import (
    EngineConstant,
    EngineConstantTag,
    TypeConstant,
    read_engine_constants,
    read_type_constants,
)
from .container import Chunk, load_chunk, parse_chunk
from .debug_info import DebugInfo, DebugLocal, DebugUpvalue, read_debug_info
from .header import Header, read_header
from .prototype import FunctionPrototype, Instruction, VarargFlags, iter_prototypes, read_prototype

__all__ = [
    "Chunk",
    "DebugInfo",
    "DebugLocal",
    "DebugUpvalue",
    "EngineConstant",
    "EngineConstantTag",
    "FunctionPrototype",
    "Header",
    "Instruction",
    "TypeConstant",
    "VarargFlags",
    "load_chunk",
    "parse_chunk",
    "iter_prototypes",
    "read_debug_info",
    "read_engine_constants",
    "read_header",
    "read_prototype",
    "read_type_constants",
]
