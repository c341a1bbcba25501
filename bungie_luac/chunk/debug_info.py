"""Optional per-prototype debug metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..io.reader import ByteReader

LOGGER = logging.getLogger(__name__)

DEBUG_INFO_PRESENT = 1


@dataclass(frozen=True)
class DebugLocal:
    name: str
    start: int
    end: int

    def as_dict(self) -> Dict[str, object]:
        return {"name": self.name, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class DebugUpvalue:
    name: str

    def as_dict(self) -> Dict[str, object]:
        return {"name": self.name}


@dataclass
class DebugInfo:
    """Line table, local ranges and upvalue names of one prototype.

    A prototype without debug data carries the default (empty) instance.
    """

    line_count: int = 0
    locals_count: int = 0
    upvalue_count_2: int = 0
    line_begin: int = 0
    line_end: int = 0
    path: str = ""
    function_name: str = ""
    lines: List[int] = field(default_factory=list)
    locals: List[DebugLocal] = field(default_factory=list)
    upvalues: List[DebugUpvalue] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {
            "line_count": self.line_count,
            "locals_count": self.locals_count,
            "upvalue_count_2": self.upvalue_count_2,
            "line_begin": self.line_begin,
            "line_end": self.line_end,
            "path": self.path,
            "function_name": self.function_name,
            "lines": list(self.lines),
            "locals": [entry.as_dict() for entry in self.locals],
            "upvalues": [entry.as_dict() for entry in self.upvalues],
        }


def read_debug_info(reader: ByteReader) -> DebugInfo:
    """Read a debug block; the caller has already consumed the presence flag."""

    line_count = reader.read_u32()
    locals_count = reader.read_u32()
    upvalue_count = reader.read_u32()
    line_begin = reader.read_u32()
    line_end = reader.read_u32()
    path = reader.read_sized_text()
    function_name = reader.read_sized_text()

    lines = [reader.read_u32() for _ in range(line_count)]
    locals_: List[DebugLocal] = []
    for _ in range(locals_count):
        name = reader.read_sized_text()
        start = reader.read_i32()
        end = reader.read_i32()
        locals_.append(DebugLocal(name=name, start=start, end=end))
    upvalues = [DebugUpvalue(name=reader.read_sized_text()) for _ in range(upvalue_count)]

    return DebugInfo(
        line_count=line_count,
        locals_count=locals_count,
        upvalue_count_2=upvalue_count,
        line_begin=line_begin,
        line_end=line_end,
        path=path,
        function_name=function_name,
        lines=lines,
        locals=locals_,
        upvalues=upvalues,
    )


def read_debug_section(reader: ByteReader) -> Tuple[bool, DebugInfo]:
    """Read the u32 presence flag and, when it equals 1, the debug block."""

    offset = reader.position
    has_debug_info = reader.read_u32() == DEBUG_INFO_PRESENT
    if not has_debug_info:
        return False, DebugInfo()
    info = read_debug_info(reader)
    LOGGER.debug(
        "debug info at 0x%X: %s (%d line(s), %d local(s), %d upvalue(s))",
        offset,
        info.function_name or "<anonymous>",
        info.line_count,
        info.locals_count,
        info.upvalue_count_2,
    )
    return True, info


__all__ = [
    "DEBUG_INFO_PRESENT",
    "DebugInfo",
    "DebugLocal",
    "DebugUpvalue",
    "read_debug_info",
    "read_debug_section",
]
