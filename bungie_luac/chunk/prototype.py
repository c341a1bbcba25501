"""Function prototype records and the recursive tree reader.

Root and child records share one in-memory shape.  They differ on disk in
two places::

    root:  upvalues u32 | params u32 | vararg u8 | slots u32 | count u32
    child: tag u32 | upvalues u32 | params u32 | vararg u8 | count u32

followed in both cases by padding up to a 4-byte boundary (relative to the
record start), ``count`` instruction words, the engine constant pool, the
debug section and the child records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Iterator, List, Optional, Tuple

from ..config import DecoderOptions, INSTRUCTION_ALIGNMENT
from ..exceptions import NestingTooDeepError
from ..io.reader import ByteReader
from .constants import EngineConstant, read_engine_constants
from .debug_info import DebugInfo, read_debug_section

LOGGER = logging.getLogger(__name__)


class VarargFlags(IntFlag):
    """Known ``vararg_flags`` bits.

    Value 3 has been seen labelled both as its own flag and as
    ``HAS | IS_VAR``; the raw byte is kept so consumers can decide.
    """

    HAS = 1
    IS_VAR = 2
    NEEDS = 4


@dataclass(frozen=True)
class Instruction:
    """On-disk instruction record; only the raw word is persisted."""

    raw: int

    def as_dict(self) -> Dict[str, object]:
        return {"raw": self.raw}


@dataclass
class FunctionPrototype:
    source_offset: int
    upvalue_count: int = 0
    param_count: int = 0
    vararg_flags: int = 0
    slot_count: Optional[int] = None
    leading_tag: Optional[int] = None
    instruction_count: int = 0
    instructions: List[Instruction] = field(default_factory=list)
    constants: List[EngineConstant] = field(default_factory=list)
    has_debug_info: bool = False
    debug_info: DebugInfo = field(default_factory=DebugInfo)
    child_count: int = 0
    children: List["FunctionPrototype"] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.leading_tag is None

    @property
    def max_stack_size(self) -> int:
        return self.slot_count if self.slot_count is not None else 0

    @property
    def vararg(self) -> VarargFlags:
        return VarargFlags(self.vararg_flags)

    def walk(self) -> Iterator["FunctionPrototype"]:
        """Yield this prototype and all descendants depth-first."""

        yield self
        for child in self.children:
            yield from child.walk()

    def as_dict(self, *, include_children: bool = True) -> Dict[str, object]:
        data: Dict[str, object] = {
            "source_offset": self.source_offset,
            "leading_tag": self.leading_tag,
            "upvalue_count": self.upvalue_count,
            "param_count": self.param_count,
            "vararg_flags": self.vararg_flags,
            "slot_count": self.slot_count,
            "instruction_count": self.instruction_count,
            "instructions": [inst.raw for inst in self.instructions],
            "constants": [constant.as_dict() for constant in self.constants],
            "has_debug_info": self.has_debug_info,
            "debug_info": self.debug_info.as_dict() if self.has_debug_info else None,
            "child_count": self.child_count,
        }
        if include_children:
            data["children"] = [child.as_dict() for child in self.children]
        return data


def read_prototype(
    reader: ByteReader,
    *,
    is_root: bool = True,
    options: Optional[DecoderOptions] = None,
    depth: int = 0,
) -> FunctionPrototype:
    """Read one prototype record, including all of its children."""

    opts = options or DecoderOptions()
    start = reader.position
    if depth >= opts.max_depth:
        raise NestingTooDeepError(depth + 1, opts.max_depth, offset=start)

    proto = FunctionPrototype(source_offset=start)
    if not is_root:
        proto.leading_tag = reader.read_u32()
    proto.upvalue_count = reader.read_u32()
    proto.param_count = reader.read_u32()
    proto.vararg_flags = reader.read_u8()
    if is_root:
        proto.slot_count = reader.read_u32()
    proto.instruction_count = reader.read_u32()

    origin = start if opts.align_relative_to_record else 0
    reader.align_to(INSTRUCTION_ALIGNMENT, origin)
    proto.instructions = [Instruction(reader.read_u32()) for _ in range(proto.instruction_count)]

    proto.constants = read_engine_constants(reader)
    proto.has_debug_info, proto.debug_info = read_debug_section(reader)
    proto.child_count = reader.read_u32()

    LOGGER.debug(
        "%s prototype at 0x%X (depth %d): %d instruction(s), %d constant(s), %d child(ren)",
        "root" if is_root else "child",
        start,
        depth,
        proto.instruction_count,
        len(proto.constants),
        proto.child_count,
    )

    proto.children = [
        read_prototype(reader, is_root=False, options=opts, depth=depth + 1)
        for _ in range(proto.child_count)
    ]
    return proto


def iter_prototypes(root: FunctionPrototype) -> Iterator[Tuple[int, FunctionPrototype]]:
    """Yield ``(depth, prototype)`` pairs depth-first, root at depth 0."""

    stack = [(0, root)]
    while stack:
        depth, proto = stack.pop()
        yield depth, proto
        stack.extend((depth + 1, child) for child in reversed(proto.children))


def count_prototypes(root: FunctionPrototype) -> int:
    return sum(1 for _ in root.walk())


def count_instructions(root: FunctionPrototype) -> int:
    return sum(len(proto.instructions) for proto in root.walk())


__all__ = [
    "FunctionPrototype",
    "Instruction",
    "VarargFlags",
    "count_instructions",
    "count_prototypes",
    "iter_prototypes",
    "read_prototype",
]
