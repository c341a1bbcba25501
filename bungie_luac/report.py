"""JSON-safe views and a compact text listing of a decoded chunk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Union

from .chunk.container import Chunk, summarise
from .vm.disassembler import DecodedPrototype


def _prototype_to_dict(node: DecodedPrototype) -> Dict[str, object]:
    data = node.prototype.as_dict(include_children=False)
    data["instructions"] = [inst.as_dict() for inst in node.instructions]
    data["children"] = [_prototype_to_dict(child) for child in node.children]
    return data


def chunk_to_dict(chunk: Chunk) -> Dict[str, object]:
    return {
        "summary": summarise(chunk),
        "header": chunk.header.as_dict(),
        "type_constants": [constant.as_dict() for constant in chunk.type_constants],
        "root": _prototype_to_dict(chunk.decoded),
    }


def write_json_report(chunk: Chunk, path: Union[str, Path]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(chunk_to_dict(chunk), indent=2), encoding="utf-8")
    return target


def render_listing(chunk: Chunk) -> str:
    """Render one block per prototype with its decoded instructions."""

    lines: List[str] = []
    for number, node in enumerate(chunk.decoded.walk()):
        proto = node.prototype
        name = proto.debug_info.function_name or ("main" if proto.is_root else f"function_{number}")
        lines.append(
            f"; {name} @0x{proto.source_offset:X} params={proto.param_count} "
            f"upvalues={proto.upvalue_count} vararg=0x{proto.vararg_flags:X} "
            f"constants={len(proto.constants)} children={proto.child_count}"
        )
        for inst in node.instructions:
            lines.append(f"  [{inst.index:04d}] {inst.raw:08X}  {inst.render()}")
    return "\n".join(lines)


__all__ = ["chunk_to_dict", "render_listing", "write_json_report"]
