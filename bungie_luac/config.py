"""Decoder options and their loading from JSON/YAML config files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .vm.opcodes import OpcodeTable, default_opcode_table, load_opcode_table

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200
# Deepest accepted tree stays under the default interpreter recursion limit.
MAX_DEPTH_LIMIT = 256
INSTRUCTION_ALIGNMENT = 4

_OPTION_KEYS = {"align_relative_to_record", "max_depth", "strict_opcodes", "opcode_table"}


@dataclass
class DecoderOptions:
    """Knobs controlling how a container is decoded.

    ``align_relative_to_record`` aligns the instruction array relative to the
    start of its prototype record; when ``False`` absolute buffer offsets are
    used instead.  Opcodes inside the table range but without a descriptor
    decode with :data:`~bungie_luac.vm.opcodes.FALLBACK_MODES`;
    ``strict_opcodes`` turns them into
    :class:`~bungie_luac.exceptions.UnknownOpcodeError` instead.
    """

    align_relative_to_record: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH
    strict_opcodes: bool = False
    opcode_table: Optional[OpcodeTable] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ValueError(f"max_depth must be an integer, got {self.max_depth!r}")
        if not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {self.max_depth}")

    def resolve_opcode_table(self) -> OpcodeTable:
        table = self.opcode_table if self.opcode_table is not None else default_opcode_table()
        if self.strict_opcodes:
            return table.with_fallback(None) if table.fallback is not None else table
        if table.fallback is None:
            table = table.with_fallback()
        return table

    @classmethod
    def from_mapping(
        cls, payload: Mapping[str, Any], *, base_dir: Optional[Path] = None
    ) -> "DecoderOptions":
        """Build options from a mapping such as a parsed config file.

        ``opcode_table`` may name a table file; relative paths resolve
        against ``base_dir``.  Flags must be real booleans.
        """

        if not isinstance(payload, Mapping):
            raise TypeError("decoder options must be a mapping")
        unknown = set(payload) - _OPTION_KEYS
        if unknown:
            LOGGER.warning("ignoring unknown decoder option(s): %s", ", ".join(sorted(unknown)))

        table: Optional[OpcodeTable] = None
        table_ref = payload.get("opcode_table")
        if isinstance(table_ref, OpcodeTable):
            table = table_ref
        elif table_ref:
            table_path = Path(str(table_ref))
            if base_dir is not None and not table_path.is_absolute():
                table_path = base_dir / table_path
            table = load_opcode_table(table_path)

        return cls(
            align_relative_to_record=_flag(payload, "align_relative_to_record", True),
            max_depth=payload.get("max_depth", DEFAULT_MAX_DEPTH),
            strict_opcodes=_flag(payload, "strict_opcodes", False),
            opcode_table=table,
        )


def _flag(payload: Mapping[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"option {key!r} must be true or false, got {value!r}")
    return value


def load_options(path: Union[str, Path]) -> DecoderOptions:
    """Load :class:`DecoderOptions` from a ``.json``, ``.yaml`` or ``.yml`` file."""

    target = Path(path)
    text = target.read_text(encoding="utf-8")
    if target.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected mapping at root of config: {target}")
    return DecoderOptions.from_mapping(data, base_dir=target.parent)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DecoderOptions",
    "INSTRUCTION_ALIGNMENT",
    "MAX_DEPTH_LIMIT",
    "load_options",
]
