"""Addressing-mode descriptors and the opcode-indexed table.

The operand decoder never owns opcode metadata.  Callers hand it an
:class:`OpcodeTable`, either the bundled Lua 5.1 layout in ``opcodes.json``
or a table loaded from a user supplied JSON/YAML file via
:func:`load_opcode_table`.

Table files look like::

    size: 128
    opcodes:
      - {opcode: 0, name: MOVE, format: iABC, a: reg, b: reg, c: unused}
      - {opcode: 1, name: LOADK, format: iABx, a: reg, b: const}

``opcodes`` may also be a mapping keyed by opcode number.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from ..exceptions import OpcodeTableError, UnknownOpcodeError

LOGGER = logging.getLogger(__name__)

OPCODE_BITS = 7
MIN_TABLE_SIZE = 1 << OPCODE_BITS

_DEFAULT_TABLE_PATH = Path(__file__).with_name("opcodes.json")


class OpFormat(Enum):
    IABC = "iABC"
    IABX = "iABx"
    IASBX = "iAsBx"


class ArgModeA(Enum):
    UNUSED = "unused"
    REGISTER = "register"


class ArgMode(Enum):
    """Operand mode for the B and C fields."""

    UNUSED = "unused"
    NUMBER = "number"
    OFFSET = "offset"
    REGISTER = "register"
    REGISTER_OR_CONSTANT = "register_or_constant"
    CONSTANT = "constant"


_FORMAT_ALIASES: Dict[str, OpFormat] = {
    "iabc": OpFormat.IABC,
    "abc": OpFormat.IABC,
    "iabx": OpFormat.IABX,
    "abx": OpFormat.IABX,
    "iasbx": OpFormat.IASBX,
    "asbx": OpFormat.IASBX,
}

_MODE_ALIASES: Dict[str, ArgMode] = {
    "unused": ArgMode.UNUSED,
    "none": ArgMode.UNUSED,
    "number": ArgMode.NUMBER,
    "num": ArgMode.NUMBER,
    "offset": ArgMode.OFFSET,
    "register": ArgMode.REGISTER,
    "reg": ArgMode.REGISTER,
    "register_or_constant": ArgMode.REGISTER_OR_CONSTANT,
    "reg_or_const": ArgMode.REGISTER_OR_CONSTANT,
    "rk": ArgMode.REGISTER_OR_CONSTANT,
    "constant": ArgMode.CONSTANT,
    "const": ArgMode.CONSTANT,
}


@dataclass(frozen=True)
class OpModes:
    """Addressing-mode descriptor for a single opcode."""

    format: OpFormat = OpFormat.IABC
    a: ArgModeA = ArgModeA.REGISTER
    b: ArgMode = ArgMode.UNUSED
    c: ArgMode = ArgMode.UNUSED
    name: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "format": self.format.value,
            "a": self.a.value,
            "b": self.b.value,
            "c": self.c.value,
        }


# Used for table gaps when strict lookups are disabled.
FALLBACK_MODES = OpModes(format=OpFormat.IABC, a=ArgModeA.UNUSED, name=None)


def parse_format(value: Union[str, OpFormat]) -> OpFormat:
    if isinstance(value, OpFormat):
        return value
    key = str(value).strip().lower()
    try:
        return _FORMAT_ALIASES[key]
    except KeyError:
        raise OpcodeTableError(f"unknown instruction format: {value!r}") from None


def parse_arg_mode(value: Union[str, ArgMode, None]) -> ArgMode:
    if value is None:
        return ArgMode.UNUSED
    if isinstance(value, ArgMode):
        return value
    key = str(value).strip().lower().replace("-", "_")
    try:
        return _MODE_ALIASES[key]
    except KeyError:
        raise OpcodeTableError(f"unknown operand mode: {value!r}") from None


def parse_arg_mode_a(value: Union[str, ArgModeA, None]) -> ArgModeA:
    if isinstance(value, ArgModeA):
        return value
    mode = parse_arg_mode(value)
    if mode is ArgMode.REGISTER:
        return ArgModeA.REGISTER
    if mode in (ArgMode.UNUSED, ArgMode.NUMBER):
        return ArgModeA.UNUSED
    raise OpcodeTableError(f"operand A only supports register/unused modes, got {value!r}")


def modes_from_mapping(entry: Mapping[str, Any]) -> OpModes:
    """Build :class:`OpModes` from a table file entry."""

    name = entry.get("name")
    return OpModes(
        format=parse_format(entry.get("format", OpFormat.IABC)),
        a=parse_arg_mode_a(entry.get("a", ArgModeA.REGISTER)),
        b=parse_arg_mode(entry.get("b")),
        c=parse_arg_mode(entry.get("c")),
        name=str(name).upper() if name else None,
    )


class OpcodeTable:
    """Opcode-indexed table of :class:`OpModes`.

    The table always spans at least the full 7-bit opcode space.  Slots with
    no descriptor raise :class:`UnknownOpcodeError` on lookup unless a
    ``fallback`` descriptor was supplied.
    """

    def __init__(
        self,
        entries: Sequence[Optional[OpModes]] = (),
        *,
        size: Optional[int] = None,
        fallback: Optional[OpModes] = None,
    ) -> None:
        length = max(size or 0, len(entries), MIN_TABLE_SIZE)
        slots: List[Optional[OpModes]] = list(entries)
        slots.extend([None] * (length - len(slots)))
        self._slots: Tuple[Optional[OpModes], ...] = tuple(slots)
        self.fallback = fallback

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, opcode: object) -> bool:
        return isinstance(opcode, int) and 0 <= opcode < len(self._slots) and self._slots[opcode] is not None

    def __iter__(self) -> Iterator[Tuple[int, OpModes]]:
        for opcode, modes in enumerate(self._slots):
            if modes is not None:
                yield opcode, modes

    def lookup(self, opcode: int) -> OpModes:
        if not 0 <= opcode < len(self._slots):
            raise UnknownOpcodeError(opcode)
        modes = self._slots[opcode]
        if modes is None:
            if self.fallback is None:
                raise UnknownOpcodeError(opcode)
            return self.fallback
        return modes

    def mnemonic(self, opcode: int) -> Optional[str]:
        if opcode in self:
            return self._slots[opcode].name  # type: ignore[union-attr]
        return None

    def with_fallback(self, fallback: Optional[OpModes] = FALLBACK_MODES) -> "OpcodeTable":
        return OpcodeTable(self._slots, fallback=fallback)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "OpcodeTable":
        """Build a table from the parsed contents of a table file."""

        if not isinstance(payload, Mapping):
            raise OpcodeTableError("opcode table root must be a mapping")
        raw_entries = payload.get("opcodes")
        if raw_entries is None:
            raise OpcodeTableError("opcode table is missing the 'opcodes' key")

        indexed: Dict[int, OpModes] = {}
        if isinstance(raw_entries, Mapping):
            items = [(_coerce_opcode(key), value) for key, value in raw_entries.items()]
        elif isinstance(raw_entries, Sequence) and not isinstance(raw_entries, (str, bytes)):
            items = []
            for position, value in enumerate(raw_entries):
                if not isinstance(value, Mapping):
                    raise OpcodeTableError(f"opcode entry {position} must be a mapping")
                items.append((_coerce_opcode(value.get("opcode", position)), value))
        else:
            raise OpcodeTableError("'opcodes' must be a list or a mapping")

        for opcode, value in items:
            if not isinstance(value, Mapping):
                raise OpcodeTableError(f"opcode entry {opcode} must be a mapping")
            if opcode < 0:
                raise OpcodeTableError(f"negative opcode {opcode}")
            if opcode in indexed:
                raise OpcodeTableError(f"duplicate entry for opcode {opcode}")
            indexed[opcode] = modes_from_mapping(value)

        size = payload.get("size")
        length = max([MIN_TABLE_SIZE, int(size) if size is not None else 0, *(op + 1 for op in indexed)])
        entries: List[Optional[OpModes]] = [indexed.get(opcode) for opcode in range(length)]
        return cls(entries, size=length)

    def as_dict(self) -> Dict[str, object]:
        return {
            "size": len(self),
            "opcodes": [dict(opcode=opcode, **modes.as_dict()) for opcode, modes in self],
        }


def _coerce_opcode(value: Any) -> int:
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    try:
        if text.startswith("0x"):
            return int(text, 16)
        return int(text, 10)
    except ValueError:
        raise OpcodeTableError(f"invalid opcode number: {value!r}") from None


def _read_table_file(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def load_opcode_table(path: Union[str, Path]) -> OpcodeTable:
    """Load an addressing-mode table from a JSON or YAML file."""

    target = Path(path)
    table = OpcodeTable.from_mapping(_read_table_file(target))
    LOGGER.debug("loaded %d opcode descriptor(s) from %s", sum(1 for _ in table), target)
    return table


@lru_cache(maxsize=1)
def default_opcode_table() -> OpcodeTable:
    """Return the bundled Lua 5.1 addressing-mode table."""

    return load_opcode_table(_DEFAULT_TABLE_PATH)


__all__ = [
    "ArgMode",
    "ArgModeA",
    "FALLBACK_MODES",
    "MIN_TABLE_SIZE",
    "OPCODE_BITS",
    "OpFormat",
    "OpModes",
    "OpcodeTable",
    "default_opcode_table",
    "load_opcode_table",
    "modes_from_mapping",
    "parse_arg_mode",
    "parse_arg_mode_a",
    "parse_format",
]
