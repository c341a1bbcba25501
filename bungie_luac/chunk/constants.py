"""Decoders for the global type pool and per-prototype engine constants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Union

from ..exceptions import UnknownConstantTagError
from ..io.reader import ByteReader

LOGGER = logging.getLogger(__name__)

ConstantValue = Union[None, bool, int, float, str]


class EngineConstantTag(IntEnum):
    """One-byte tags selecting the payload layout of an engine constant."""

    NONE = 0
    BOOL = 1
    HANDLE = 2
    FLOAT = 3
    STRING = 4
    UINT64 = 11


@dataclass(frozen=True)
class TypeConstant:
    """Entry of the global string/type pool; its list index is the pool key."""

    type_tag: int
    string: str

    def as_dict(self) -> Dict[str, object]:
        return {"type_tag": self.type_tag, "string": self.string}


@dataclass(frozen=True)
class EngineConstant:
    """Tagged engine constant.  ``value`` is ``None`` for :attr:`EngineConstantTag.NONE`."""

    tag: EngineConstantTag
    value: ConstantValue = None

    @property
    def type_tag(self) -> int:
        return int(self.tag)

    def as_dict(self) -> Dict[str, object]:
        return {"type": self.tag.name.lower(), "tag": int(self.tag), "value": self.value}


def _read_none(reader: ByteReader) -> ConstantValue:
    return None


def _read_bool(reader: ByteReader) -> ConstantValue:
    return reader.read_u8() == 1


def _read_handle(reader: ByteReader) -> ConstantValue:
    return reader.read_i64()


def _read_float(reader: ByteReader) -> ConstantValue:
    return reader.read_f32()


def _read_string(reader: ByteReader) -> ConstantValue:
    return reader.read_sized_text()


def _read_uint64(reader: ByteReader) -> ConstantValue:
    return reader.read_u64()


_PAYLOAD_READERS: Dict[EngineConstantTag, Callable[[ByteReader], ConstantValue]] = {
    EngineConstantTag.NONE: _read_none,
    EngineConstantTag.BOOL: _read_bool,
    EngineConstantTag.HANDLE: _read_handle,
    EngineConstantTag.FLOAT: _read_float,
    EngineConstantTag.STRING: _read_string,
    EngineConstantTag.UINT64: _read_uint64,
}


def _lookup_tag(raw_tag: int) -> Optional[EngineConstantTag]:
    try:
        return EngineConstantTag(raw_tag)
    except ValueError:
        return None


def read_type_constants(reader: ByteReader) -> List[TypeConstant]:
    """Read the u32-counted type pool."""

    start = reader.position
    count = reader.read_u32()
    constants: List[TypeConstant] = []
    for _ in range(count):
        type_tag = reader.read_u32()
        constants.append(TypeConstant(type_tag=type_tag, string=reader.read_sized_text()))
    LOGGER.debug("type pool at 0x%X: %d constant(s)", start, count)
    return constants


def read_engine_constant(reader: ByteReader) -> EngineConstant:
    """Read one tagged engine constant.

    Payload width depends on the tag, so an unknown tag cannot be skipped and
    raises :class:`UnknownConstantTagError` before any payload byte is read.
    """

    offset = reader.position
    raw_tag = reader.read_u8()
    tag = _lookup_tag(raw_tag)
    if tag is None:
        raise UnknownConstantTagError(raw_tag, offset=offset)
    return EngineConstant(tag=tag, value=_PAYLOAD_READERS[tag](reader))


def read_engine_constants(reader: ByteReader) -> List[EngineConstant]:
    """Read the u32-counted engine constant pool of one prototype."""

    start = reader.position
    count = reader.read_u32()
    constants = [read_engine_constant(reader) for _ in range(count)]
    LOGGER.debug("engine constant pool at 0x%X: %d constant(s)", start, count)
    return constants


__all__ = [
    "ConstantValue",
    "EngineConstant",
    "EngineConstantTag",
    "TypeConstant",
    "read_engine_constant",
    "read_engine_constants",
    "read_type_constants",
]
