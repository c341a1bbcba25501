"""Container header model and validation gate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional

from ..exceptions import BadMagicError, UnsupportedFormatError, UnsupportedVersionError
from ..io.reader import ByteReader

LOGGER = logging.getLogger(__name__)

LUA_MAGIC = b"\x1bLua"
LUA_VERSION = 0x51
CONTAINER_FORMAT = 0x0E
HEADER_SIZE = 14


class Endianness(IntEnum):
    BIG = 0
    LITTLE = 1


class NumberType(IntEnum):
    FLOAT = 0
    INTEGER = 1


def _enum_or_none(enum_cls, value: int):
    try:
        return enum_cls(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Header:
    """Fixed-size container header.

    Only ``magic``, ``version`` and ``format`` gate decoding.  The remaining
    fields describe the producing toolchain and are kept verbatim.
    """

    magic: bytes
    version: int
    format: int
    endianness: int
    int_size: int
    size_t_size: int
    instruction_size: int
    number_size: int
    number_type: int
    integral_flag: int
    reserved: int

    @property
    def endian(self) -> Optional[Endianness]:
        return _enum_or_none(Endianness, self.endianness)

    @property
    def number_kind(self) -> Optional[NumberType]:
        return _enum_or_none(NumberType, self.number_type)

    def as_dict(self) -> Dict[str, object]:
        endian = self.endian
        number_kind = self.number_kind
        return {
            "magic": self.magic.hex(),
            "version": self.version,
            "format": self.format,
            "endianness": endian.name.lower() if endian is not None else self.endianness,
            "int_size": self.int_size,
            "size_t_size": self.size_t_size,
            "instruction_size": self.instruction_size,
            "number_size": self.number_size,
            "number_type": number_kind.name.lower() if number_kind is not None else self.number_type,
            "integral_flag": self.integral_flag,
            "reserved": self.reserved,
        }


def read_header(reader: ByteReader) -> Header:
    """Read and validate the header at the reader's current position.

    Raises :class:`BadMagicError`, :class:`UnsupportedVersionError` or
    :class:`UnsupportedFormatError` before anything past the header is
    touched.
    """

    magic = reader.read_bytes(len(LUA_MAGIC))
    if magic != LUA_MAGIC:
        raise BadMagicError(magic, LUA_MAGIC)
    version = reader.read_u8()
    if version != LUA_VERSION:
        raise UnsupportedVersionError(version, LUA_VERSION)
    format_ = reader.read_u8()
    if format_ != CONTAINER_FORMAT:
        raise UnsupportedFormatError(format_, CONTAINER_FORMAT)

    header = Header(
        magic=magic,
        version=version,
        format=format_,
        endianness=reader.read_u8(),
        int_size=reader.read_u8(),
        size_t_size=reader.read_u8(),
        instruction_size=reader.read_u8(),
        number_size=reader.read_u8(),
        number_type=reader.read_u8(),
        integral_flag=reader.read_u8(),
        reserved=reader.read_u8(),
    )
    LOGGER.debug(
        "header: version=0x%02X format=0x%02X int=%d size_t=%d instruction=%d number=%d",
        header.version,
        header.format,
        header.int_size,
        header.size_t_size,
        header.instruction_size,
        header.number_size,
    )
    return header


__all__ = [
    "CONTAINER_FORMAT",
    "Endianness",
    "HEADER_SIZE",
    "Header",
    "LUA_MAGIC",
    "LUA_VERSION",
    "NumberType",
    "read_header",
]
