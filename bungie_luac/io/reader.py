"""Sequential big-endian reader over an in-memory chunk buffer.

Every higher decoding layer consumes the buffer through :class:`ByteReader`.
Reads either return the full requested width or raise
:class:`~bungie_luac.exceptions.TruncatedError`; partial values are never
produced.
"""

from __future__ import annotations

import logging
import struct
from typing import Dict, Literal, Union

from ..exceptions import MisalignedSectionError, TruncatedError

LOGGER = logging.getLogger(__name__)

Endian = Literal["big", "little"]
Buffer = Union[bytes, bytearray, memoryview]

_PREFIX: Dict[str, str] = {"big": ">", "little": "<"}


class ByteReader:
    """Cursor based reader for fixed-width integers and sized strings."""

    def __init__(self, data: Buffer, *, endian: Endian = "big", start: int = 0) -> None:
        if endian not in _PREFIX:
            raise ValueError(f"unsupported endianness: {endian!r}")
        self._data = bytes(data)
        self._pos = 0
        self.endian: Endian = endian
        prefix = _PREFIX[endian]
        self._u16 = struct.Struct(prefix + "H")
        self._u32 = struct.Struct(prefix + "I")
        self._u64 = struct.Struct(prefix + "Q")
        self._i32 = struct.Struct(prefix + "i")
        self._i64 = struct.Struct(prefix + "q")
        self._f32 = struct.Struct(prefix + "f")
        self.seek(start)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ByteReader(position=0x{self._pos:X}, size=0x{len(self._data):X})"

    # --- Cursor ----------------------------------------------------
    @property
    def position(self) -> int:
        return self._pos

    def tell(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self._data):
            raise ValueError(f"seek offset {offset} outside buffer of {len(self._data)} bytes")
        self._pos = offset

    def _take(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("read size must not be negative")
        available = self.remaining
        if size > available:
            raise TruncatedError(size, available, offset=self._pos)
        start = self._pos
        self._pos = start + size
        return self._data[start : self._pos]

    def _unpack(self, fmt: struct.Struct) -> Union[int, float]:
        return fmt.unpack(self._take(fmt.size))[0]

    # --- Fixed width -----------------------------------------------
    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16(self) -> int:
        return int(self._unpack(self._u16))

    def read_u32(self) -> int:
        return int(self._unpack(self._u32))

    def read_u64(self) -> int:
        return int(self._unpack(self._u64))

    def read_i32(self) -> int:
        return int(self._unpack(self._i32))

    def read_i64(self) -> int:
        return int(self._unpack(self._i64))

    def read_f32(self) -> float:
        return float(self._unpack(self._f32))

    # --- Sized data ------------------------------------------------
    def read_bytes(self, size: int) -> bytes:
        return self._take(size)

    def read_text(self, size: int) -> str:
        """Read ``size`` bytes as lossy UTF-8 with trailing NULs trimmed."""

        raw = self._take(size)
        return raw.decode("utf-8", errors="replace").rstrip("\x00")

    def read_sized_text(self) -> str:
        """Read a u32 length prefix followed by that many bytes of text."""

        size = self.read_u32()
        return self.read_text(size)

    # --- Alignment -------------------------------------------------
    def align_to(self, alignment: int, origin: int = 0) -> int:
        """Skip padding so ``position - origin`` becomes a multiple of ``alignment``.

        Returns the number of padding bytes skipped.
        """

        if alignment <= 0:
            raise ValueError("alignment must be a positive integer")
        padding = (-(self._pos - origin)) % alignment
        if padding > self.remaining:
            raise MisalignedSectionError(padding, self.remaining, offset=self._pos)
        if padding:
            LOGGER.debug("skipping %d padding byte(s) at 0x%X", padding, self._pos)
        self._pos += padding
        return padding


__all__ = ["ByteReader", "Endian"]
