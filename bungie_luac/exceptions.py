"""Custom exception hierarchy for the chunk decoder."""

from __future__ import annotations

from typing import Optional


def _where(offset: Optional[int]) -> str:
    if offset is None:
        return ""
    return f" at offset 0x{offset:X}"


class ChunkDecodeError(Exception):
    """Base class for all decoding related errors.

    ``offset`` records the buffer position where the problem was detected when
    the raising layer knows it.
    """

    def __init__(self, message: str, *, offset: Optional[int] = None) -> None:
        super().__init__(f"{message}{_where(offset)}")
        self.offset = offset


class TruncatedError(ChunkDecodeError):
    """Raised when fewer bytes remain than a field or record requires."""

    def __init__(self, needed: int, available: int, *, offset: Optional[int] = None) -> None:
        super().__init__(
            f"truncated input: need {needed} byte(s), {available} available",
            offset=offset,
        )
        self.needed = needed
        self.available = available


class MisalignedSectionError(ChunkDecodeError):
    """Raised when an alignment skip would run past the end of the buffer."""

    def __init__(self, padding: int, available: int, *, offset: Optional[int] = None) -> None:
        super().__init__(
            f"alignment padding of {padding} byte(s) exceeds the {available} remaining",
            offset=offset,
        )
        self.padding = padding
        self.available = available


class HeaderError(ChunkDecodeError):
    """Base class for header gate failures."""


class BadMagicError(HeaderError):
    def __init__(self, found: bytes, expected: bytes) -> None:
        super().__init__(f"bad magic {found!r}, expected {expected!r}", offset=0)
        self.found = found
        self.expected = expected


class UnsupportedVersionError(HeaderError):
    def __init__(self, version: int, expected: int) -> None:
        super().__init__(f"unsupported version 0x{version:02X}, expected 0x{expected:02X}")
        self.version = version


class UnsupportedFormatError(HeaderError):
    def __init__(self, format_: int, expected: int) -> None:
        super().__init__(f"unsupported format 0x{format_:02X}, expected 0x{expected:02X}")
        self.format = format_


class UnknownConstantTagError(ChunkDecodeError):
    """Raised for an engine constant tag whose payload width is unknown."""

    def __init__(self, tag: int, *, offset: Optional[int] = None) -> None:
        super().__init__(f"unknown engine constant tag {tag}", offset=offset)
        self.tag = tag


class UnknownOpcodeError(ChunkDecodeError):
    """Raised when the addressing-mode table has no entry for an opcode."""

    def __init__(self, opcode: int) -> None:
        super().__init__(f"no addressing mode registered for opcode {opcode}")
        self.opcode = opcode


class NestingTooDeepError(ChunkDecodeError):
    """Raised when prototype nesting exceeds the configured limit."""

    def __init__(self, depth: int, limit: int, *, offset: Optional[int] = None) -> None:
        super().__init__(f"prototype nesting depth {depth} exceeds limit {limit}", offset=offset)
        self.depth = depth
        self.limit = limit


class OpcodeTableError(ValueError):
    """Raised when an addressing-mode table file cannot be interpreted."""


__all__ = [
    "ChunkDecodeError",
    "TruncatedError",
    "MisalignedSectionError",
    "HeaderError",
    "BadMagicError",
    "UnsupportedVersionError",
    "UnsupportedFormatError",
    "UnknownConstantTagError",
    "UnknownOpcodeError",
    "NestingTooDeepError",
    "OpcodeTableError",
]
