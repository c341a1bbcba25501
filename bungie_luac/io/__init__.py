"""Input helpers: the byte cursor and file loading."""

from __future__ import annotations

from .loader import read_chunk_bytes
from .reader import ByteReader

__all__ = ["ByteReader", "read_chunk_bytes"]
