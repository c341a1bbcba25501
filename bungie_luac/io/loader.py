"""Utilities for loading compiled chunk files from disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def read_chunk_bytes(path: PathLike) -> bytes:
    """Return the full contents of ``path``.

    The decoder works on a single in-memory buffer, so the whole file is read
    up front.
    """

    target = Path(path)
    data = target.read_bytes()
    LOGGER.info("Loaded %s (%d bytes)", target, len(data))
    return data


__all__ = ["read_chunk_bytes"]
