"""Logging helpers for the CLI and per-run decode traces."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

__all__ = [
    "configure_logging",
    "configure_debug_file_logger",
    "close_debug_logger",
]

_COLOUR_CODES = {
    logging.DEBUG: "34",
    logging.INFO: "32",
    logging.WARNING: "33",
    logging.ERROR: "31",
    logging.CRITICAL: "35",
}


class _ColourFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - trivial wrapper
        message = super().format(record)
        code = _COLOUR_CODES.get(record.levelno, "0")
        return f"\033[{code}m{message}\033[0m"


def configure_logging(verbose: bool, log_file: Optional[Path] = None) -> None:
    """Configure root logging handlers.

    Warnings and errors always reach stderr; ``verbose`` lowers the threshold
    to DEBUG and colourises the stream output.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    stream = logging.StreamHandler()
    if verbose:
        stream.setFormatter(_ColourFormatter("%(levelname)s: %(message)s"))
    else:
        stream.setLevel(logging.WARNING)
        stream.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(stream)


def configure_debug_file_logger(
    name: str,
    path: Path,
    *,
    level: int = logging.DEBUG,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Logger:
    """Return a logger writing debug traces to ``path``.

    Any previously configured trace handlers on ``name`` are removed so repeated
    invocations replace earlier traces instead of appending to them.  Trace
    records stay out of the root handlers until :func:`close_debug_logger`
    restores the logger.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    close_debug_logger(logger)

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler._decode_trace = True  # type: ignore[attr-defined]
    handler._saved_state = (logger.level, logger.propagate)  # type: ignore[attr-defined]
    if formatter is None:
        formatter = logging.Formatter("%(name)s: %(message)s")
    handler.setFormatter(formatter)

    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(handler)
    return logger


def close_debug_logger(logger: logging.Logger) -> None:
    """Tear down handlers installed by :func:`configure_debug_file_logger`."""

    for handler in list(logger.handlers):
        if getattr(handler, "_decode_trace", False):
            logger.removeHandler(handler)
            handler.close()
            saved = getattr(handler, "_saved_state", None)
            if saved is not None:
                logger.setLevel(saved[0])
                logger.propagate = saved[1]
