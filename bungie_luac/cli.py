"""Command line entry point for decoding compiled script containers."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import yaml

from .chunk.container import load_chunk, summarise
from .config import DecoderOptions, load_options
from .exceptions import ChunkDecodeError, OpcodeTableError
from .logging_config import close_debug_logger, configure_debug_file_logger, configure_logging
from .report import render_listing, write_json_report
from .vm.opcodes import load_opcode_table

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decode Lua 5.1 derived compiled script containers")
    parser.add_argument("input", type=Path, help="Path to the compiled container")
    parser.add_argument("--opcodes", type=Path, help="Addressing-mode table (JSON or YAML)")
    parser.add_argument("--config", type=Path, help="Decoder options file (JSON or YAML)")
    parser.add_argument("--json-out", type=Path, help="Optional JSON report path")
    parser.add_argument("--listing", action="store_true", help="Print the decoded instruction listing")
    parser.add_argument(
        "--absolute-align",
        action="store_true",
        help="Align instruction arrays to absolute buffer offsets instead of record offsets",
    )
    parser.add_argument(
        "--strict-opcodes",
        action="store_true",
        help="Fail on opcodes missing from the table instead of using a fallback descriptor",
    )
    parser.add_argument("--max-depth", type=int, help="Maximum prototype nesting depth")
    parser.add_argument("--trace-file", type=Path, help="Write decoder debug traces to this file")
    parser.add_argument("--log-file", type=Path, help="Write the run log to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def _build_options(args: argparse.Namespace) -> DecoderOptions:
    options = load_options(args.config) if args.config else DecoderOptions()
    if args.opcodes:
        options.opcode_table = load_opcode_table(args.opcodes)
    if args.absolute_align:
        options.align_relative_to_record = False
    if args.strict_opcodes:
        options.strict_opcodes = True
    if args.max_depth is not None:
        options.max_depth = args.max_depth
    options.validate()
    return options


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose, args.log_file)

    try:
        options = _build_options(args)
    except (OSError, ValueError, OpcodeTableError, yaml.YAMLError) as exc:
        LOGGER.error("invalid configuration: %s", exc)
        return 2

    trace_logger = None
    if args.trace_file:
        trace_logger = configure_debug_file_logger("bungie_luac", args.trace_file)

    try:
        chunk = load_chunk(args.input, options)
    except OSError as exc:
        LOGGER.error("unable to read %s: %s", args.input, exc)
        return 2
    except ChunkDecodeError as exc:
        LOGGER.error("failed to decode %s: %s", args.input, exc)
        return 1
    finally:
        if trace_logger is not None:
            close_debug_logger(trace_logger)

    summary = summarise(chunk)
    print(
        f"{args.input}: version=0x{summary['version']:02X} format=0x{summary['format']:02X} "
        f"type_constants={summary['type_constants']} prototypes={summary['prototypes']} "
        f"instructions={summary['instructions']}"
    )
    if args.listing:
        print(render_listing(chunk))

    if args.json_out:
        write_json_report(chunk, args.json_out)
        LOGGER.info("Wrote JSON report to %s", args.json_out)

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
