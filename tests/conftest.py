"""Test configuration ensuring the project source tree is importable."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
TESTS = ROOT / "tests"

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
else:
    idx = sys.path.index(root_str)
    if idx != 0:
        sys.path.insert(0, sys.path.pop(idx))

from bungie_luac.vm.opcodes import (  # noqa: E402
    ArgMode,
    ArgModeA,
    OpFormat,
    OpModes,
    OpcodeTable,
)


@pytest.fixture
def mode_table() -> OpcodeTable:
    """Small addressing-mode table covering every operand mode."""

    entries = [
        OpModes(OpFormat.IABC, ArgModeA.REGISTER, ArgMode.REGISTER, ArgMode.UNUSED, "MOVE"),
        OpModes(OpFormat.IABX, ArgModeA.REGISTER, ArgMode.CONSTANT, ArgMode.UNUSED, "LOADK"),
        OpModes(
            OpFormat.IABC,
            ArgModeA.REGISTER,
            ArgMode.REGISTER_OR_CONSTANT,
            ArgMode.REGISTER_OR_CONSTANT,
            "ADD",
        ),
        OpModes(OpFormat.IASBX, ArgModeA.UNUSED, ArgMode.OFFSET, ArgMode.UNUSED, "JMP"),
        OpModes(OpFormat.IABC, ArgModeA.REGISTER, ArgMode.UNUSED, ArgMode.UNUSED, "CLOSE"),
        OpModes(OpFormat.IABC, ArgModeA.UNUSED, ArgMode.OFFSET, ArgMode.NUMBER, "SETLIST"),
    ]
    return OpcodeTable(entries)
