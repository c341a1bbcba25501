from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from bungie_luac.config import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT, DecoderOptions, load_options
from bungie_luac.exceptions import UnknownOpcodeError
from bungie_luac.vm.opcodes import FALLBACK_MODES, default_opcode_table


def test_defaults() -> None:
    options = DecoderOptions()
    assert options.align_relative_to_record is True
    assert options.max_depth == DEFAULT_MAX_DEPTH
    assert options.strict_opcodes is False


def test_default_table_decodes_gaps_with_fallback() -> None:
    table = DecoderOptions().resolve_opcode_table()
    assert table.mnemonic(0) == "MOVE"
    assert table.lookup(64) is FALLBACK_MODES
    assert table.lookup(127) is FALLBACK_MODES
    assert default_opcode_table().fallback is None


def test_strict_options_reject_gaps() -> None:
    table = DecoderOptions(strict_opcodes=True).resolve_opcode_table()
    assert table.fallback is None
    with pytest.raises(UnknownOpcodeError):
        table.lookup(64)


def test_strict_options_drop_table_fallback() -> None:
    lenient = default_opcode_table().with_fallback()
    table = DecoderOptions(strict_opcodes=True, opcode_table=lenient).resolve_opcode_table()
    with pytest.raises(UnknownOpcodeError):
        table.lookup(100)


@pytest.mark.parametrize("depth", [0, -1, MAX_DEPTH_LIMIT + 1, 5000])
def test_max_depth_bounds(depth: int) -> None:
    with pytest.raises(ValueError):
        DecoderOptions(max_depth=depth)


def test_max_depth_limit_accepted() -> None:
    assert DecoderOptions(max_depth=MAX_DEPTH_LIMIT).max_depth == MAX_DEPTH_LIMIT


@pytest.mark.parametrize(
    "payload",
    [
        {"strict_opcodes": "false"},
        {"align_relative_to_record": "no"},
        {"align_relative_to_record": 0},
        {"max_depth": "12"},
        {"max_depth": True},
    ],
)
def test_option_types_are_checked(payload: dict) -> None:
    with pytest.raises(ValueError):
        DecoderOptions.from_mapping(payload)


def test_load_json_options_with_relative_table(tmp_path: Path) -> None:
    (tmp_path / "ops.json").write_text(
        json.dumps({"opcodes": [{"opcode": 0, "name": "nop", "a": "unused"}]}),
        encoding="utf-8",
    )
    config = tmp_path / "decoder.json"
    config.write_text(
        json.dumps({"align_relative_to_record": False, "max_depth": 8, "opcode_table": "ops.json"}),
        encoding="utf-8",
    )
    options = load_options(config)

    assert options.align_relative_to_record is False
    assert options.max_depth == 8
    assert options.opcode_table is not None
    assert options.opcode_table.mnemonic(0) == "NOP"


def test_load_yaml_options(tmp_path: Path) -> None:
    config = tmp_path / "decoder.yaml"
    config.write_text("strict_opcodes: true\nmax_depth: 16\n", encoding="utf-8")
    options = load_options(config)
    assert options.strict_opcodes is True
    assert options.max_depth == 16


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    config = tmp_path / "empty.yml"
    config.write_text("", encoding="utf-8")
    assert load_options(config) == DecoderOptions()


def test_non_mapping_config_rejected(tmp_path: Path) -> None:
    config = tmp_path / "list.json"
    config.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_options(config)


def test_unknown_keys_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="bungie_luac.config"):
        options = DecoderOptions.from_mapping({"max_depth": 4, "colour": True})
    assert options.max_depth == 4
    assert "colour" in caplog.text
