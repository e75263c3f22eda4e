from __future__ import annotations

import pytest

from chip8emu import debug_runner
from chip8emu.chip8.computer import Chip8Computer


class DummyMemory:
    def __init__(self) -> None:
        self.values = {0x0000: 0x12, 0x0001: 0x34, 0x000F: 0xAB, 0x0010: 0xCD}

    def load8(self, address: int) -> int:
        return self.values.get(address & 0xFFF, 0x00)


def test_parse_hex_accepts_prefixed_and_plain() -> None:
    assert debug_runner._parse_hex("0x0200") == 0x0200
    assert debug_runner._parse_hex("200") == 0x0200
    assert debug_runner._parse_hex("F", limit=0xF) == 0xF


@pytest.mark.parametrize("value", ["", "0x1000", "xyz", "-1"])
def test_parse_hex_rejects_invalid(value: str) -> None:
    with pytest.raises(ValueError):
        debug_runner._parse_hex(value)


def test_parse_hex_key_limit() -> None:
    with pytest.raises(ValueError):
        debug_runner._parse_hex("10", limit=0xF)


def test_parse_range_and_merge() -> None:
    rng = debug_runner._parse_range("0210:021F")
    assert rng.start == 0x0210
    assert rng.end == 0x021F
    merged = debug_runner._merge_ranges(
        [debug_runner.DumpRange(0x0200, 0x020F), debug_runner.DumpRange(0x0210, 0x0215)]
    )
    assert merged == [debug_runner.DumpRange(0x0200, 0x0215)]


@pytest.mark.parametrize("spec", ["0200", "0300:0200", "0200:1000"])
def test_parse_range_rejects_invalid(spec: str) -> None:
    with pytest.raises(ValueError):
        debug_runner._parse_range(spec)


def test_merge_ranges_defaults_to_full_memory() -> None:
    merged = debug_runner._merge_ranges([])
    assert merged == [debug_runner.DumpRange(0x0000, 0x0FFF)]


def test_merge_ranges_keeps_disjoint_ranges_sorted() -> None:
    merged = debug_runner._merge_ranges(
        [debug_runner.DumpRange(0x0400, 0x040F), debug_runner.DumpRange(0x0200, 0x020F)]
    )
    assert merged == [debug_runner.DumpRange(0x0200, 0x020F), debug_runner.DumpRange(0x0400, 0x040F)]


def test_format_hex_dump_renders_expected_table() -> None:
    memory = DummyMemory()
    dump = debug_runner._format_hex_dump(memory, [debug_runner.DumpRange(0x0000, 0x0010)])
    lines = dump.splitlines()
    assert lines[0].startswith("ADDR")
    assert lines[1].startswith("0000 12 34")
    assert lines[1].endswith("AB")
    assert lines[2].startswith("0010 CD 00")


def test_format_registers_lists_machine_state() -> None:
    computer = Chip8Computer()
    computer.load_program(bytes([0x6A, 0x42, 0xA3, 0x21, 0x22, 0x08]))
    for _ in range(3):
        computer.execute(set())
    text = debug_runner._format_registers(computer)
    lines = text.splitlines()
    assert lines[0].startswith("PC=208 I=321")
    assert "VA=42" in lines[1]
    assert lines[2] == "STACK: 206"


def test_write_dump_binary_to_file(tmp_path) -> None:
    memory = DummyMemory()
    target = tmp_path / "dump.bin"
    debug_runner._write_dump(memory, [debug_runner.DumpRange(0x0000, 0x0001)], target=target, fmt="bin")
    assert target.read_bytes() == b"\x12\x34"


def test_write_dump_hex_to_file(tmp_path) -> None:
    memory = DummyMemory()
    target = tmp_path / "dump.txt"
    debug_runner._write_dump(memory, [debug_runner.DumpRange(0x0010, 0x0010)], target=target, fmt="hex")
    assert target.read_text().splitlines()[1].startswith("0010 CD")
