from __future__ import annotations

import pytest

from chip8emu.faults import OutOfBoundsAccess
from chip8emu.memory import (
    FONT_DATA,
    FONT_START,
    HIRES_FONT_DATA,
    HIRES_FONT_START,
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START,
    Chip8Memory,
    Memory,
)


def test_fonts_are_installed_at_fixed_addresses() -> None:
    memory = Chip8Memory()
    assert memory.read_block(FONT_START, len(FONT_DATA)) == bytes(FONT_DATA)
    assert memory.read_block(HIRES_FONT_START, len(HIRES_FONT_DATA)) == bytes(HIRES_FONT_DATA)
    assert len(FONT_DATA) == 80
    assert len(HIRES_FONT_DATA) == 160


def test_font_addresses() -> None:
    assert Chip8Memory.font_address(0) == 0x50
    assert Chip8Memory.font_address(0xF) == 0x50 + 15 * 5
    assert Chip8Memory.hires_font_address(1) == HIRES_FONT_START + 10


def test_program_is_copied_to_program_area() -> None:
    memory = Chip8Memory()
    memory.load_program(b"\x12\x34\x56")
    assert memory.read_block(PROGRAM_START, 4) == b"\x12\x34\x56\x00"
    assert memory.load16(PROGRAM_START) == 0x1234


def test_program_fills_memory_exactly() -> None:
    memory = Chip8Memory()
    memory.load_program(bytes([0xAB]) * MAX_PROGRAM_SIZE)
    assert memory.load8(MEMORY_SIZE - 1) == 0xAB


def test_oversized_program_is_rejected() -> None:
    memory = Chip8Memory()
    with pytest.raises(ValueError):
        memory.load_program(bytes(MAX_PROGRAM_SIZE + 1))


def test_sixteen_bit_access_is_big_endian() -> None:
    memory = Memory(0x100)
    memory.store16(0x10, 0xBEEF)
    assert memory.load8(0x10) == 0xBE
    assert memory.load8(0x11) == 0xEF
    assert memory.load16(0x10) == 0xBEEF


def test_store_masks_to_a_byte() -> None:
    memory = Memory(0x10)
    memory.store8(0, 0x1FF)
    assert memory.load8(0) == 0xFF


@pytest.mark.parametrize(
    "action",
    [
        lambda memory: memory.load8(MEMORY_SIZE),
        lambda memory: memory.load8(-1),
        lambda memory: memory.load16(MEMORY_SIZE - 1),
        lambda memory: memory.store8(MEMORY_SIZE, 0),
        lambda memory: memory.read_block(MEMORY_SIZE - 2, 3),
        lambda memory: memory.write_block(MEMORY_SIZE - 1, [1, 2]),
    ],
)
def test_out_of_range_access_faults(action) -> None:
    memory = Chip8Memory()
    with pytest.raises(OutOfBoundsAccess):
        action(memory)


def test_failed_block_write_leaves_memory_untouched() -> None:
    memory = Chip8Memory()
    with pytest.raises(OutOfBoundsAccess):
        memory.write_block(MEMORY_SIZE - 1, [1, 2])
    assert memory.load8(MEMORY_SIZE - 1) == 0


def test_invalid_memory_size() -> None:
    with pytest.raises(ValueError):
        Memory(0)
