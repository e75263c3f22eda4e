"""Memory image for the CHIP-8 address space."""

from __future__ import annotations

from typing import Iterable, List

from chip8emu.faults import OutOfBoundsAccess

MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START

FONT_START = 0x050
FONT_GLYPH_SIZE = 5
HIRES_FONT_GLYPH_SIZE = 10

# 4x5 hexadecimal digits, one bit per column in the high nibble.
FONT_DATA: List[int] = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
]

# 8x10 SUPER-CHIP digits.
HIRES_FONT_DATA: List[int] = [
    0xFF, 0xFF, 0xC3, 0xC3, 0xC3, 0xC3, 0xC3, 0xC3, 0xFF, 0xFF,  # 0
    0x18, 0x78, 0x78, 0x18, 0x18, 0x18, 0x18, 0x18, 0xFF, 0xFF,  # 1
    0xFF, 0xFF, 0x03, 0x03, 0xFF, 0xFF, 0xC0, 0xC0, 0xFF, 0xFF,  # 2
    0xFF, 0xFF, 0x03, 0x03, 0xFF, 0xFF, 0x03, 0x03, 0xFF, 0xFF,  # 3
    0xC3, 0xC3, 0xC3, 0xC3, 0xFF, 0xFF, 0x03, 0x03, 0x03, 0x03,  # 4
    0xFF, 0xFF, 0xC0, 0xC0, 0xFF, 0xFF, 0x03, 0x03, 0xFF, 0xFF,  # 5
    0xFF, 0xFF, 0xC0, 0xC0, 0xFF, 0xFF, 0xC3, 0xC3, 0xFF, 0xFF,  # 6
    0xFF, 0xFF, 0x03, 0x03, 0x06, 0x0C, 0x18, 0x18, 0x18, 0x18,  # 7
    0xFF, 0xFF, 0xC3, 0xC3, 0xFF, 0xFF, 0xC3, 0xC3, 0xFF, 0xFF,  # 8
    0xFF, 0xFF, 0xC3, 0xC3, 0xFF, 0xFF, 0x03, 0x03, 0xFF, 0xFF,  # 9
    0x7E, 0xFF, 0xC3, 0xC3, 0xC3, 0xFF, 0xFF, 0xC3, 0xC3, 0xC3,  # A
    0xFC, 0xFC, 0xC3, 0xC3, 0xFC, 0xFC, 0xC3, 0xC3, 0xFC, 0xFC,  # B
    0x3C, 0xFF, 0xC3, 0xC0, 0xC0, 0xC0, 0xC0, 0xC3, 0xFF, 0x3C,  # C
    0xFC, 0xFE, 0xC3, 0xC3, 0xC3, 0xC3, 0xC3, 0xC3, 0xFE, 0xFC,  # D
    0xFF, 0xFF, 0xC0, 0xC0, 0xFF, 0xFF, 0xC0, 0xC0, 0xFF, 0xFF,  # E
    0xFF, 0xFF, 0xC0, 0xC0, 0xFF, 0xFF, 0xC0, 0xC0, 0xC0, 0xC0,  # F
]

FONT_END = FONT_START + len(FONT_DATA)
HIRES_FONT_START = FONT_END
HIRES_FONT_END = HIRES_FONT_START + len(HIRES_FONT_DATA)


class Memory:
    """Flat byte array with bounds-checked 8/16-bit accesses."""

    length: int
    data: bytearray

    def __init__(self, length: int) -> None:
        if length <= 0 or length > 0x10000:
            raise ValueError("invalid memory size")
        self.length = length
        self.data = bytearray(length)

    def _check(self, address: int, count: int = 1) -> None:
        if address < 0 or address + count > self.length:
            raise OutOfBoundsAccess(address, self.length)

    def load8(self, address: int) -> int:
        self._check(address)
        return self.data[address]

    def store8(self, address: int, value: int) -> None:
        self._check(address)
        self.data[address] = value & 0xFF

    def load16(self, address: int) -> int:
        self._check(address, 2)
        return (self.data[address] << 8) | self.data[address + 1]

    def store16(self, address: int, value: int) -> None:
        self._check(address, 2)
        self.data[address] = (value >> 8) & 0xFF
        self.data[address + 1] = value & 0xFF

    def read_block(self, address: int, count: int) -> bytes:
        self._check(address, count)
        return bytes(self.data[address:address + count])

    def write_block(self, address: int, values: Iterable[int]) -> None:
        payload = bytes(value & 0xFF for value in values)
        self._check(address, len(payload))
        self.data[address:address + len(payload)] = payload


class Chip8Memory(Memory):
    """4 KiB CHIP-8 address space with both system fonts installed."""

    def __init__(self) -> None:
        super().__init__(MEMORY_SIZE)
        self.data[FONT_START:FONT_END] = bytes(FONT_DATA)
        self.data[HIRES_FONT_START:HIRES_FONT_END] = bytes(HIRES_FONT_DATA)

    def load_program(self, program: bytes) -> None:
        if len(program) > MAX_PROGRAM_SIZE:
            raise ValueError(f"program too large: {len(program)} bytes (max {MAX_PROGRAM_SIZE})")
        self.data[PROGRAM_START:MEMORY_SIZE] = bytes(MAX_PROGRAM_SIZE)
        self.data[PROGRAM_START:PROGRAM_START + len(program)] = program

    @staticmethod
    def font_address(digit: int) -> int:
        return FONT_START + digit * FONT_GLYPH_SIZE

    @staticmethod
    def hires_font_address(digit: int) -> int:
        return HIRES_FONT_START + digit * HIRES_FONT_GLYPH_SIZE


__all__ = [
    "Chip8Memory",
    "FONT_DATA",
    "FONT_START",
    "HIRES_FONT_DATA",
    "HIRES_FONT_START",
    "MAX_PROGRAM_SIZE",
    "MEMORY_SIZE",
    "Memory",
    "PROGRAM_START",
]
