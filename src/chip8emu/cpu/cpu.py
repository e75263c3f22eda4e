"""CHIP-8 / SUPER-CHIP opcode interpreter."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import AbstractSet, Callable, Dict, FrozenSet, List, Optional

from chip8emu.chip8.keypad import KeyWaitState
from chip8emu.cpu.quirks import JumpBehaviour, Quirks, RegSaveLoad, ShiftingReg
from chip8emu.faults import StackUnderflow, UnsupportedOpcode
from chip8emu.memory import PROGRAM_START, Chip8Memory

logger = logging.getLogger(__name__)

FLAG = 0xF
SUPER_SPRITE_ROWS = 16
SCROLL_COLUMNS = 4


@dataclass
class CPURegisters:
    """V0-VF, the address register I and the program counter."""

    v: List[int] = field(default_factory=lambda: [0x00] * 16)
    index: int = 0
    program_counter: int = PROGRAM_START


@dataclass
class CPUStatus:
    halted: bool = False
    executed: int = 0


@dataclass(frozen=True)
class Instruction:
    """A fetched opcode split into its standard fields."""

    opcode: int
    address: int = 0

    @property
    def kind(self) -> int:
        return (self.opcode >> 12) & 0xF

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0xF

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def nn(self) -> int:
        return self.opcode & 0x00FF

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF


def decode(opcode: int, address: int = 0) -> Instruction:
    return Instruction(opcode & 0xFFFF, address)


def _default_random_source(seed: Optional[int] = None) -> Callable[[], int]:
    rng = random.Random(seed)
    return lambda: rng.getrandbits(8)


class Chip8CPU:
    """Fetch/decode/execute core.

    Memory, display and timers are resolved from ``computer.hardware`` on every
    access and quirks from ``computer.quirks``, so the host may swap either
    between instructions.
    """

    OP_CLS = 0x00E0
    OP_RET = 0x00EE
    OP_SCROLL_DOWN = 0x00C0
    OP_SCROLL_RIGHT = 0x00FB
    OP_SCROLL_LEFT = 0x00FC
    OP_EXIT = 0x00FD
    OP_LORES = 0x00FE
    OP_HIRES = 0x00FF

    def __init__(self, computer: object, *, random_byte: Optional[Callable[[], int]] = None, seed: Optional[int] = None) -> None:
        self.computer = computer
        self.registers = CPURegisters()
        self.status = CPUStatus()
        self.stack: List[int] = []
        self.key_wait = KeyWaitState()
        self.random_byte: Callable[[], int] = random_byte or _default_random_source(seed)
        self._pressed: FrozenSet[int] = frozenset()
        self._class_table: Dict[int, Callable[[Instruction], None]] = {}
        self._system_table: Dict[int, Callable[[Instruction], None]] = {}
        self._alu_table: Dict[int, Callable[[Instruction], None]] = {}
        self._key_table: Dict[int, Callable[[Instruction], None]] = {}
        self._misc_table: Dict[int, Callable[[Instruction], None]] = {}
        self._init_opcode_tables()

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------
    @property
    def memory(self) -> Chip8Memory:
        return self.computer.hardware.memory

    @property
    def display(self):
        return self.computer.hardware.display

    @property
    def timers(self):
        return self.computer.hardware.timers

    @property
    def quirks(self) -> Quirks:
        quirks = getattr(self.computer, "quirks", None)
        return quirks if quirks is not None else Quirks()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self.registers = CPURegisters()
        self.status = CPUStatus()
        self.stack = []
        self.key_wait = KeyWaitState()
        self._pressed = frozenset()

    def key_released(self, key: int) -> None:
        self.key_wait.key_released(key)

    def execute(self, pressed_keys: Optional[AbstractSet[int]] = None) -> Instruction:
        """Run exactly one instruction and return it.

        Raises a :class:`~chip8emu.faults.CPUFault` subclass when the program
        counter, the address register or the opcode itself is invalid.
        """

        address = self.registers.program_counter
        opcode = self.memory.load16(address)
        self.registers.program_counter = (address + 2) & 0xFFFF
        instruction = decode(opcode, address)
        self._pressed = frozenset(pressed_keys or ())
        self._class_table[instruction.kind](instruction)
        self.status.executed += 1
        return instruction

    # ------------------------------------------------------------------
    # Dispatch tables
    # ------------------------------------------------------------------
    def _init_opcode_tables(self) -> None:
        self._class_table.update({
            0x0: self._opcode_system,
            0x1: self._opcode_jump,
            0x2: self._opcode_call,
            0x3: self._opcode_skip_eq_imm,
            0x4: self._opcode_skip_ne_imm,
            0x5: self._opcode_skip_eq_reg,
            0x6: self._opcode_load_imm,
            0x7: self._opcode_add_imm,
            0x8: self._opcode_alu,
            0x9: self._opcode_skip_ne_reg,
            0xA: self._opcode_load_index,
            0xB: self._opcode_jump_offset,
            0xC: self._opcode_random,
            0xD: self._opcode_draw,
            0xE: self._opcode_key,
            0xF: self._opcode_misc,
        })
        self._system_table.update({
            self.OP_CLS: self._opcode_cls,
            self.OP_RET: self._opcode_ret,
            self.OP_SCROLL_RIGHT: self._opcode_scroll_right,
            self.OP_SCROLL_LEFT: self._opcode_scroll_left,
            self.OP_EXIT: self._opcode_exit,
            self.OP_LORES: self._opcode_lores,
            self.OP_HIRES: self._opcode_hires,
        })
        self._alu_table.update({
            0x0: self._alu_mov,
            0x1: self._alu_or,
            0x2: self._alu_and,
            0x3: self._alu_xor,
            0x4: self._alu_add,
            0x5: self._alu_sub,
            0x6: self._alu_shr,
            0x7: self._alu_subn,
            0xE: self._alu_shl,
        })
        self._key_table.update({
            0x9E: self._opcode_skip_key_pressed,
            0xA1: self._opcode_skip_key_not_pressed,
        })
        self._misc_table.update({
            0x07: self._opcode_get_delay,
            0x0A: self._opcode_wait_key,
            0x15: self._opcode_set_delay,
            0x18: self._opcode_set_sound,
            0x1E: self._opcode_add_index,
            0x29: self._opcode_font,
            0x30: self._opcode_hires_font,
            0x33: self._opcode_bcd,
            0x55: self._opcode_store_registers,
            0x65: self._opcode_load_registers,
        })

    def _lookup(self, table: Dict[int, Callable[[Instruction], None]], key: int, ins: Instruction) -> Callable[[Instruction], None]:
        handler = table.get(key)
        if handler is None:
            raise UnsupportedOpcode(ins.opcode, ins.address)
        return handler

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.registers.program_counter = (self.registers.program_counter + 2) & 0xFFFF

    # ------------------------------------------------------------------
    # 0x0: system and SUPER-CHIP display control
    # ------------------------------------------------------------------
    def _opcode_system(self, ins: Instruction) -> None:
        if ins.opcode & 0xFFF0 == self.OP_SCROLL_DOWN:
            self.display.scroll_down(ins.n)
            return
        self._lookup(self._system_table, ins.opcode, ins)(ins)

    def _opcode_cls(self, ins: Instruction) -> None:
        self.display.clear()

    def _opcode_ret(self, ins: Instruction) -> None:
        if not self.stack:
            raise StackUnderflow(ins.address)
        self.registers.program_counter = self.stack.pop()

    def _opcode_scroll_right(self, ins: Instruction) -> None:
        self.display.scroll_right(SCROLL_COLUMNS)

    def _opcode_scroll_left(self, ins: Instruction) -> None:
        self.display.scroll_left(SCROLL_COLUMNS)

    def _opcode_exit(self, ins: Instruction) -> None:
        self.registers.program_counter = ins.address
        self.status.halted = True

    def _opcode_lores(self, ins: Instruction) -> None:
        self.display.set_resolution(False)
        logger.debug("display switched to %dx%d", self.display.width, self.display.height)

    def _opcode_hires(self, ins: Instruction) -> None:
        self.display.set_resolution(True)
        logger.debug("display switched to %dx%d", self.display.width, self.display.height)

    # ------------------------------------------------------------------
    # 0x1-0x7: flow control and immediates
    # ------------------------------------------------------------------
    def _opcode_jump(self, ins: Instruction) -> None:
        self.registers.program_counter = ins.nnn

    def _opcode_call(self, ins: Instruction) -> None:
        self.stack.append(self.registers.program_counter)
        self.registers.program_counter = ins.nnn

    def _opcode_skip_eq_imm(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] == ins.nn)

    def _opcode_skip_ne_imm(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] != ins.nn)

    def _opcode_skip_eq_reg(self, ins: Instruction) -> None:
        if ins.n != 0:
            raise UnsupportedOpcode(ins.opcode, ins.address)
        self._skip_if(self.registers.v[ins.x] == self.registers.v[ins.y])

    def _opcode_load_imm(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = ins.nn

    def _opcode_add_imm(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = (self.registers.v[ins.x] + ins.nn) & 0xFF

    # ------------------------------------------------------------------
    # 0x8: register to register arithmetic
    # ------------------------------------------------------------------
    def _opcode_alu(self, ins: Instruction) -> None:
        handler = self._lookup(self._alu_table, ins.n, ins)
        if self.quirks.vf_reset:
            self.registers.v[FLAG] = 0
        handler(ins)

    def _alu_mov(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = self.registers.v[ins.y]

    def _alu_or(self, ins: Instruction) -> None:
        self.registers.v[ins.x] |= self.registers.v[ins.y]

    def _alu_and(self, ins: Instruction) -> None:
        self.registers.v[ins.x] &= self.registers.v[ins.y]

    def _alu_xor(self, ins: Instruction) -> None:
        self.registers.v[ins.x] ^= self.registers.v[ins.y]

    def _alu_add(self, ins: Instruction) -> None:
        v = self.registers.v
        total = v[ins.x] + v[ins.y]
        v[ins.x] = total & 0xFF
        v[FLAG] = 1 if total > 0xFF else 0

    def _alu_sub(self, ins: Instruction) -> None:
        v = self.registers.v
        minuend, subtrahend = v[ins.x], v[ins.y]
        v[ins.x] = (minuend - subtrahend) & 0xFF
        v[FLAG] = 1 if minuend >= subtrahend else 0

    def _alu_subn(self, ins: Instruction) -> None:
        v = self.registers.v
        subtrahend, minuend = v[ins.x], v[ins.y]
        v[ins.x] = (minuend - subtrahend) & 0xFF
        v[FLAG] = 1 if minuend >= subtrahend else 0

    def _shift_source(self, ins: Instruction) -> int:
        if self.quirks.shifting is ShiftingReg.VY:
            return self.registers.v[ins.y]
        return self.registers.v[ins.x]

    def _alu_shr(self, ins: Instruction) -> None:
        source = self._shift_source(ins)
        self.registers.v[ins.x] = source >> 1
        self.registers.v[FLAG] = source & 0x01

    def _alu_shl(self, ins: Instruction) -> None:
        source = self._shift_source(ins)
        self.registers.v[ins.x] = (source << 1) & 0xFF
        self.registers.v[FLAG] = (source >> 7) & 0x01

    # ------------------------------------------------------------------
    # 0x9-0xD
    # ------------------------------------------------------------------
    def _opcode_skip_ne_reg(self, ins: Instruction) -> None:
        if ins.n != 0:
            raise UnsupportedOpcode(ins.opcode, ins.address)
        self._skip_if(self.registers.v[ins.x] != self.registers.v[ins.y])

    def _opcode_load_index(self, ins: Instruction) -> None:
        self.registers.index = ins.nnn

    def _opcode_jump_offset(self, ins: Instruction) -> None:
        if self.quirks.jump is JumpBehaviour.BXNN:
            target = self.registers.v[ins.x] + ins.nn
        else:
            target = self.registers.v[0] + ins.nnn
        self.registers.program_counter = target & 0xFFFF

    def _opcode_random(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = self.random_byte() & ins.nn

    def _opcode_draw(self, ins: Instruction) -> None:
        index = self.registers.index
        if ins.n == 0:
            data = self.memory.read_block(index, SUPER_SPRITE_ROWS * 2)
            rows = [(data[i] << 8) | data[i + 1] for i in range(0, len(data), 2)]
            sprite_width = 16
        else:
            rows = list(self.memory.read_block(index, ins.n))
            sprite_width = 8
        v = self.registers.v
        x, y = v[ins.x], v[ins.y]
        v[FLAG] = 0
        collided = self.display.draw_sprite(x, y, rows, sprite_width, wrap=self.quirks.screen_wrap)
        v[FLAG] = 1 if collided else 0

    # ------------------------------------------------------------------
    # 0xE: keypad
    # ------------------------------------------------------------------
    def _opcode_key(self, ins: Instruction) -> None:
        self._lookup(self._key_table, ins.nn, ins)(ins)

    def _opcode_skip_key_pressed(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] in self._pressed)

    def _opcode_skip_key_not_pressed(self, ins: Instruction) -> None:
        self._skip_if(self.registers.v[ins.x] not in self._pressed)

    # ------------------------------------------------------------------
    # 0xF: timers, index register and memory transfers
    # ------------------------------------------------------------------
    def _opcode_misc(self, ins: Instruction) -> None:
        self._lookup(self._misc_table, ins.nn, ins)(ins)

    def _opcode_get_delay(self, ins: Instruction) -> None:
        self.registers.v[ins.x] = self.timers.delay

    def _opcode_wait_key(self, ins: Instruction) -> None:
        wait = self.key_wait
        if wait.resolved_key is None:
            if not wait.waiting:
                wait.begin(self._pressed)
            self.registers.program_counter = ins.address
            return
        self.registers.v[ins.x] = wait.complete()

    def _opcode_set_delay(self, ins: Instruction) -> None:
        self.timers.set_delay(self.registers.v[ins.x])

    def _opcode_set_sound(self, ins: Instruction) -> None:
        self.timers.set_sound(self.registers.v[ins.x])

    def _opcode_add_index(self, ins: Instruction) -> None:
        self.registers.index = (self.registers.index + self.registers.v[ins.x]) & 0xFFFF

    def _opcode_font(self, ins: Instruction) -> None:
        self.registers.index = Chip8Memory.font_address(self.registers.v[ins.x])

    def _opcode_hires_font(self, ins: Instruction) -> None:
        self.registers.index = Chip8Memory.hires_font_address(self.registers.v[ins.x])

    def _opcode_bcd(self, ins: Instruction) -> None:
        # Double dabble: digits accumulate in bits 8-19 as the value shifts out.
        bcd = self.registers.v[ins.x]
        for _ in range(8):
            if bcd & 0x00F00 >= 0x00500:
                bcd += 0x00300
            if bcd & 0x0F000 >= 0x05000:
                bcd += 0x03000
            if bcd & 0xF0000 >= 0x50000:
                bcd += 0x30000
            bcd <<= 1
        digits = [(bcd >> 16) & 0x0F, (bcd >> 12) & 0x0F, (bcd >> 8) & 0x0F]
        self.memory.write_block(self.registers.index, digits)

    def _opcode_store_registers(self, ins: Instruction) -> None:
        self.memory.write_block(self.registers.index, self.registers.v[: ins.x + 1])
        self._advance_index_after_transfer(ins.x)

    def _opcode_load_registers(self, ins: Instruction) -> None:
        values = self.memory.read_block(self.registers.index, ins.x + 1)
        self.registers.v[: ins.x + 1] = list(values)
        self._advance_index_after_transfer(ins.x)

    def _advance_index_after_transfer(self, x: int) -> None:
        mode = self.quirks.reg_save_load
        if mode is RegSaveLoad.INCREMENT_X:
            self.registers.index = (self.registers.index + x) & 0xFFFF
        elif mode is RegSaveLoad.INCREMENT_X_PLUS_ONE:
            self.registers.index = (self.registers.index + x + 1) & 0xFFFF


__all__ = [
    "CPURegisters",
    "CPUStatus",
    "Chip8CPU",
    "Instruction",
    "decode",
]
