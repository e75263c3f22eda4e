"""CHIP-8 system wiring and the host-facing control surface."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import AbstractSet, Callable, List, Optional, Set

from chip8emu.chip8.hardware import Chip8Hardware
from chip8emu.chip8.keypad import KEY_COUNT
from chip8emu.chip8.sound import Chip8Beeper
from chip8emu.cpu.cpu import Chip8CPU, Instruction
from chip8emu.cpu.quirks import Quirks
from chip8emu.emulator.file import ProgramInfo, load_rom
from chip8emu.faults import CPUFault
from chip8emu.memory import Chip8Memory

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Outcome of one timer tick plus one instruction batch."""

    executed: int = 0
    sounding: bool = False
    fault: Optional[CPUFault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


class Chip8Computer:
    """Owns the hardware, the CPU and the active quirks."""

    STATUS_RUNNING = 0
    STATUS_PAUSED = 1
    STATUS_STOPPED = 2

    DEFAULT_CYCLES_PER_FRAME = 12
    ENV_ROM_PATH = "CHIP8EMU_ROM"

    def __init__(
        self,
        rom_path: str | os.PathLike[str] | None = None,
        *,
        quirks: Optional[Quirks] = None,
        cycles_per_frame: int = DEFAULT_CYCLES_PER_FRAME,
        beeper: Optional[Chip8Beeper] = None,
        random_byte: Optional[Callable[[], int]] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.hardware = Chip8Hardware(beeper=beeper if beeper is not None else Chip8Beeper())
        self._quirks = quirks if quirks is not None else Quirks()
        self.cycles_per_frame = cycles_per_frame
        self.cpu_core = Chip8CPU(self, random_byte=random_byte, seed=seed)
        self.program_info: Optional[ProgramInfo] = None
        self._program: bytes = b""
        self._running_status: int = self.STATUS_STOPPED

        self.rom_path = self._resolve_rom_path(rom_path)
        if self.rom_path is not None:
            self.load_rom_file(self.rom_path)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def quirks(self) -> Quirks:
        return self._quirks

    @quirks.setter
    def quirks(self, value: Quirks) -> None:
        if not isinstance(value, Quirks):
            raise TypeError("quirks must be a Quirks instance")
        self._quirks = value

    def _resolve_rom_path(self, rom_path: str | os.PathLike[str] | None) -> Optional[Path]:
        if rom_path is not None:
            return Path(rom_path)
        env_path = os.environ.get(self.ENV_ROM_PATH)
        if env_path:
            return Path(env_path)
        return None

    # ------------------------------------------------------------------
    # Program loading
    # ------------------------------------------------------------------
    def load_program(self, program: bytes) -> None:
        """Start the machine afresh with ``program`` at 0x200.

        Display contents and quirks survive; memory, registers, stack,
        timers and any pending key wait do not.
        """

        data = bytes(program)
        memory = Chip8Memory()
        memory.load_program(data)
        self.hardware.memory = memory
        self.hardware.timers.reset()
        self.cpu_core.reset()
        self._program = data
        logger.debug("loaded %d byte program", len(data))

    def load_rom_file(self, path: str | os.PathLike[str]) -> ProgramInfo:
        info = load_rom(path)
        self.load_program(info.data)
        self.program_info = info
        return info

    def reset(self, *, clear_display: bool = True) -> None:
        """Reload the current program from scratch, keeping the quirks."""

        self.load_program(self._program)
        if clear_display:
            self.hardware.display.set_resolution(False)
        self.hardware.beeper.update(False)
        logger.debug("machine reset")

    # ------------------------------------------------------------------
    # Core boundary
    # ------------------------------------------------------------------
    def tick_timers(self) -> bool:
        return self.hardware.timers.tick()

    def execute(self, pressed_keys: Optional[AbstractSet[int]] = None) -> Instruction:
        keys = self.pressed_keys() if pressed_keys is None else pressed_keys
        return self.cpu_core.execute(keys)

    def notify_key_released(self, key: int) -> None:
        if not (0 <= key < KEY_COUNT):
            raise ValueError("key out of range")
        self.cpu_core.key_released(key)

    def pressed_keys(self) -> Set[int]:
        return self.hardware.keypad.pressed_keys()

    def display(self) -> List[List[bool]]:
        return self.hardware.display.snapshot()

    @property
    def width(self) -> int:
        return self.hardware.display.width

    @property
    def height(self) -> int:
        return self.hardware.display.height

    # ------------------------------------------------------------------
    # Host conveniences
    # ------------------------------------------------------------------
    def press_key(self, key: int) -> None:
        self.hardware.keypad.press(key)

    def release_key(self, key: int) -> None:
        self.hardware.keypad.release(key)
        self.notify_key_released(key)

    def run_frame(self, cycles: Optional[int] = None) -> FrameResult:
        """Tick the timers once, then execute one batch of instructions.

        A fault ends the batch and stops the machine; it is reported in the
        result rather than raised.
        """

        if self._running_status != self.STATUS_RUNNING:
            return FrameResult()
        sounding = self.tick_timers()
        self.hardware.beeper.update(sounding)
        budget = self.cycles_per_frame if cycles is None else cycles
        keys = self.pressed_keys()
        executed = 0
        for _ in range(budget):
            try:
                self.cpu_core.execute(keys)
            except CPUFault as exc:
                logger.error("execution stopped: %s", exc)
                self._running_status = self.STATUS_STOPPED
                self.hardware.beeper.update(False)
                return FrameResult(executed, sounding, exc)
            executed += 1
        return FrameResult(executed, sounding)

    # ------------------------------------------------------------------
    # Control lifecycle
    # ------------------------------------------------------------------
    def power_on(self) -> None:
        self._running_status = self.STATUS_RUNNING

    def power_off(self) -> None:
        self._running_status = self.STATUS_STOPPED
        self.hardware.beeper.update(False)

    def pause(self) -> None:
        if self._running_status != self.STATUS_RUNNING:
            return
        self._running_status = self.STATUS_PAUSED
        self.hardware.beeper.update(False)

    def resume(self) -> None:
        if self._running_status != self.STATUS_PAUSED:
            return
        self._running_status = self.STATUS_RUNNING

    def get_running_status(self) -> int:
        return self._running_status

    @property
    def memory(self) -> Chip8Memory:
        return self.hardware.memory
