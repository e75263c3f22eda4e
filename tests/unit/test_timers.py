from __future__ import annotations

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.timers import Chip8Timers


def test_timers_count_down_to_zero_and_stay() -> None:
    timers = Chip8Timers()
    timers.set_delay(2)
    timers.set_sound(1)
    assert timers.tick() is True
    assert (timers.delay, timers.sound) == (1, 0)
    assert timers.tick() is False
    assert (timers.delay, timers.sound) == (0, 0)
    assert timers.tick() is False
    assert (timers.delay, timers.sound) == (0, 0)


def test_timer_values_are_masked_to_a_byte() -> None:
    timers = Chip8Timers()
    timers.set_delay(0x1FF)
    timers.set_sound(0x100)
    assert timers.delay == 0xFF
    assert timers.sound == 0


def test_sounding_reflects_value_before_decrement() -> None:
    timers = Chip8Timers()
    timers.set_sound(3)
    assert [timers.tick() for _ in range(5)] == [True, True, True, False, False]


def test_delay_timer_readback_after_ticks() -> None:
    computer = Chip8Computer()
    computer.load_program(bytes([0x60, 0x05, 0xF0, 0x15, 0xF1, 0x07]))
    computer.execute(set())
    computer.execute(set())
    for _ in range(3):
        computer.tick_timers()
    computer.execute(set())
    assert computer.cpu_core.registers.v[1] == 2


def test_reset_clears_both_timers() -> None:
    timers = Chip8Timers(delay=9, sound=4)
    timers.reset()
    assert (timers.delay, timers.sound) == (0, 0)
