"""Beeper tests."""

from __future__ import annotations

import sys

import pytest

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.sound import Chip8Beeper


class DummySound:
    def __init__(self, path):
        self.path = path


class DummyChannel:
    def __init__(self, mixer):
        self.mixer = mixer

    def play(self, sound, loops=0):
        self.mixer.last_sound = sound
        self.mixer.last_loops = loops

    def set_volume(self, volume):
        self.mixer.last_volume = volume

    def stop(self):
        self.mixer.stopped = True


class DummyMixer:
    def __init__(self):
        self.initialized = False
        self.last_sound = None
        self.last_volume = None
        self.last_loops = None
        self.stopped = False

    def init(self, **kwargs):
        self.initialized = True

    def get_init(self):
        return self.initialized

    def Channel(self, index):
        return DummyChannel(self)

    def Sound(self, path):
        return DummySound(path)


class DummyPygame:
    def __init__(self):
        self.mixer = DummyMixer()


class BrokenMixer(DummyMixer):
    def Sound(self, path):
        raise OSError("cannot open sample")


def test_beeper_history_only():
    beeper = Chip8Beeper()
    beeper.update(True)
    beeper.update(True)
    beeper.update(False)
    beeper.update(False)
    assert [entry[0] for entry in beeper.history] == ["set_line_on", "set_line_off"]
    assert beeper.playing is False


def test_beeper_loops_sample(monkeypatch, tmp_path):
    dummy = DummyPygame()
    monkeypatch.setitem(sys.modules, "pygame", dummy)
    sample = tmp_path / "beep.wav"

    beeper = Chip8Beeper(sample_path=sample, enable_audio=True)
    beeper.update(True)
    assert dummy.mixer.initialized is True
    assert dummy.mixer.last_sound.path == str(sample)
    assert dummy.mixer.last_loops == -1
    assert dummy.mixer.last_volume == pytest.approx(beeper.volume)
    beeper.update(False)
    assert dummy.mixer.stopped is True


def test_beeper_without_sample_stays_silent(monkeypatch):
    dummy = DummyPygame()
    monkeypatch.setitem(sys.modules, "pygame", dummy)

    beeper = Chip8Beeper(enable_audio=True)
    beeper.update(True)
    assert dummy.mixer.last_sound is None
    assert beeper.playing is True


def test_beeper_disables_audio_when_mixer_fails(monkeypatch, tmp_path):
    dummy = DummyPygame()
    dummy.mixer = BrokenMixer()
    monkeypatch.setitem(sys.modules, "pygame", dummy)

    beeper = Chip8Beeper(sample_path=tmp_path / "missing.wav", enable_audio=True)
    beeper.update(True)
    assert beeper.enable_audio is False
    assert [entry[0] for entry in beeper.history] == ["set_line_on"]


def test_sound_timer_drives_beeper_per_frame():
    computer = Chip8Computer()
    computer.load_program(bytes([0x60, 0x02, 0xF0, 0x18, 0x12, 0x04]))
    computer.power_on()
    history = computer.hardware.beeper.history

    computer.run_frame(cycles=2)
    assert history == []
    computer.run_frame(cycles=1)
    assert [entry[0] for entry in history] == ["set_line_on"]
    computer.run_frame(cycles=1)
    assert [entry[0] for entry in history] == ["set_line_on"]
    computer.run_frame(cycles=1)
    assert [entry[0] for entry in history] == ["set_line_on", "set_line_off"]


def test_pause_silences_beeper():
    computer = Chip8Computer()
    computer.load_program(bytes([0x60, 0x09, 0xF0, 0x18, 0x12, 0x04]))
    computer.power_on()
    computer.run_frame(cycles=2)
    computer.run_frame(cycles=1)
    assert computer.hardware.beeper.playing is True
    computer.pause()
    assert computer.hardware.beeper.playing is False
