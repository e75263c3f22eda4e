"""Beeper driven by the sound timer, with optional pygame sample playback."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass
class Chip8Beeper:
    """Tone on/off sink.

    Playback loops a user supplied sample through the pygame mixer; without a
    sample (or without pygame) the beeper only records the line history.
    """

    history: List[Tuple[str, Tuple[object, ...]]] = field(default_factory=list)
    sample_path: Optional[Path] = None
    volume: float = 0.3
    enable_audio: bool = False

    def __post_init__(self) -> None:
        self._audio_initialized: bool = False
        self._channel = None
        self._sound = None
        self._status: int = 0

    @property
    def playing(self) -> bool:
        return self._status == 1

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def update(self, sounding: bool) -> None:
        if sounding and not self.playing:
            self.set_line_on()
        elif not sounding and self.playing:
            self.set_line_off()

    def set_line_on(self) -> None:
        self.history.append(("set_line_on", tuple()))
        self._status = 1
        if not self._ensure_mixer():
            return
        self._channel.set_volume(self.volume)
        self._channel.play(self._sound, loops=-1)

    def set_line_off(self) -> None:
        self.history.append(("set_line_off", tuple()))
        self._status = 0
        if self._audio_initialized and self._channel is not None:
            self._channel.stop()

    # ------------------------------------------------------------------
    # Audio control helpers
    # ------------------------------------------------------------------

    def _ensure_mixer(self) -> bool:
        if not self.enable_audio or self.sample_path is None:
            return False
        if self._audio_initialized:
            return True
        try:
            import pygame  # type: ignore

            if not pygame.mixer.get_init():
                pygame.mixer.init()
            self._sound = pygame.mixer.Sound(str(self.sample_path))
            self._channel = pygame.mixer.Channel(0)
            self._audio_initialized = True
        except Exception:
            self.enable_audio = False
            self._channel = None
            self._sound = None
            self._audio_initialized = False
        return self._audio_initialized
