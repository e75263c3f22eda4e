"""Hexadecimal keypad and the FX0A key-wait state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

KEY_COUNT = 16


def _check_key(key: int) -> int:
    if not (0 <= key < KEY_COUNT):
        raise ValueError("key out of range")
    return key


@dataclass
class Chip8Keypad:
    """Set of keys the host currently reports as held."""

    _held: Set[int] = field(default_factory=set)

    def press(self, key: int) -> None:
        self._held.add(_check_key(key))

    def release(self, key: int) -> None:
        self._held.discard(_check_key(key))

    def set_pressed(self, keys: Iterable[int]) -> None:
        self._held = {_check_key(key) for key in keys}

    def pressed_keys(self) -> Set[int]:
        return set(self._held)

    def is_pressed(self, key: int) -> bool:
        return key in self._held

    def clear(self) -> None:
        self._held.clear()


@dataclass
class KeyWaitState:
    """Blocked-on-key state for FX0A.

    Keys already held when the wait starts are ignored; releasing one of them
    only takes it off the ignore list. The first release of any other key
    resolves the wait.
    """

    waiting: bool = False
    resolved_key: Optional[int] = None
    ignore_keys: Set[int] = field(default_factory=set)

    def begin(self, held: Iterable[int]) -> None:
        self.waiting = True
        self.resolved_key = None
        self.ignore_keys = set(held)

    def key_released(self, key: int) -> None:
        if not self.waiting:
            return
        if key in self.ignore_keys:
            self.ignore_keys.discard(key)
            return
        if self.resolved_key is None:
            self.resolved_key = key

    def complete(self) -> int:
        if self.resolved_key is None:
            raise RuntimeError("key wait has not been resolved")
        key = self.resolved_key
        self.waiting = False
        self.resolved_key = None
        self.ignore_keys = set()
        return key


__all__ = ["Chip8Keypad", "KEY_COUNT", "KeyWaitState"]
