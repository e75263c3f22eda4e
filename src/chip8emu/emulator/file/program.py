"""ROM image loader for CHIP-8 programs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from chip8emu.memory import MAX_PROGRAM_SIZE


class ProgramLoadError(RuntimeError):
    """Raised when a ROM image cannot be read."""


@dataclass
class ProgramInfo:
    data: bytes
    name: str = ""
    path: Optional[Path] = None

    @property
    def size(self) -> int:
        return len(self.data)


def load_rom(path: str | Path) -> ProgramInfo:
    """Read a raw CHIP-8 / SUPER-CHIP ROM; the bytes are loaded verbatim at 0x200."""

    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise ProgramLoadError(f"cannot read ROM {file_path}: {exc}") from exc
    if not data:
        raise ProgramLoadError(f"ROM {file_path} is empty")
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramLoadError(
            f"ROM {file_path} is {len(data)} bytes; at most {MAX_PROGRAM_SIZE} fit above 0x200"
        )
    return ProgramInfo(data=data, name=file_path.stem.upper(), path=file_path)
