"""Behaviour switches for historically divergent CHIP-8 interpreters."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
import json
from pathlib import Path
from typing import Dict, Mapping, Optional


class ShiftingReg(str, Enum):
    """Register that 8XY6/8XYE read their source value from."""

    VX = "vx"
    VY = "vy"


class RegSaveLoad(str, Enum):
    """How FX55/FX65 leave the address register afterwards."""

    UNCHANGED = "unchanged"
    INCREMENT_X = "x"
    INCREMENT_X_PLUS_ONE = "x_plus_one"


class JumpBehaviour(str, Enum):
    BNNN = "bnnn"
    BXNN = "bxnn"


class ScrollStyle(str, Enum):
    # Reserved for scroll opcode variants; not consulted by the interpreter.
    MODERN = "modern"
    LEGACY = "legacy"


@dataclass
class Quirks:
    """Active quirk selection, read by the CPU on every relevant opcode."""

    vf_reset: bool = False
    shifting: ShiftingReg = ShiftingReg.VX
    reg_save_load: RegSaveLoad = RegSaveLoad.UNCHANGED
    jump: JumpBehaviour = JumpBehaviour.BNNN
    screen_wrap: bool = False
    scrolling: ScrollStyle = ScrollStyle.MODERN

    def copy(self) -> "Quirks":
        return replace(self)

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            out[item.name] = value.value if isinstance(value, Enum) else bool(value)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, fallback: Optional["Quirks"] = None) -> "Quirks":
        """Build quirks from a mapping; invalid or missing entries keep the fallback value."""

        base = fallback.copy() if fallback is not None else cls()
        for name, converter in _CONVERTERS.items():
            if name not in data:
                continue
            try:
                setattr(base, name, converter(data[name]))
            except ValueError:
                continue
        return base


def _to_bool(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in ("on", "off", "true", "false"):
        return raw.strip().lower() in ("on", "true")
    raise ValueError(f"not a boolean quirk value: {raw!r}")


def _enum_converter(enum_type):
    def convert(raw: object):
        if isinstance(raw, enum_type):
            return raw
        if not isinstance(raw, str):
            raise ValueError(f"not a {enum_type.__name__} value: {raw!r}")
        return enum_type(raw.strip().lower())

    return convert


_CONVERTERS = {
    "vf_reset": _to_bool,
    "shifting": _enum_converter(ShiftingReg),
    "reg_save_load": _enum_converter(RegSaveLoad),
    "jump": _enum_converter(JumpBehaviour),
    "screen_wrap": _to_bool,
    "scrolling": _enum_converter(ScrollStyle),
}


def load_quirks_file(path: str | Path, *, fallback: Optional[Quirks] = None) -> Quirks:
    base = fallback.copy() if fallback is not None else Quirks()
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError("quirks file must contain a JSON object")
    except (OSError, ValueError, TypeError):
        return base
    return Quirks.from_dict(data, fallback=base)


def write_quirks_template(path: str | Path, quirks: Optional[Quirks] = None) -> None:
    template = (quirks or Quirks()).to_dict()
    Path(path).write_text(json.dumps(template, indent=2), encoding="utf-8")


__all__ = [
    "JumpBehaviour",
    "Quirks",
    "RegSaveLoad",
    "ScrollStyle",
    "ShiftingReg",
    "load_quirks_file",
    "write_quirks_template",
]
