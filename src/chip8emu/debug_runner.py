"""Headless runner for CHIP-8 ROMs: run a number of frames, then dump state."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

from chip8emu.chip8.computer import Chip8Computer, FrameResult
from chip8emu.cpu.quirks import load_quirks_file
from chip8emu.emulator.file import ProgramLoadError
from chip8emu.memory import MEMORY_SIZE


DEFAULT_FRAMES = 60
ADDRESS_MASK = MEMORY_SIZE - 1

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_FAULT = 4


@dataclass(frozen=True)
class DumpRange:
    """Inclusive memory range used for dumping."""

    start: int
    end: int

    def iter_addresses(self) -> Iterable[int]:
        for address in range(self.start, self.end + 1):
            yield address


def _parse_hex(value: str, *, limit: int = ADDRESS_MASK) -> int:
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text:
        raise ValueError("empty hexadecimal value")
    result = int(text, 16)
    if not (0 <= result <= limit):
        raise ValueError("hex value out of range")
    return result


def _parse_range(spec: str) -> DumpRange:
    start_str, sep, end_str = spec.partition(":")
    if not sep:
        raise ValueError("range specification must contain ':'")
    start = _parse_hex(start_str)
    end = _parse_hex(end_str)
    if end < start:
        raise ValueError("range end must be >= start")
    return DumpRange(start, end)


def _merge_ranges(ranges: Sequence[DumpRange]) -> List[DumpRange]:
    if not ranges:
        return [DumpRange(0x000, ADDRESS_MASK)]
    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    merged: List[DumpRange] = []
    for current in ordered:
        if not merged:
            merged.append(current)
            continue
        last = merged[-1]
        if current.start <= last.end + 1:
            merged[-1] = DumpRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def _format_hex_dump(memory, dump_ranges: Sequence[DumpRange]) -> str:
    lines: List[str] = []
    header = "ADDR " + " ".join(f"+{offset:X}" for offset in range(16))
    for index, dump_range in enumerate(dump_ranges):
        if index:
            lines.append("")
        lines.append(header)
        start_line = dump_range.start & ~0x0F
        end_line = dump_range.end | 0x0F
        for base in range(start_line, end_line + 1, 16):
            row = [f"{base:04X}"]
            for offset in range(16):
                row.append(f"{memory.load8(base + offset):02X}")
            lines.append(" ".join(row))
    return "\n".join(lines)


def _format_registers(computer: Chip8Computer) -> str:
    cpu = computer.cpu_core
    regs = cpu.registers
    values = " ".join(f"V{index:X}={value:02X}" for index, value in enumerate(regs.v))
    timers = computer.hardware.timers
    stack = " ".join(f"{address:03X}" for address in cpu.stack) or "-"
    return "\n".join(
        [
            f"PC={regs.program_counter:03X} I={regs.index:03X} DT={timers.delay:02X} ST={timers.sound:02X}",
            values,
            f"STACK: {stack}",
        ]
    )


def _write_dump(memory, dump_ranges: Sequence[DumpRange], *, target: Path | None, fmt: str) -> None:
    ranges = _merge_ranges(dump_ranges)
    if fmt == "bin":
        data = bytearray()
        for dump_range in ranges:
            for address in dump_range.iter_addresses():
                data.append(memory.load8(address))
        if target is None:
            sys.stdout.buffer.write(bytes(data))
            return
        target.write_bytes(bytes(data))
        return

    text = _format_hex_dump(memory, ranges)
    if target is None:
        print(text)
    else:
        target.write_text(text + "\n")


def _run_frames(computer: Chip8Computer, frames: int) -> FrameResult:
    last = FrameResult()
    for _ in range(frames):
        last = computer.run_frame()
        if not last.ok:
            break
    return last


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8emu-debug-runner",
        description="Headless CHIP-8 runner that executes a ROM and dumps machine state.",
    )
    parser.add_argument("--rom", type=str, required=True, help="CHIP-8 / SUPER-CHIP ROM image")
    parser.add_argument("--frames", type=int, default=DEFAULT_FRAMES, help="Number of frames to run")
    parser.add_argument(
        "--cycles",
        type=int,
        default=Chip8Computer.DEFAULT_CYCLES_PER_FRAME,
        help="Instructions executed per frame",
    )
    parser.add_argument("--quirks", type=str, default=None, help="JSON file with quirk settings")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the CXNN random source")
    parser.add_argument(
        "--hold",
        action="append",
        default=[],
        help="Hex key (0-F) held down for the whole run (repeatable)",
    )
    parser.add_argument("--dump", type=str, default=None, help="File path for memory dump (defaults to stdout)")
    parser.add_argument(
        "--dump-range",
        action="append",
        default=[],
        help="Memory range to dump in START:END hex form (inclusive). Repeat to add multiple ranges.",
    )
    parser.add_argument(
        "--dump-format",
        choices=("hex", "bin", "none"),
        default="hex",
        help="Dump format (hex table, raw binary, or no memory dump)",
    )
    parser.add_argument("--screen", action="store_true", help="Print the display as text after the run")
    parser.add_argument("--registers", action="store_true", help="Print registers, timers and stack after the run")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")

    if args.frames < 0:
        parser.error("frames must not be negative")
    if args.cycles <= 0:
        parser.error("cycles must be positive")

    held: List[int] = []
    for spec in args.hold:
        try:
            held.append(_parse_hex(spec, limit=0xF))
        except ValueError as exc:
            parser.error(f"invalid key '{spec}': {exc}")

    dump_ranges: List[DumpRange] = []
    for spec in args.dump_range:
        try:
            dump_ranges.append(_parse_range(spec))
        except ValueError as exc:
            parser.error(f"invalid dump range '{spec}': {exc}")

    computer = Chip8Computer(cycles_per_frame=args.cycles, seed=args.seed)
    if args.quirks is not None:
        computer.quirks = load_quirks_file(args.quirks)

    try:
        computer.load_rom_file(args.rom)
    except ProgramLoadError as exc:
        print(f"Failed to load ROM: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    for key in held:
        computer.press_key(key)

    computer.power_on()
    result = _run_frames(computer, args.frames)

    if args.dump_format != "none":
        dump_target = Path(args.dump) if args.dump is not None else None
        _write_dump(computer.memory, dump_ranges, target=dump_target, fmt=args.dump_format)
    if args.registers:
        print(_format_registers(computer))
    if args.screen:
        print(computer.hardware.display.render_text())

    if result.fault is not None:
        print(f"Execution stopped: {result.fault}", file=sys.stderr)
        return EXIT_FAULT
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
