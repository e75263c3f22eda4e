"""CHIP-8 emulator pygame front-end."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.sound import Chip8Beeper
from chip8emu.cpu.quirks import load_quirks_file, write_quirks_template
from chip8emu.emulator.file import ProgramInfo, ProgramLoadError

BASE_CAPTION = "CHIP-8 Emulator"

# Host keyboard (QWERTY left block) to the 4x4 hexadecimal keypad:
#   1 2 3 4      1 2 3 C
#   Q W E R  ->  4 5 6 D
#   A S D F      7 8 9 E
#   Z X C V      A 0 B F
KEY_MAP: Dict[int, int] = {
    ord("1"): 0x1,
    ord("2"): 0x2,
    ord("3"): 0x3,
    ord("4"): 0xC,
    ord("q"): 0x4,
    ord("w"): 0x5,
    ord("e"): 0x6,
    ord("r"): 0xD,
    ord("a"): 0x7,
    ord("s"): 0x8,
    ord("d"): 0x9,
    ord("f"): 0xE,
    ord("z"): 0xA,
    ord("x"): 0x0,
    ord("c"): 0xB,
    ord("v"): 0xF,
}

KEY_ESCAPE = 27
KEY_PAUSE = ord("p")
KEY_RESTART = 1073741886  # pygame.K_F5


def _handle_key_event(computer: Chip8Computer, key: int, pressed: bool) -> bool:
    """Forward a host key edge to the keypad; False when the key is unmapped."""

    mapping = KEY_MAP.get(key)
    if mapping is None:
        return False
    if pressed:
        computer.press_key(mapping)
    else:
        computer.release_key(mapping)
    return True


def _build_caption(info: Optional[ProgramInfo], status: str = "") -> str:
    caption = BASE_CAPTION if info is None else f"{info.name} - {BASE_CAPTION}"
    if status:
        caption = f"{caption} [{status}]"
    return caption


def _pygame_loop(computer: Chip8Computer, scale: int, fps: int) -> None:
    import pygame  # type: ignore

    pygame.init()
    display = computer.hardware.display
    screen = pygame.display.set_mode((display.width * scale, display.height * scale))
    pygame.display.set_caption(_build_caption(computer.program_info))
    clock = pygame.time.Clock()
    last_size = (display.width, display.height)

    computer.power_on()
    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == KEY_ESCAPE:
                        running = False
                    elif event.key == KEY_PAUSE:
                        if computer.get_running_status() == computer.STATUS_PAUSED:
                            computer.resume()
                            pygame.display.set_caption(_build_caption(computer.program_info))
                        else:
                            computer.pause()
                            pygame.display.set_caption(_build_caption(computer.program_info, "paused"))
                    elif event.key == KEY_RESTART:
                        computer.reset()
                        computer.power_on()
                        pygame.display.set_caption(_build_caption(computer.program_info))
                    else:
                        _handle_key_event(computer, event.key, True)
                elif event.type == pygame.KEYUP:
                    _handle_key_event(computer, event.key, False)

            result = computer.run_frame()
            if result.fault is not None:
                pygame.display.set_caption(_build_caption(computer.program_info, f"stopped: {result.fault}"))

            display = computer.hardware.display
            if (display.width, display.height) != last_size:
                last_size = (display.width, display.height)
                # Keep the window size; a high-resolution grid gets half the scale.
                factor = scale if not display.hires else max(1, scale // 2)
                screen = pygame.display.set_mode((display.width * factor, display.height * factor))

            if display.dirty:
                factor = screen.get_width() // display.width
                screen.blit(display.render_pygame_surface(scaling=max(1, factor)), (0, 0))
                pygame.display.flip()
                display.dirty = False
            clock.tick(fps)
    finally:
        computer.power_off()
        pygame.quit()


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CHIP-8 / SUPER-CHIP emulator")
    parser.add_argument(
        "--write-quirks-template",
        metavar="PATH",
        help="Write a JSON quirk settings template to the given path and exit",
    )
    parser.add_argument("--rom", help="ROM image to run. Defaults to $CHIP8EMU_ROM if omitted")
    parser.add_argument("--scale", type=int, default=10, help="Integer scaling factor for the 64x32 display (default: 10)")
    parser.add_argument("--fps", type=int, default=60, help="Frames per second; timers tick once per frame")
    parser.add_argument(
        "--cycles",
        type=int,
        default=Chip8Computer.DEFAULT_CYCLES_PER_FRAME,
        help="Instructions executed per frame (default: 12)",
    )
    parser.add_argument("--quirks", help="Path to JSON file with quirk settings")
    parser.add_argument("--beep", help="Sound sample (WAV/OGG) looped while the sound timer runs")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.write_quirks_template:
        write_quirks_template(Path(args.write_quirks_template))
        return

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")

    if args.scale <= 0:
        raise SystemExit("scale must be positive")
    if args.fps <= 0:
        raise SystemExit("fps must be positive")
    if args.cycles <= 0:
        raise SystemExit("cycles must be positive")

    beeper = Chip8Beeper(
        sample_path=Path(args.beep) if args.beep else None,
        enable_audio=args.beep is not None,
    )
    try:
        computer = Chip8Computer(args.rom, cycles_per_frame=args.cycles, beeper=beeper)
    except ProgramLoadError as exc:
        raise SystemExit(f"Failed to load ROM: {exc}")
    if computer.program_info is None:
        raise SystemExit(f"no ROM given (use --rom or set {Chip8Computer.ENV_ROM_PATH})")
    if args.quirks:
        computer.quirks = load_quirks_file(args.quirks)

    try:
        _pygame_loop(computer, args.scale, args.fps)
    except RuntimeError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()
