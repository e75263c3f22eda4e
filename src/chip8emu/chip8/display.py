"""CHIP-8 / SUPER-CHIP display surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

LORES_WIDTH = 64
LORES_HEIGHT = 32
HIRES_WIDTH = LORES_WIDTH * 2
HIRES_HEIGHT = LORES_HEIGHT * 2

COLOR_OFF = 0x0F0F0F
COLOR_ON = 0xFFFFFF


def _blank(width: int, height: int) -> List[List[bool]]:
    return [[False] * width for _ in range(height)]


@dataclass
class Chip8Display:
    """Boolean pixel grid indexed as ``pixels[row][col]``."""

    hires: bool = False
    color_off: int = COLOR_OFF
    color_on: int = COLOR_ON
    pixels: List[List[bool]] = field(default_factory=lambda: _blank(LORES_WIDTH, LORES_HEIGHT))
    dirty: bool = True

    @property
    def width(self) -> int:
        return HIRES_WIDTH if self.hires else LORES_WIDTH

    @property
    def height(self) -> int:
        return HIRES_HEIGHT if self.hires else LORES_HEIGHT

    def set_resolution(self, hires: bool) -> None:
        """Switch resolution mode; the grid is always reallocated blank."""

        self.hires = hires
        self.pixels = _blank(self.width, self.height)
        self.dirty = True

    def clear(self) -> None:
        self.pixels = _blank(self.width, self.height)
        self.dirty = True

    def snapshot(self) -> List[List[bool]]:
        return [list(row) for row in self.pixels]

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------
    def scroll_down(self, rows: int) -> None:
        if rows <= 0:
            return
        rows = min(rows, self.height)
        kept = self.pixels[: self.height - rows]
        self.pixels = _blank(self.width, rows) + kept
        self.dirty = True

    def scroll_right(self, columns: int = 4) -> None:
        columns = min(columns, self.width)
        self.pixels = [[False] * columns + row[: self.width - columns] for row in self.pixels]
        self.dirty = True

    def scroll_left(self, columns: int = 4) -> None:
        columns = min(columns, self.width)
        self.pixels = [row[columns:] + [False] * columns for row in self.pixels]
        self.dirty = True

    # ------------------------------------------------------------------
    # Sprites
    # ------------------------------------------------------------------
    def draw_sprite(self, x: int, y: int, rows: Sequence[int], sprite_width: int = 8, *, wrap: bool = False) -> bool:
        """XOR a sprite onto the grid and report whether any lit pixel was erased.

        ``rows`` holds one integer per sprite line, ``sprite_width`` bits wide,
        most significant bit leftmost. Pixels past the right or bottom edge wrap
        around when ``wrap`` is set and are clipped otherwise; clipping at the
        bottom edge stops the draw.
        """

        width = self.width
        height = self.height
        origin_col = x % width
        origin_row = y % height
        collision = False

        for offset, bits in enumerate(rows):
            target_row = origin_row + offset
            if target_row >= height:
                if not wrap:
                    break
                target_row %= height
            line = self.pixels[target_row]
            for bit in range(sprite_width):
                if not (bits >> (sprite_width - 1 - bit)) & 0x01:
                    continue
                target_col = origin_col + bit
                if target_col >= width:
                    if not wrap:
                        continue
                    target_col %= width
                if line[target_col]:
                    collision = True
                line[target_col] = not line[target_col]
        self.dirty = True
        return collision

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_pixels(self) -> List[List[int]]:
        return [[self.color_on if lit else self.color_off for lit in row] for row in self.pixels]

    def render_text(self, on: str = "#", off: str = ".") -> str:
        return "\n".join("".join(on if lit else off for lit in row) for row in self.pixels)

    def render_pygame_surface(self, scaling: int = 1):
        """Render the display into a pygame Surface.

        Parameters
        ----------
        scaling:
            Integer scale factor applied to both axes.

        Returns
        -------
        pygame.Surface
            RGB surface representing the current screen.

        Raises
        ------
        RuntimeError
            If pygame is not available.
        """

        if scaling <= 0:
            raise ValueError("scaling factor must be positive")

        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for render_pygame_surface") from exc

        surface = pygame.Surface((self.width * scaling, self.height * scaling))
        surface.fill(self.color_off)
        surface.lock()
        try:
            for y, row in enumerate(self.pixels):
                for x, lit in enumerate(row):
                    if lit:
                        surface.fill(self.color_on, (x * scaling, y * scaling, scaling, scaling))
        finally:
            surface.unlock()
        return surface
