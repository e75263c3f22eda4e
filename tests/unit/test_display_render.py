"""Rendering and pixel-grid tests for Chip8Display."""

from __future__ import annotations

import pytest

from chip8emu.chip8.display import COLOR_OFF, COLOR_ON, Chip8Display


def test_default_resolution_is_low() -> None:
    display = Chip8Display()
    assert (display.width, display.height) == (64, 32)
    assert len(display.pixels) == 32
    assert all(len(row) == 64 for row in display.pixels)


def test_render_text_marks_lit_pixels() -> None:
    display = Chip8Display()
    display.draw_sprite(0, 0, [0b10100000])
    lines = display.render_text().splitlines()
    assert len(lines) == 32
    assert lines[0].startswith("#.#.")
    assert lines[1] == "." * 64


def test_render_pixels_uses_color_map() -> None:
    display = Chip8Display()
    display.draw_sprite(1, 0, [0x80])
    pixels = display.render_pixels()
    assert pixels[0][0] == COLOR_OFF
    assert pixels[0][1] == COLOR_ON


def test_snapshot_is_independent_of_grid() -> None:
    display = Chip8Display()
    snapshot = display.snapshot()
    snapshot[0][0] = True
    assert display.pixels[0][0] is False


def test_draw_marks_display_dirty() -> None:
    display = Chip8Display()
    display.dirty = False
    display.draw_sprite(0, 0, [0x00])
    assert display.dirty is True


def test_wide_sprite_clips_and_wraps_in_hires() -> None:
    display = Chip8Display()
    display.set_resolution(True)
    display.draw_sprite(120, 0, [0xFFFF], sprite_width=16)
    assert [col for col, lit in enumerate(display.pixels[0]) if lit] == list(range(120, 128))

    display.clear()
    display.draw_sprite(120, 0, [0xFFFF], sprite_width=16, wrap=True)
    assert [col for col, lit in enumerate(display.pixels[0]) if lit] == list(range(0, 8)) + list(range(120, 128))


def test_scroll_down_past_height_blanks_grid() -> None:
    display = Chip8Display()
    display.draw_sprite(0, 0, [0x80])
    display.scroll_down(40)
    assert not any(any(row) for row in display.pixels)
    assert len(display.pixels) == 32


def test_scroll_down_zero_rows_is_noop() -> None:
    display = Chip8Display()
    display.draw_sprite(0, 0, [0x80])
    display.scroll_down(0)
    assert display.pixels[0][0] is True


def test_render_pygame_surface_rejects_bad_scale() -> None:
    display = Chip8Display()
    with pytest.raises(ValueError):
        display.render_pygame_surface(scaling=0)
