"""Framebuffer conversion for the renderer and for headless output."""

import numpy as np
from typing import Tuple

import jax.numpy as jnp

Color = Tuple[int, int, int]

COLOR_SCHEMES = {
    "white": ((255, 255, 255), (0, 0, 0)),
    "classic": ((0, 255, 0), (0, 0, 0)),  # phosphor green
    "amber": ((255, 176, 0), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Color = (255, 255, 255),
    off_color: Color = (0, 0, 0),
) -> np.ndarray:
    """Convert the boolean framebuffer to an upscaled RGB image.

    Args:
        display: Boolean array of shape (64, 32) indexed [x, y]
        scale: Pixels per CHIP-8 pixel along each axis
        on_color: RGB colour of lit pixels
        off_color: RGB colour of unlit pixels

    Returns:
        uint8 array of shape (32 * scale, 64 * scale, 3), row-major
    """
    palette = np.array([off_color, on_color], dtype=np.uint8)
    # [x, y] -> [row, column]
    rgb_frame = palette[np.asarray(display, dtype=np.int32).T]

    if scale > 1:
        rgb_frame = rgb_frame.repeat(scale, axis=0).repeat(scale, axis=1)
    return rgb_frame


def create_color_scheme(scheme: str = "white") -> Tuple[Color, Color]:
    """Look up an (on_color, off_color) pair by name."""
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}"
        )
    return COLOR_SCHEMES[scheme]


def display_to_text(display: jnp.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the display as one line of text per screen row."""
    rows = np.asarray(display, dtype=np.bool_).T
    return "\n".join("".join(on if pixel else off for pixel in row) for row in rows)
