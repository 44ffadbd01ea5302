# body_generator/color_maps.py

"""
================================================================================
PALETTE TABLES AND QUANTIZATION
================================================================================
This module contains the per-theme colour palettes and the functions that map
scalar noise/height values in [0, 1] onto them.

It is designed to be a pure, stateless utility with no dependencies on Pygame,
allowing it to be used by both the live viewer and the offline baker.

Quantization is deliberately a hard step function: neighbouring palette
entries are never blended, which gives bodies their banded look.
================================================================================
"""
import math

import numpy as np

from . import config as DEFAULTS

# --- Terran Palettes (ordered low -> high) ---
PALETTE_TEMPERATE = (
    (18, 42, 98),     # Deep ocean
    (28, 78, 150),    # Ocean
    (46, 128, 190),   # Shallows
    (214, 196, 140),  # Beach
    (62, 138, 62),    # Grassland
    (34, 96, 44),     # Forest
    (120, 112, 100),  # Mountain
    (236, 240, 245),  # Snow
)
PALETTE_ARID = (
    (96, 52, 30),
    (140, 80, 42),
    (182, 116, 64),
    (210, 160, 98),
    (228, 196, 140),
    (244, 224, 180),
)
PALETTE_OCEANIC = (
    (10, 30, 80),
    (16, 52, 120),
    (24, 84, 160),
    (40, 120, 196),
    (72, 160, 210),
    (200, 196, 150),
    (70, 140, 80),
)
PALETTE_FROZEN = (
    (60, 90, 130),
    (110, 150, 190),
    (170, 200, 225),
    (210, 228, 240),
    (240, 246, 252),
)
PALETTE_LAVA = (
    (24, 12, 10),     # Cooled crust
    (48, 24, 18),
    (80, 36, 22),
    (150, 50, 20),
    (220, 90, 30),
    (255, 170, 60),
    (255, 230, 140),  # Molten
)

# --- Gaseous Palettes ---
PALETTE_JOVIAN = (
    (120, 80, 50),
    (168, 122, 84),
    (200, 160, 112),
    (226, 200, 160),
    (240, 226, 200),
    (186, 110, 70),
)
PALETTE_NEPTUNIAN = (
    (20, 40, 110),
    (36, 72, 160),
    (60, 110, 200),
    (96, 150, 225),
    (150, 196, 240),
)
PALETTE_TOXIC = (
    (70, 80, 20),
    (110, 120, 30),
    (150, 160, 50),
    (190, 196, 90),
    (220, 220, 140),
)
PALETTE_CRIMSON = (
    (70, 14, 20),
    (120, 28, 30),
    (170, 52, 40),
    (210, 96, 66),
    (236, 150, 110),
)

# --- Moon Palettes ---
PALETTE_MOON_ROCKY = (
    (60, 60, 62),
    (88, 88, 90),
    (116, 114, 112),
    (146, 144, 140),
    (178, 176, 170),
    (206, 204, 198),
)
PALETTE_MOON_ICY = (
    (120, 140, 160),
    (156, 178, 196),
    (190, 208, 222),
    (220, 232, 240),
    (244, 248, 252),
)
PALETTE_MOON_VOLCANIC = (
    (30, 26, 24),
    (58, 48, 40),
    (92, 70, 50),
    (140, 96, 56),
    (220, 140, 50),
    (255, 210, 90),
)
PALETTE_MOON_DUSTY = (
    (90, 70, 52),
    (124, 98, 72),
    (158, 128, 96),
    (190, 160, 124),
    (216, 192, 160),
)

# --- Asteroid Palettes ---
PALETTE_CARBONACEOUS = (
    (30, 30, 32),
    (46, 44, 44),
    (64, 60, 58),
    (84, 80, 76),
    (106, 100, 94),
)
PALETTE_METALLIC = (
    (80, 78, 76),
    (112, 108, 104),
    (146, 140, 132),
    (178, 172, 162),
    (210, 204, 194),
)
PALETTE_SILICATE = (
    (92, 76, 60),
    (122, 102, 80),
    (150, 128, 102),
    (178, 156, 126),
    (204, 184, 154),
)
PALETTE_ASTEROID_ICY = (
    (96, 112, 128),
    (130, 150, 166),
    (170, 188, 200),
    (206, 220, 230),
    (236, 242, 248),
)


def validate_palette(palette) -> None:
    """Raises ValueError unless palette holds 3-8 RGB triples of 0-255 ints."""
    if not DEFAULTS.MIN_PALETTE_SIZE <= len(palette) <= DEFAULTS.MAX_PALETTE_SIZE:
        raise ValueError(
            f"Palette must have {DEFAULTS.MIN_PALETTE_SIZE}-{DEFAULTS.MAX_PALETTE_SIZE} entries, got {len(palette)}"
        )
    for color in palette:
        if len(color) != 3 or not all(isinstance(c, int) and 0 <= c <= 255 for c in color):
            raise ValueError(f"Palette entries must be RGB triples of 0-255 ints, got {color!r}")


# --- Color Lookup Table (LUT) Generation ---
def create_palette_lut(palette) -> np.ndarray:
    """Creates a LUT where the index is the palette step and the value is the RGB color."""
    return np.array(palette, dtype=np.uint8)


def quantize(value: float, palette) -> tuple[int, int, int]:
    """Maps one value in [0, 1] to a palette entry. Out-of-range values clamp."""
    last = len(palette) - 1
    index = min(max(math.floor(value * last), 0), last)
    return palette[index]


def quantize_array(values: np.ndarray, palette_lut: np.ndarray) -> np.ndarray:
    """
    Vectorised quantize: returns a (..., 3) uint8 array of palette colours
    for an array of values in [0, 1].
    """
    last = palette_lut.shape[0] - 1
    indices = np.clip(np.floor(values * last), 0, last).astype(np.intp)
    return palette_lut[indices]
