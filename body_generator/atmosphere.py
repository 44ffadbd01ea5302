# body_generator/atmosphere.py

"""
================================================================================
ATMOSPHERE HALO RASTERIZER
================================================================================
Produces the translucent halo drawn behind (and slightly under) a body. The
halo is a separate buffer, larger than the body by its thickness factor and
centred on the same point.

Data Contract:
---------------
- Inputs:
    - size_px: the body's edge length in pixels.
    - seed: the body seed (offset internally for the halo layer).
    - color: RGBA base colour, four ints in [0, 255].
    - thickness: halo depth as a fraction of the body radius, > 0.
    - pattern: one of themes.ATMOSPHERE_PATTERNS.
    - settings: the generator's consolidated settings dict.
- Outputs: a PixelBuffer of side ceil(size_px * (1 + thickness)).
- Side Effects: None.
- Invariants:
    - Alpha is 0 beyond the outer radius and inside the inner radius
      (body radius minus the overlap).
    - On bodies at least BANDED_ATMOSPHERE_MIN_PX wide, alpha takes at most
      ATMOSPHERE_BAND_STEPS + 1 distinct values.
================================================================================
"""

import math
import numbers

import numpy as np

from . import config as DEFAULTS
from .descriptor import PixelBuffer
from .hashing import derive_seed, hash01, hash_range
from .noise import amplitude_sum, fbm_grid


def validate_color(color) -> tuple[int, int, int, int]:
    """Returns color as a tuple of four ints, or raises ValueError."""
    try:
        channels = tuple(color)
    except TypeError:
        raise ValueError(f"Atmosphere color must be an RGBA sequence, got {color!r}") from None
    if len(channels) != 4 or not all(
        isinstance(c, numbers.Integral) and not isinstance(c, bool) and 0 <= c <= 255 for c in channels
    ):
        raise ValueError(f"Atmosphere color must be four ints in [0, 255], got {color!r}")
    return tuple(int(c) for c in channels)


def validate_thickness(thickness) -> float:
    if isinstance(thickness, bool) or not isinstance(thickness, numbers.Real):
        raise ValueError(f"Atmosphere thickness must be a number, got {thickness!r}")
    if not math.isfinite(thickness) or thickness <= 0:
        raise ValueError(f"Atmosphere thickness must be positive and finite, got {thickness!r}")
    return float(thickness)


def jitter_color(color: tuple, seed: int, jitter: int) -> tuple[int, int, int]:
    """Shifts each RGB channel by a seeded integer in [-jitter, jitter]."""
    salt = DEFAULTS.ATMOSPHERE_SALT
    jittered = []
    for channel in range(3):
        offset = min(int(hash01(seed, channel, 0, salt) * (2 * jitter + 1)), 2 * jitter) - jitter
        jittered.append(min(max(color[channel] + offset, 0), 255))
    return tuple(jittered)


def pattern_field(pattern: str, dx: np.ndarray, dy: np.ndarray, dist: np.ndarray, seed: int, settings: dict) -> np.ndarray:
    """
    Angular modulation in [0, 1]. dx, dy and dist are measured in body
    radii from the centre.
    """
    angle = np.arctan2(dy, dx)
    octaves = settings['atmosphere_pattern_octaves']

    if pattern == "bands":
        return 0.5 + 0.5 * np.sin(dy * settings['atmosphere_band_count'] * math.pi)

    if pattern == "sine":
        phase = hash_range(seed, 0, 1, DEFAULTS.ATMOSPHERE_SALT, 0.0, 2.0 * math.pi)
        return 0.5 + 0.5 * np.sin(angle * settings['atmosphere_sine_lobes'] + phase)

    # Noise patterns sample fBm around a circle so there is no seam at +/- pi.
    if pattern == "clouds":
        ring = 1.0 + dist
        frequency = settings['atmosphere_cloud_frequency']
    elif pattern == "dust":
        # Barely changes with distance: streaks run outward.
        ring = 1.0 + 0.2 * dist
        frequency = settings['atmosphere_dust_frequency']
    else:
        raise ValueError(f"Unknown atmosphere pattern '{pattern}'")

    x = np.ascontiguousarray(np.cos(angle) * ring)
    y = np.ascontiguousarray(np.sin(angle) * ring)
    amplitude = DEFAULTS.NOISE_BASE_AMPLITUDE
    field = fbm_grid(x, y, octaves, seed, frequency, amplitude)
    return np.clip(field / amplitude_sum(octaves, amplitude), 0.0, 1.0)


def rasterize_atmosphere(size_px: int, seed: int, color, thickness: float, pattern: str, settings: dict) -> PixelBuffer:
    """Builds the halo buffer for one body."""
    color = validate_color(color)
    thickness = validate_thickness(thickness)
    layer_seed = derive_seed(seed, settings['atmosphere_seed_offset'])

    side = math.ceil(size_px * (1.0 + thickness))
    body_radius = size_px / 2.0

    # --- Geometry, in body radii ---
    offsets = ((np.arange(side) + 0.5) - side / 2.0) / body_radius
    dx, dy = np.meshgrid(offsets, offsets)
    dist = np.sqrt(dx * dx + dy * dy)

    inner = 1.0 - settings['atmosphere_overlap']
    outer = side / size_px
    ring = (dist >= inner) & (dist < outer)

    # --- Alpha ---
    t = np.clip((dist - inner) / (outer - inner), 0.0, 1.0)
    falloff = 1.0 - t * t * (3.0 - 2.0 * t)
    strength = settings['atmosphere_pattern_strength']
    pattern_values = pattern_field(pattern, dx, dy, dist, layer_seed, settings)
    fraction = falloff * (1.0 - strength + strength * pattern_values)

    if size_px >= settings['banded_atmosphere_min_px']:
        steps = settings['atmosphere_band_steps']
        fraction = np.floor(fraction * steps) / steps

    alpha = fraction * settings['atmosphere_max_alpha'] * (color[3] / 255.0)
    alpha8 = np.where(ring, np.round(alpha * 255.0), 0.0).astype(np.uint8)

    # --- Colour ---
    rgb = jitter_color(color, layer_seed, settings['atmosphere_color_jitter'])
    pixels = np.zeros((side, side, 4), dtype=np.uint8)
    visible = alpha8 > 0
    pixels[visible, :3] = rgb
    pixels[..., 3] = alpha8

    return PixelBuffer(width=side, height=side, pixels=pixels)
