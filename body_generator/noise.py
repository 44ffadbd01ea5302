# body_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides 2D lattice (value) noise and its fractal sum (fBm). It is
designed to be a pure, stateless utility built on the deterministic hash.

Data Contract:
---------------
- Inputs:
    - seed: The layer seed (int64).
    - x, y: Scalars or NumPy arrays of coordinates.
    - octaves, frequency, amplitude: fBm parameters (per theme).
- Outputs:
    - lattice_noise: a value in [0, 1).
    - fbm / fbm_grid: values in [0, amplitude_sum(octaves, amplitude)].
- Side Effects: None.
- Invariants: The shape of the fbm_grid output matches the shape of x and y.
  Smoothstep interpolation keeps the field C1-continuous across lattice
  cell boundaries.
================================================================================
"""

import numpy as np
from numba import njit

from .hashing import hash01

# Each octave doubles the frequency and halves the amplitude.
LACUNARITY = 2.0
GAIN = 0.5


@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)


@njit
def _smoothstep(t):
    "t^2 (3 - 2t)"
    return t * t * (3.0 - 2.0 * t)


@njit
def lattice_noise(x, y, seed, salt=0):
    """
    Value noise: pseudo-random values at the four integer lattice corners
    around (x, y), blended with smoothstep weights in both axes.
    """
    x0 = np.floor(x)
    y0 = np.floor(y)
    xi = np.int64(x0)
    yi = np.int64(y0)

    u = _smoothstep(x - x0)
    v = _smoothstep(y - y0)

    v00 = hash01(seed, xi, yi, salt)
    v10 = hash01(seed, xi + 1, yi, salt)
    v01 = hash01(seed, xi, yi + 1, salt)
    v11 = hash01(seed, xi + 1, yi + 1, salt)

    x1 = _lerp(v00, v10, u)
    x2 = _lerp(v01, v11, u)
    return _lerp(x1, x2, v)


@njit
def fbm(x, y, octaves, seed, frequency=8.0, amplitude=0.5):
    """Fractal Brownian motion over lattice_noise. Each octave gets its own salt."""
    total = 0.0
    freq = frequency
    amp = amplitude
    for octave in range(octaves):
        total += lattice_noise(x * freq, y * freq, seed, octave) * amp
        freq *= LACUNARITY
        amp *= GAIN
    return total


@njit
def fbm_grid(x, y, octaves, seed, frequency, amplitude):
    """
    Evaluates fbm for every element of the 2D coordinate arrays x and y.
    This function is JIT-compiled with Numba; the explicit loops compile to
    efficient machine code.
    """
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))

    for i in range(rows):
        for j in range(cols):
            total_noise[i, j] = fbm(x[i, j], y[i, j], octaves, seed, frequency, amplitude)

    return total_noise


def amplitude_sum(octaves: int, amplitude: float) -> float:
    """The largest value fbm can reach for these parameters."""
    return amplitude * sum(GAIN ** octave for octave in range(octaves))
