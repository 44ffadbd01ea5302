# body_generator/projection.py

"""
================================================================================
SPHERE PROJECTION
================================================================================
Remaps flat texture coordinates so a planar noise field reads as a lit globe,
and pre-warps centred coordinates into irregular silhouettes for asteroids.

Data Contract:
---------------
- Inputs: unit-square (u, v) coordinates, scalars or NumPy arrays.
- Outputs: remapped (u', v') in the unit square.
- Side Effects: None.
- Invariants: Points on or outside the unit disk (after recentring) are
  returned unchanged; the centre maps to (0.5, 0.5).
================================================================================
"""

import math
from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS
from .hashing import hash01, hash_range


def spherify(u, v):
    """
    Stereographic-like compression of a unit-square sample onto a sphere.
    Accepts scalars or arrays of matching shape.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)

    # Recentre to [-1, 1].
    cu = u * 2.0 - 1.0
    cv = v * 2.0 - 1.0
    r2 = cu * cu + cv * cv
    on_disk = r2 < 1.0

    # Clamp keeps sqrt real for the off-disk lanes; they are discarded below.
    z = np.sqrt(np.clip(1.0 - r2, 0.0, 1.0))
    su = (cu / (z + 1.0) + 1.0) / 2.0
    sv = (cv / (z + 1.0) + 1.0) / 2.0

    out_u = np.where(on_disk, su, u)
    out_v = np.where(on_disk, sv, v)
    if out_u.ndim == 0:
        return float(out_u), float(out_v)
    return out_u, out_v


@dataclass(frozen=True)
class AsteroidShape:
    """Silhouette parameters of one irregular body."""
    elongation: float
    rotation: float
    lobes: int
    wobble: float
    phase: float

    @classmethod
    def from_seed(cls, seed: int) -> "AsteroidShape":
        salt = DEFAULTS.SHAPE_SALT
        lobe_choices = DEFAULTS.ASTEROID_LOBE_CHOICES
        lobe_index = int(hash01(seed, 2, 0, salt) * len(lobe_choices))
        return cls(
            elongation=hash_range(seed, 0, 0, salt, *DEFAULTS.ASTEROID_ELONGATION_RANGE),
            rotation=hash_range(seed, 1, 0, salt, 0.0, math.pi),
            lobes=lobe_choices[min(lobe_index, len(lobe_choices) - 1)],
            wobble=hash_range(seed, 3, 0, salt, *DEFAULTS.ASTEROID_WOBBLE_RANGE),
            phase=hash_range(seed, 4, 0, salt, 0.0, 2.0 * math.pi),
        )


def warp_asteroid(x: np.ndarray, y: np.ndarray, shape: AsteroidShape) -> tuple[np.ndarray, np.ndarray]:
    """
    Pre-warps centred coordinates ([-1, 1]) so that the unit-disk test that
    follows carves a lumpy, elongated silhouette instead of a circle.
    """
    cos_r = math.cos(shape.rotation)
    sin_r = math.sin(shape.rotation)

    # 1. Rotate into the body's frame and squash the short axis.
    along = x * cos_r + y * sin_r
    across = (-x * sin_r + y * cos_r) * shape.elongation

    # 2. Sinusoidal angular distortion: the radius the disk test sees grows
    #    or shrinks with angle, pushing out lobes.
    angle = np.arctan2(across, along)
    radial_scale = 1.0 + shape.wobble * np.sin(shape.lobes * angle + shape.phase)

    # The (1 + wobble) factor keeps the largest lobe inside the frame.
    scale = (1.0 + shape.wobble) / radial_scale
    return along * scale, across * scale
