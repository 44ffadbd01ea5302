# body_generator/craters.py

"""
================================================================================
CRATER FIELD GENERATION
================================================================================
This module places non-overlapping circular depressions on a body and turns
them into a dense depth field. Placement is rejection sampling driven by the
deterministic hash; the depth field is a Numba kernel over flat crater arrays.

Data Contract:
---------------
- Inputs:
    - seed: The crater layer seed.
    - count/radius/depth ranges and the maximum number of placement attempts.
    - u, v: projected body coordinates in [0, 1] (2D arrays) plus an
      'inside' mask.
- Outputs:
    - A list of CraterSpec (possibly shorter than requested).
    - A float64 depth field with the same shape as u and v.
- Side Effects: Logs a debug message when the field is under-filled.
- Invariants:
    - For every accepted pair: distance(a, b) >= (r_a + r_b) * overlap_margin.
    - Depth values are finite; the profile is defined at the crater centre.
================================================================================
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .hashing import hash01, hash_range
from .noise import lattice_noise

logger = logging.getLogger(__name__)

# --- Profile Constants (frozen into the compiled kernels) ---
_FLOOR_END = DEFAULTS.CRATER_FLOOR_END
_WALL_END = DEFAULTS.CRATER_WALL_END
_FLOOR_CURVATURE = DEFAULTS.CRATER_FLOOR_CURVATURE
_WALL_EXPONENT = DEFAULTS.CRATER_WALL_EXPONENT
_RIM_HEIGHT = DEFAULTS.CRATER_RIM_HEIGHT
_SHAPE_SALT = DEFAULTS.CRATER_SHAPE_SALT

# Independent draw channels per placement attempt.
_CHANNEL_ANGLE = 0
_CHANNEL_REACH = 1
_CHANNEL_RADIUS = 2
_CHANNEL_DEPTH = 3
_CHANNEL_NOISE_FREQ = 4
_CHANNEL_NOISE_AMP = 5
_CHANNEL_ELONGATION_ANGLE = 6
_CHANNEL_ELONGATION_AMOUNT = 7


@dataclass(frozen=True)
class CraterSpec:
    """One crater, in normalised [0, 1]^2 body coordinates."""
    center: tuple[float, float]
    radius: float
    depth: float
    noise_freq: float
    noise_amp: float
    elongation_angle: float
    elongation_amount: float


def _check_range(name: str, value_range, minimum: float = 0.0, exclusive: bool = False):
    low, high = value_range
    if not (math.isfinite(low) and math.isfinite(high)) or low > high:
        raise ValueError(f"{name} must be a finite (low, high) pair with low <= high, got {value_range}")
    if low < minimum or (exclusive and low <= minimum):
        raise ValueError(f"{name} must start above {minimum}, got {value_range}")


def place_craters(
    seed: int,
    count_range: tuple[int, int],
    radius_range: tuple[float, float],
    depth_range: tuple[float, float],
    max_attempts: int = None,
    *,
    attempts_per_crater: int = DEFAULTS.CRATER_ATTEMPTS_PER_CRATER,
    overlap_margin: float = DEFAULTS.CRATER_OVERLAP_MARGIN,
    spread: float = DEFAULTS.CRATER_CENTER_SPREAD,
    noise_freq_range: tuple[float, float] = DEFAULTS.CRATER_NOISE_FREQ_RANGE,
    noise_amp_range: tuple[float, float] = DEFAULTS.CRATER_NOISE_AMP_RANGE,
    elongation_range: tuple[float, float] = DEFAULTS.CRATER_ELONGATION_RANGE,
) -> list[CraterSpec]:
    """
    Places up to N craters by rejection sampling, where N is drawn from
    count_range. Stops after N acceptances or max_attempts tries; returning
    fewer than N craters is a valid result on small or crowded bodies.
    """
    _check_range("count_range", count_range)
    _check_range("radius_range", radius_range, exclusive=True)
    _check_range("depth_range", depth_range)
    _check_range("noise_freq_range", noise_freq_range)
    _check_range("noise_amp_range", noise_amp_range)
    _check_range("elongation_range", elongation_range)
    if noise_amp_range[1] >= 1.0:
        raise ValueError(f"noise_amp_range must stay below 1.0, got {noise_amp_range}")
    if overlap_margin < 1.0:
        raise ValueError(f"overlap_margin must be >= 1.0, got {overlap_margin}")

    salt = DEFAULTS.CRATER_SALT
    low, high = int(count_range[0]), int(count_range[1])
    count = low + min(int(hash01(seed, 0, 0, salt) * (high - low + 1)), high - low)
    if count == 0:
        return []
    if max_attempts is None:
        max_attempts = count * attempts_per_crater

    accepted: list[CraterSpec] = []
    for attempt in range(1, max_attempts + 1):
        if len(accepted) >= count:
            break

        # Centre: uniform over a disk of radius spread/2 around (0.5, 0.5).
        angle = hash_range(seed, attempt, _CHANNEL_ANGLE, salt, 0.0, 2.0 * math.pi)
        reach = math.sqrt(hash01(seed, attempt, _CHANNEL_REACH, salt)) * spread * 0.5
        cx = 0.5 + reach * math.cos(angle)
        cy = 0.5 + reach * math.sin(angle)
        radius = hash_range(seed, attempt, _CHANNEL_RADIUS, salt, *radius_range)

        if _overlaps_any(cx, cy, radius, accepted, overlap_margin):
            continue

        accepted.append(CraterSpec(
            center=(cx, cy),
            radius=radius,
            depth=hash_range(seed, attempt, _CHANNEL_DEPTH, salt, *depth_range),
            noise_freq=hash_range(seed, attempt, _CHANNEL_NOISE_FREQ, salt, *noise_freq_range),
            noise_amp=hash_range(seed, attempt, _CHANNEL_NOISE_AMP, salt, *noise_amp_range),
            elongation_angle=hash_range(seed, attempt, _CHANNEL_ELONGATION_ANGLE, salt, 0.0, math.pi),
            elongation_amount=hash_range(seed, attempt, _CHANNEL_ELONGATION_AMOUNT, salt, *elongation_range),
        ))

    if len(accepted) < count:
        logger.debug(f"Crater field under-filled: placed {len(accepted)}/{count} after {max_attempts} attempts.")
    return accepted


def _overlaps_any(cx: float, cy: float, radius: float, accepted: list[CraterSpec], margin: float) -> bool:
    for other in accepted:
        dx = cx - other.center[0]
        dy = cy - other.center[1]
        min_dist = (radius + other.radius) * margin
        if dx * dx + dy * dy < min_dist * min_dist:
            return True
    return False


def crater_arrays(craters: list[CraterSpec]) -> dict[str, np.ndarray]:
    """Flattens a crater list into one float64 array per field."""
    return {
        'cx': np.array([c.center[0] for c in craters], dtype=np.float64),
        'cy': np.array([c.center[1] for c in craters], dtype=np.float64),
        'radius': np.array([c.radius for c in craters], dtype=np.float64),
        'depth': np.array([c.depth for c in craters], dtype=np.float64),
        'noise_freq': np.array([c.noise_freq for c in craters], dtype=np.float64),
        'noise_amp': np.array([c.noise_amp for c in craters], dtype=np.float64),
        'elongation_angle': np.array([c.elongation_angle for c in craters], dtype=np.float64),
        'elongation_amount': np.array([c.elongation_amount for c in craters], dtype=np.float64),
    }


@njit
def crater_profile(d, depth):
    """
    Signed height at normalised distance d from a crater centre:
    concave floor, power-curve wall, then a rim overshoot that decays to
    zero at d = 1.
    """
    if d < _FLOOR_END:
        t = d / _FLOOR_END
        return -depth * (1.0 - _FLOOR_CURVATURE * t * t)

    floor_edge = -depth * (1.0 - _FLOOR_CURVATURE)
    rim = depth * _RIM_HEIGHT
    if d < _WALL_END:
        t = (d - _FLOOR_END) / (_WALL_END - _FLOOR_END)
        return floor_edge + (rim - floor_edge) * t ** _WALL_EXPONENT

    if d < 1.0:
        t = (d - _WALL_END) / (1.0 - _WALL_END)
        return rim * (1.0 - t) * (1.0 - t)

    return 0.0


@njit
def _shaped_distance(dx, dy, radius, noise_freq, noise_amp, elongation_angle, elongation_amount, seed, index):
    """Distance in crater radii after elongation and angular shape noise."""
    c = np.cos(elongation_angle)
    s = np.sin(elongation_angle)
    along = (dx * c + dy * s) / (1.0 + elongation_amount)
    across = -dx * s + dy * c

    dist = np.sqrt(along * along + across * across)
    if dist == 0.0:
        return 0.0

    phi = np.arctan2(across, along)
    # Sampling noise on a circle keeps the outline closed at phi = +/- pi.
    wobble = lattice_noise(np.cos(phi) * noise_freq + index * 7.31, np.sin(phi) * noise_freq, seed, _SHAPE_SALT)
    shape = 1.0 + noise_amp * (2.0 * wobble - 1.0)
    return dist / (radius * shape)


@njit
def _accumulate_depth(u, v, inside, cx, cy, radius, depth, noise_freq, noise_amp,
                      elongation_angle, elongation_amount, seed):
    rows, cols = u.shape
    field = np.zeros((rows, cols))

    for k in range(cx.shape[0]):
        # Farthest any point of this crater can reach once shaped.
        reach = radius[k] * (1.0 + noise_amp[k]) * (1.0 + elongation_amount[k])
        reach2 = reach * reach
        for i in range(rows):
            for j in range(cols):
                if not inside[i, j]:
                    continue
                dx = u[i, j] - cx[k]
                dy = v[i, j] - cy[k]
                if dx * dx + dy * dy >= reach2:
                    continue
                d = _shaped_distance(dx, dy, radius[k], noise_freq[k], noise_amp[k],
                                     elongation_angle[k], elongation_amount[k], seed, k)
                field[i, j] += crater_profile(d, depth[k])

    return field


def depth_field(u: np.ndarray, v: np.ndarray, inside: np.ndarray, craters: list[CraterSpec], seed: int) -> np.ndarray:
    """
    Sums every crater's contribution at each (u, v). Influence areas may
    overlap even though crater centres never do.
    """
    if not craters:
        return np.zeros(u.shape)

    arrays = crater_arrays(craters)
    return _accumulate_depth(
        np.ascontiguousarray(u, dtype=np.float64),
        np.ascontiguousarray(v, dtype=np.float64),
        np.ascontiguousarray(inside, dtype=np.bool_),
        arrays['cx'], arrays['cy'], arrays['radius'], arrays['depth'],
        arrays['noise_freq'], arrays['noise_amp'],
        arrays['elongation_angle'], arrays['elongation_amount'],
        seed,
    )
