# body_generator/hashing.py

"""
================================================================================
DETERMINISTIC HASHING
================================================================================
This module maps integer tuples (seed, x, y, salt) to reproducible
pseudo-random values. Every random decision in the generator flows through
here, so the output of a body depends only on its inputs and never on the
host's hash randomisation, memory layout or clock.

Data Contract:
---------------
- Inputs: four signed 64-bit integers.
- Outputs:
    - hash_u64: an unsigned 64-bit integer.
    - hash01: a float uniformly distributed in [0, 1).
- Side Effects: None.
- Invariants: The same inputs give the same output on every platform. The
  mix is splitmix64 applied once per input, in order, with wrap-around
  unsigned arithmetic.
================================================================================
"""

import numpy as np
from numba import njit

# splitmix64 constants. Stored as uint64 so Numba never promotes to float.
_GOLDEN_GAMMA = np.uint64(0x9E3779B97F4A7C15)
_MIX_MULTIPLIER_1 = np.uint64(0xBF58476D1CE4E5B9)
_MIX_MULTIPLIER_2 = np.uint64(0x94D049BB133111EB)
_SHIFT_27 = np.uint64(27)
_SHIFT_30 = np.uint64(30)
_SHIFT_31 = np.uint64(31)

# Keep the top 53 bits: exactly the mantissa of a float64.
_MANTISSA_SHIFT = np.uint64(11)
_INV_2_POW_53 = 1.0 / 9007199254740992.0

_U64_MASK = 0xFFFFFFFFFFFFFFFF
_I64_SIGN = 1 << 63


@njit
def _splitmix64(z):
    z = z + _GOLDEN_GAMMA
    z = (z ^ (z >> _SHIFT_30)) * _MIX_MULTIPLIER_1
    z = (z ^ (z >> _SHIFT_27)) * _MIX_MULTIPLIER_2
    return z ^ (z >> _SHIFT_31)


@njit
def hash_u64(seed, x, y, salt):
    """Folds the four inputs into one 64-bit value."""
    h = _splitmix64(np.uint64(seed))
    h = _splitmix64(h ^ np.uint64(x))
    h = _splitmix64(h ^ np.uint64(y))
    return _splitmix64(h ^ np.uint64(salt))


@njit
def hash01(seed, x, y, salt):
    """Returns a float in [0, 1) for the given integer tuple."""
    bits = hash_u64(seed, x, y, salt) >> _MANTISSA_SHIFT
    return np.float64(bits) * _INV_2_POW_53


def hash_range(seed: int, x: int, y: int, salt: int, low: float, high: float) -> float:
    """Maps hash01 onto [low, high)."""
    return low + (high - low) * hash01(seed, x, y, salt)


def derive_seed(seed: int, offset: int) -> int:
    """
    Offsets a seed, wrapping into the signed 64-bit range so that layer
    seeds can always be passed to the compiled kernels.
    """
    value = (int(seed) + int(offset)) & _U64_MASK
    return value - (1 << 64) if value >= _I64_SIGN else value
