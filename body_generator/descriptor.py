# body_generator/descriptor.py

"""
================================================================================
SURFACE DESCRIPTORS AND PIXEL BUFFERS
================================================================================
The immutable inputs that fully determine a generated body, and the RGBA8
buffer that is the only artifact handed to presentation code.
================================================================================
"""

import math
import numbers
from dataclasses import dataclass
from enum import Enum

import numpy as np

from . import config as DEFAULTS
from .themes import BodyCategory

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class DegenerateSizeError(ValueError):
    """size_px is not a positive, finite integer. Indicates a caller bug."""


class SizeClass(Enum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"

    @property
    def size_px(self) -> int:
        return DEFAULTS.SIZE_CLASS_PX[self.value]


def validate_size(size_px) -> int:
    """Returns size_px as an int, or raises DegenerateSizeError."""
    if isinstance(size_px, bool) or not isinstance(size_px, numbers.Real):
        raise DegenerateSizeError(f"size_px must be a number, got {size_px!r}")
    if not math.isfinite(size_px) or size_px <= 0 or int(size_px) != size_px:
        raise DegenerateSizeError(f"size_px must be a positive finite integer, got {size_px!r}")
    return int(size_px)


@dataclass(frozen=True)
class SurfaceDescriptor:
    """
    Everything that determines a body's pixels. Two descriptors with equal
    fields always rasterize to identical buffers, so descriptors double as
    cache keys.

    Attributes:
        seed (int): Signed 64-bit seed. Uniqueness across bodies is the
            caller's responsibility.
        category (BodyCategory): Terran, gaseous, moon or asteroid. A matching
            string value ('moon') is accepted and converted.
        theme (Enum | int): A theme enum member of the category, or an index
            into it. Invalid themes are resolved at generation time.
        size_px (int): Edge length of the square output buffer.
    """
    seed: int
    category: BodyCategory
    theme: object
    size_px: int

    def __post_init__(self):
        if isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral):
            raise ValueError(f"seed must be an integer, got {self.seed!r}")
        if not _INT64_MIN <= int(self.seed) <= _INT64_MAX:
            raise ValueError(f"seed must fit in a signed 64-bit integer, got {self.seed}")
        object.__setattr__(self, 'seed', int(self.seed))
        object.__setattr__(self, 'category', BodyCategory(self.category))
        object.__setattr__(self, 'size_px', validate_size(self.size_px))

    @classmethod
    def from_size_class(cls, seed: int, category: BodyCategory, theme, size_class: SizeClass) -> "SurfaceDescriptor":
        return cls(seed=seed, category=category, theme=theme, size_px=SizeClass(size_class).size_px)

    def cache_key(self) -> tuple:
        """A plain tuple identifying this body, stable across processes."""
        theme = self.theme.name if isinstance(self.theme, Enum) else self.theme
        return (self.category.value, theme, self.seed, self.size_px)


class PixelBuffer:
    """
    A read-only RGBA8 image, row-major, shape (height, width, 4).
    Alpha 0 means fully transparent.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray):
        pixels = np.array(pixels, dtype=np.uint8, order='C')
        if pixels.shape != (height, width, 4):
            raise ValueError(f"Expected pixel shape {(height, width, 4)}, got {pixels.shape}")
        pixels.flags.writeable = False
        self.width = width
        self.height = height
        self.pixels = pixels

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) and np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self):
        return f"PixelBuffer(width={self.width}, height={self.height})"
