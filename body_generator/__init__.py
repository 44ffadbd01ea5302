# body_generator/__init__.py

# Public API of the body generator. The pygame-facing code lives in the
# 'runtime' sub-package and is not imported here.

from .cache import CacheEntry, GenerationCache
from .descriptor import DegenerateSizeError, PixelBuffer, SizeClass, SurfaceDescriptor
from .generator import BodyGenerator, generate_atmosphere, generate_surface
from .service import BodyService
from .themes import AsteroidTheme, BodyCategory, GaseousTheme, MoonTheme, TerranTheme

__all__ = [
    "AsteroidTheme",
    "BodyCategory",
    "BodyGenerator",
    "BodyService",
    "CacheEntry",
    "DegenerateSizeError",
    "GaseousTheme",
    "GenerationCache",
    "MoonTheme",
    "PixelBuffer",
    "SizeClass",
    "SurfaceDescriptor",
    "TerranTheme",
    "generate_atmosphere",
    "generate_surface",
]
