# body_generator/service.py

"""
================================================================================
BODY SERVICE
================================================================================
Composes one BodyGenerator with one GenerationCache. This is the object a
game or tool keeps alive; everything below it is stateless.
================================================================================
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import NamedTuple

from .cache import GenerationCache
from .descriptor import PixelBuffer, SurfaceDescriptor
from .generator import BodyGenerator


class AtmosphereKey(NamedTuple):
    """Cache key of a halo buffer. Buckets by the body's category."""
    descriptor: SurfaceDescriptor
    color: tuple
    thickness: float

    @property
    def category(self):
        return self.descriptor.category


class BodyService:
    def __init__(self, generator: BodyGenerator = None, cache: GenerationCache = None, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger(__name__)
        self.generator = generator or BodyGenerator(logger=self.logger)
        self.cache = cache if cache is not None else GenerationCache()

    def surface(self, descriptor: SurfaceDescriptor) -> PixelBuffer:
        return self.cache.get_or_compute(descriptor, lambda: self.generator.generate_surface(descriptor))

    def atmosphere(self, descriptor: SurfaceDescriptor, color=None, thickness=None) -> PixelBuffer:
        key = AtmosphereKey(descriptor, None if color is None else tuple(color), thickness)
        return self.cache.get_or_compute(key, lambda: self.generator.generate_atmosphere(descriptor, color, thickness))

    def render_many(self, descriptors, max_workers: int = None) -> list[PixelBuffer]:
        """Surfaces for every descriptor, in input order, generated on a thread pool."""
        descriptors = list(descriptors)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            buffers = list(executor.map(self.surface, descriptors))
        self.logger.info(f"Rendered {len(buffers)} bodies ({len(self.cache)} cached).")
        return buffers
