# body_generator/runtime/sprites.py

"""
================================================================================
PYGAME SPRITE ADAPTER
================================================================================
The presentation boundary: turns PixelBuffers (generated live) or baked PNGs
(written by bake_bodies.py) into pygame Surfaces. No generation logic lives
here.
================================================================================
"""
import json
import logging
import os

# This module requires Pygame, as it is the runtime component.
import pygame

from ..descriptor import PixelBuffer


def _finalize(surface: pygame.Surface) -> pygame.Surface:
    # convert_alpha needs an initialised display; headless callers keep the raw surface.
    if pygame.display.get_init() and pygame.display.get_surface() is not None:
        return surface.convert_alpha()
    return surface


def to_surface(buffer: PixelBuffer) -> pygame.Surface:
    """Copies an RGBA PixelBuffer into a new per-pixel-alpha Surface."""
    surface = pygame.image.frombuffer(buffer.tobytes(), (buffer.width, buffer.height), 'RGBA')
    # frombuffer shares memory with the bytes object; copy so the Surface owns its pixels.
    return _finalize(surface.copy())


class BakedBodyLibrary:
    """
    A loaded baked body package. Reads the manifest once and loads body
    images on demand, caching them by content hash.
    """
    def __init__(self, package_path: str):
        self.package_path = package_path
        self.images_path = os.path.join(self.package_path, "images")
        self.logger = logging.getLogger(__name__)
        self._surface_cache = {}

        manifest_path = os.path.join(self.package_path, "manifest.json")
        config_path = os.path.join(self.package_path, "generation_config.json")
        if not os.path.exists(manifest_path) or not os.path.exists(config_path):
            raise FileNotFoundError(
                f"Could not find 'manifest.json' or 'generation_config.json' in '{package_path}'"
            )

        with open(manifest_path, 'r') as f:
            manifest = json.load(f)
        with open(config_path, 'r') as f:
            self.config = json.load(f)

        self.bodies = {entry['key']: entry for entry in manifest.get('bodies', [])}
        self.logger.info(f"Loaded {len(self.bodies)} baked bodies from '{package_path}'.")

    @property
    def keys(self) -> list[str]:
        return list(self.bodies)

    def _load(self, image_hash: str) -> pygame.Surface | None:
        if image_hash in self._surface_cache:
            return self._surface_cache[image_hash]

        filepath = os.path.join(self.images_path, f"{image_hash}.png")
        try:
            surface = _finalize(pygame.image.load(filepath))
        except (pygame.error, FileNotFoundError):
            self.logger.error(f"Failed to load body image for hash '{image_hash}' at '{filepath}'")
            return None
        self._surface_cache[image_hash] = surface
        return surface

    def get_surface(self, key: str) -> pygame.Surface | None:
        entry = self.bodies.get(key)
        return self._load(entry['surface']) if entry else None

    def get_atmosphere(self, key: str) -> pygame.Surface | None:
        entry = self.bodies.get(key)
        if not entry or not entry.get('atmosphere'):
            return None
        return self._load(entry['atmosphere'])
