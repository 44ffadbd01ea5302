# body_generator/runtime/__init__.py

# This file makes the 'runtime' directory a Python package.
# It holds the Pygame-facing side of the generator and is the only part of
# the project that imports pygame.

from .sprites import BakedBodyLibrary, to_surface

__all__ = ["BakedBodyLibrary", "to_surface"]
