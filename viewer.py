# viewer.py

"""
================================================================================
LIVE BODY VIEWER
================================================================================
A small Pygame window that generates bodies on the fly and shows each one on
top of its atmosphere halo.

Controls:
    LEFT / RIGHT    previous / next seed
    UP / DOWN       jump ten seeds
    C               cycle body category
    T               cycle theme within the category
    + / -           larger / smaller size class
    A               toggle the atmosphere halo
    ESC             quit

Usage:
    python viewer.py [--config path/to/config.json] [--seed N]
================================================================================
"""
import argparse
import json
import logging
import sys

import pygame

from body_generator import BodyService, GenerationCache
from body_generator import config as DEFAULTS
from body_generator.descriptor import SizeClass, SurfaceDescriptor
from body_generator.generator import BodyGenerator
from body_generator.runtime import to_surface
from body_generator.themes import BodyCategory, THEMES_BY_CATEGORY

# --- Application Constants ---
SCREEN_WIDTH = 960
SCREEN_HEIGHT = 640
BACKGROUND_COLOR = (8, 8, 18)
TEXT_COLOR = (220, 220, 230)
# Bodies are drawn scaled up by this factor so pixel art stays visible.
DISPLAY_SCALE = 2
SEED_JUMP = 10


class ViewerApp:
    """The main application class for the live body viewer."""
    def __init__(self, generation_params: dict, seed: int):
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
        self.logger = logging.getLogger(__name__)

        self.logger.info("Initializing Pygame...")
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Body Viewer")
        self.font = pygame.font.Font(None, 24)
        self.clock = pygame.time.Clock()
        self.is_running = True

        generator = BodyGenerator(config=generation_params, logger=self.logger)
        self.service = BodyService(generator=generator, cache=GenerationCache())

        # --- View State ---
        self.seed = seed
        self.categories = list(BodyCategory)
        self.category_index = 0
        self.theme_index = 0
        self.size_classes = list(SizeClass)
        self.size_index = self.size_classes.index(SizeClass.MEDIUM)
        self.show_atmosphere = True

        self._surfaces = None
        self._refresh()

    @property
    def descriptor(self) -> SurfaceDescriptor:
        category = self.categories[self.category_index]
        theme = list(THEMES_BY_CATEGORY[category])[self.theme_index]
        return SurfaceDescriptor.from_size_class(self.seed, category, theme, self.size_classes[self.size_index])

    def _refresh(self):
        """Regenerates (or fetches from the cache) the sprites for the current body."""
        descriptor = self.descriptor
        body = to_surface(self.service.surface(descriptor))
        halo = to_surface(self.service.atmosphere(descriptor)) if self.show_atmosphere else None
        self._surfaces = (body, halo)

    def run(self):
        """The main application loop."""
        while self.is_running:
            self.handle_events()
            self.draw()
            self.clock.tick(30)

        self.logger.info("Exiting viewer.")
        pygame.quit()
        sys.exit()

    def handle_events(self):
        """Processes user input; any change regenerates the displayed body."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.is_running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.is_running = False
                    return
                if not self._apply_key(event.key):
                    continue
                self._refresh()

    def _apply_key(self, key) -> bool:
        if key == pygame.K_RIGHT:
            self.seed += 1
        elif key == pygame.K_LEFT:
            self.seed -= 1
        elif key == pygame.K_UP:
            self.seed += SEED_JUMP
        elif key == pygame.K_DOWN:
            self.seed -= SEED_JUMP
        elif key == pygame.K_c:
            self.category_index = (self.category_index + 1) % len(self.categories)
            self.theme_index = 0
        elif key == pygame.K_t:
            themes = THEMES_BY_CATEGORY[self.categories[self.category_index]]
            self.theme_index = (self.theme_index + 1) % len(themes)
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.size_index = min(self.size_index + 1, len(self.size_classes) - 1)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.size_index = max(self.size_index - 1, 0)
        elif key == pygame.K_a:
            self.show_atmosphere = not self.show_atmosphere
        else:
            return False
        return True

    def draw(self):
        """Handles all rendering for the application."""
        self.screen.fill(BACKGROUND_COLOR)
        center = (SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2)

        body, halo = self._surfaces
        for sprite in (halo, body):
            if sprite is None:
                continue
            scaled = pygame.transform.scale(
                sprite, (sprite.get_width() * DISPLAY_SCALE, sprite.get_height() * DISPLAY_SCALE)
            )
            self.screen.blit(scaled, scaled.get_rect(center=center))

        descriptor = self.descriptor
        theme_name = list(THEMES_BY_CATEGORY[descriptor.category])[self.theme_index].name
        label = (
            f"{descriptor.category.value} / {theme_name} | seed {descriptor.seed} | "
            f"{descriptor.size_px}px | cached {len(self.service.cache)}"
        )
        self.screen.blit(self.font.render(label, True, TEXT_COLOR), (12, 12))
        pygame.display.flip()


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Live viewer for the celestial body generator.")
    parser.add_argument("--config", type=str, default=None, help="Optional bake config; its generation_parameters are used.")
    parser.add_argument("--seed", type=int, default=DEFAULTS.DEFAULT_SEED, help="Starting seed.")
    args = parser.parse_args()

    params = {}
    if args.config:
        try:
            with open(args.config, 'r') as f:
                params = json.load(f).get('generation_parameters', {})
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
            logging.getLogger(__name__).critical(f"Failed to load or parse config file: {e}")
            sys.exit(1)

    app = ViewerApp(generation_params=params, seed=args.seed)
    app.run()
