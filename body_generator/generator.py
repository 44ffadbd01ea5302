# body_generator/generator.py

"""
================================================================================
CORE BODY GENERATOR
================================================================================
This module contains the BodyGenerator class, which rasterizes the surface
and atmosphere of a celestial body from its SurfaceDescriptor.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Parameters which can override the internal defaults in
      config.py. Expected keys include 'padding_px', 'light_direction', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - PixelBuffer objects: RGBA8, size_px x size_px for surfaces.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same descriptor and configuration, the output is
  bit-identical. Silhouettes use a hard threshold and are never
  anti-aliased.
================================================================================
"""

import logging
import time
from dataclasses import dataclass

import numpy as np

from . import color_maps
from . import config as DEFAULTS
from . import craters as crater_field
from . import lighting
from .atmosphere import rasterize_atmosphere
from .descriptor import PixelBuffer, SurfaceDescriptor
from .effects import POST_EFFECTS
from .hashing import derive_seed
from .noise import amplitude_sum, fbm_grid
from .projection import AsteroidShape, spherify, warp_asteroid
from .themes import CATEGORY_TABLE, THEME_TABLE, ThemeConfig, VariantConfig, resolve_theme


@dataclass
class SurfaceLayers:
    """
    Intermediate arrays of one rasterization pass, all on the padded grid.
    Kept together so tools can inspect a body stage by stage.
    """
    theme: object
    inside: np.ndarray
    dist2: np.ndarray
    value: np.ndarray
    base_rgb: np.ndarray
    depth: np.ndarray
    rgb: np.ndarray
    craters: list


def get_coordinate_grid(size_px: int, padding_px: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Centred pixel coordinates for a padded square grid. The unpadded area
    spans [-1, 1] in both axes; samples are taken at pixel centres.
    """
    indices = (np.arange(size_px + 2 * padding_px) - padding_px + 0.5) / size_px * 2.0 - 1.0
    return np.meshgrid(indices, indices)


class BodyGenerator:
    """
    Generates surface and atmosphere buffers for celestial bodies.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict = None, logger: logging.Logger = None):
        """
        Initializes the body generator.

        Args:
            config (dict, optional): User-defined parameters to override defaults.
            logger (logging.Logger, optional): The logger instance for all output.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.user_config = config or {}

        # --- Consolidate Configuration ---
        self.settings = {
            'base_seed_offset': self.user_config.get('base_seed_offset', DEFAULTS.BASE_SEED_OFFSET),
            'crater_seed_offset': self.user_config.get('crater_seed_offset', DEFAULTS.CRATER_SEED_OFFSET),
            'shape_seed_offset': self.user_config.get('shape_seed_offset', DEFAULTS.SHAPE_SEED_OFFSET),
            'secondary_seed_offset': self.user_config.get('secondary_seed_offset', DEFAULTS.SECONDARY_SEED_OFFSET),
            'atmosphere_seed_offset': self.user_config.get('atmosphere_seed_offset', DEFAULTS.ATMOSPHERE_SEED_OFFSET),

            'padding_px': self.user_config.get('padding_px', DEFAULTS.SURFACE_PADDING_PX),
            'edge_darkening': {**DEFAULTS.EDGE_DARKENING, **self.user_config.get('edge_darkening', {})},

            'light_direction': tuple(self.user_config.get('light_direction', DEFAULTS.LIGHT_DIRECTION)),
            'view_direction': tuple(self.user_config.get('view_direction', DEFAULTS.VIEW_DIRECTION)),
            'ambient_light': self.user_config.get('ambient_light', DEFAULTS.AMBIENT_LIGHT),
            'light_intensity': self.user_config.get('light_intensity', DEFAULTS.LIGHT_INTENSITY),
            'normal_strength': self.user_config.get('normal_strength', DEFAULTS.NORMAL_STRENGTH),
            'normal_reference_size_px': self.user_config.get('normal_reference_size_px', DEFAULTS.NORMAL_REFERENCE_SIZE_PX),
            'specular_power': self.user_config.get('specular_power', DEFAULTS.SPECULAR_POWER),
            'specular_strength': self.user_config.get('specular_strength', DEFAULTS.SPECULAR_STRENGTH),

            'crater_overlap_margin': self.user_config.get('crater_overlap_margin', DEFAULTS.CRATER_OVERLAP_MARGIN),
            'crater_attempts_per_crater': self.user_config.get('crater_attempts_per_crater', DEFAULTS.CRATER_ATTEMPTS_PER_CRATER),
            'crater_center_spread': self.user_config.get('crater_center_spread', DEFAULTS.CRATER_CENTER_SPREAD),

            'secondary_noise_octaves': self.user_config.get('secondary_noise_octaves', DEFAULTS.SECONDARY_NOISE_OCTAVES),
            'secondary_noise_frequency': self.user_config.get('secondary_noise_frequency', DEFAULTS.SECONDARY_NOISE_FREQUENCY),
            'great_spot_u_range': tuple(self.user_config.get('great_spot_u_range', DEFAULTS.GREAT_SPOT_U_RANGE)),
            'great_spot_v_range': tuple(self.user_config.get('great_spot_v_range', DEFAULTS.GREAT_SPOT_V_RANGE)),
            'great_spot_radii': tuple(self.user_config.get('great_spot_radii', DEFAULTS.GREAT_SPOT_RADII)),
            'great_spot_darkening': self.user_config.get('great_spot_darkening', DEFAULTS.GREAT_SPOT_DARKENING),
            'great_spot_turbulence': self.user_config.get('great_spot_turbulence', DEFAULTS.GREAT_SPOT_TURBULENCE),
            'lava_hotspot_threshold': self.user_config.get('lava_hotspot_threshold', DEFAULTS.LAVA_HOTSPOT_THRESHOLD),
            'lava_hotspot_glow': tuple(self.user_config.get('lava_hotspot_glow', DEFAULTS.LAVA_HOTSPOT_GLOW)),
            'polar_cap_latitude': self.user_config.get('polar_cap_latitude', DEFAULTS.POLAR_CAP_LATITUDE),
            'polar_cap_jitter': self.user_config.get('polar_cap_jitter', DEFAULTS.POLAR_CAP_JITTER),
            'polar_cap_color': tuple(self.user_config.get('polar_cap_color', DEFAULTS.POLAR_CAP_COLOR)),

            'default_atmosphere_thickness': self.user_config.get('default_atmosphere_thickness', DEFAULTS.DEFAULT_ATMOSPHERE_THICKNESS),
            'atmosphere_overlap': self.user_config.get('atmosphere_overlap', DEFAULTS.ATMOSPHERE_OVERLAP),
            'atmosphere_max_alpha': self.user_config.get('atmosphere_max_alpha', DEFAULTS.ATMOSPHERE_MAX_ALPHA),
            'atmosphere_band_steps': self.user_config.get('atmosphere_band_steps', DEFAULTS.ATMOSPHERE_BAND_STEPS),
            'banded_atmosphere_min_px': self.user_config.get('banded_atmosphere_min_px', DEFAULTS.BANDED_ATMOSPHERE_MIN_PX),
            'atmosphere_color_jitter': self.user_config.get('atmosphere_color_jitter', DEFAULTS.ATMOSPHERE_COLOR_JITTER),
            'atmosphere_pattern_strength': self.user_config.get('atmosphere_pattern_strength', DEFAULTS.ATMOSPHERE_PATTERN_STRENGTH),
            'atmosphere_pattern_octaves': self.user_config.get('atmosphere_pattern_octaves', DEFAULTS.ATMOSPHERE_PATTERN_OCTAVES),
            'atmosphere_band_count': self.user_config.get('atmosphere_band_count', DEFAULTS.ATMOSPHERE_BAND_COUNT),
            'atmosphere_sine_lobes': self.user_config.get('atmosphere_sine_lobes', DEFAULTS.ATMOSPHERE_SINE_LOBES),
            'atmosphere_cloud_frequency': self.user_config.get('atmosphere_cloud_frequency', DEFAULTS.ATMOSPHERE_CLOUD_FREQUENCY),
            'atmosphere_dust_frequency': self.user_config.get('atmosphere_dust_frequency', DEFAULTS.ATMOSPHERE_DUST_FREQUENCY),
        }

        # --- Validate the values the rasterizer cannot recover from ---
        padding_px = self.settings['padding_px']
        if padding_px != int(padding_px) or padding_px < 1:
            raise ValueError(f"padding_px must be a whole number of at least 1, got {padding_px}")
        self.settings['padding_px'] = int(padding_px)
        if self.settings['crater_overlap_margin'] < 1.0:
            raise ValueError(f"crater_overlap_margin must be >= 1.0, got {self.settings['crater_overlap_margin']}")
        if not DEFAULTS.MIN_NOISE_OCTAVES <= self.settings['secondary_noise_octaves'] <= DEFAULTS.MAX_NOISE_OCTAVES:
            raise ValueError(f"secondary_noise_octaves out of range: {self.settings['secondary_noise_octaves']}")
        if self.settings['atmosphere_band_steps'] < 1:
            raise ValueError(f"atmosphere_band_steps must be at least 1, got {self.settings['atmosphere_band_steps']}")
        self.settings['light_direction'] = tuple(lighting.normalize(self.settings['light_direction']))
        self.settings['view_direction'] = tuple(lighting.normalize(self.settings['view_direction']))

        self.logger.info(f"BodyGenerator initialized with {len(self.user_config)} configuration override(s).")

    # --- Crater Field ---
    def place_craters(self, descriptor: SurfaceDescriptor) -> list[crater_field.CraterSpec]:
        """The crater field of a body; empty for categories without craters."""
        theme = resolve_theme(descriptor.category, descriptor.theme, self.logger)
        return self._place_craters(descriptor, CATEGORY_TABLE[descriptor.category], THEME_TABLE[theme])

    def _place_craters(self, descriptor: SurfaceDescriptor, variant: VariantConfig, theme_config: ThemeConfig) -> list:
        if not variant.has_craters or theme_config.craters is None:
            return []
        ranges = theme_config.craters
        return crater_field.place_craters(
            derive_seed(descriptor.seed, self.settings['crater_seed_offset']),
            ranges.count_range,
            ranges.radius_range,
            ranges.depth_range,
            attempts_per_crater=self.settings['crater_attempts_per_crater'],
            overlap_margin=self.settings['crater_overlap_margin'],
            spread=self.settings['crater_center_spread'],
        )

    # --- Surface Value ---
    def _normalized_fbm(self, u, v, octaves, seed, frequency, amplitude) -> np.ndarray:
        """fBm stretched to [0, 1] by its total amplitude."""
        return fbm_grid(u, v, octaves, seed, frequency, amplitude) / amplitude_sum(octaves, amplitude)

    def _surface_value(self, u, v, seed: int, theme_config: ThemeConfig, variant: VariantConfig) -> np.ndarray:
        base_seed = derive_seed(seed, self.settings['base_seed_offset'])
        base = self._normalized_fbm(u, v, theme_config.octaves, base_seed, theme_config.frequency, theme_config.amplitude)

        if variant.surface_mode == "bands":
            # Latitude bands, bent sideways by the noise.
            phase = (v + theme_config.band_turbulence * (base - 0.5)) * theme_config.band_frequency * np.pi
            value = 0.8 * (0.5 + 0.5 * np.sin(phase)) + 0.2 * base
        else:
            value = base
            for layer in theme_config.detail_layers:
                detail = self._normalized_fbm(
                    u, v, layer.octaves, derive_seed(seed, layer.seed_offset), layer.frequency, theme_config.amplitude
                )
                value = value + layer.weight * (detail - 0.5)

        return 0.5 + (value - 0.5) * theme_config.contrast

    # --- Main Rasterization ---
    def rasterize_layers(self, descriptor: SurfaceDescriptor) -> SurfaceLayers:
        """
        Runs the full surface pipeline on the padded grid and returns every
        intermediate layer. generate_surface crops the result.
        """
        category = descriptor.category
        theme = resolve_theme(category, descriptor.theme, self.logger)
        theme_config = THEME_TABLE[theme]
        variant = CATEGORY_TABLE[category]
        seed = descriptor.seed
        size_px = descriptor.size_px

        # 1. Silhouette. Irregular bodies warp the grid before the disk test.
        x, y = get_coordinate_grid(size_px, self.settings['padding_px'])
        if variant.irregular_silhouette:
            shape = AsteroidShape.from_seed(derive_seed(seed, self.settings['shape_seed_offset']))
            x, y = warp_asteroid(x, y, shape)
        dist2 = x * x + y * y
        inside = dist2 < 1.0

        # 2. Project onto the sphere.
        u, v = spherify((x + 1.0) / 2.0, (y + 1.0) / 2.0)
        u = np.ascontiguousarray(u)
        v = np.ascontiguousarray(v)

        # 3. Base value from noise (terrain) or latitude bands (gaseous).
        value = self._surface_value(u, v, seed, theme_config, variant)

        # 4. Craters darken their floors and brighten their rims.
        craters = self._place_craters(descriptor, variant, theme_config)
        depth = None
        if craters:
            crater_seed = derive_seed(seed, self.settings['crater_seed_offset'])
            depth = crater_field.depth_field(u, v, inside, craters, crater_seed)
            value = value + depth * theme_config.crater_tone
        value = np.clip(value, 0.0, 1.0)

        # 5. Quantize onto the theme palette.
        lut = color_maps.create_palette_lut(theme_config.palette)
        base_rgb = color_maps.quantize_array(value, lut)
        rgb = base_rgb.astype(np.float64) / 255.0

        # 6. Post effect, keyed off a secondary noise layer.
        if theme_config.post_effect != "none":
            secondary = self._normalized_fbm(
                u, v,
                self.settings['secondary_noise_octaves'],
                derive_seed(seed, self.settings['secondary_seed_offset']),
                self.settings['secondary_noise_frequency'],
                DEFAULTS.NOISE_BASE_AMPLITUDE,
            )
            rgb = POST_EFFECTS[theme_config.post_effect](rgb, u, v, secondary, seed, self.settings)

        # 7. Lighting, only where a depth field exists.
        if depth is not None:
            strength = self.settings['normal_strength'] * size_px / self.settings['normal_reference_size_px']
            normals = lighting.normal_map(depth, strength)
            rgb = lighting.shade(
                rgb, normals, self.settings['light_direction'],
                self.settings['ambient_light'], self.settings['light_intensity'],
            )
            if theme_config.enhanced_lighting:
                highlight = lighting.specular(
                    normals, self.settings['light_direction'], self.settings['view_direction'],
                    self.settings['specular_power'], self.settings['specular_strength'],
                )
                rgb = np.clip(rgb + highlight[..., np.newaxis], 0.0, 1.0)
        else:
            depth = np.zeros(value.shape)

        # 8. Radial edge darkening.
        k = self.settings['edge_darkening'][category.value]
        rgb = rgb * np.clip(1.0 - dist2 * k, 0.0, 1.0)[..., np.newaxis]

        return SurfaceLayers(
            theme=theme, inside=inside, dist2=dist2, value=value,
            base_rgb=base_rgb, depth=depth, rgb=rgb, craters=craters,
        )

    def generate_surface(self, descriptor: SurfaceDescriptor) -> PixelBuffer:
        """Rasterizes the body's surface into a size_px x size_px RGBA buffer."""
        start_time = time.perf_counter()
        layers = self.rasterize_layers(descriptor)

        pixels = np.zeros(layers.inside.shape + (4,), dtype=np.uint8)
        pixels[..., :3] = np.round(layers.rgb * 255.0).astype(np.uint8)
        pixels[..., 3] = 255
        pixels[~layers.inside] = 0

        # Crop the padding away.
        pad = self.settings['padding_px']
        size_px = descriptor.size_px
        pixels = pixels[pad:pad + size_px, pad:pad + size_px]

        elapsed = time.perf_counter() - start_time
        self.logger.debug(
            f"Generated {descriptor.category.value}/{layers.theme.name} seed={descriptor.seed} "
            f"{size_px}px ({len(layers.craters)} craters) in {elapsed * 1000:.1f} ms"
        )
        return PixelBuffer(width=size_px, height=size_px, pixels=pixels)

    def generate_atmosphere(self, descriptor: SurfaceDescriptor, color=None, thickness=None) -> PixelBuffer:
        """
        Rasterizes the halo for a body. None selects the theme's colour and
        the default thickness.
        """
        theme = resolve_theme(descriptor.category, descriptor.theme, self.logger)
        theme_config = THEME_TABLE[theme]
        if color is None:
            color = theme_config.atmosphere_color
        if thickness is None:
            thickness = self.settings['default_atmosphere_thickness']

        return rasterize_atmosphere(
            descriptor.size_px, descriptor.seed, color, thickness, theme_config.atmosphere_pattern, self.settings
        )


# --- Module-Level Convenience ---
def generate_surface(descriptor: SurfaceDescriptor, config: dict = None) -> PixelBuffer:
    return BodyGenerator(config=config).generate_surface(descriptor)


def generate_atmosphere(descriptor: SurfaceDescriptor, color=None, thickness=None, config: dict = None) -> PixelBuffer:
    return BodyGenerator(config=config).generate_atmosphere(descriptor, color, thickness)
