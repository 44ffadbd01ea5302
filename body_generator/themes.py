# body_generator/themes.py

"""
================================================================================
BODY CATEGORIES AND THEMES
================================================================================
Closed enums for body categories and their themes, and the fixed tables that
turn a (category, theme) pair into rasterizer parameters. Adding a theme means
adding an enum member and a THEME_TABLE row; nothing else changes.
================================================================================
"""

import logging
import numbers
from dataclasses import dataclass
from enum import Enum

from . import color_maps
from . import config as DEFAULTS


class BodyCategory(Enum):
    TERRAN = "terran"
    GASEOUS = "gaseous"
    MOON = "moon"
    ASTEROID = "asteroid"


# Theme values double as the integer index accepted in a SurfaceDescriptor.
class TerranTheme(Enum):
    TEMPERATE = 0
    ARID = 1
    OCEANIC = 2
    FROZEN = 3
    LAVA = 4


class GaseousTheme(Enum):
    JOVIAN = 0
    NEPTUNIAN = 1
    TOXIC = 2
    CRIMSON = 3


class MoonTheme(Enum):
    ROCKY = 0
    ICY = 1
    VOLCANIC = 2
    DUSTY = 3


class AsteroidTheme(Enum):
    CARBONACEOUS = 0
    METALLIC = 1
    SILICATE = 2
    ICY = 3


THEMES_BY_CATEGORY = {
    BodyCategory.TERRAN: TerranTheme,
    BodyCategory.GASEOUS: GaseousTheme,
    BodyCategory.MOON: MoonTheme,
    BodyCategory.ASTEROID: AsteroidTheme,
}

POST_EFFECT_NAMES = ("none", "great_spot", "lava_hotspots", "polar_caps")
ATMOSPHERE_PATTERNS = ("clouds", "bands", "dust", "sine")
SURFACE_MODES = ("terrain", "bands")


@dataclass(frozen=True)
class DetailLayer:
    """A smaller-amplitude fBm layer added on top of the base noise."""
    octaves: int
    frequency: float
    weight: float
    seed_offset: int


@dataclass(frozen=True)
class CraterConfig:
    count_range: tuple[int, int]
    radius_range: tuple[float, float]
    depth_range: tuple[float, float]


@dataclass(frozen=True)
class ThemeConfig:
    palette: tuple
    octaves: int
    frequency: float = DEFAULTS.NOISE_BASE_FREQUENCY
    amplitude: float = DEFAULTS.NOISE_BASE_AMPLITUDE
    # Stretch applied around 0.5 after the fBm is normalised to [0, 1].
    contrast: float = 1.0
    detail_layers: tuple[DetailLayer, ...] = ()
    # Gaseous banding: number of latitude bands and how far noise bends them.
    band_frequency: float = 0.0
    band_turbulence: float = 0.0
    craters: CraterConfig = None
    # How strongly crater depth darkens (floors) or brightens (rims) the value.
    crater_tone: float = 0.0
    post_effect: str = "none"
    enhanced_lighting: bool = False
    atmosphere_color: tuple[int, int, int, int] = (255, 255, 255, 128)
    atmosphere_pattern: str = "sine"

    def __post_init__(self):
        color_maps.validate_palette(self.palette)
        octave_counts = [self.octaves] + [layer.octaves for layer in self.detail_layers]
        for octaves in octave_counts:
            if not DEFAULTS.MIN_NOISE_OCTAVES <= octaves <= DEFAULTS.MAX_NOISE_OCTAVES:
                raise ValueError(
                    f"Octaves must be in [{DEFAULTS.MIN_NOISE_OCTAVES}, {DEFAULTS.MAX_NOISE_OCTAVES}], got {octaves}"
                )
        if self.post_effect not in POST_EFFECT_NAMES:
            raise ValueError(f"Unknown post effect '{self.post_effect}'")
        if self.atmosphere_pattern not in ATMOSPHERE_PATTERNS:
            raise ValueError(f"Unknown atmosphere pattern '{self.atmosphere_pattern}'")


@dataclass(frozen=True)
class VariantConfig:
    """What differs between categories beyond the theme table."""
    surface_mode: str
    has_craters: bool = False
    irregular_silhouette: bool = False

    def __post_init__(self):
        if self.surface_mode not in SURFACE_MODES:
            raise ValueError(f"Unknown surface mode '{self.surface_mode}'")


CATEGORY_TABLE = {
    BodyCategory.TERRAN: VariantConfig(surface_mode="terrain"),
    BodyCategory.GASEOUS: VariantConfig(surface_mode="bands"),
    BodyCategory.MOON: VariantConfig(surface_mode="terrain", has_craters=True),
    BodyCategory.ASTEROID: VariantConfig(surface_mode="terrain", has_craters=True, irregular_silhouette=True),
}

# --- Shared Layer Presets ---
_TERRAN_DETAIL = (
    DetailLayer(octaves=3, frequency=16.0, weight=0.15, seed_offset=DEFAULTS.DETAIL_SEED_OFFSET),
    DetailLayer(octaves=2, frequency=32.0, weight=0.05, seed_offset=DEFAULTS.SECONDARY_SEED_OFFSET),
)
_ROCK_DETAIL = (
    DetailLayer(octaves=2, frequency=24.0, weight=0.10, seed_offset=DEFAULTS.DETAIL_SEED_OFFSET),
)

THEME_TABLE = {
    # --- Terran ---
    TerranTheme.TEMPERATE: ThemeConfig(
        palette=color_maps.PALETTE_TEMPERATE, octaves=4, frequency=4.0, contrast=1.6,
        detail_layers=_TERRAN_DETAIL, post_effect="polar_caps",
        atmosphere_color=(120, 170, 255, 200), atmosphere_pattern="clouds",
    ),
    TerranTheme.ARID: ThemeConfig(
        palette=color_maps.PALETTE_ARID, octaves=4, frequency=5.0, contrast=1.4,
        detail_layers=_TERRAN_DETAIL[:1],
        atmosphere_color=(230, 180, 120, 160), atmosphere_pattern="dust",
    ),
    TerranTheme.OCEANIC: ThemeConfig(
        palette=color_maps.PALETTE_OCEANIC, octaves=4, frequency=3.0, contrast=1.3,
        detail_layers=_TERRAN_DETAIL, post_effect="polar_caps",
        atmosphere_color=(110, 160, 255, 210), atmosphere_pattern="clouds",
    ),
    TerranTheme.FROZEN: ThemeConfig(
        palette=color_maps.PALETTE_FROZEN, octaves=3, frequency=5.0, contrast=1.5,
        detail_layers=_TERRAN_DETAIL[:1],
        atmosphere_color=(200, 225, 255, 170), atmosphere_pattern="clouds",
    ),
    TerranTheme.LAVA: ThemeConfig(
        palette=color_maps.PALETTE_LAVA, octaves=4, frequency=6.0, contrast=1.8,
        detail_layers=_TERRAN_DETAIL[:1], post_effect="lava_hotspots",
        atmosphere_color=(255, 120, 60, 190), atmosphere_pattern="sine",
    ),

    # --- Gaseous ---
    GaseousTheme.JOVIAN: ThemeConfig(
        palette=color_maps.PALETTE_JOVIAN, octaves=3, frequency=4.0, contrast=1.2,
        band_frequency=7.0, band_turbulence=0.35, post_effect="great_spot",
        atmosphere_color=(230, 200, 160, 150), atmosphere_pattern="bands",
    ),
    GaseousTheme.NEPTUNIAN: ThemeConfig(
        palette=color_maps.PALETTE_NEPTUNIAN, octaves=3, frequency=3.0, contrast=1.1,
        band_frequency=5.0, band_turbulence=0.25, post_effect="great_spot",
        atmosphere_color=(120, 170, 255, 170), atmosphere_pattern="bands",
    ),
    GaseousTheme.TOXIC: ThemeConfig(
        palette=color_maps.PALETTE_TOXIC, octaves=3, frequency=5.0, contrast=1.3,
        band_frequency=9.0, band_turbulence=0.45,
        atmosphere_color=(190, 210, 90, 170), atmosphere_pattern="bands",
    ),
    GaseousTheme.CRIMSON: ThemeConfig(
        palette=color_maps.PALETTE_CRIMSON, octaves=3, frequency=4.0, contrast=1.2,
        band_frequency=6.0, band_turbulence=0.30, post_effect="great_spot",
        atmosphere_color=(230, 110, 90, 160), atmosphere_pattern="bands",
    ),

    # --- Moons ---
    MoonTheme.ROCKY: ThemeConfig(
        palette=color_maps.PALETTE_MOON_ROCKY, octaves=3, contrast=1.3, detail_layers=_ROCK_DETAIL,
        craters=CraterConfig(count_range=(6, 14), radius_range=(0.04, 0.12), depth_range=(0.5, 1.0)),
        crater_tone=0.35,
        atmosphere_color=(200, 200, 210, 90), atmosphere_pattern="dust",
    ),
    MoonTheme.ICY: ThemeConfig(
        palette=color_maps.PALETTE_MOON_ICY, octaves=3, contrast=1.2, detail_layers=_ROCK_DETAIL,
        craters=CraterConfig(count_range=(4, 9), radius_range=(0.04, 0.10), depth_range=(0.3, 0.7)),
        crater_tone=0.25, enhanced_lighting=True,
        atmosphere_color=(190, 220, 255, 120), atmosphere_pattern="sine",
    ),
    MoonTheme.VOLCANIC: ThemeConfig(
        palette=color_maps.PALETTE_MOON_VOLCANIC, octaves=3, contrast=1.4, detail_layers=_ROCK_DETAIL,
        craters=CraterConfig(count_range=(3, 8), radius_range=(0.05, 0.12), depth_range=(0.4, 0.9)),
        crater_tone=0.30, post_effect="lava_hotspots",
        atmosphere_color=(255, 140, 80, 120), atmosphere_pattern="dust",
    ),
    MoonTheme.DUSTY: ThemeConfig(
        palette=color_maps.PALETTE_MOON_DUSTY, octaves=2, contrast=1.2, detail_layers=_ROCK_DETAIL,
        craters=CraterConfig(count_range=(8, 18), radius_range=(0.03, 0.09), depth_range=(0.4, 0.8)),
        crater_tone=0.30,
        atmosphere_color=(210, 180, 140, 110), atmosphere_pattern="dust",
    ),

    # --- Asteroids ---
    AsteroidTheme.CARBONACEOUS: ThemeConfig(
        palette=color_maps.PALETTE_CARBONACEOUS, octaves=2, frequency=6.0, contrast=1.2,
        craters=CraterConfig(count_range=(5, 12), radius_range=(0.05, 0.14), depth_range=(0.6, 1.2)),
        crater_tone=0.40,
        atmosphere_color=(120, 110, 100, 60), atmosphere_pattern="dust",
    ),
    AsteroidTheme.METALLIC: ThemeConfig(
        palette=color_maps.PALETTE_METALLIC, octaves=2, frequency=6.0, contrast=1.1,
        craters=CraterConfig(count_range=(4, 10), radius_range=(0.05, 0.12), depth_range=(0.5, 1.0)),
        crater_tone=0.30, enhanced_lighting=True,
        atmosphere_color=(190, 185, 175, 60), atmosphere_pattern="dust",
    ),
    AsteroidTheme.SILICATE: ThemeConfig(
        palette=color_maps.PALETTE_SILICATE, octaves=3, frequency=6.0, contrast=1.2,
        craters=CraterConfig(count_range=(5, 12), radius_range=(0.05, 0.14), depth_range=(0.6, 1.2)),
        crater_tone=0.35,
        atmosphere_color=(200, 170, 130, 60), atmosphere_pattern="dust",
    ),
    AsteroidTheme.ICY: ThemeConfig(
        palette=color_maps.PALETTE_ASTEROID_ICY, octaves=2, frequency=6.0, contrast=1.2,
        craters=CraterConfig(count_range=(3, 8), radius_range=(0.05, 0.12), depth_range=(0.4, 0.8)),
        crater_tone=0.25, enhanced_lighting=True,
        atmosphere_color=(200, 225, 255, 80), atmosphere_pattern="sine",
    ),
}


def default_theme(category: BodyCategory) -> Enum:
    return next(iter(THEMES_BY_CATEGORY[category]))


def resolve_theme(category: BodyCategory, theme, logger: logging.Logger = None) -> Enum:
    """
    Returns the theme enum member for (category, theme). An out-of-range
    index, or a theme that belongs to another category, falls back to the
    category default with a logged warning.
    """
    themes = THEMES_BY_CATEGORY[category]
    if isinstance(theme, themes):
        return theme

    members = list(themes)
    if isinstance(theme, numbers.Integral) and not isinstance(theme, bool) and 0 <= theme < len(members):
        return members[theme]

    fallback = members[0]
    (logger or logging.getLogger(__name__)).warning(
        f"Invalid theme {theme!r} for category '{category.value}'; falling back to {fallback.name}."
    )
    return fallback
