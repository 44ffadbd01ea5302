import logging

import numpy as np
import pytest

from body_generator import generate_atmosphere, generate_surface
from body_generator.descriptor import SurfaceDescriptor
from body_generator.generator import BodyGenerator, get_coordinate_grid
from body_generator.themes import (
    THEME_TABLE,
    THEMES_BY_CATEGORY,
    AsteroidTheme,
    BodyCategory,
    GaseousTheme,
    MoonTheme,
    TerranTheme,
)


@pytest.fixture(scope="module")
def generator():
    return BodyGenerator(logger=logging.getLogger("test-generator"))


def test_moon_example_end_to_end(generator):
    descriptor = SurfaceDescriptor(seed=42, category=BodyCategory.MOON, theme=MoonTheme.ROCKY, size_px=48)
    first = generator.generate_surface(descriptor)
    second = generator.generate_surface(descriptor)

    assert first == second
    assert first.tobytes() == second.tobytes()
    assert (first.width, first.height) == (48, 48)
    assert first.pixels.shape == (48, 48, 4)
    assert first.pixels[0, 0, 3] == 0

    center = first.pixels[24, 24]
    assert center[3] == 255
    assert center[:3].max() > 0

    # The padded grid is 52x52; its centre colour before lighting is a Rocky palette entry.
    layers = generator.rasterize_layers(descriptor)
    assert layers.inside.shape == (52, 52)
    assert tuple(int(c) for c in layers.base_rgb[26, 26]) in THEME_TABLE[MoonTheme.ROCKY].palette


def test_module_level_generate_surface_matches_generator(generator):
    descriptor = SurfaceDescriptor(seed=42, category="moon", theme=0, size_px=48)
    assert generate_surface(descriptor) == generator.generate_surface(descriptor)


def test_different_seeds_give_different_bodies(generator):
    a = generator.generate_surface(SurfaceDescriptor(1, BodyCategory.TERRAN, TerranTheme.TEMPERATE, 64))
    b = generator.generate_surface(SurfaceDescriptor(2, BodyCategory.TERRAN, TerranTheme.TEMPERATE, 64))
    assert a != b


def test_every_category_and_theme_renders(generator):
    for category, themes in THEMES_BY_CATEGORY.items():
        for theme in themes:
            buffer = generator.generate_surface(SurfaceDescriptor(7, category, theme, 32))
            assert buffer.pixels.shape == (32, 32, 4)
            assert buffer.pixels[0, 0, 3] == 0
            assert buffer.pixels[16, 16, 3] == 255


@pytest.mark.parametrize("category, theme", [
    (BodyCategory.TERRAN, TerranTheme.OCEANIC),
    (BodyCategory.GASEOUS, GaseousTheme.JOVIAN),
    (BodyCategory.MOON, MoonTheme.ICY),
    (BodyCategory.ASTEROID, AsteroidTheme.METALLIC),
])
def test_silhouette_edges_are_hard(generator, category, theme):
    buffer = generator.generate_surface(SurfaceDescriptor(1234, category, theme, 256))
    assert set(np.unique(buffer.alpha)) <= {0, 255}
    # Transparent pixels carry no colour.
    assert not np.any(buffer.pixels[buffer.alpha == 0, :3])


def test_round_silhouette_matches_disk_test(generator):
    size = 64
    buffer = generator.generate_surface(SurfaceDescriptor(5, BodyCategory.TERRAN, TerranTheme.ARID, size))
    x, y = get_coordinate_grid(size, 0)
    expected = np.where(x * x + y * y < 1.0, 255, 0)
    assert np.array_equal(buffer.alpha, expected)


def test_asteroids_are_irregular(generator):
    size = 96
    buffer = generator.generate_surface(SurfaceDescriptor(77, BodyCategory.ASTEROID, AsteroidTheme.SILICATE, size))
    x, y = get_coordinate_grid(size, 0)
    disk = x * x + y * y < 1.0
    opaque = buffer.alpha == 255
    # Warping only ever removes pixels from the disk.
    assert not np.any(opaque & ~disk)
    assert opaque.sum() < disk.sum()


def test_invalid_theme_renders_category_default(generator, caplog):
    default = SurfaceDescriptor(9, BodyCategory.GASEOUS, GaseousTheme.JOVIAN, 32)
    invalid = SurfaceDescriptor(9, BodyCategory.GASEOUS, 99, 32)
    with caplog.at_level(logging.WARNING):
        buffer = generator.generate_surface(invalid)
    assert buffer == generator.generate_surface(default)
    assert "falling back to JOVIAN" in caplog.text


def test_theme_from_another_category_falls_back(generator, caplog):
    with caplog.at_level(logging.WARNING):
        buffer = generator.generate_surface(SurfaceDescriptor(9, BodyCategory.MOON, TerranTheme.LAVA, 32))
    assert buffer == generator.generate_surface(SurfaceDescriptor(9, BodyCategory.MOON, MoonTheme.ROCKY, 32))
    assert "Invalid theme" in caplog.text


def test_place_craters_per_category(generator):
    assert generator.place_craters(SurfaceDescriptor(3, BodyCategory.TERRAN, 0, 32)) == []
    assert generator.place_craters(SurfaceDescriptor(3, BodyCategory.GASEOUS, 0, 32)) == []
    moon_craters = generator.place_craters(SurfaceDescriptor(3, BodyCategory.MOON, 0, 32))
    assert len(moon_craters) >= 1
    # Crater placement does not depend on resolution.
    assert moon_craters == generator.place_craters(SurfaceDescriptor(3, BodyCategory.MOON, 0, 128))


def test_tiny_bodies_render():
    buffer = generate_surface(SurfaceDescriptor(1, BodyCategory.MOON, 0, 1))
    assert buffer.pixels.shape == (1, 1, 4)
    assert buffer.pixels[0, 0, 3] == 255


def test_config_overrides_change_output():
    descriptor = SurfaceDescriptor(11, BodyCategory.MOON, MoonTheme.DUSTY, 48)
    default = generate_surface(descriptor)
    dimmer = generate_surface(descriptor, config={'ambient_light': 0.05})
    assert default != dimmer


@pytest.mark.parametrize("config", [
    {'crater_overlap_margin': 0.5},
    {'padding_px': 0},
    {'padding_px': 2.5},
    {'secondary_noise_octaves': 5},
    {'light_direction': (0.0, 0.0, 0.0)},
])
def test_invalid_configuration_raises(config):
    with pytest.raises(ValueError):
        BodyGenerator(config=config)


def test_generate_atmosphere_uses_theme_defaults():
    descriptor = SurfaceDescriptor(4, BodyCategory.TERRAN, TerranTheme.TEMPERATE, 64)
    halo = generate_atmosphere(descriptor)
    explicit = generate_atmosphere(descriptor, color=THEME_TABLE[TerranTheme.TEMPERATE].atmosphere_color, thickness=0.15)
    assert halo == explicit


def test_whole_float_padding_from_json_is_accepted():
    descriptor = SurfaceDescriptor(6, BodyCategory.MOON, MoonTheme.ROCKY, 24)
    generator = BodyGenerator(config={'padding_px': 2.0})
    assert generator.settings['padding_px'] == 2
    assert isinstance(generator.settings['padding_px'], int)
    assert generator.generate_surface(descriptor) == generate_surface(descriptor)
