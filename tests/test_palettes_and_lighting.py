import numpy as np
import pytest

from body_generator import color_maps
from body_generator.lighting import normal_at, normal_map, normalize, shade, specular
from body_generator.themes import THEME_TABLE


def test_quantize_endpoints_for_every_theme_palette():
    for theme, theme_config in THEME_TABLE.items():
        palette = theme_config.palette
        assert color_maps.quantize(0.0, palette) == palette[0], theme
        assert color_maps.quantize(1.0, palette) == palette[-1], theme


def test_quantize_is_a_hard_step_and_clamps():
    palette = ((0, 0, 0), (128, 128, 128), (255, 255, 255))
    assert color_maps.quantize(-0.5, palette) == palette[0]
    assert color_maps.quantize(0.49, palette) == palette[0]
    assert color_maps.quantize(0.5, palette) == palette[1]
    assert color_maps.quantize(0.99, palette) == palette[1]
    assert color_maps.quantize(3.0, palette) == palette[2]


def test_quantize_array_agrees_with_scalar_quantize():
    palette = color_maps.PALETTE_TEMPERATE
    lut = color_maps.create_palette_lut(palette)
    values = np.linspace(-0.2, 1.2, 57)
    colors = color_maps.quantize_array(values, lut)
    assert colors.shape == (57, 3)
    assert colors.dtype == np.uint8
    for value, color in zip(values, colors):
        assert tuple(int(c) for c in color) == color_maps.quantize(value, palette)


@pytest.mark.parametrize("palette", [
    ((0, 0, 0), (1, 1, 1)),
    tuple((i, i, i) for i in range(9)),
    ((0, 0, 0), (1, 1, 1), (300, 0, 0)),
    ((0, 0, 0), (1, 1, 1), (2, 2)),
])
def test_validate_palette_rejects_bad_palettes(palette):
    with pytest.raises(ValueError):
        color_maps.validate_palette(palette)


def test_flat_depth_gives_up_normals():
    normals = normal_map(np.zeros((8, 8)), strength=5.0)
    assert normals.shape == (8, 8, 3)
    assert np.allclose(normals, [0.0, 0.0, 1.0])


def test_normal_at_matches_normal_map_including_edges():
    rng = np.random.default_rng(3)
    depth = rng.random((10, 12))
    normals = normal_map(depth, strength=2.0)
    for x, y in [(0, 0), (5, 4), (11, 9), (0, 9)]:
        assert np.allclose(normal_at(depth, x, y, 2.0), normals[y, x])


def test_normals_are_unit_length():
    rng = np.random.default_rng(4)
    normals = normal_map(rng.random((16, 16)) * 3.0, strength=6.0)
    assert np.allclose(np.linalg.norm(normals, axis=-1), 1.0)


def test_shade_lambert_factor():
    base = np.full((1, 1, 3), 0.5)
    up = np.array([[[0.0, 0.0, 1.0]]])
    lit = shade(base, up, (0.0, 0.0, 1.0), ambient=0.2, intensity=0.6)
    assert np.allclose(lit, 0.5 * 0.8)
    # Light from behind: ambient only.
    dark = shade(base, up, (0.0, 0.0, -1.0), ambient=0.2, intensity=0.6)
    assert np.allclose(dark, 0.5 * 0.2)
    bright = shade(np.ones((1, 1, 3)), up, (0.0, 0.0, 1.0), ambient=0.9, intensity=0.9)
    assert bright.max() == 1.0


def test_specular_is_zero_when_facing_away_from_light():
    up = np.array([[[0.0, 0.0, 1.0]]])
    assert specular(up, (0.0, 0.0, -1.0), (0.0, 0.0, 1.0), 16.0, 0.5)[0, 0] == 0.0
    assert specular(up, (0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 16.0, 0.5)[0, 0] == pytest.approx(0.5)


def test_normalize_rejects_zero_vector():
    with pytest.raises(ValueError):
        normalize((0.0, 0.0, 0.0))
