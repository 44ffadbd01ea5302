import logging

import numpy as np
import pytest

from body_generator.descriptor import DegenerateSizeError, PixelBuffer, SizeClass, SurfaceDescriptor
from body_generator.effects import POST_EFFECTS
from body_generator.themes import (
    CATEGORY_TABLE,
    POST_EFFECT_NAMES,
    THEME_TABLE,
    THEMES_BY_CATEGORY,
    BodyCategory,
    MoonTheme,
    TerranTheme,
    resolve_theme,
)


def test_every_theme_has_a_table_row():
    for category, themes in THEMES_BY_CATEGORY.items():
        assert category in CATEGORY_TABLE
        for theme in themes:
            assert theme in THEME_TABLE


def test_post_effect_names_match_registry():
    assert set(POST_EFFECTS) == set(POST_EFFECT_NAMES)
    for theme_config in THEME_TABLE.values():
        assert theme_config.post_effect in POST_EFFECTS


def test_only_moons_and_asteroids_have_craters():
    for category, variant in CATEGORY_TABLE.items():
        assert variant.has_craters == (category in (BodyCategory.MOON, BodyCategory.ASTEROID))
        if variant.has_craters:
            for theme in THEMES_BY_CATEGORY[category]:
                assert THEME_TABLE[theme].craters is not None


def test_resolve_theme_accepts_members_and_indices():
    assert resolve_theme(BodyCategory.MOON, MoonTheme.ICY) is MoonTheme.ICY
    assert resolve_theme(BodyCategory.MOON, 2) is MoonTheme.VOLCANIC
    assert resolve_theme(BodyCategory.MOON, np.int64(3)) is MoonTheme.DUSTY


@pytest.mark.parametrize("theme", [99, -1, TerranTheme.LAVA, "rocky", True, None])
def test_invalid_theme_falls_back_with_warning(theme, caplog):
    with caplog.at_level(logging.WARNING):
        resolved = resolve_theme(BodyCategory.MOON, theme)
    assert resolved is MoonTheme.ROCKY
    assert "falling back" in caplog.text


@pytest.mark.parametrize("size_px", [0, -4, 1.5, float("nan"), float("inf"), True, "48", None])
def test_degenerate_sizes_raise(size_px):
    with pytest.raises(DegenerateSizeError):
        SurfaceDescriptor(seed=1, category=BodyCategory.MOON, theme=0, size_px=size_px)


def test_degenerate_size_error_is_a_value_error():
    assert issubclass(DegenerateSizeError, ValueError)


def test_descriptor_normalises_fields_and_is_hashable():
    a = SurfaceDescriptor(seed=7, category="moon", theme=MoonTheme.ROCKY, size_px=48.0)
    b = SurfaceDescriptor(seed=7, category=BodyCategory.MOON, theme=MoonTheme.ROCKY, size_px=48)
    assert a == b
    assert hash(a) == hash(b)
    assert a.category is BodyCategory.MOON
    assert isinstance(a.size_px, int)
    assert a.cache_key() == ("moon", "ROCKY", 7, 48)


@pytest.mark.parametrize("seed", [2 ** 63, -(2 ** 63) - 1, 1.0, "7"])
def test_descriptor_rejects_bad_seeds(seed):
    with pytest.raises(ValueError):
        SurfaceDescriptor(seed=seed, category=BodyCategory.MOON, theme=0, size_px=16)


def test_descriptor_from_size_class():
    descriptor = SurfaceDescriptor.from_size_class(3, BodyCategory.TERRAN, TerranTheme.ARID, SizeClass.SMALL)
    assert descriptor.size_px == 48
    assert SurfaceDescriptor.from_size_class(3, BodyCategory.TERRAN, 0, "huge").size_px == 256


def test_pixel_buffer_is_read_only_rgba():
    pixels = np.zeros((3, 5, 4), dtype=np.uint8)
    buffer = PixelBuffer(width=5, height=3, pixels=pixels)
    assert len(buffer.tobytes()) == 5 * 3 * 4
    assert not buffer.pixels.flags.writeable
    assert buffer == PixelBuffer(width=5, height=3, pixels=pixels.copy())
    with pytest.raises(ValueError):
        PixelBuffer(width=3, height=5, pixels=pixels)
