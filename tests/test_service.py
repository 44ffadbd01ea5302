from body_generator import BodyService, GenerationCache
from body_generator.descriptor import SurfaceDescriptor
from body_generator.generator import BodyGenerator
from body_generator.themes import BodyCategory, MoonTheme, TerranTheme


def test_surface_is_served_from_cache():
    service = BodyService(cache=GenerationCache(max_size=8))
    descriptor = SurfaceDescriptor(42, BodyCategory.MOON, MoonTheme.ROCKY, 24)
    first = service.surface(descriptor)
    assert service.surface(descriptor) is first
    assert service.cache.stats()['hits'] == 1


def test_atmosphere_keys_do_not_collide_with_surfaces():
    service = BodyService()
    descriptor = SurfaceDescriptor(5, BodyCategory.TERRAN, TerranTheme.FROZEN, 24)
    surface = service.surface(descriptor)
    halo = service.atmosphere(descriptor)
    assert halo.width > surface.width
    assert service.atmosphere(descriptor) is halo
    assert service.atmosphere(descriptor, thickness=0.4) is not halo
    assert service.cache.bucket_size(BodyCategory.TERRAN) == 3


def test_render_many_preserves_order_and_matches_direct_generation():
    generator = BodyGenerator()
    service = BodyService(generator=generator, cache=GenerationCache(max_size=4))
    descriptors = [SurfaceDescriptor(seed, BodyCategory.MOON, seed % 4, 16) for seed in range(6)]
    descriptors.append(descriptors[0])

    buffers = service.render_many(descriptors, max_workers=3)

    assert len(buffers) == len(descriptors)
    for descriptor, buffer in zip(descriptors, buffers):
        assert buffer == generator.generate_surface(descriptor)
    assert service.cache.bucket_size(BodyCategory.MOON) <= 4
