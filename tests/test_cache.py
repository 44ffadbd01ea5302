import threading

import pytest

from body_generator.cache import GenerationCache
from body_generator.descriptor import SurfaceDescriptor
from body_generator.themes import BodyCategory


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Counter:
    """A compute function that records how often it ran."""
    def __init__(self, value):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


def single_bucket(key):
    return "all"


def test_bucket_never_exceeds_cap():
    cache = GenerationCache(max_size=4, ttl=1000.0, sweep_interval=1000.0, clock=FakeClock())
    for seed in range(4 + 6):
        key = SurfaceDescriptor(seed, BodyCategory.MOON, 0, 8)
        cache.get_or_compute(key, Counter(seed))
        assert cache.bucket_size(BodyCategory.MOON) <= 4
    assert len(cache) == 4


def test_buckets_are_per_category():
    cache = GenerationCache(max_size=2, ttl=1000.0, sweep_interval=1000.0, clock=FakeClock())
    for seed in range(3):
        cache.get_or_compute(SurfaceDescriptor(seed, BodyCategory.MOON, 0, 8), Counter(seed))
        cache.get_or_compute(SurfaceDescriptor(seed, BodyCategory.TERRAN, 0, 8), Counter(seed))
    assert cache.bucket_size(BodyCategory.MOON) == 2
    assert cache.bucket_size(BodyCategory.TERRAN) == 2
    assert len(cache) == 4


def test_hit_returns_cached_value_without_recomputing():
    cache = GenerationCache(bucket_of=single_bucket, clock=FakeClock())
    compute = Counter("buffer")
    assert cache.get_or_compute("a", compute) == "buffer"
    assert cache.get_or_compute("a", compute) == "buffer"
    assert compute.calls == 1
    stats = cache.stats()
    assert stats['hits'] == 1
    assert stats['misses'] == 1


def test_least_recently_used_entry_is_evicted():
    cache = GenerationCache(max_size=2, ttl=1000.0, sweep_interval=1000.0, bucket_of=single_bucket, clock=FakeClock())
    cache.get_or_compute("a", Counter(1))
    cache.get_or_compute("b", Counter(2))
    cache.get_or_compute("a", Counter(1))
    cache.get_or_compute("c", Counter(3))
    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache


def test_expired_entries_are_recomputed():
    clock = FakeClock()
    cache = GenerationCache(ttl=10.0, sweep_interval=1.0, bucket_of=single_bucket, clock=clock)
    compute = Counter("v")
    cache.get_or_compute("a", compute)
    clock.advance(5.0)
    cache.get_or_compute("a", compute)
    assert compute.calls == 1
    # Hits refresh the access time, so expiry counts from the last hit.
    clock.advance(11.0)
    cache.get_or_compute("a", compute)
    assert compute.calls == 2


def test_sweep_removes_expired_entries_from_every_bucket():
    clock = FakeClock()
    cache = GenerationCache(ttl=10.0, sweep_interval=1.0, bucket_of=lambda key: key[0], clock=clock)
    cache.get_or_compute(("x", 1), Counter(1))
    cache.get_or_compute(("y", 1), Counter(1))
    clock.advance(20.0)
    cache.get_or_compute(("z", 1), Counter(1))
    assert len(cache) == 1
    assert ("z", 1) in cache
    assert cache.stats()['evictions'] == 2


def test_sweep_is_throttled():
    clock = FakeClock()
    cache = GenerationCache(ttl=10.0, sweep_interval=100.0, bucket_of=lambda key: key[0], clock=clock)
    cache.get_or_compute(("x", 1), Counter(1))
    clock.advance(20.0)
    cache.get_or_compute(("y", 1), Counter(1))
    # The stale entry survives until the next sweep is due, but is never served.
    assert ("x", 1) in cache
    compute = Counter(2)
    assert cache.get_or_compute(("x", 1), compute) == 2
    assert compute.calls == 1


def test_clear_does_not_change_results():
    cache = GenerationCache(bucket_of=single_bucket, clock=FakeClock())
    compute = Counter((1, 2, 3))
    before = cache.get_or_compute("k", compute)
    cache.clear()
    assert len(cache) == 0
    after = cache.get_or_compute("k", compute)
    assert before == after
    assert compute.calls == 2


def test_configure_enforces_new_cap_immediately():
    cache = GenerationCache(max_size=5, bucket_of=single_bucket, clock=FakeClock())
    for key in "abcde":
        cache.get_or_compute(key, Counter(key))
    cache.configure(max_size=2)
    assert len(cache) == 2
    assert "d" in cache and "e" in cache
    assert cache.max_size == 2
    cache.configure(ttl=3.0)
    assert cache.ttl == 3.0


@pytest.mark.parametrize("kwargs", [{"max_size": 0}, {"ttl": 0}, {"ttl": -1.0}, {"sweep_interval": -1.0}])
def test_invalid_parameters_raise(kwargs):
    with pytest.raises(ValueError):
        GenerationCache(**kwargs)


def test_concurrent_callers_see_consistent_values():
    cache = GenerationCache(max_size=4, bucket_of=single_bucket)
    errors = []

    def worker(offset):
        for i in range(200):
            key = (i + offset) % 10
            value = cache.get_or_compute(key, lambda: key * 100)
            if value != key * 100:
                errors.append((key, value))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(cache) <= 4
