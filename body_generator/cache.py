# body_generator/cache.py

"""
================================================================================
GENERATION CACHE
================================================================================
A bounded store of previously rasterized buffers. It is owned by whichever
long-lived service composes the generator and is passed around explicitly;
there is no module-level cache.

Data Contract:
---------------
- Inputs: hashable keys (usually SurfaceDescriptor) and zero-argument
  compute functions that return a buffer.
- Outputs: the cached or freshly computed buffer.
- Side Effects: Logs evictions at debug level.
- Invariants:
    - No bucket holds more than max_size entries once an insert returns.
    - The cache never changes what get_or_compute returns for a key, only
      how often compute_fn runs.
    - compute_fn runs outside the lock, so slow generations never block
      hits on other keys.
================================================================================
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass

from . import config as DEFAULTS

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: object
    buffer: object
    last_access_time: float


def category_bucket(key):
    """Default bucketing: one bucket per body category."""
    return getattr(key, 'category', None)


class GenerationCache:
    """
    Per-bucket LRU cache with a time-to-live. Expired entries are removed
    first, then least recently used ones, until the bucket fits its cap.
    """
    def __init__(
        self,
        max_size: int = DEFAULTS.MAX_CACHE_SIZE,
        ttl: float = DEFAULTS.CACHE_TTL_SECONDS,
        sweep_interval: float = DEFAULTS.CACHE_SWEEP_INTERVAL_SECONDS,
        bucket_of=category_bucket,
        clock=time.monotonic,
    ):
        self._validate(max_size, ttl)
        if sweep_interval < 0:
            raise ValueError(f"sweep_interval must be >= 0, got {sweep_interval}")
        self._max_size = max_size
        self._ttl = ttl
        self._sweep_interval = sweep_interval
        self._bucket_of = bucket_of
        self._clock = clock

        self._lock = threading.Lock()
        self._buckets: dict[object, OrderedDict] = {}
        self._last_sweep = clock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def _validate(max_size, ttl):
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> float:
        return self._ttl

    def get_or_compute(self, key, compute_fn):
        """
        Returns the buffer for key, calling compute_fn on a miss. Two threads
        missing the same key may both compute; the first insert wins and both
        results are identical by construction.
        """
        bucket_name = self._bucket_of(key)

        with self._lock:
            now = self._clock()
            entry = self._live_entry(bucket_name, key, now)
            if entry is not None:
                self._hits += 1
                return entry.buffer
            self._misses += 1

        buffer = compute_fn()

        with self._lock:
            now = self._clock()
            entry = self._live_entry(bucket_name, key, now)
            if entry is not None:
                return entry.buffer

            bucket = self._buckets.setdefault(bucket_name, OrderedDict())
            bucket[key] = CacheEntry(key=key, buffer=buffer, last_access_time=now)

            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)
            elif len(bucket) > self._max_size:
                self._evict(bucket_name, bucket, now)
        return buffer

    def _live_entry(self, bucket_name, key, now: float):
        """Looks up key and refreshes it; expired entries count as absent."""
        bucket = self._buckets.get(bucket_name)
        if bucket is None:
            return None
        entry = bucket.get(key)
        if entry is None:
            return None
        if now - entry.last_access_time > self._ttl:
            del bucket[key]
            self._evictions += 1
            return None
        entry.last_access_time = now
        bucket.move_to_end(key)
        return entry

    def _sweep(self, now: float):
        for bucket_name, bucket in list(self._buckets.items()):
            self._evict(bucket_name, bucket, now)
            if not bucket:
                del self._buckets[bucket_name]
        self._last_sweep = now

    def _evict(self, bucket_name, bucket: OrderedDict, now: float):
        """Drops expired entries, then the least recently used, down to max_size."""
        expired = [key for key, entry in bucket.items() if now - entry.last_access_time > self._ttl]
        for key in expired:
            del bucket[key]

        overflow = 0
        while len(bucket) > self._max_size:
            bucket.popitem(last=False)
            overflow += 1

        removed = len(expired) + overflow
        if removed:
            self._evictions += removed
            logger.debug(f"Evicted {len(expired)} expired and {overflow} LRU entries from bucket {bucket_name!r}.")

    def clear(self):
        with self._lock:
            self._buckets.clear()

    def configure(self, max_size: int = None, ttl: float = None):
        """Changes the cap and/or TTL and immediately enforces them."""
        self._validate(max_size, ttl)
        with self._lock:
            if max_size is not None:
                self._max_size = max_size
            if ttl is not None:
                self._ttl = ttl
            self._sweep(self._clock())

    def bucket_size(self, bucket_name) -> int:
        with self._lock:
            return len(self._buckets.get(bucket_name, ()))

    def stats(self) -> dict:
        with self._lock:
            return {
                'hits': self._hits,
                'misses': self._misses,
                'evictions': self._evictions,
                'entries': sum(len(bucket) for bucket in self._buckets.values()),
            }

    def __len__(self):
        with self._lock:
            return sum(len(bucket) for bucket in self._buckets.values())

    def __contains__(self, key):
        with self._lock:
            bucket = self._buckets.get(self._bucket_of(key))
            return bucket is not None and key in bucket
