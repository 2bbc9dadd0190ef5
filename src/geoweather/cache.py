"""In-memory freshness cache for weather snapshots.

Snapshots are keyed by a grid cell rather than the exact coordinate, so
consecutive fixes that differ only by GPS jitter share one entry.

Cache policy:
    - **TTL**: an entry is stale once ``now - inserted_at > ttl``. Stale
      entries are dropped lazily by the lookup that finds them; absent and
      stale keys both read as a miss.
    - **Capacity**: bounded. Inserting past the bound first evicts the
      least-recently-used entry. Hits refresh recency.
    - **Monotonic time**: a put carrying an older observation than the
      newest one stored for the key is rejected, even after that entry
      expired. The high-water mark is forgotten when the key is evicted.

Example:
    Used implicitly by WeatherAcquisition, or directly::

        cache = FreshnessCache(ttl_minutes=10, capacity=16)
        key = cache_key_for(coordinate)
        cache.put(key, snapshot)
        assert cache.get(key) is snapshot
"""

import logging
import math
import threading
import time
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Optional

from .exceptions import GeoWeatherConfigError
from .models import CacheEntry, CacheKey, Coordinate, WeatherSnapshot
from .types import DEFAULT_CACHE_CAPACITY, DEFAULT_GRID_RESOLUTION, DEFAULT_TTL_MINUTES

logger = logging.getLogger(__name__)


def cache_key_for(
    coordinate: Coordinate, resolution: float = DEFAULT_GRID_RESOLUTION
) -> CacheKey:
    """Quantize a coordinate to its grid cell.

    Each axis is divided by ``resolution`` and floored, so a cell covers
    ``[i * resolution, (i + 1) * resolution)``.

    Args:
        coordinate: Position to quantize.
        resolution: Cell size in degrees. Must be positive.

    Returns:
        CacheKey for the cell containing the coordinate.

    Raises:
        GeoWeatherConfigError: If resolution is not positive.

    Example:
        >>> cache_key_for(Coordinate(latitude=37.5665, longitude=126.978))
        CacheKey(lat_index=3756, lon_index=12697, resolution=0.01)
    """
    if not resolution > 0:
        raise GeoWeatherConfigError(f"resolution must be > 0, got {resolution}")
    return CacheKey(
        lat_index=math.floor(coordinate.latitude / resolution),
        lon_index=math.floor(coordinate.longitude / resolution),
        resolution=resolution,
    )


class FreshnessCache:
    """Bounded TTL/LRU cache of weather snapshots.

    Safe to share between threads and concurrent tasks: every operation
    runs under one lock and never awaits.

    Args:
        ttl_minutes: Default entry lifetime in minutes. Defaults to 10.
        capacity: Maximum number of entries. Defaults to 32.
        clock: Monotonic clock returning seconds. Defaults to
            ``time.monotonic``.

    Example:
        >>> cache = FreshnessCache(ttl_minutes=10)
        >>> cache.put(key, snapshot)
        >>> cache.get(key) is snapshot
        True
    """

    def __init__(
        self,
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not ttl_minutes > 0:
            raise GeoWeatherConfigError(f"ttl_minutes must be > 0, got {ttl_minutes}")
        if capacity < 1:
            raise GeoWeatherConfigError(f"capacity must be >= 1, got {capacity}")
        self._ttl_seconds = ttl_minutes * 60.0
        self._capacity = capacity
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        # Newest observed_at stored per key; outlives expiry, not eviction.
        self._latest: "OrderedDict[CacheKey, datetime]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: CacheKey) -> Optional[WeatherSnapshot]:
        """Return the fresh snapshot for ``key``, or None.

        A stale entry is removed and reported as a miss.

        Args:
            key: Grid cell to look up.

        Returns:
            The cached snapshot, or None when absent or expired.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache miss for {key}")
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry for {key} expired")
                return None
            self._entries.move_to_end(key)
            logger.debug(f"Cache hit for {key}")
            return entry.snapshot

    def put(
        self,
        key: CacheKey,
        snapshot: WeatherSnapshot,
        ttl_seconds: Optional[float] = None,
    ) -> bool:
        """Store ``snapshot`` under ``key``.

        Replaces any previous entry for the key, unless a newer observation
        was stored for it (expired or not). Evicts the least-recently-used
        entry when the cache is full.

        Args:
            key: Grid cell to store under.
            snapshot: Snapshot to cache. Never modified.
            ttl_seconds: Lifetime for this entry. Defaults to the cache TTL.

        Returns:
            True if stored, False if rejected as older than the newest
            observation stored for the key.

        Raises:
            GeoWeatherConfigError: If ttl_seconds is given and not positive.
        """
        if ttl_seconds is None:
            ttl_seconds = self._ttl_seconds
        elif not ttl_seconds > 0:
            raise GeoWeatherConfigError(f"ttl_seconds must be > 0, got {ttl_seconds}")

        with self._lock:
            latest = self._latest.get(key)
            if latest is not None and latest > snapshot.observed_at:
                logger.debug(
                    f"Rejected snapshot for {key}: observed {snapshot.observed_at} "
                    f"is older than {latest}"
                )
                return False

            if key not in self._entries and len(self._entries) >= self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._latest.pop(evicted, None)
                logger.debug(f"Evicted least recently used entry {evicted}")

            self._entries[key] = CacheEntry(
                snapshot=snapshot,
                inserted_at=self._clock(),
                ttl_seconds=ttl_seconds,
            )
            self._entries.move_to_end(key)
            self._latest[key] = snapshot.observed_at
            self._latest.move_to_end(key)
            if len(self._latest) > self._capacity:
                expired = next(k for k in self._latest if k not in self._entries)
                del self._latest[expired]
            return True

    def invalidate(self, key: CacheKey) -> None:
        """Drop the entry and the stored timestamp for ``key``."""
        with self._lock:
            self._entries.pop(key, None)
            self._latest.pop(key, None)

    def clear(self) -> None:
        """Remove all cached snapshots.

        Example:
            >>> cache.clear()  # Next acquisition fetches fresh data
        """
        with self._lock:
            self._entries.clear()
            self._latest.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # Stale entries still count until a get() drops them.
        with self._lock:
            return key in self._entries
