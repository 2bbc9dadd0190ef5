"""Acquisition orchestrator: location, cache, fetch.

WeatherAcquisition turns the three collaborators into one call,
``request_weather()``, which always returns an AcquisitionResult:

    IDLE -> LOCATING_STARTED -> LOCATION_RESOLVED -> CACHE_CHECKED
        -> DONE                                   (cache hit)
        -> FETCHING -> FETCH_RESOLVED -> DONE     (cache miss)
    any stage -> FAILED

A failure is returned exactly as the collaborator raised it. The cache is
written only after a successful fetch, and the core never retries or
falls back to stale data. A fetched snapshot older than the newest one
cached for its cell is not cached; if that newer snapshot is still fresh
it is returned instead.

Example:
    Wiring from settings::

        import asyncio
        from geoweather import (
            Coordinate,
            GeoWeatherSettings,
            StaticLocationSource,
            WeatherAcquisition,
        )

        async def main():
            source = StaticLocationSource(Coordinate(latitude=37.5665, longitude=126.978))
            async with WeatherAcquisition.from_settings(source, GeoWeatherSettings()) as acq:
                result = await acq.request_weather(timeout_budget=20.0)
                print(result.snapshot if result.ok else result.error)

        asyncio.run(main())
"""

import asyncio
import logging
from functools import partial
from typing import Any, Optional

import httpx

from .cache import FreshnessCache, cache_key_for
from .client import WeatherClient
from .config import GeoWeatherSettings
from .exceptions import (
    AcquisitionError,
    GeoWeatherConfigError,
    NetworkFailureError,
)
from .location import LocationAdapter, LocationSource
from .models import AcquisitionResult, CacheKey, Coordinate, WeatherSnapshot
from .types import DEFAULT_GRID_RESOLUTION, AcquisitionState

logger = logging.getLogger(__name__)


class _SharedFetch:
    """An in-flight fetch joined by one or more callers."""

    def __init__(self, task: "asyncio.Task[WeatherSnapshot]") -> None:
        self.task = task
        self.waiters = 0


class WeatherAcquisition:
    """Sequences location, cache lookup and fetch into one operation.

    Holds no per-call state; only the cache is shared between calls.

    Args:
        location: Adapter producing the current coordinate.
        client: Weather API client.
        cache: Freshness cache. A default FreshnessCache is created if None.
        grid_resolution: Cache grid cell size in degrees.
        coalesce: Share one in-flight fetch between concurrent misses on the
            same cell. Defaults to False (duplicate fetches are allowed).

    Example:
        >>> acquisition = WeatherAcquisition(LocationAdapter(source), WeatherClient())
        >>> result = await acquisition.request_weather()
    """

    def __init__(
        self,
        location: LocationAdapter,
        client: WeatherClient,
        cache: Optional[FreshnessCache] = None,
        *,
        grid_resolution: float = DEFAULT_GRID_RESOLUTION,
        coalesce: bool = False,
    ) -> None:
        if not grid_resolution > 0:
            raise GeoWeatherConfigError(
                f"grid_resolution must be > 0, got {grid_resolution}"
            )
        self._location = location
        self._client = client
        self._cache = cache if cache is not None else FreshnessCache()
        self._grid_resolution = grid_resolution
        self._coalesce = coalesce
        self._inflight: dict[CacheKey, _SharedFetch] = {}

    @classmethod
    def from_settings(
        cls,
        source: LocationSource,
        settings: Optional[GeoWeatherSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WeatherAcquisition":
        """Build the full pipeline from settings.

        Args:
            source: Location collaborator.
            settings: Configuration. Read from the environment if None.
            transport: Optional httpx transport for the client.
        """
        if settings is None:
            settings = GeoWeatherSettings()
        return cls(
            LocationAdapter(source, timeout=settings.location_timeout_seconds),
            WeatherClient.from_settings(settings, transport=transport),
            FreshnessCache(
                ttl_minutes=settings.cache_ttl_minutes,
                capacity=settings.cache_capacity,
            ),
            grid_resolution=settings.grid_resolution_degrees,
            coalesce=settings.coalesce_requests,
        )

    @property
    def cache(self) -> FreshnessCache:
        return self._cache

    @property
    def client(self) -> WeatherClient:
        return self._client

    async def __aenter__(self) -> "WeatherAcquisition":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the weather client."""
        await self._client.close()

    async def request_weather(
        self, timeout_budget: Optional[float] = None
    ) -> AcquisitionResult:
        """Acquire weather for the current position.

        Args:
            timeout_budget: Overall time limit in seconds. Caps the location
                timeout and bounds the fetch; a fetch still running when the
                budget runs out is a NetworkFailureError. None means only the
                location and HTTP timeouts apply.

        Returns:
            AcquisitionResult with either the snapshot or the error. The
            error is one of the five AcquisitionError kinds.

        Note:
            Cancelling the awaiting task cancels the pending location
            request and the in-flight HTTP request; nothing is cached.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        trace = [AcquisitionState.IDLE, AcquisitionState.LOCATING_STARTED]

        location_timeout = self._location.timeout
        if timeout_budget is not None:
            location_timeout = min(location_timeout, timeout_budget)

        try:
            coordinate = await self._location.acquire_coordinate(location_timeout)
        except AcquisitionError as e:
            return self._failed(e, trace)

        trace.append(AcquisitionState.LOCATION_RESOLVED)
        key = cache_key_for(coordinate, self._grid_resolution)

        cached = self._cache.get(key)
        trace.append(AcquisitionState.CACHE_CHECKED)
        if cached is not None:
            trace.append(AcquisitionState.DONE)
            return AcquisitionResult.success(cached, tuple(trace), from_cache=True)

        trace.append(AcquisitionState.FETCHING)
        remaining = None
        if timeout_budget is not None:
            remaining = timeout_budget - (loop.time() - started)

        try:
            snapshot = await self._fetch_within(key, coordinate, remaining)
        except AcquisitionError as e:
            return self._failed(e, trace)

        trace.append(AcquisitionState.FETCH_RESOLVED)
        if not self._cache.put(key, snapshot):
            # A newer observation reached the cache first.
            held = self._cache.get(key)
            if held is not None:
                trace.append(AcquisitionState.DONE)
                return AcquisitionResult.success(held, tuple(trace), from_cache=True)
            logger.debug(
                f"Fetched snapshot for {key} predates the last cached one; not caching"
            )
        trace.append(AcquisitionState.DONE)
        return AcquisitionResult.success(snapshot, tuple(trace))

    def _failed(
        self, error: AcquisitionError, trace: list[AcquisitionState]
    ) -> AcquisitionResult:
        trace.append(AcquisitionState.FAILED)
        logger.warning(f"Weather acquisition failed ({error.kind.value}): {error}")
        return AcquisitionResult.failure(error, tuple(trace))

    async def _fetch_within(
        self, key: CacheKey, coordinate: Coordinate, remaining: Optional[float]
    ) -> WeatherSnapshot:
        if remaining is None:
            return await self._fetch(key, coordinate)
        if remaining <= 0:
            raise NetworkFailureError("Timeout budget exhausted before fetch")
        try:
            return await asyncio.wait_for(self._fetch(key, coordinate), remaining)
        except asyncio.TimeoutError as e:
            raise NetworkFailureError(
                f"Fetch did not complete within the remaining {remaining:.3g}s"
            ) from e

    async def _fetch(self, key: CacheKey, coordinate: Coordinate) -> WeatherSnapshot:
        if not self._coalesce:
            return await self._client.fetch(coordinate)

        shared = self._inflight.get(key)
        if shared is None:
            shared = _SharedFetch(asyncio.ensure_future(self._client.fetch(coordinate)))
            self._inflight[key] = shared
            shared.task.add_done_callback(partial(self._forget, key, shared))
        else:
            logger.debug(f"Joining in-flight fetch for {key}")

        shared.waiters += 1
        try:
            return await asyncio.shield(shared.task)
        except asyncio.CancelledError:
            if shared.waiters == 1:
                shared.task.cancel()
            raise
        finally:
            shared.waiters -= 1

    def _forget(self, key: CacheKey, shared: _SharedFetch, _task: Any) -> None:
        if self._inflight.get(key) is shared:
            del self._inflight[key]
