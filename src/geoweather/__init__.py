"""Location-driven weather acquisition core.

This package resolves the current position through a pluggable location
source, queries a weather API for it, normalizes the answer into an
immutable WeatherSnapshot, and caches it per grid cell with a TTL. The
caller gets one AcquisitionResult holding either the snapshot or a typed
error.

Key features:
    - Single-shot, timeout-bounded location requests with cancellation
    - Async httpx client for OpenWeatherMap-style current and forecast
      endpoints
    - Bounded TTL/LRU cache keyed by ~1 km grid cells
    - Five disjoint error kinds, no silent retries or stale fallbacks
    - Configuration from environment variables via GeoWeatherSettings
    - Optional DataFrame conversion via geoweather.dataframe

Caching strategy:
    - **Current conditions**: in memory, keyed by grid cell, 10 minute TTL
      by default. A hit never touches the network.
    - **Forecast**: not cached; fetched on demand with
      ``WeatherClient.fetch_forecast``.

Example:
    Acquire current weather::

        import asyncio
        from geoweather import (
            Coordinate,
            ErrorKind,
            StaticLocationSource,
            WeatherAcquisition,
        )

        async def main():
            source = StaticLocationSource(Coordinate(latitude=37.5665, longitude=126.978))
            async with WeatherAcquisition.from_settings(source) as acquisition:
                result = await acquisition.request_weather()
                if result.ok:
                    s = result.snapshot
                    print(f"{s.temperature}°C {s.condition}, humidity {s.humidity}%")
                elif result.error.kind is ErrorKind.LOCATION_UNAVAILABLE:
                    print("Enable location services")
                else:
                    print(f"Failed: {result.error}")

        asyncio.run(main())

    Fetch the 5-day forecast::

        from geoweather import WeatherClient

        async with WeatherClient(api_key="...") as client:
            forecast = await client.fetch_forecast(coordinate)
            for day in forecast.daily_summaries():
                print(f"{day.day}: {day.temp_min} - {day.temp_max}")
"""

from .cache import FreshnessCache, cache_key_for
from .client import WeatherClient
from .config import GeoWeatherSettings
from .exceptions import (
    AcquisitionError,
    ApiError,
    GeoWeatherConfigError,
    GeoWeatherError,
    LocationTimeoutError,
    LocationUnavailableError,
    MalformedResponseError,
    NetworkFailureError,
)
from .location import (
    CallbackLocationSource,
    LocationAdapter,
    LocationSource,
    StaticLocationSource,
)
from .models import (
    AcquisitionResult,
    CacheEntry,
    CacheKey,
    Coordinate,
    DailySummary,
    Forecast,
    ForecastSlot,
    WeatherSnapshot,
)
from .orchestrator import WeatherAcquisition
from .types import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_GRID_RESOLUTION,
    DEFAULT_LOCATION_TIMEOUT,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_TTL_MINUTES,
    FORECAST_BASE_URL,
    WEATHER_BASE_URL,
    AcquisitionState,
    ErrorKind,
    Units,
)

__all__ = [
    "WeatherAcquisition",
    "WeatherClient",
    "FreshnessCache",
    "cache_key_for",
    "LocationAdapter",
    "LocationSource",
    "CallbackLocationSource",
    "StaticLocationSource",
    "GeoWeatherSettings",
    "AcquisitionResult",
    "CacheEntry",
    "CacheKey",
    "Coordinate",
    "WeatherSnapshot",
    "Forecast",
    "ForecastSlot",
    "DailySummary",
    "GeoWeatherError",
    "GeoWeatherConfigError",
    "AcquisitionError",
    "LocationUnavailableError",
    "LocationTimeoutError",
    "NetworkFailureError",
    "MalformedResponseError",
    "ApiError",
    "AcquisitionState",
    "ErrorKind",
    "Units",
    "WEATHER_BASE_URL",
    "FORECAST_BASE_URL",
    "DEFAULT_TTL_MINUTES",
    "DEFAULT_CACHE_CAPACITY",
    "DEFAULT_GRID_RESOLUTION",
    "DEFAULT_LOCATION_TIMEOUT",
    "DEFAULT_NETWORK_TIMEOUT",
]
