"""Runtime configuration for the geoweather core."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_GRID_RESOLUTION,
    DEFAULT_LANG,
    DEFAULT_LOCATION_TIMEOUT,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_TTL_MINUTES,
    DEFAULT_UNITS,
    FORECAST_BASE_URL,
    WEATHER_BASE_URL,
    Units,
)


class GeoWeatherSettings(BaseSettings):
    """Configuration loaded from environment variables or defaults.

    Every field can be set with a ``GEOWEATHER_`` prefixed variable, e.g.
    ``GEOWEATHER_API_KEY`` or ``GEOWEATHER_CACHE_TTL_MINUTES``.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEOWEATHER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default=WEATHER_BASE_URL,
        description="Endpoint answering current-conditions queries.",
    )
    forecast_url: str = Field(
        default=FORECAST_BASE_URL,
        description="Endpoint answering 5-day / 3-hour forecast queries.",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Provider API key, sent as the appid query parameter.",
    )
    units: Units = DEFAULT_UNITS
    lang: str = DEFAULT_LANG
    lat_param: str = "lat"
    lon_param: str = "lon"
    location_timeout_seconds: float = Field(default=DEFAULT_LOCATION_TIMEOUT, gt=0)
    network_timeout_seconds: float = Field(default=DEFAULT_NETWORK_TIMEOUT, gt=0)
    cache_ttl_minutes: float = Field(default=DEFAULT_TTL_MINUTES, gt=0)
    cache_capacity: int = Field(default=DEFAULT_CACHE_CAPACITY, ge=1)
    grid_resolution_degrees: float = Field(
        default=DEFAULT_GRID_RESOLUTION,
        gt=0,
        le=1.0,
        description="Cache grid cell size; 0.01 is roughly 1 km.",
    )
    coalesce_requests: bool = Field(
        default=False,
        description="Share one in-flight fetch between concurrent misses on a cell.",
    )
