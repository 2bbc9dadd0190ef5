"""Types and constants for the geoweather acquisition core.

This module defines enumerations and default configuration values used
throughout the package. Every default here can be overridden through
``GeoWeatherSettings`` or the constructor arguments of each component.

Example:
    Requesting imperial units::

        from geoweather import WeatherClient, Units

        async with WeatherClient(api_key="...", units=Units.IMPERIAL) as client:
            snapshot = await client.fetch(coordinate)
"""

from enum import Enum


class Units(str, Enum):
    """Unit system requested from the weather provider.

    Values are passed through as the ``units`` query parameter. The core
    never converts between them.

    Attributes:
        STANDARD: Kelvin, m/s.
        METRIC: Celsius, m/s.
        IMPERIAL: Fahrenheit, mph.
    """

    STANDARD = "standard"
    METRIC = "metric"
    IMPERIAL = "imperial"


class ErrorKind(str, Enum):
    """The five disjoint kinds of acquisition failure."""

    LOCATION_UNAVAILABLE = "location_unavailable"
    LOCATION_TIMEOUT = "location_timeout"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"
    API_ERROR = "api_error"


class AcquisitionState(str, Enum):
    """States a single ``request_weather()`` call moves through.

    ``DONE`` and ``FAILED`` are terminal. A cache hit goes straight from
    ``CACHE_CHECKED`` to ``DONE``; a miss passes through ``FETCHING`` and
    ``FETCH_RESOLVED``.
    """

    IDLE = "idle"
    LOCATING_STARTED = "locating_started"
    LOCATION_RESOLVED = "location_resolved"
    CACHE_CHECKED = "cache_checked"
    FETCHING = "fetching"
    FETCH_RESOLVED = "fetch_resolved"
    DONE = "done"
    FAILED = "failed"


WEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
"""str: Default endpoint for current conditions.

Answers ``GET ?lat=..&lon=..`` with a single observation.
"""

FORECAST_BASE_URL = "https://api.openweathermap.org/data/2.5/forecast"
"""str: Default endpoint for the 5-day forecast in 3-hour slots."""

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon}@2x.png"
"""str: Template for condition icon URLs. Fetching them is left to callers."""

DEFAULT_UNITS = Units.METRIC

DEFAULT_LANG = "en"

DEFAULT_TTL_MINUTES = 10
"""int: Default cache time-to-live in minutes.

Matches the update cadence of typical current-conditions feeds.
"""

DEFAULT_CACHE_CAPACITY = 32
"""int: Default maximum number of grid cells held by the cache."""

DEFAULT_GRID_RESOLUTION = 0.01
"""float: Default cache grid cell size in degrees.

0.01 degree is about 1.1 km of latitude, coarse enough to absorb GPS
jitter between consecutive fixes.
"""

DEFAULT_LOCATION_TIMEOUT = 10.0
"""float: Default time in seconds to wait for a location fix."""

DEFAULT_NETWORK_TIMEOUT = 15.0
"""float: Default HTTP request timeout in seconds."""
