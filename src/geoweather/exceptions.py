"""Exceptions for the geoweather acquisition core.

All exceptions inherit from GeoWeatherError. Failures of a single
acquisition are ``AcquisitionError`` subclasses, one per kind; each
carries a ``kind`` attribute so presentation code can switch on it
without isinstance chains.

Example:
    Mapping failures to user-facing messages::

        from geoweather import ErrorKind

        result = await acquisition.request_weather()
        if not result.ok:
            if result.error.kind is ErrorKind.LOCATION_UNAVAILABLE:
                show("Enable location services")
            elif result.error.kind is ErrorKind.API_ERROR:
                show(f"Weather service error {result.error.status_code}")

    Raising instead of branching::

        try:
            snapshot = (await acquisition.request_weather()).unwrap()
        except LocationTimeoutError:
            ...
"""

from typing import Optional

from .types import ErrorKind


class GeoWeatherError(Exception):
    """Base exception for all geoweather errors."""

    pass


class GeoWeatherConfigError(GeoWeatherError):
    """Exception raised when a component is constructed with invalid settings.

    Example:
        >>> FreshnessCache(capacity=0)
        GeoWeatherConfigError: capacity must be >= 1, got 0
    """

    pass


class AcquisitionError(GeoWeatherError):
    """Base class for the five terminal acquisition failures.

    The core never retries on these; retry policy belongs to the caller.

    Attributes:
        kind: The ErrorKind of this failure.
    """

    kind: ErrorKind


class LocationUnavailableError(AcquisitionError):
    """The device cannot provide a location.

    Raised on missing capability, permission denial, or a fix outside the
    valid coordinate range. Not retryable within the same call.
    """

    kind = ErrorKind.LOCATION_UNAVAILABLE


class LocationTimeoutError(AcquisitionError):
    """No location fix arrived within the allowed time.

    Args:
        timeout: The timeout that elapsed, in seconds.

    Attributes:
        timeout: The timeout that elapsed, in seconds.
    """

    kind = ErrorKind.LOCATION_TIMEOUT

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"No location fix within {timeout:g}s")


class NetworkFailureError(AcquisitionError):
    """Transport-level failure talking to the weather API.

    Covers DNS failures, refused connections and timeouts. Wraps the
    underlying httpx exception as ``__cause__``.
    """

    kind = ErrorKind.NETWORK_FAILURE


class MalformedResponseError(AcquisitionError):
    """A 2xx response whose body does not match the expected schema.

    Wraps JSON decoding and pydantic validation errors so that no parser
    exception crosses the package boundary.
    """

    kind = ErrorKind.MALFORMED_RESPONSE


class ApiError(AcquisitionError):
    """The weather API answered with a non-2xx status.

    Args:
        status_code: HTTP status code of the response.
        reason: Provider message, if the body carried one.

    Attributes:
        status_code: HTTP status code of the response.
        reason: Provider message, or None.

    Example:
        >>> raise ApiError(401, "Invalid API key")
        ApiError: API error 401: Invalid API key
    """

    kind = ErrorKind.API_ERROR

    def __init__(self, status_code: int, reason: Optional[str] = None) -> None:
        self.status_code = status_code
        self.reason = reason
        message = f"API error {status_code}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
