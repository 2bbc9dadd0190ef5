"""Location acquisition for the geoweather core.

The core consumes a single position per acquisition. Platform location
services are plugged in through the LocationSource protocol; the
LocationAdapter bounds each request with a timeout and normalizes
failures into LocationUnavailableError / LocationTimeoutError.

Sources:
    - **LocationSource**: anything with an awaitable
      ``current_location()``.
    - **CallbackLocationSource**: base class turning a callback-style
      platform API (start request, receive fix or error, stop request)
      into one awaitable that resolves exactly once and stops the platform
      request when abandoned.
    - **StaticLocationSource**: a fixed or previously stored position.

Example:
    Wrapping a callback-based provider::

        class FusedSource(CallbackLocationSource):
            def _start(self, on_fix, on_error):
                return platform.request_single_fix(
                    lambda loc: on_fix(loc.lat, loc.lon), on_error
                )

            def _stop(self, handle):
                handle.cancel()

        adapter = LocationAdapter(FusedSource(), timeout=5.0)
        coordinate = await adapter.acquire_coordinate()
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol

from pydantic import ValidationError

from .exceptions import LocationTimeoutError, LocationUnavailableError
from .models import Coordinate
from .types import DEFAULT_LOCATION_TIMEOUT

logger = logging.getLogger(__name__)

FixCallback = Callable[[float, float], None]
ErrorCallback = Callable[[BaseException], None]


class LocationSource(Protocol):
    """Collaborator that produces one position per call."""

    async def current_location(self) -> Coordinate:
        """Return the current position.

        Raises:
            LocationUnavailableError: If there is no location capability.
            PermissionError: If location access was denied.
        """
        ...


class CallbackLocationSource(ABC):
    """Adapts a callback-based platform location API to ``current_location``.

    Subclasses start a single-fix request in ``_start`` and hand the
    platform the two callbacks they receive. Callbacks may be invoked from
    any thread; only the first one counts. If the awaiting task is
    cancelled (including by the adapter's timeout), ``_stop`` is called
    with the handle ``_start`` returned.
    """

    @abstractmethod
    def _start(self, on_fix: FixCallback, on_error: ErrorCallback) -> Any:
        """Start a platform request and return a handle for ``_stop``."""

    @abstractmethod
    def _stop(self, handle: Any) -> None:
        """Cancel the platform request identified by ``handle``."""

    async def current_location(self) -> Coordinate:
        loop = asyncio.get_running_loop()
        future: "asyncio.Future[Coordinate]" = loop.create_future()

        def settle_fix(latitude: float, longitude: float) -> None:
            if future.done():
                return
            try:
                coordinate = Coordinate(latitude=latitude, longitude=longitude)
            except ValidationError as e:
                error = LocationUnavailableError(
                    f"Invalid fix ({latitude}, {longitude})"
                )
                error.__cause__ = e
                future.set_exception(error)
                return
            future.set_result(coordinate)

        def settle_error(exc: BaseException) -> None:
            if not future.done():
                future.set_exception(exc)

        def on_fix(latitude: float, longitude: float) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(settle_fix, latitude, longitude)

        def on_error(exc: BaseException) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(settle_error, exc)

        handle = self._start(on_fix, on_error)
        try:
            return await future
        finally:
            if future.cancelled():
                logger.debug("Location request abandoned, stopping platform request")
                self._stop(handle)


class StaticLocationSource:
    """Location source returning a stored position.

    Args:
        coordinate: The position to report. None means no position has
            been stored yet, which reads as LocationUnavailableError.

    Example:
        >>> source = StaticLocationSource(Coordinate(latitude=37.5665, longitude=126.978))
        >>> await source.current_location()
        Coordinate(latitude=37.5665, longitude=126.978)
    """

    def __init__(self, coordinate: Optional[Coordinate] = None) -> None:
        self.coordinate = coordinate

    async def current_location(self) -> Coordinate:
        if self.coordinate is None:
            raise LocationUnavailableError("No stored location")
        return self.coordinate


class LocationAdapter:
    """Timeout-bounded, single-shot access to a LocationSource.

    Args:
        source: Location collaborator.
        timeout: Default time to wait for a fix, in seconds. Defaults to 10.

    Example:
        >>> adapter = LocationAdapter(source, timeout=5.0)
        >>> coordinate = await adapter.acquire_coordinate()
    """

    def __init__(
        self, source: LocationSource, timeout: float = DEFAULT_LOCATION_TIMEOUT
    ) -> None:
        self._source = source
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def acquire_coordinate(self, timeout: Optional[float] = None) -> Coordinate:
        """Wait for the first available fix.

        Accuracy is not inspected; the first fix wins.

        Args:
            timeout: Seconds to wait. Defaults to the adapter timeout.

        Returns:
            The coordinate reported by the source.

        Raises:
            LocationUnavailableError: If the source has no capability or
                permission, reports an invalid position, or fails in any
                other way.
            LocationTimeoutError: If no fix arrives in time. The pending
                source call is cancelled first.
        """
        if timeout is None:
            timeout = self._timeout

        try:
            return await asyncio.wait_for(self._source.current_location(), timeout)
        except asyncio.TimeoutError as e:
            logger.debug(f"No location fix within {timeout}s")
            raise LocationTimeoutError(timeout) from e
        except (LocationUnavailableError, LocationTimeoutError):
            raise
        except Exception as e:
            logger.debug(f"Location source failed: {type(e).__name__}: {e}")
            raise LocationUnavailableError(f"Location unavailable: {e}") from e
