"""Async client for the weather API.

This module provides WeatherClient, which queries an OpenWeatherMap-style
endpoint for one position and normalizes the answer into the domain
models. Every failure leaves the client as one of three
AcquisitionError kinds:

    - NetworkFailureError: DNS, refused connection, timeout.
    - ApiError: any non-2xx status, with the status code.
    - MalformedResponseError: a 2xx body that is not JSON or does not
      match the schema.

Example:
    Fetch current conditions::

        import asyncio
        from geoweather import Coordinate, WeatherClient

        async def main():
            async with WeatherClient(api_key="...") as client:
                snapshot = await client.fetch(
                    Coordinate(latitude=37.5665, longitude=126.978)
                )
                print(f"{snapshot.temperature}°C, {snapshot.description}")

        asyncio.run(main())
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .config import GeoWeatherSettings
from .exceptions import ApiError, MalformedResponseError, NetworkFailureError
from .models import (
    Coordinate,
    CurrentWeatherResponse,
    Forecast,
    ForecastResponse,
    WeatherSnapshot,
)
from .types import (
    DEFAULT_LANG,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_UNITS,
    FORECAST_BASE_URL,
    WEATHER_BASE_URL,
    Units,
)

logger = logging.getLogger(__name__)


class WeatherClient:
    """Async client for a single weather API.

    Values are returned in the units requested from the provider; the
    client does not convert them.

    Args:
        base_url: Current-conditions endpoint.
        forecast_url: 5-day / 3-hour forecast endpoint.
        api_key: Provider API key, sent as ``appid``. Omitted when None.
        units: Unit system to request. Defaults to metric.
        lang: Language for condition descriptions. Defaults to "en".
        timeout: HTTP request timeout in seconds. Defaults to 15.0.
        lat_param: Query parameter name for latitude.
        lon_param: Query parameter name for longitude.
        extra_params: Additional query parameters sent with every request.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.

    Attributes:
        _client: Lazy-initialized httpx.AsyncClient.

    Example:
        Using as async context manager (recommended)::

            async with WeatherClient(api_key="...") as client:
                snapshot = await client.fetch(coordinate)

        Manual resource management::

            client = WeatherClient(api_key="...")
            try:
                forecast = await client.fetch_forecast(coordinate)
            finally:
                await client.close()
    """

    def __init__(
        self,
        *,
        base_url: str = WEATHER_BASE_URL,
        forecast_url: str = FORECAST_BASE_URL,
        api_key: Optional[str] = None,
        units: Units = DEFAULT_UNITS,
        lang: str = DEFAULT_LANG,
        timeout: float = DEFAULT_NETWORK_TIMEOUT,
        lat_param: str = "lat",
        lon_param: str = "lon",
        extra_params: Optional[dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._forecast_url = forecast_url
        self._api_key = api_key
        self._units = Units(units)
        self._lang = lang
        self._timeout = timeout
        self._lat_param = lat_param
        self._lon_param = lon_param
        self._extra_params = dict(extra_params or {})
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: GeoWeatherSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WeatherClient":
        """Build a client from a GeoWeatherSettings instance."""
        return cls(
            base_url=settings.base_url,
            forecast_url=settings.forecast_url,
            api_key=settings.api_key,
            units=settings.units,
            lang=settings.lang,
            timeout=settings.network_timeout_seconds,
            lat_param=settings.lat_param,
            lon_param=settings.lon_param,
            transport=transport,
        )

    @property
    def units(self) -> Units:
        return self._units

    async def __aenter__(self) -> "WeatherClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create the httpx.AsyncClient on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources.

        Safe to call multiple times.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _params(self, coordinate: Coordinate) -> dict[str, Any]:
        params: dict[str, Any] = {
            self._lat_param: coordinate.latitude,
            self._lon_param: coordinate.longitude,
            "units": self._units.value,
            "lang": self._lang,
        }
        if self._api_key:
            params["appid"] = self._api_key
        params.update(self._extra_params)
        return params

    @staticmethod
    def _error_reason(response: httpx.Response) -> Optional[str]:
        """Extract the provider's error message from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return None

    async def _fetch(self, url: str, params: dict[str, Any]) -> Any:
        """Perform a GET request and return the decoded JSON body.

        Args:
            url: Endpoint to query.
            params: Query parameters.

        Returns:
            Decoded JSON body.

        Raises:
            NetworkFailureError: If the request fails at transport level.
            ApiError: If the status is not 2xx.
            MalformedResponseError: If the body is not valid JSON.
        """
        client = await self._ensure_client()

        logger.debug(
            f"GET {url} {self._lat_param}={params.get(self._lat_param)} "
            f"{self._lon_param}={params.get(self._lon_param)}"
        )
        try:
            response = await client.get(url, params=params)
        except httpx.RequestError as e:
            raise NetworkFailureError(f"Request error: {e}") from e

        if not response.is_success:
            raise ApiError(response.status_code, self._error_reason(response))

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    async def fetch(self, coordinate: Coordinate) -> WeatherSnapshot:
        """Get current conditions for a position.

        Args:
            coordinate: Position to query.

        Returns:
            WeatherSnapshot in the client's units.

        Raises:
            NetworkFailureError: If the request fails at transport level.
            ApiError: If the API answers with a non-2xx status.
            MalformedResponseError: If the body does not match the schema.

        Example:
            >>> snapshot = await client.fetch(Coordinate(latitude=37.5665, longitude=126.978))
            >>> snapshot.condition
            'Clouds'
        """
        data = await self._fetch(self._base_url, self._params(coordinate))
        try:
            parsed = CurrentWeatherResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected current weather payload: {e.error_count()} validation errors"
            ) from e
        return parsed.to_snapshot(coordinate, self._units)

    async def fetch_forecast(self, coordinate: Coordinate) -> Forecast:
        """Get the 5-day forecast in 3-hour slots for a position.

        Forecasts are not cached.

        Args:
            coordinate: Position to query.

        Returns:
            Forecast with slots in chronological order.

        Raises:
            NetworkFailureError: If the request fails at transport level.
            ApiError: If the API answers with a non-2xx status.
            MalformedResponseError: If the body does not match the schema.

        Example:
            >>> forecast = await client.fetch_forecast(coordinate)
            >>> forecast.nearest().condition
            'Rain'
        """
        data = await self._fetch(self._forecast_url, self._params(coordinate))
        try:
            parsed = ForecastResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected forecast payload: {e.error_count()} validation errors"
            ) from e
        return parsed.to_forecast(coordinate, self._units)
