"""Basic usage examples for the geoweather core.

Set GEOWEATHER_API_KEY before running.
"""

import asyncio

from geoweather import (
    Coordinate,
    GeoWeatherSettings,
    StaticLocationSource,
    WeatherAcquisition,
    WeatherClient,
)

SEOUL = Coordinate(latitude=37.5665, longitude=126.978)


async def acquisition_example() -> None:
    """Acquire weather twice; the second call is served from the cache."""
    source = StaticLocationSource(SEOUL)
    async with WeatherAcquisition.from_settings(source) as acquisition:
        print("=== Current Weather ===")
        for _ in range(2):
            result = await acquisition.request_weather(timeout_budget=20.0)
            if not result.ok:
                print(f"Failed ({result.error.kind.value}): {result.error}")
                return

            s = result.snapshot
            origin = "cache" if result.from_cache else "network"
            print(f"[{origin}] {s.location_name}: {s.temperature}° {s.condition}")
            print(f"Humidity: {s.humidity}%  Wind: {s.wind_speed}")
            print(f"Trace: {' -> '.join(state.value for state in result.trace)}")


async def forecast_example() -> None:
    """Get the 5-day forecast, grouped by local date."""
    async with WeatherClient.from_settings(GeoWeatherSettings()) as client:
        forecast = await client.fetch_forecast(SEOUL)

        print("\n=== 5-Day Forecast ===")
        now = forecast.nearest()
        if now is not None:
            print(f"Now: {now.temperature}° {now.description}")
        for summary in forecast.daily_summaries():
            print(
                f"{summary.day}: {summary.temp_min}° - {summary.temp_max}°, "
                f"{summary.condition}"
            )


async def dataframe_example() -> None:
    """Convert a forecast to a pandas DataFrame."""
    try:
        from geoweather.dataframe import to_dataframe
        import pandas  # noqa: F401
    except ImportError:
        print("\n=== DataFrame Example ===")
        print("Install pandas: pip install geoweather[pandas]")
        return

    async with WeatherClient.from_settings(GeoWeatherSettings()) as client:
        forecast = await client.fetch_forecast(SEOUL)

        df = to_dataframe(forecast)

        print("\n=== DataFrame Example ===")
        print(f"Shape: {df.shape}")
        print(f"Columns: {list(df.columns)}")
        print()
        print(df.head())


async def main() -> None:
    """Run all examples."""
    await acquisition_example()
    await forecast_example()
    await dataframe_example()


if __name__ == "__main__":
    asyncio.run(main())
