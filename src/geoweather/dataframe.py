"""DataFrame conversion utilities for geoweather results.

Requirements:
    pandas >= 2.0 must be installed. Install with:
        pip install pandas
    Or install geoweather with the pandas extra:
        pip install geoweather[pandas]

Functions:
    to_dataframe: Convert a Forecast or a sequence of snapshots to a
        pandas DataFrame.

Example:
    Forecast as a table::

        from geoweather.dataframe import to_dataframe

        async with WeatherClient(api_key="...") as client:
            forecast = await client.fetch_forecast(coordinate)
            df = to_dataframe(forecast)
            print(df.groupby(df["time"].dt.date)["temperature"].max())
"""

from collections.abc import Sequence
from typing import Union

from .models import Forecast, WeatherSnapshot


def _check_pandas() -> None:
    """Check if pandas is installed and raise informative error if not."""
    try:
        import pandas  # noqa: F401
    except ImportError as e:
        raise ImportError(
            "pandas is required for DataFrame conversion. "
            "Install it with: pip install pandas"
        ) from e


def to_dataframe(
    data: Union[Forecast, Sequence[WeatherSnapshot]],
) -> "pd.DataFrame":
    """Convert a forecast or snapshots to a pandas DataFrame.

    Args:
        data: Either a Forecast (one row per slot, time column ``time``) or
            a sequence of WeatherSnapshot (one row per snapshot, time column
            ``observed_at``, with ``latitude``/``longitude`` columns in place
            of the nested coordinate).

    Returns:
        pandas DataFrame. The time column is datetime64 in UTC.

    Raises:
        ImportError: If pandas is not installed.
        ValueError: If the input type is not recognized.

    Example:
        >>> df = to_dataframe(forecast)
        >>> df.columns[:3].tolist()
        ['time', 'temperature', 'humidity']
    """
    _check_pandas()
    import pandas as pd

    if isinstance(data, Forecast):
        df = pd.DataFrame([slot.model_dump() for slot in data.slots])
        if df.empty:
            return pd.DataFrame(columns=["time"])
        df["time"] = pd.to_datetime(df["time"], utc=True)
        return df

    if isinstance(data, Sequence) and all(
        isinstance(item, WeatherSnapshot) for item in data
    ):
        rows = []
        for snapshot in data:
            row = snapshot.model_dump(exclude={"coordinate"}, mode="python")
            row["units"] = snapshot.units.value
            row["latitude"] = snapshot.coordinate.latitude
            row["longitude"] = snapshot.coordinate.longitude
            rows.append(row)
        df = pd.DataFrame(rows)
        if df.empty:
            return pd.DataFrame(columns=["observed_at"])
        df["observed_at"] = pd.to_datetime(df["observed_at"], utc=True)
        return df

    raise ValueError(
        f"Unsupported input type: {type(data).__name__}. "
        "Expected Forecast or a sequence of WeatherSnapshot."
    )


__all__ = ["to_dataframe"]
