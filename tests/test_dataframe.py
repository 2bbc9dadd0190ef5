import pytest

from geoweather import Coordinate, Forecast, Units
from geoweather.models import ForecastResponse


class TestForecastToDataframe:
    def test_one_row_per_slot(self, seoul, forecast_payload):
        pd = pytest.importorskip("pandas")
        from geoweather.dataframe import to_dataframe

        forecast = ForecastResponse.model_validate(forecast_payload).to_forecast(
            seoul, Units.METRIC
        )
        df = to_dataframe(forecast)

        assert len(df) == 6
        assert "time" in df.columns
        assert "temperature" in df.columns
        assert str(df["time"].dt.tz) == "UTC"
        assert df["temperature"].iloc[0] == 17.0
        assert df["condition"].iloc[-1] == "Rain"
        assert pd.api.types.is_datetime64_any_dtype(df["time"])

    def test_empty_forecast(self, seoul):
        pytest.importorskip("pandas")
        from geoweather.dataframe import to_dataframe

        df = to_dataframe(Forecast(coordinate=seoul, slots=()))

        assert df.empty
        assert list(df.columns) == ["time"]


class TestSnapshotsToDataframe:
    def test_snapshots_flattened(self, make_snapshot):
        pytest.importorskip("pandas")
        from geoweather.dataframe import to_dataframe

        busan = Coordinate(latitude=35.1796, longitude=129.0756)
        df = to_dataframe([make_snapshot(), make_snapshot(coordinate=busan)])

        assert len(df) == 2
        assert "coordinate" not in df.columns
        assert df["latitude"].tolist() == [37.5665, 35.1796]
        assert df["longitude"].tolist() == [126.978, 129.0756]
        assert df["units"].tolist() == ["metric", "metric"]
        assert str(df["observed_at"].dt.tz) == "UTC"

    def test_empty_sequence(self):
        pytest.importorskip("pandas")
        from geoweather.dataframe import to_dataframe

        df = to_dataframe([])
        assert df.empty
        assert list(df.columns) == ["observed_at"]


class TestUnsupportedInput:
    def test_to_dataframe_unsupported_type(self):
        pytest.importorskip("pandas")
        from geoweather.dataframe import to_dataframe

        with pytest.raises(ValueError, match="Unsupported input type"):
            to_dataframe("not a forecast")

    def test_mixed_sequence_rejected(self, make_snapshot):
        pytest.importorskip("pandas")
        from geoweather.dataframe import to_dataframe

        with pytest.raises(ValueError):
            to_dataframe([make_snapshot(), {"temperature": 1.0}])
