from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from geoweather import (
    AcquisitionResult,
    AcquisitionState,
    ApiError,
    Coordinate,
    Forecast,
    Units,
)
from geoweather.models import CacheEntry, CurrentWeatherResponse, ForecastResponse

from conftest import T0


class TestCoordinate:
    def test_valid_coordinates(self):
        Coordinate(latitude=0.0, longitude=0.0)
        Coordinate(latitude=-90.0, longitude=-180.0)
        Coordinate(latitude=90.0, longitude=180.0)

    @pytest.mark.parametrize(
        "lat,lon", [(91.0, 0.0), (-91.0, 0.0), (0.0, 181.0), (0.0, -180.5)]
    )
    def test_out_of_range(self, lat, lon):
        with pytest.raises(ValidationError):
            Coordinate(latitude=lat, longitude=lon)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            Coordinate(latitude=float("nan"), longitude=0.0)

    def test_immutable(self, seoul):
        with pytest.raises(ValidationError):
            seoul.latitude = 0.0


class TestWeatherSnapshot:
    def test_icon_url_none_without_icon(self, make_snapshot):
        assert make_snapshot().icon_url is None

    def test_snapshot_is_frozen(self, make_snapshot):
        snapshot = make_snapshot()
        with pytest.raises(ValidationError):
            snapshot.temperature = 0.0

    def test_default_units(self, make_snapshot):
        assert make_snapshot().units is Units.METRIC


class TestCacheEntry:
    def test_expiry_boundary(self, make_snapshot):
        entry = CacheEntry(snapshot=make_snapshot(), inserted_at=100.0, ttl_seconds=600.0)
        assert entry.is_expired(700.0) is False
        assert entry.is_expired(700.5) is True


class TestAcquisitionResult:
    def test_success(self, make_snapshot):
        snapshot = make_snapshot()
        trace = (AcquisitionState.IDLE, AcquisitionState.DONE)
        result = AcquisitionResult.success(snapshot, trace)

        assert result.ok
        assert result.unwrap() is snapshot
        assert result.state is AcquisitionState.DONE
        assert result.from_cache is False

    def test_failure_unwrap_raises(self):
        error = ApiError(500)
        result = AcquisitionResult.failure(
            error, (AcquisitionState.IDLE, AcquisitionState.FAILED)
        )

        assert not result.ok
        assert result.snapshot is None
        assert result.state is AcquisitionState.FAILED
        with pytest.raises(ApiError) as exc_info:
            result.unwrap()
        assert exc_info.value is error

    def test_empty_trace_is_idle(self, make_snapshot):
        result = AcquisitionResult.success(make_snapshot(), ())
        assert result.state is AcquisitionState.IDLE

    def test_requires_snapshot_or_error(self):
        with pytest.raises(ValidationError):
            AcquisitionResult()

    def test_rejects_snapshot_and_error(self, make_snapshot):
        with pytest.raises(ValidationError):
            AcquisitionResult(snapshot=make_snapshot(), error=ApiError(500))


class TestProviderResponseTypes:
    def test_integer_values_accepted(self, current_payload):
        current_payload["main"]["temp"] = 18
        parsed = CurrentWeatherResponse.model_validate(current_payload)
        assert parsed.main.temp == 18
        assert parsed.main.humidity == 55

    @pytest.mark.parametrize(
        "block,field,value",
        [
            ("main", "temp", "18.2"),
            ("main", "humidity", True),
            ("wind", "speed", "3.1"),
        ],
    )
    def test_coercible_values_rejected(self, current_payload, block, field, value):
        current_payload[block][field] = value
        with pytest.raises(ValidationError):
            CurrentWeatherResponse.model_validate(current_payload)

    def test_string_timestamp_rejected(self, current_payload):
        current_payload["dt"] = str(T0)
        with pytest.raises(ValidationError):
            CurrentWeatherResponse.model_validate(current_payload)


class TestForecast:
    @pytest.fixture
    def forecast(self, seoul, forecast_payload):
        return ForecastResponse.model_validate(forecast_payload).to_forecast(
            seoul, Units.METRIC
        )

    def test_by_date_uses_local_time(self, forecast):
        grouped = forecast.by_date()
        assert list(grouped) == [date(2025, 5, 20), date(2025, 5, 21)]
        assert len(grouped[date(2025, 5, 20)]) == 5
        assert len(grouped[date(2025, 5, 21)]) == 1

    def test_by_date_without_offset(self, seoul, forecast_payload):
        del forecast_payload["city"]
        forecast = ForecastResponse.model_validate(forecast_payload).to_forecast(
            seoul, Units.METRIC
        )
        assert list(forecast.by_date()) == [date(2025, 5, 20)]
        assert forecast.location_name is None

    def test_nearest(self, forecast):
        moment = datetime.fromtimestamp(T0, tz=timezone.utc) + timedelta(hours=7)
        slot = forecast.nearest(moment)
        assert slot.time == datetime.fromtimestamp(T0 + 6 * 3600, tz=timezone.utc)

    def test_nearest_naive_is_utc(self, forecast):
        moment = datetime(2025, 5, 20, 14, 0)
        slot = forecast.nearest(moment)
        assert slot.time == datetime(2025, 5, 20, 15, 0, tzinfo=timezone.utc)

    def test_nearest_empty(self, seoul):
        assert Forecast(coordinate=seoul, slots=()).nearest() is None

    def test_daily_summaries(self, forecast):
        summaries = forecast.daily_summaries()
        assert len(summaries) == 2

        first = summaries[0]
        assert first.day == date(2025, 5, 20)
        assert first.temp_min == 14.1
        assert first.temp_max == 23.2
        assert first.condition == "Clouds"
        assert first.icon == "03d"
        assert first.slot_count == 5

        second = summaries[1]
        assert second.condition == "Rain"
        assert second.temp_min == 12.3
        assert second.temp_max == 13.8

    def test_daily_summaries_limit(self, forecast):
        assert len(forecast.daily_summaries(max_days=1)) == 1
