import pytest
from pydantic import ValidationError

from geoweather import GeoWeatherSettings, Units
from geoweather.types import FORECAST_BASE_URL, WEATHER_BASE_URL


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "GEOWEATHER_API_KEY",
        "GEOWEATHER_UNITS",
        "GEOWEATHER_CACHE_TTL_MINUTES",
        "GEOWEATHER_CACHE_CAPACITY",
        "GEOWEATHER_GRID_RESOLUTION_DEGREES",
        "GEOWEATHER_COALESCE_REQUESTS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettingsDefaults:
    def test_defaults(self):
        settings = GeoWeatherSettings(_env_file=None)
        assert settings.base_url == WEATHER_BASE_URL
        assert settings.forecast_url == FORECAST_BASE_URL
        assert settings.api_key is None
        assert settings.units is Units.METRIC
        assert settings.cache_ttl_minutes == 10
        assert settings.cache_capacity == 32
        assert settings.grid_resolution_degrees == 0.01
        assert settings.coalesce_requests is False


class TestSettingsFromEnv:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GEOWEATHER_API_KEY", "from-env")
        monkeypatch.setenv("GEOWEATHER_UNITS", "imperial")
        monkeypatch.setenv("GEOWEATHER_CACHE_TTL_MINUTES", "5")
        monkeypatch.setenv("GEOWEATHER_COALESCE_REQUESTS", "true")

        settings = GeoWeatherSettings(_env_file=None)

        assert settings.api_key == "from-env"
        assert settings.units is Units.IMPERIAL
        assert settings.cache_ttl_minutes == 5
        assert settings.coalesce_requests is True

    def test_prefix_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("geoweather_cache_capacity", "7")
        assert GeoWeatherSettings(_env_file=None).cache_capacity == 7

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "nope")
        assert GeoWeatherSettings(_env_file=None).api_key is None


class TestSettingsValidation:
    @pytest.mark.parametrize(
        "field,value",
        [
            ("cache_ttl_minutes", 0),
            ("cache_capacity", 0),
            ("grid_resolution_degrees", 0),
            ("grid_resolution_degrees", 2.0),
            ("location_timeout_seconds", -1),
            ("network_timeout_seconds", 0),
        ],
    )
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            GeoWeatherSettings(_env_file=None, **{field: value})

    def test_rejects_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("GEOWEATHER_CACHE_CAPACITY", "many")
        with pytest.raises(ValidationError):
            GeoWeatherSettings(_env_file=None)
