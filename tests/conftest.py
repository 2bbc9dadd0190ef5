import copy
from datetime import datetime, timezone

import pytest

from geoweather import Coordinate, WeatherSnapshot

# 2025-05-20T00:00:00Z
T0 = 1747699200

CURRENT_PAYLOAD = {
    "coord": {"lon": 126.978, "lat": 37.5665},
    "weather": [
        {"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}
    ],
    "main": {
        "temp": 18.2,
        "feels_like": 17.6,
        "temp_min": 16.9,
        "temp_max": 19.4,
        "pressure": 1013,
        "humidity": 55,
    },
    "wind": {"speed": 3.1, "deg": 250},
    "dt": T0,
    "timezone": 32400,
    "name": "Seoul",
    "cod": 200,
}


def _forecast_item(offset_hours, temp, temp_min, temp_max, main="Clear", icon="01d"):
    dt = T0 + offset_hours * 3600
    return {
        "dt": dt,
        "main": {
            "temp": temp,
            "feels_like": temp - 0.5,
            "temp_min": temp_min,
            "temp_max": temp_max,
            "humidity": 60,
        },
        "weather": [{"id": 800, "main": main, "description": main.lower(), "icon": icon}],
        "wind": {"speed": 2.0, "deg": 180},
        "dt_txt": datetime.fromtimestamp(dt, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
    }


# Seoul is UTC+9: the first five slots fall on 2025-05-20 local time,
# the sixth (15:00Z) on 2025-05-21.
FORECAST_PAYLOAD = {
    "cod": "200",
    "cnt": 6,
    "list": [
        _forecast_item(0, 17.0, 16.0, 17.5, main="Clouds", icon="03d"),
        _forecast_item(3, 20.0, 19.0, 21.0),
        _forecast_item(6, 22.0, 21.5, 23.2),
        _forecast_item(9, 19.0, 18.0, 19.5),
        _forecast_item(12, 15.0, 14.1, 15.5),
        _forecast_item(15, 13.0, 12.3, 13.8, main="Rain", icon="10n"),
    ],
    "city": {"id": 1835848, "name": "Seoul", "timezone": 32400},
}


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def seoul():
    return Coordinate(latitude=37.5665, longitude=126.9780)


@pytest.fixture
def current_payload():
    return copy.deepcopy(CURRENT_PAYLOAD)


@pytest.fixture
def forecast_payload():
    return copy.deepcopy(FORECAST_PAYLOAD)


@pytest.fixture
def make_snapshot(seoul):
    def _make(observed_at=T0, temperature=18.2, coordinate=None):
        return WeatherSnapshot(
            temperature=temperature,
            condition="Clouds",
            humidity=55,
            wind_speed=3.1,
            observed_at=datetime.fromtimestamp(observed_at, tz=timezone.utc),
            coordinate=coordinate or seoul,
        )

    return _make
