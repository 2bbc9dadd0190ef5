"""Pydantic models for the geoweather domain and provider responses.

Key model groups:
    1. **Domain**: Coordinate, CacheKey, WeatherSnapshot, CacheEntry,
       AcquisitionResult. Frozen, so they can be shared between callers
       and the cache without copying.
    2. **Forecast**: Forecast, ForecastSlot, DailySummary for the 5-day,
       3-hour forecast.
    3. **Provider responses**: CurrentWeatherResponse and
       ForecastResponse, which validate the raw JSON before it is
       normalized into the domain models.

Note:
    Temperatures and wind speeds are kept in whatever units the provider
    returned (see ``WeatherSnapshot.units``). Conversion is a presentation
    concern.

Example:
    Reading a snapshot::

        result = await acquisition.request_weather()
        if result.ok:
            s = result.snapshot
            print(f"{s.temperature}° {s.condition}, humidity {s.humidity}%")
"""

from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)

from .exceptions import AcquisitionError
from .types import ICON_URL_TEMPLATE, AcquisitionState, Units


class Coordinate(BaseModel):
    """A WGS84 position in decimal degrees.

    Attributes:
        latitude: Latitude in [-90, 90].
        longitude: Longitude in [-180, 180].

    Example:
        >>> Coordinate(latitude=37.5665, longitude=126.9780)
        >>> Coordinate(latitude=91.0, longitude=0.0)  # Raises ValidationError
    """

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)


class CacheKey(BaseModel):
    """A coordinate quantized to a grid cell.

    Built by ``geoweather.cache.cache_key_for``; two coordinates in the
    same cell produce equal keys.

    Attributes:
        lat_index: Cell index along latitude.
        lon_index: Cell index along longitude.
        resolution: Cell size in degrees the indices were derived with.
    """

    model_config = ConfigDict(frozen=True)

    lat_index: int
    lon_index: int
    resolution: float


class WeatherSnapshot(BaseModel):
    """A normalized weather observation.

    Attributes:
        temperature: Air temperature in provider units.
        condition: Condition group reported by the provider (e.g. "Clouds").
        humidity: Relative humidity in %.
        wind_speed: Wind speed in provider units.
        observed_at: Observation time, timezone-aware UTC.
        coordinate: Position the snapshot was requested for.
        condition_id: Provider condition code (e.g. 803).
        description: Localized condition text (e.g. "broken clouds").
        icon: Provider icon code (e.g. "04d").
        feels_like: Apparent temperature in provider units.
        temp_min: Minimum temperature currently observed in the area.
        temp_max: Maximum temperature currently observed in the area.
        location_name: Place name resolved by the provider.
        units: Unit system the values are expressed in.

    Example:
        >>> snapshot.temperature, snapshot.condition
        (18.2, 'Clouds')
    """

    model_config = ConfigDict(frozen=True)

    temperature: float
    condition: str
    humidity: float
    wind_speed: float
    observed_at: datetime
    coordinate: Coordinate
    condition_id: Optional[int] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    location_name: Optional[str] = None
    units: Units = Units.METRIC

    @property
    def icon_url(self) -> Optional[str]:
        """URL of the condition icon, or None when the provider sent none."""
        if not self.icon:
            return None
        return ICON_URL_TEMPLATE.format(icon=self.icon)


class CacheEntry(BaseModel):
    """A snapshot held by the freshness cache.

    Attributes:
        snapshot: The cached snapshot.
        inserted_at: Cache clock reading at insertion, in seconds.
        ttl_seconds: Lifetime of the entry in seconds.
    """

    model_config = ConfigDict(frozen=True)

    snapshot: WeatherSnapshot
    inserted_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl_seconds


class AcquisitionResult(BaseModel):
    """Outcome of one ``request_weather()`` call.

    Exactly one of ``snapshot`` and ``error`` is set.

    Attributes:
        snapshot: The weather snapshot on success.
        error: The failure on error.
        from_cache: True when the snapshot came from the cache.
        trace: States visited by the call, ending in DONE or FAILED.

    Example:
        >>> result = await acquisition.request_weather()
        >>> if result.ok:
        ...     print(result.snapshot.temperature)
        ... else:
        ...     print(result.error.kind)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    snapshot: Optional[WeatherSnapshot] = None
    error: Optional[AcquisitionError] = None
    from_cache: bool = False
    trace: tuple[AcquisitionState, ...] = ()

    @model_validator(mode="after")
    def _check_outcome(self) -> "AcquisitionResult":
        if (self.snapshot is None) == (self.error is None):
            raise ValueError("exactly one of snapshot and error must be set")
        return self

    @classmethod
    def success(
        cls,
        snapshot: WeatherSnapshot,
        trace: tuple[AcquisitionState, ...],
        from_cache: bool = False,
    ) -> "AcquisitionResult":
        return cls(snapshot=snapshot, from_cache=from_cache, trace=trace)

    @classmethod
    def failure(
        cls, error: AcquisitionError, trace: tuple[AcquisitionState, ...]
    ) -> "AcquisitionResult":
        return cls(error=error, trace=trace)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def state(self) -> AcquisitionState:
        """Terminal state of the call."""
        return self.trace[-1] if self.trace else AcquisitionState.IDLE

    def unwrap(self) -> WeatherSnapshot:
        """Return the snapshot, or raise the stored error.

        Raises:
            AcquisitionError: The failure of this call.
        """
        if self.error is not None:
            raise self.error
        return self.snapshot


class ForecastSlot(BaseModel):
    """One 3-hour entry of the forecast.

    Attributes:
        time: Start of the slot, timezone-aware UTC.
        temperature: Air temperature in provider units.
        humidity: Relative humidity in %.
        wind_speed: Wind speed in provider units, None if not reported.
        condition: Condition group (e.g. "Rain").
        description: Localized condition text.
        icon: Provider icon code.
        feels_like: Apparent temperature.
        temp_min: Minimum temperature for the slot.
        temp_max: Maximum temperature for the slot.
    """

    model_config = ConfigDict(frozen=True)

    time: datetime
    temperature: float
    humidity: float
    wind_speed: Optional[float] = None
    condition: str
    description: Optional[str] = None
    icon: Optional[str] = None
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None


class DailySummary(BaseModel):
    """Per-day aggregate of forecast slots.

    Attributes:
        day: Local calendar date.
        temp_min: Lowest slot minimum of the day.
        temp_max: Highest slot maximum of the day.
        condition: Condition of the first slot of the day.
        description: Description of the first slot of the day.
        icon: Icon of the first slot of the day.
        slot_count: Number of slots aggregated.
    """

    model_config = ConfigDict(frozen=True)

    day: date
    temp_min: float
    temp_max: float
    condition: str
    description: Optional[str] = None
    icon: Optional[str] = None
    slot_count: int


class Forecast(BaseModel):
    """A multi-day forecast for one position.

    Attributes:
        coordinate: Position the forecast was requested for.
        slots: Forecast slots in chronological order.
        utc_offset_seconds: Offset of the location's local time from UTC.
        location_name: Place name resolved by the provider.
        units: Unit system the values are expressed in.

    Example:
        >>> forecast = await client.fetch_forecast(coordinate)
        >>> for day in forecast.daily_summaries():
        ...     print(f"{day.day}: {day.temp_min} - {day.temp_max}")
    """

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    slots: tuple[ForecastSlot, ...]
    utc_offset_seconds: int = 0
    location_name: Optional[str] = None
    units: Units = Units.METRIC

    def local_date(self, slot: ForecastSlot) -> date:
        return (slot.time + timedelta(seconds=self.utc_offset_seconds)).date()

    def by_date(self) -> dict[date, list[ForecastSlot]]:
        """Group slots by local calendar date, keeping chronological order."""
        grouped: dict[date, list[ForecastSlot]] = {}
        for slot in self.slots:
            grouped.setdefault(self.local_date(slot), []).append(slot)
        return grouped

    def nearest(self, moment: Optional[datetime] = None) -> Optional[ForecastSlot]:
        """Return the slot closest in time to ``moment`` (default: now).

        Naive datetimes are taken as UTC. Returns None for an empty forecast.
        """
        if not self.slots:
            return None
        if moment is None:
            moment = datetime.now(tz=dt_timezone.utc)
        elif moment.tzinfo is None:
            moment = moment.replace(tzinfo=dt_timezone.utc)
        return min(self.slots, key=lambda slot: abs(slot.time - moment))

    def daily_summaries(self, max_days: int = 5) -> list[DailySummary]:
        """Summarize the forecast into at most ``max_days`` days.

        Slots without explicit min/max fall back to their temperature.
        """
        summaries = []
        for day, slots in self.by_date().items():
            if len(summaries) >= max_days:
                break
            first = slots[0]
            summaries.append(
                DailySummary(
                    day=day,
                    temp_min=min(
                        s.temp_min if s.temp_min is not None else s.temperature
                        for s in slots
                    ),
                    temp_max=max(
                        s.temp_max if s.temp_max is not None else s.temperature
                        for s in slots
                    ),
                    condition=first.condition,
                    description=first.description,
                    icon=first.icon,
                    slot_count=len(slots),
                )
            )
        return summaries


# Provider numbers are checked strictly: JSON ints and floats pass, while
# numeric strings and booleans are rejected.
Number = Union[StrictInt, StrictFloat]


class ConditionData(BaseModel):
    """One entry of the provider's ``weather`` array."""

    id: Optional[StrictInt] = None
    main: StrictStr
    description: Optional[StrictStr] = None
    icon: Optional[StrictStr] = None


class MainData(BaseModel):
    """The provider's ``main`` block.

    Attributes:
        temp: Air temperature.
        humidity: Relative humidity in %.
        feels_like: Apparent temperature.
        temp_min: Minimum temperature.
        temp_max: Maximum temperature.
        pressure: Sea-level pressure in hPa.
    """

    temp: Number
    humidity: Number
    feels_like: Optional[Number] = None
    temp_min: Optional[Number] = None
    temp_max: Optional[Number] = None
    pressure: Optional[Number] = None


class WindData(BaseModel):
    speed: Number
    deg: Optional[Number] = None


class CurrentWeatherResponse(BaseModel):
    """Current-conditions response from the weather API.

    Only the fields the core needs are declared; everything else is kept
    as extra data.

    Attributes:
        weather: Condition entries; the first one is authoritative.
        main: Temperature and humidity block.
        wind: Wind block.
        dt: Observation time as a Unix timestamp.
        name: Place name.
        timezone: Offset of local time from UTC in seconds.
    """

    model_config = ConfigDict(extra="allow")

    weather: list[ConditionData] = Field(min_length=1)
    main: MainData
    wind: WindData
    dt: StrictInt
    name: Optional[str] = None
    timezone: StrictInt = 0

    def to_snapshot(self, coordinate: Coordinate, units: Units) -> WeatherSnapshot:
        condition = self.weather[0]
        return WeatherSnapshot(
            temperature=self.main.temp,
            condition=condition.main,
            humidity=self.main.humidity,
            wind_speed=self.wind.speed,
            observed_at=datetime.fromtimestamp(self.dt, tz=dt_timezone.utc),
            coordinate=coordinate,
            condition_id=condition.id,
            description=condition.description,
            icon=condition.icon,
            feels_like=self.main.feels_like,
            temp_min=self.main.temp_min,
            temp_max=self.main.temp_max,
            location_name=self.name or None,
            units=units,
        )


class ForecastItemData(BaseModel):
    """One element of the forecast response's ``list`` array."""

    model_config = ConfigDict(extra="allow")

    dt: StrictInt
    main: MainData
    weather: list[ConditionData] = Field(min_length=1)
    wind: Optional[WindData] = None
    dt_txt: Optional[str] = None

    def to_slot(self) -> ForecastSlot:
        condition = self.weather[0]
        return ForecastSlot(
            time=datetime.fromtimestamp(self.dt, tz=dt_timezone.utc),
            temperature=self.main.temp,
            humidity=self.main.humidity,
            wind_speed=self.wind.speed if self.wind else None,
            condition=condition.main,
            description=condition.description,
            icon=condition.icon,
            feels_like=self.main.feels_like,
            temp_min=self.main.temp_min,
            temp_max=self.main.temp_max,
        )


class CityData(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    timezone: StrictInt = 0


class ForecastResponse(BaseModel):
    """5-day / 3-hour forecast response from the weather API.

    The provider names the slot array ``list``; it is exposed as ``items``.
    """

    model_config = ConfigDict(extra="allow")

    items: list[ForecastItemData] = Field(alias="list")
    city: Optional[CityData] = None

    def to_forecast(self, coordinate: Coordinate, units: Units) -> Forecast:
        slots = sorted((item.to_slot() for item in self.items), key=lambda s: s.time)
        return Forecast(
            coordinate=coordinate,
            slots=tuple(slots),
            utc_offset_seconds=self.city.timezone if self.city else 0,
            location_name=(self.city.name or None) if self.city else None,
            units=units,
        )
