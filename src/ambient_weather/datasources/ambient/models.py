"""
Ambient Weather request context and response models.

``FunctionData`` carries the per-session request parameters.  The response
models are pydantic, keyed by the wire names the API uses and ignoring any
field we do not model (stations report different sensor sets).
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ambient_weather.dates import epoch_ms_to_datetime, to_epoch_ms
from ambient_weather.errors import InvalidLimitError, MalformedDateError

MIN_LIMIT = 1
MAX_LIMIT = 288  # one day of 5-minute records


# =============================================================================
# Request context
# =============================================================================


@dataclass(frozen=True)
class FunctionData:
    """
    Parameters for one logical session against the API.

    ``epoch`` is the first checkpoint (ms since the epoch) for historical
    queries.  Instances are immutable; the pagination engine derives one copy
    per window with ``dataclasses.replace`` instead of moving a shared cursor.
    """

    api_key: str = ""
    application_key: str = ""
    epoch: int = 0
    limit: int = MIN_LIMIT
    mac_address: str = ""

    def __post_init__(self) -> None:
        if not MIN_LIMIT <= self.limit <= MAX_LIMIT:
            raise InvalidLimitError(self.limit, MIN_LIMIT, MAX_LIMIT)
        if self.epoch < 0:
            raise MalformedDateError(str(self.epoch))

    @classmethod
    def from_date(
        cls,
        api_key: str,
        application_key: str,
        *,
        mac_address: str,
        start_date: str,
        limit: int = MAX_LIMIT,
    ) -> FunctionData:
        """Build a session whose first checkpoint is ``start_date`` (YYYY-MM-DD)."""
        return cls(
            api_key=api_key,
            application_key=application_key,
            epoch=to_epoch_ms(start_date),
            limit=limit,
            mac_address=mac_address,
        )

    def __str__(self) -> str:
        return json.dumps(asdict(self))


def create_api_config(api_key: str, application_key: str) -> FunctionData:
    """``FunctionData`` holding just a key pair; other fields take defaults."""
    return FunctionData(api_key=api_key, application_key=application_key)


# =============================================================================
# Response models
# =============================================================================


class DeviceRecord(BaseModel):
    """One weather observation from a station."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    dateutc: int = Field(..., description="Observation time, ms since the epoch")
    date: datetime | None = None
    tz: str | None = None

    # Barometer (inHg)
    barom_abs_in: float | None = Field(default=None, alias="baromabsin")
    barom_rel_in: float | None = Field(default=None, alias="baromrelin")

    # Rain (in)
    hourly_rain_in: float | None = Field(default=None, alias="hourlyrainin")
    daily_rain_in: float | None = Field(default=None, alias="dailyrainin")
    weekly_rain_in: float | None = Field(default=None, alias="weeklyrainin")
    monthly_rain_in: float | None = Field(default=None, alias="monthlyrainin")
    yearly_rain_in: float | None = Field(default=None, alias="yearlyrainin")
    event_rain_in: float | None = Field(default=None, alias="eventrainin")
    last_rain: datetime | None = Field(default=None, alias="lastRain")

    # Temperature (F)
    temp_f: float | None = Field(default=None, alias="tempf")
    temp_in_f: float | None = Field(default=None, alias="tempinf")
    feels_like: float | None = Field(default=None, alias="feelsLike")
    feels_like_in: float | None = Field(default=None, alias="feelsLikein")
    dew_point: float | None = Field(default=None, alias="dewPoint")
    dew_point_in: float | None = Field(default=None, alias="dewPointin")

    # Humidity (%)
    humidity: int | None = None
    humidity_in: int | None = Field(default=None, alias="humidityin")

    # Wind
    wind_speed_mph: float | None = Field(default=None, alias="windspeedmph")
    wind_gust_mph: float | None = Field(default=None, alias="windgustmph")
    wind_dir: int | None = Field(default=None, alias="winddir")
    wind_speed_avg10m_mph: float | None = Field(default=None, alias="windspdmph_avg10m")
    wind_dir_avg10m: int | None = Field(default=None, alias="winddir_avg10m")
    max_daily_gust: float | None = Field(default=None, alias="maxdailygust")

    # Sun
    uv: int | None = None
    solar_radiation: float | None = Field(default=None, alias="solarradiation")

    # Lightning
    lightning_day: int | None = None
    lightning_hour: int | None = None
    lightning_distance: float | None = None
    lightning_time: int | None = None
    batt_lightning: int | None = None

    @property
    def timestamp(self) -> datetime:
        """Observation time as an aware UTC datetime."""
        return epoch_ms_to_datetime(self.dateutc)


class GeoPoint(BaseModel):
    type: str | None = None
    coordinates: list[float] = Field(default_factory=list)


class LatLon(BaseModel):
    lat: float | None = None
    lon: float | None = None


class Coordinates(BaseModel):
    """Station location as reported under ``info.coords``."""

    address: str | None = None
    location: str | None = None
    elevation: float | None = None
    coords: LatLon | None = None
    geo: GeoPoint | None = None


class DeviceInfo(BaseModel):
    name: str | None = None
    coords: Coordinates | None = None


class DeviceSummary(BaseModel):
    """
    A registered station with its most recent observation.

    ``mac_address`` is what historical queries need; everything else is
    informational.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    mac_address: str = Field(..., alias="macAddress")
    info: DeviceInfo = Field(default_factory=DeviceInfo)
    last_data: DeviceRecord | None = Field(default=None, alias="lastData")

    @property
    def name(self) -> str:
        return self.info.name or self.mac_address


def parse_records(payload: list[dict[str, Any]]) -> list[DeviceRecord]:
    """Validate a list of wire records."""
    return [DeviceRecord.model_validate(item) for item in payload]


def parse_devices(payload: list[dict[str, Any]]) -> list[DeviceSummary]:
    return [DeviceSummary.model_validate(item) for item in payload]
