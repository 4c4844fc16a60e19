"""Tests for FunctionData and the response models."""

from __future__ import annotations

import json
from dataclasses import FrozenInstanceError, replace
from datetime import UTC, datetime

import pytest

from ambient_weather.datasources.ambient.models import (
    MAX_LIMIT,
    DeviceRecord,
    DeviceSummary,
    FunctionData,
    create_api_config,
    parse_devices,
    parse_records,
)
from ambient_weather.errors import ErrorKind, InvalidLimitError, MalformedDateError

SAMPLE_RECORD: dict = {
    "dateutc": 1700006400000,
    "date": "2023-11-15T00:00:00.000Z",
    "tz": "America/Chicago",
    "baromabsin": 29.12,
    "baromrelin": 29.92,
    "hourlyrainin": 0,
    "dailyrainin": 0.02,
    "weeklyrainin": 0.5,
    "monthlyrainin": 1.1,
    "yearlyrainin": 30.4,
    "eventrainin": 0.02,
    "lastRain": "2023-11-14T18:20:00.000Z",
    "tempf": 54.3,
    "tempinf": 70.1,
    "feelsLike": 54.3,
    "feelsLikein": 69.8,
    "dewPoint": 40.2,
    "dewPointin": 48.0,
    "humidity": 59,
    "humidityin": 45,
    "windspeedmph": 3.4,
    "windgustmph": 6.9,
    "winddir": 180,
    "windspdmph_avg10m": 2.9,
    "winddir_avg10m": 175,
    "maxdailygust": 12.1,
    "uv": 2,
    "solarradiation": 250.5,
    "lightning_day": 0,
    "lightning_hour": 0,
    "lightning_distance": 7.5,
    "lightning_time": 1699990000000,
    "batt_lightning": 0,
    "some_new_sensor": 1,
}

SAMPLE_DEVICE: dict = {
    "macAddress": "00:0E:C6:20:0F:7B",
    "info": {
        "name": "Backyard",
        "coords": {
            "address": "123 Main St",
            "location": "Springfield",
            "elevation": 210.5,
            "coords": {"lat": 39.78, "lon": -89.65},
            "geo": {"type": "Point", "coordinates": [-89.65, 39.78]},
        },
    },
    "lastData": {"dateutc": 1700006400000, "tempf": 54.3},
}


class TestFunctionData:
    """Test the request context."""

    def test_defaults(self) -> None:
        fd = FunctionData()
        assert fd.api_key == ""
        assert fd.application_key == ""
        assert fd.epoch == 0
        assert fd.limit == 1
        assert fd.mac_address == ""

    def test_create_api_config(self) -> None:
        fd = create_api_config("api", "app")
        assert fd == FunctionData(api_key="api", application_key="app")

    @pytest.mark.parametrize("limit", [1, 100, MAX_LIMIT])
    def test_limit_in_range(self, limit: int) -> None:
        assert FunctionData(limit=limit).limit == limit

    @pytest.mark.parametrize("limit", [0, -1, 289, 1000])
    def test_limit_out_of_range(self, limit: int) -> None:
        with pytest.raises(InvalidLimitError) as exc_info:
            FunctionData(limit=limit)
        assert exc_info.value.limit == limit
        assert exc_info.value.kind == ErrorKind.INVALID_LIMIT

    def test_negative_epoch(self) -> None:
        with pytest.raises(MalformedDateError):
            FunctionData(epoch=-5)

    def test_immutable(self) -> None:
        fd = FunctionData()
        with pytest.raises(FrozenInstanceError):
            fd.epoch = 5  # type: ignore[misc]

    def test_replace_leaves_original(self) -> None:
        fd = FunctionData(epoch=10)
        moved = replace(fd, epoch=20)
        assert fd.epoch == 10
        assert moved.epoch == 20

    def test_replace_revalidates(self) -> None:
        with pytest.raises(InvalidLimitError):
            replace(FunctionData(), limit=300)

    def test_from_date(self) -> None:
        fd = FunctionData.from_date("api", "app", mac_address="mac", start_date="2014-01-01")
        assert fd.epoch == 1388534400000
        assert fd.limit == MAX_LIMIT
        assert fd.mac_address == "mac"

    def test_from_date_malformed(self) -> None:
        with pytest.raises(MalformedDateError):
            FunctionData.from_date("api", "app", mac_address="mac", start_date="11-15-2021")

    def test_str_is_json(self) -> None:
        data = json.loads(str(FunctionData(api_key="a", application_key="b", epoch=3, limit=2)))
        assert data == {
            "api_key": "a",
            "application_key": "b",
            "epoch": 3,
            "limit": 2,
            "mac_address": "",
        }


class TestDeviceRecord:
    """Test decoding of wire records."""

    def test_full_record(self) -> None:
        rec = DeviceRecord.model_validate(SAMPLE_RECORD)
        assert rec.dateutc == 1700006400000
        assert rec.barom_abs_in == 29.12
        assert rec.daily_rain_in == 0.02
        assert rec.temp_f == 54.3
        assert rec.temp_in_f == 70.1
        assert rec.humidity == 59
        assert rec.wind_speed_avg10m_mph == 2.9
        assert rec.wind_dir_avg10m == 175
        assert rec.solar_radiation == 250.5
        assert rec.lightning_distance == 7.5
        assert rec.feels_like == 54.3
        assert rec.tz == "America/Chicago"

    def test_timestamp(self) -> None:
        rec = DeviceRecord.model_validate(SAMPLE_RECORD)
        assert rec.timestamp == datetime(2023, 11, 15, tzinfo=UTC)

    def test_sparse_record(self) -> None:
        rec = DeviceRecord.model_validate({"dateutc": 1})
        assert rec.temp_f is None
        assert rec.lightning_day is None

    def test_dateutc_required(self) -> None:
        with pytest.raises(ValueError):
            DeviceRecord.model_validate({"tempf": 50})

    def test_dump_uses_wire_names(self) -> None:
        rec = DeviceRecord(dateutc=1, temp_f=50.0)
        assert json.loads(rec.model_dump_json(by_alias=True, exclude_none=True)) == {
            "dateutc": 1,
            "tempf": 50.0,
        }

    def test_frozen(self) -> None:
        rec = DeviceRecord(dateutc=1)
        with pytest.raises(ValueError):
            rec.dateutc = 2  # type: ignore[misc]

    def test_parse_records_empty(self) -> None:
        assert parse_records([]) == []


class TestDeviceSummary:
    """Test decoding of the devices listing."""

    def test_full_device(self) -> None:
        device = DeviceSummary.model_validate(SAMPLE_DEVICE)
        assert device.mac_address == "00:0E:C6:20:0F:7B"
        assert device.name == "Backyard"
        assert device.info.coords is not None
        assert device.info.coords.coords is not None
        assert device.info.coords.coords.lat == 39.78
        assert device.last_data is not None
        assert device.last_data.temp_f == 54.3

    def test_name_falls_back_to_mac(self) -> None:
        device = DeviceSummary.model_validate({"macAddress": "aa:bb"})
        assert device.name == "aa:bb"
        assert device.last_data is None

    def test_parse_devices(self) -> None:
        devices = parse_devices([SAMPLE_DEVICE, {"macAddress": "aa:bb"}])
        assert [d.mac_address for d in devices] == ["00:0E:C6:20:0F:7B", "aa:bb"]
