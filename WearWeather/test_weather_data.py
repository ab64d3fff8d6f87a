"""Tests for weather_data module."""
import json
from datetime import date

import pytest
from pydantic import ValidationError

from weather_data import (
    DEFAULT_OUTFIT,
    MISSING_TEXT,
    CachePayload,
    ClothingOutfit,
    Condition,
    DailyForecastItem,
    WeatherReading,
    WidgetSnapshot,
    aqi_status_text,
    compass_point,
    round_half_away,
)


@pytest.fixture
def full_reading():
    """Reading with every optional field present."""
    return WeatherReading(
        temperature=16.4,
        condition=Condition.RAIN,
        daily_high=17.0,
        daily_low=12.0,
        feels_like=15.0,
        humidity=0.86,
        wind_speed=4.9,
        wind_direction=190,
        precipitation_chance=0.75,
        air_quality_index=96,
        pm25=30.0,
    )


@pytest.fixture
def bare_reading():
    """Reading with only the required fields."""
    return WeatherReading(temperature=20.0, condition=Condition.CLEAR, daily_high=23.0, daily_low=14.0)


def test_round_half_away_from_zero():
    """Test halves round away from zero, unlike round()."""
    assert round_half_away(2.5) == 3
    assert round_half_away(-2.5) == -3
    assert round_half_away(0.5) == 1
    assert round_half_away(2.4) == 2
    assert round_half_away(-0.4) == 0
    assert round_half_away(16.0) == 16


def test_aqi_status_thresholds():
    """Test AQI status boundaries."""
    assert aqi_status_text(0) == "good"
    assert aqi_status_text(50) == "good"
    assert aqi_status_text(51) == "moderate"
    assert aqi_status_text(100) == "moderate"
    assert aqi_status_text(101) == "unhealthy"
    assert aqi_status_text(150) == "unhealthy"
    assert aqi_status_text(151) == "very-unhealthy"
    assert aqi_status_text(500) == "very-unhealthy"


def test_compass_point():
    """Test wind direction names."""
    assert compass_point(0) == "N"
    assert compass_point(359) == "N"
    assert compass_point(40) == "NE"
    assert compass_point(190) == "S"
    assert compass_point(250) == "W"
    assert compass_point(320) == "NW"


def test_is_bad_air_threshold(bare_reading):
    """Test bad air starts at AQI 101."""
    assert WeatherReading(16, Condition.RAIN, 17, 12, air_quality_index=100).is_bad_air is False
    assert WeatherReading(16, Condition.RAIN, 17, 12, air_quality_index=101).is_bad_air is True
    assert bare_reading.is_bad_air is False


def test_display_texts(full_reading):
    """Test display helpers format present values."""
    assert full_reading.temp_text == "16°"
    assert full_reading.feels_like_text == "15°"
    assert full_reading.humidity_text == "86%"
    assert full_reading.wind_text == "S 4.9m/s"
    assert full_reading.precip_chance_text == "75%"
    assert full_reading.aqi_text == "96"
    assert full_reading.aqi_status_text == "moderate"
    assert full_reading.pm25_text == "30µg/m³"


def test_missing_values_render_as_sentinel(bare_reading):
    """Test unknown values never render as zero."""
    assert bare_reading.feels_like_text == MISSING_TEXT
    assert bare_reading.humidity_text == MISSING_TEXT
    assert bare_reading.wind_text == MISSING_TEXT
    assert bare_reading.precip_chance_text == MISSING_TEXT
    assert bare_reading.aqi_text == MISSING_TEXT
    assert bare_reading.aqi_status_text == MISSING_TEXT
    assert bare_reading.pm25_text == MISSING_TEXT


def test_default_outfit():
    """Test the outfit shown before any reading."""
    assert DEFAULT_OUTFIT.top == "basic-tshirt"
    assert DEFAULT_OUTFIT.bottom == "basic-shorts"
    assert DEFAULT_OUTFIT.shoes == "basic-shoes"
    assert DEFAULT_OUTFIT.outer is None
    assert DEFAULT_OUTFIT.accessory is None
    assert DEFAULT_OUTFIT.has_mask is False


def test_reading_from_dict_ignores_unknown_and_defaults_missing():
    """Test decoding is tolerant of schema drift."""
    reading = WeatherReading.from_dict({
        "temperature": 7,
        "condition": "cloudy",
        "daily_high": 10,
        "daily_low": 2,
        "uv_index": 3,
    })
    assert reading.temperature == 7.0
    assert reading.condition == Condition.CLOUDY
    assert reading.humidity is None
    assert reading.air_quality_index is None


def test_reading_from_dict_rejects_unknown_condition():
    """Test an unknown condition is a decode error."""
    with pytest.raises(ValueError):
        WeatherReading.from_dict({"temperature": 7, "condition": "hail", "daily_high": 10, "daily_low": 2})


def test_cache_payload_json_round_trip(full_reading):
    """Test a cache payload survives JSON encoding."""
    payload = CachePayload(
        saved_at=1700000000.5,
        location_name="Seoul",
        weather=full_reading,
        outfit=ClothingOutfit(top="knit", bottom="warm-pants", shoes="rain-boots",
                              outer="light-jacket", accessory="umbrella"),
        daily=(DailyForecastItem(date(2024, 1, 1), 17.0, 12.0, Condition.RAIN),),
        is_bad_air=False,
    )
    decoded = CachePayload.from_dict(json.loads(json.dumps(payload.to_dict())))
    assert decoded == payload


def test_cache_payload_from_older_schema():
    """Test a payload without daily/is_bad_air still decodes."""
    decoded = CachePayload.from_dict({
        "saved_at": 1.0,
        "location_name": "Seoul",
        "weather": {"temperature": -1, "condition": "snow", "daily_high": 0, "daily_low": -6,
                    "air_quality_index": 118},
        "outfit": {"top": "sweatshirt", "bottom": "padded-pants"},
    })
    assert decoded.daily == ()
    assert decoded.is_bad_air is True
    assert decoded.outfit.shoes == DEFAULT_OUTFIT.shoes


def test_widget_snapshot_json_round_trip():
    """Test decode(encode(snapshot)) == snapshot."""
    snapshot = WidgetSnapshot(
        updated_at=1700000123.25,
        location_name="Seoul",
        temperature=-1,
        condition=Condition.SNOW,
        daily_high=0,
        daily_low=-6,
        outfit=ClothingOutfit(top="sweatshirt", bottom="padded-pants", shoes="winter-boots",
                              outer="padding", accessory="gloves", has_mask=True),
        air_quality_index=118,
        air_quality_status_text="unhealthy",
    )
    assert WidgetSnapshot.from_dict(json.loads(json.dumps(snapshot.to_dict()))) == snapshot


def test_widget_snapshot_without_air_quality_round_trip():
    """Test optional AQI fields round-trip as None."""
    snapshot = WidgetSnapshot(1.0, "Seoul", 27, Condition.CLEAR, 29, 21, DEFAULT_OUTFIT)
    decoded = WidgetSnapshot.from_dict(json.loads(json.dumps(snapshot.to_dict())))
    assert decoded == snapshot
    assert decoded.air_quality_index is None


def test_day_text():
    """Test forecast day labels."""
    today = date(2024, 3, 4)  # a Monday
    assert DailyForecastItem(today, 1, 0, Condition.CLEAR).day_text(today) == "Today"
    assert DailyForecastItem(date(2024, 3, 5), 1, 0, Condition.CLEAR).day_text(today) == "Tomorrow"
    assert DailyForecastItem(date(2024, 3, 6), 1, 0, Condition.CLEAR).day_text(today) == "Wed"


def test_snapshot_missing_required_field_is_validation_error():
    """Test a snapshot without its temperature fails validation."""
    data = WidgetSnapshot(1.0, "Seoul", 27, Condition.CLEAR, 29, 21, DEFAULT_OUTFIT).to_dict()
    del data["temperature"]
    with pytest.raises(ValidationError):
        WidgetSnapshot.from_dict(data)


def test_decoding_coerces_wire_types():
    """Test JSON strings come back as dates and conditions."""
    decoded = CachePayload.from_dict({
        "saved_at": "1700000000",
        "location_name": "Seoul",
        "weather": {"temperature": 16, "condition": "rain", "daily_high": 17, "daily_low": 12},
        "outfit": {"top": "hoodie", "bottom": "denim-pants"},
        "daily": [{"date": "2024-01-01", "high": 17, "low": 12, "condition": "rain"}],
    })
    assert decoded.saved_at == 1700000000.0
    assert decoded.daily[0].date == date(2024, 1, 1)
    assert decoded.daily[0].condition is Condition.RAIN
    assert decoded.is_bad_air is False
    assert decoded.to_dict()["daily"][0]["date"] == "2024-01-01"
