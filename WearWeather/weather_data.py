"""Weather and outfit domain model - pure data structures independent of any API."""
import math
from datetime import date, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from pydantic import TypeAdapter, model_validator
from pydantic.dataclasses import dataclass

# Shown in place of any value the provider did not report
MISSING_TEXT = "--"

# AQI at or above this value counts as bad air (mask recommended)
BAD_AIR_AQI = 101

DEFAULT_SHOES = "basic-shoes"


class Condition(str, Enum):
    """Coarse weather condition understood by the stylist and the displays."""
    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"
    SNOW = "snow"
    STORM = "storm"

    @property
    def short_text(self) -> str:
        return self.value.capitalize()


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer with halves going away from zero.

    Python's round() uses banker's rounding (round(2.5) == 2), which is not
    what a thermometer reading should show.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def aqi_status_text(aqi: int) -> str:
    """Map an air quality index to its status label."""
    if aqi <= 50:
        return "good"
    if aqi <= 100:
        return "moderate"
    if aqi <= 150:
        return "unhealthy"
    return "very-unhealthy"


def compass_point(degrees: float) -> str:
    """8-point compass name for a wind direction in degrees."""
    points = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
    return points[int(((degrees % 360) + 22.5) // 45) % 8]


@lru_cache(maxsize=None)
def wire_adapter(tp: Any) -> TypeAdapter:
    """Cached pydantic adapter used to validate and dump a wire type."""
    return TypeAdapter(tp)


class WireModel:
    """
    JSON-compatible encoding shared by everything that is persisted.

    Unknown keys are ignored and missing optional keys take their defaults;
    anything else that does not validate raises pydantic.ValidationError.
    """

    def to_dict(self) -> Dict[str, Any]:
        return wire_adapter(type(self)).dump_python(self, mode="json")

    @classmethod
    def from_dict(cls, data: Any):
        return wire_adapter(cls).validate_python(data)


@dataclass(frozen=True)
class WeatherReading(WireModel):
    """Current weather at one place, as reported by a live or mock source."""
    temperature: float  # °C
    condition: Condition
    daily_high: float
    daily_low: float

    # Unknown unless the source reports them
    feels_like: Optional[float] = None
    humidity: Optional[float] = None  # 0..1
    wind_speed: Optional[float] = None  # m/s
    wind_direction: Optional[float] = None  # degrees, 0..360
    precipitation_chance: Optional[float] = None  # 0..1
    air_quality_index: Optional[int] = None
    pm25: Optional[float] = None  # µg/m³

    @property
    def is_bad_air(self) -> bool:
        return self.air_quality_index is not None and self.air_quality_index >= BAD_AIR_AQI

    @property
    def temp_text(self) -> str:
        return f"{round_half_away(self.temperature)}°"

    @property
    def feels_like_text(self) -> str:
        if self.feels_like is None:
            return MISSING_TEXT
        return f"{round_half_away(self.feels_like)}°"

    @property
    def humidity_text(self) -> str:
        if self.humidity is None:
            return MISSING_TEXT
        return f"{round_half_away(self.humidity * 100)}%"

    @property
    def wind_text(self) -> str:
        if self.wind_speed is None:
            return MISSING_TEXT
        if self.wind_direction is None:
            return f"{self.wind_speed:.1f}m/s"
        return f"{compass_point(self.wind_direction)} {self.wind_speed:.1f}m/s"

    @property
    def precip_chance_text(self) -> str:
        if self.precipitation_chance is None:
            return MISSING_TEXT
        return f"{round_half_away(self.precipitation_chance * 100)}%"

    @property
    def aqi_text(self) -> str:
        if self.air_quality_index is None:
            return MISSING_TEXT
        return str(self.air_quality_index)

    @property
    def aqi_status_text(self) -> str:
        if self.air_quality_index is None:
            return MISSING_TEXT
        return aqi_status_text(self.air_quality_index)

    @property
    def pm25_text(self) -> str:
        if self.pm25 is None:
            return MISSING_TEXT
        return f"{round_half_away(self.pm25)}µg/m³"


@dataclass(frozen=True)
class ClothingOutfit(WireModel):
    """The outfit the stylist picked; items are artwork identifiers."""
    top: str
    bottom: str
    shoes: str = DEFAULT_SHOES
    outer: Optional[str] = None
    accessory: Optional[str] = None
    has_mask: bool = False


# Shown before any reading is available
DEFAULT_OUTFIT = ClothingOutfit(top="basic-tshirt", bottom="basic-shorts", shoes=DEFAULT_SHOES)


@dataclass(frozen=True)
class DailyForecastItem(WireModel):
    date: date
    high: float
    low: float
    condition: Condition

    def day_text(self, today: date) -> str:
        """Label for a forecast row: Today, Tomorrow, or the weekday."""
        if self.date == today:
            return "Today"
        if self.date == today + timedelta(days=1):
            return "Tomorrow"
        return self.date.strftime("%a")


@dataclass(frozen=True)
class HourlyForecastItem:
    hour_text: str  # e.g. "14:00"
    temperature: int
    condition: Condition


@dataclass(frozen=True)
class WeatherPackage:
    """Everything a weather source returns in one call."""
    current: WeatherReading
    daily: Tuple[DailyForecastItem, ...] = ()


@dataclass(frozen=True)
class CachePayload(WireModel):
    """The last successful refresh, as persisted by the TTL cache."""
    saved_at: float  # UNIX timestamp
    location_name: str
    weather: WeatherReading
    outfit: ClothingOutfit
    daily: Tuple[DailyForecastItem, ...] = ()
    is_bad_air: bool = False

    @model_validator(mode="before")
    @classmethod
    def _derive_bad_air(cls, data: Any) -> Any:
        # Payloads written before is_bad_air existed carry it only as an AQI
        if isinstance(data, dict) and "is_bad_air" not in data and isinstance(data.get("weather"), dict):
            aqi = data["weather"].get("air_quality_index")
            if isinstance(aqi, (int, float)):
                data = {**data, "is_bad_air": aqi >= BAD_AIR_AQI}
        return data

    def age_seconds(self, now: float) -> float:
        return now - self.saved_at


@dataclass(frozen=True)
class WidgetSnapshot(WireModel):
    """
    Display-ready state handed to the companion display.

    Numbers are pre-rounded and texts precomputed so the reader only renders.
    """
    updated_at: float  # UNIX timestamp
    location_name: str
    temperature: int
    condition: Condition
    daily_high: int
    daily_low: int
    outfit: ClothingOutfit
    air_quality_index: Optional[int] = None
    air_quality_status_text: Optional[str] = None
