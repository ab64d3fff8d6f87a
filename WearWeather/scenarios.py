"""
Deterministic mock weather - named scenarios and the forecasts derived from them.

Used when no live provider is configured and by the companion display when
the shared snapshot is missing. Same (time, override) in, same data out.
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from snapshot import project
from stylist import Stylist
from weather_data import (
    ClothingOutfit,
    Condition,
    DailyForecastItem,
    HourlyForecastItem,
    WeatherPackage,
    WeatherReading,
    WidgetSnapshot,
    round_half_away,
)

MOCK_LOCATION_NAME = "Seoul"

DAILY_WIGGLE = [0, 1, -1, 2, -2, 1, 0]
HOURLY_OFFSETS = [-2, -1, 0, 1, 2, 1, 0, -1]
DAILY_DAYS = 7
HOURLY_HOURS = 8


class Scenario(str, Enum):
    """Fixed weather presets, in the order the hourly rotation walks them."""
    CLOUDY_COLD = "cloudy-cold"
    RAINY = "rainy"
    CLEAR_WARM = "clear-warm"
    SNOWY = "snowy"
    STORMY = "stormy"


TEMPLATES: Dict[Scenario, WeatherReading] = {
    Scenario.CLOUDY_COLD: WeatherReading(
        temperature=7, condition=Condition.CLOUDY, daily_high=10, daily_low=2,
        feels_like=5, humidity=0.62, wind_speed=3.2, wind_direction=40, precipitation_chance=0.10,
        air_quality_index=72, pm25=22,
    ),
    Scenario.RAINY: WeatherReading(
        temperature=16, condition=Condition.RAIN, daily_high=17, daily_low=12,
        feels_like=15, humidity=0.86, wind_speed=4.9, wind_direction=190, precipitation_chance=0.75,
        air_quality_index=96, pm25=30,
    ),
    Scenario.CLEAR_WARM: WeatherReading(
        temperature=27, condition=Condition.CLEAR, daily_high=29, daily_low=21,
        feels_like=29, humidity=0.48, wind_speed=2.1, wind_direction=120, precipitation_chance=0.05,
        air_quality_index=38, pm25=8,
    ),
    Scenario.SNOWY: WeatherReading(
        temperature=-1, condition=Condition.SNOW, daily_high=0, daily_low=-6,
        feels_like=-4, humidity=0.70, wind_speed=5.2, wind_direction=320, precipitation_chance=0.55,
        air_quality_index=118, pm25=42,
    ),
    Scenario.STORMY: WeatherReading(
        temperature=12, condition=Condition.STORM, daily_high=13, daily_low=8,
        feels_like=10, humidity=0.90, wind_speed=9.8, wind_direction=250, precipitation_chance=0.90,
        air_quality_index=165, pm25=68,
    ),
}


def degraded_condition(condition: Condition, index: int) -> Condition:
    """
    Condition for the index-th day or hour after a reading.

    Severe weather eases off most of the time and comes back periodically.
    """
    if condition == Condition.STORM:
        return Condition.STORM if index % 3 == 0 else Condition.RAIN
    if condition == Condition.SNOW:
        return Condition.SNOW if index % 4 == 0 else Condition.CLOUDY
    if condition == Condition.RAIN:
        return Condition.RAIN if index % 4 == 0 else Condition.CLOUDY
    if condition == Condition.CLOUDY:
        return Condition.CLOUDY if index % 5 == 0 else Condition.CLEAR
    return Condition.CLEAR


def scenario_for_time(now: datetime, override: Optional[Scenario] = None) -> Scenario:
    """Pinned scenario if any, otherwise one chosen by the wall-clock hour."""
    if override is not None:
        return override
    scenarios = list(Scenario)
    return scenarios[now.hour % len(scenarios)]


def daily_forecast(base: WeatherReading, today: date) -> List[DailyForecastItem]:
    base_high = round_half_away(base.daily_high)
    base_low = round_half_away(base.daily_low)
    items = []
    for i in range(DAILY_DAYS):
        wiggle = DAILY_WIGGLE[i % len(DAILY_WIGGLE)]
        items.append(DailyForecastItem(
            date=today + timedelta(days=i),
            high=float(base_high + wiggle),
            # Lows only ever dip
            low=float(base_low + min(wiggle, 0)),
            condition=degraded_condition(base.condition, i),
        ))
    return items


def weather_package(scenario: Scenario, today: date) -> WeatherPackage:
    """Current reading plus a 7-day forecast for a scenario."""
    current = TEMPLATES[scenario]
    return WeatherPackage(current=current, daily=tuple(daily_forecast(current, today)))


def hourly_forecast(current: WeatherReading, now: datetime) -> List[HourlyForecastItem]:
    """The next 8 hours, centred on the current temperature."""
    base = round_half_away(current.temperature)
    items = []
    for i in range(HOURLY_HOURS):
        hour = (now.hour + i + 1) % 24
        items.append(HourlyForecastItem(
            hour_text=f"{hour:02d}:00",
            temperature=base + HOURLY_OFFSETS[i % len(HOURLY_OFFSETS)],
            condition=degraded_condition(current.condition, i),
        ))
    return items


def location_name() -> str:
    return MOCK_LOCATION_NAME


def make_widget_snapshot(now: datetime, override: Optional[Scenario] = None) -> WidgetSnapshot:
    """
    Build a snapshot from scratch without any shared state.

    This is what the companion display shows when the primary process has
    never written a snapshot it can see.
    """
    scenario = scenario_for_time(now, override)
    package = weather_package(scenario, now.date())
    weather = package.current
    outfit: ClothingOutfit = Stylist().recommend(weather.temperature, weather.condition, weather.is_bad_air)
    return project(location_name(), weather, outfit, now=now.timestamp())
