"""Projection of full weather state into the companion display's snapshot."""
import time
from typing import Optional

from weather_data import (
    ClothingOutfit,
    WeatherReading,
    WidgetSnapshot,
    aqi_status_text,
    round_half_away,
)

# Cross-process key the companion display reads
SNAPSHOT_KEY = "wearweather.widget-snapshot.v1"


def project(
    location_name: str,
    weather: WeatherReading,
    outfit: ClothingOutfit,
    now: Optional[float] = None
) -> WidgetSnapshot:
    """
    Reduce a reading and outfit to display-ready values.

    Args:
        location_name: Place name to show
        weather: Current reading
        outfit: Outfit recommended for the reading
        now: UNIX timestamp to stamp the snapshot with (default: current time)

    Returns:
        WidgetSnapshot: Rounded, precomputed snapshot
    """
    aqi = weather.air_quality_index
    return WidgetSnapshot(
        updated_at=time.time() if now is None else now,
        location_name=location_name,
        temperature=round_half_away(weather.temperature),
        condition=weather.condition,
        daily_high=round_half_away(weather.daily_high),
        daily_low=round_half_away(weather.daily_low),
        outfit=outfit,
        air_quality_index=aqi,
        air_quality_status_text=None if aqi is None else aqi_status_text(aqi),
    )
