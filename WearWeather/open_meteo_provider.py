"""Open-Meteo forecast and air-quality API provider implementation."""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import requests

from weather_data import Condition, DailyForecastItem, WeatherPackage, WeatherReading
from weather_provider import WeatherProviderBase, WeatherProviderError


def condition_from_wmo(code: Optional[int]) -> Condition:
    """
    Map a WMO weather interpretation code onto our coarse conditions.

    See https://open-meteo.com/en/docs (WMO Weather interpretation codes).
    Unknown codes read as clear.
    """
    if code is None:
        return Condition.CLEAR
    if code in (0, 1):
        return Condition.CLEAR
    if code in (2, 3, 45, 48):
        return Condition.CLOUDY
    if 51 <= code <= 67 or 80 <= code <= 82:
        return Condition.RAIN
    if 71 <= code <= 77 or code in (85, 86):
        return Condition.SNOW
    if 95 <= code <= 99:
        return Condition.STORM
    return Condition.CLEAR


class OpenMeteoProvider(WeatherProviderBase):
    """
    Weather provider using the Open-Meteo APIs.

    Open-Meteo needs no API key. Current conditions and the 7-day forecast
    come from one forecast request; air quality comes from a second request
    whose failure only leaves the AQI fields empty.
    """

    FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
    AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

    def __init__(self, timeout: int = 10, forecast_days: int = 7):
        """
        Initialize Open-Meteo provider.

        Args:
            timeout: HTTP request timeout in seconds
            forecast_days: Number of daily forecast entries to request
        """
        self.timeout = timeout
        self.forecast_days = forecast_days

    def fetch_weather_package(self, latitude: float, longitude: float) -> WeatherPackage:
        """
        Fetch current weather and the daily forecast from Open-Meteo.

        Returns:
            WeatherPackage: Current reading plus daily forecast

        Raises:
            WeatherProviderError: If the forecast request fails or is malformed
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join([
                "temperature_2m",
                "apparent_temperature",
                "relative_humidity_2m",
                "weather_code",
                "wind_speed_10m",
                "wind_direction_10m",
            ]),
            "daily": ",".join([
                "weather_code",
                "temperature_2m_max",
                "temperature_2m_min",
                "precipitation_probability_max",
            ]),
            "forecast_days": self.forecast_days,
            "wind_speed_unit": "ms",
            "timezone": "auto",
        }

        try:
            logging.info(f"Making Open-Meteo forecast request: {self.FORECAST_URL}")
            logging.debug(f"Request parameters: lat={latitude}, lon={longitude}")

            response = requests.get(self.FORECAST_URL, params=params, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")
            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")

            current = data.get("current")
            if not current:
                raise WeatherProviderError("Response missing 'current' block")
            daily_block = data.get("daily")
            if not daily_block:
                raise WeatherProviderError("Response missing 'daily' block")

            daily = self._parse_daily(daily_block)
            aqi, pm25 = self._fetch_air_quality(latitude, longitude)

            precip = daily_block.get("precipitation_probability_max") or []
            precip_today = precip[0] if precip else None
            humidity = current.get("relative_humidity_2m")

            reading = WeatherReading(
                temperature=float(current["temperature_2m"]),
                condition=condition_from_wmo(current.get("weather_code")),
                daily_high=daily[0].high if daily else float(current["temperature_2m"]),
                daily_low=daily[0].low if daily else float(current["temperature_2m"]),
                feels_like=current.get("apparent_temperature"),
                humidity=humidity / 100.0 if humidity is not None else None,
                wind_speed=current.get("wind_speed_10m"),
                wind_direction=current.get("wind_direction_10m"),
                precipitation_chance=precip_today / 100.0 if precip_today is not None else None,
                air_quality_index=aqi,
                pm25=pm25,
            )

            logging.info(f"Successfully parsed weather data: {reading.temperature}°C, {reading.condition.value}")
            return WeatherPackage(current=reading, daily=tuple(daily))

        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except (KeyError, ValueError, TypeError, IndexError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

    def _parse_daily(self, block: Dict[str, Any]) -> List[DailyForecastItem]:
        days = block["time"]
        codes = block.get("weather_code") or [None] * len(days)
        highs = block["temperature_2m_max"]
        lows = block["temperature_2m_min"]
        return [
            DailyForecastItem(
                date=date.fromisoformat(day),
                high=float(high),
                low=float(low),
                condition=condition_from_wmo(code),
            )
            for day, code, high, low in zip(days, codes, highs, lows)
        ]

    def _fetch_air_quality(self, latitude: float, longitude: float) -> Tuple[Optional[int], Optional[float]]:
        """Return (US AQI, PM2.5); (None, None) if unavailable."""
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "us_aqi,pm2_5",
        }
        try:
            response = requests.get(self.AIR_QUALITY_URL, params=params, timeout=self.timeout)
            if not response.ok:
                logging.warning(f"Air quality request failed with status {response.status_code}")
                return None, None
            current = response.json().get("current") or {}
            aqi = current.get("us_aqi")
            pm25 = current.get("pm2_5")
            return (
                int(round(aqi)) if aqi is not None else None,
                float(pm25) if pm25 is not None else None,
            )
        except (requests.exceptions.RequestException, ValueError, TypeError) as e:
            logging.warning(f"Air quality unavailable: {e}")
            return None, None

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from an Open-Meteo error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )

        logging.error(f"Open-Meteo API error response: {error_data}")
        reason = error_data.get("reason", "Unknown error")
        raise WeatherProviderError(f"Open-Meteo API error {response.status_code}: {reason}")
