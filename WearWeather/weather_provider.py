"""Provider abstractions - weather source, location source and place-name lookup."""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator

from weather_data import WeatherPackage

EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def distance_to(self, other: "Coordinates") -> float:
        """Great-circle distance in meters (haversine)."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        d_lat = lat2 - lat1
        d_lon = math.radians(other.longitude - self.longitude)
        a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def fetch_weather_package(self, latitude: float, longitude: float) -> WeatherPackage:
        """
        Fetch current weather and the daily forecast for a position.

        Returns:
            WeatherPackage: Current reading plus daily forecast

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass


class LocationProviderBase(ABC):
    """Source of position updates."""

    @abstractmethod
    def updates(self) -> AsyncIterator[Coordinates]:
        """Yield coordinates as the device moves."""
        pass


class StaticLocationProvider(LocationProviderBase):
    """Reports one configured position and stops."""

    def __init__(self, coordinates: Coordinates):
        self.coordinates = coordinates

    async def updates(self) -> AsyncIterator[Coordinates]:
        yield self.coordinates


class PlaceNameResolverBase(ABC):
    """Reverse geocoding: coordinates to a human-readable place name."""

    @abstractmethod
    def resolve(self, coordinates: Coordinates) -> str:
        """
        Return a display name for the position.

        Raises:
            Exception: Any failure; callers treat the name as best-effort
        """
        pass


class StaticPlaceNameResolver(PlaceNameResolverBase):
    """Always answers with a configured name."""

    def __init__(self, name: str):
        self.name = name

    def resolve(self, coordinates: Coordinates) -> str:
        return self.name
