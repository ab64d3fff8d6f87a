"""Weather provider backed by the deterministic scenarios."""
import logging
from datetime import datetime
from typing import Callable, Optional

from override_store import OverrideStore
from scenarios import Scenario, scenario_for_time, weather_package
from weather_data import WeatherPackage
from weather_provider import WeatherProviderBase


class ScenarioWeatherProvider(WeatherProviderBase):
    """
    Serves scenario data instead of live weather.

    Coordinates are ignored; the scenario comes from the pinned override,
    or from the wall-clock hour when nothing is pinned.
    """

    def __init__(
        self,
        override_store: Optional[OverrideStore] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.override_store = override_store
        self.clock = clock

    def current_scenario(self, now: Optional[datetime] = None) -> Scenario:
        override = self.override_store.get() if self.override_store else None
        return scenario_for_time(now or self.clock(), override)

    def fetch_weather_package(self, latitude: float, longitude: float) -> WeatherPackage:
        now = self.clock()
        scenario = self.current_scenario(now)
        logging.info(f"Serving mock scenario '{scenario.value}' for {now:%H:%M}")
        return weather_package(scenario, now.date())
