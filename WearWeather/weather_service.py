"""Weather refresh flow with caching, retries and snapshot publishing."""
import asyncio
import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from scenarios import hourly_forecast
from shared_store import KeyValueStore
from snapshot import SNAPSHOT_KEY, project
from stylist import Stylist
from weather_cache import WeatherCache
from weather_data import (
    DEFAULT_OUTFIT,
    CachePayload,
    ClothingOutfit,
    DailyForecastItem,
    HourlyForecastItem,
    WeatherPackage,
    WeatherReading,
)
from weather_provider import (
    Coordinates,
    LocationProviderBase,
    PlaceNameResolverBase,
    WeatherProviderBase,
    WeatherProviderError,
)

# Seoul City Hall, used until the first position arrives
DEFAULT_COORDINATES = Coordinates(37.5665, 126.9780)
PLACEHOLDER_LOCATION_NAME = "My Location"
# Position updates closer than this to the last one are ignored
MIN_LOCATION_CHANGE_M = 50.0

_CLIENT_ERROR = re.compile(r"\b4\d\d\b")


@dataclass(frozen=True)
class WeatherState:
    """Everything the primary display shows. Replaced wholesale on change."""
    location_name: str = PLACEHOLDER_LOCATION_NAME
    weather: Optional[WeatherReading] = None
    outfit: ClothingOutfit = DEFAULT_OUTFIT
    daily: Tuple[DailyForecastItem, ...] = ()
    hourly: Tuple[HourlyForecastItem, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None


StateListener = Callable[[WeatherState], None]


class WeatherService:
    """
    Refreshes weather, picks an outfit, and hands the result to everyone
    who needs it.

    A refresh asks the provider (with retries), runs the stylist, writes the
    TTL cache, projects a snapshot into the shared store for the companion
    display, and notifies subscribers with the new WeatherState.

    Overlapping refreshes are allowed; each one is numbered and only the most
    recently started one may publish its result.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache: WeatherCache,
        shared_store: KeyValueStore,
        stylist: Optional[Stylist] = None,
        resolver: Optional[PlaceNameResolverBase] = None,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache: TTL cache of the last successful refresh
            shared_store: Cross-process store the snapshot is written to
            stylist: Outfit decision engine (a fresh one if omitted)
            resolver: Place-name lookup for position updates
            max_retries: Maximum number of attempts on transient errors
            retry_delay_seconds: Base delay between retries
            clock: Returns the current local time
        """
        self.provider = provider
        self.cache = cache
        self.shared_store = shared_store
        self.stylist = stylist or Stylist()
        self.resolver = resolver
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.clock = clock

        self._state = WeatherState()
        self._listeners: List[StateListener] = []
        self._refresh_seq = 0
        self._name_seq = 0
        self._last_location: Optional[Coordinates] = None

    @property
    def state(self) -> WeatherState:
        return self._state

    @property
    def last_location(self) -> Optional[Coordinates]:
        return self._last_location

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_state(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _show_payload(self, payload: CachePayload, **extra) -> None:
        self._set_state(
            location_name=payload.location_name,
            weather=payload.weather,
            outfit=payload.outfit,
            daily=payload.daily,
            hourly=tuple(hourly_forecast(payload.weather, self.clock())),
            **extra
        )

    def _publish_snapshot(self, location_name: str, weather: WeatherReading, outfit: ClothingOutfit) -> None:
        snapshot = project(location_name, weather, outfit, now=self.clock().timestamp())
        self.shared_store.save(snapshot, SNAPSHOT_KEY)

    def load_cache(self) -> bool:
        """
        Paint the last refresh on cold start if it is still within the TTL.

        Returns:
            bool: True if a valid cache entry was shown
        """
        payload = self.cache.read()
        if payload is None:
            logging.info("No valid cached weather on startup")
            return False
        logging.info(f"Showing cached weather for {payload.location_name}")
        self._show_payload(payload)
        # The companion display may have nothing yet, or something older
        self._publish_snapshot(payload.location_name, payload.weather, payload.outfit)
        return True

    def _repaint_hourly(self) -> None:
        weather = self._state.weather
        if weather is None:
            payload = self.cache.read_even_if_stale()
            if payload is None:
                return
            self._show_payload(payload)
            return
        self._set_state(hourly=tuple(hourly_forecast(weather, self.clock())))

    async def refresh(self, location: Optional[Coordinates] = None, force: bool = False) -> WeatherState:
        """
        Refresh weather and outfit.

        Args:
            location: Position to fetch weather for (last known, else default)
            force: Ignore a still-valid cache entry

        Returns:
            WeatherState: State after this refresh (may be unchanged if a
            newer refresh superseded it)
        """
        if not force and self.cache.is_valid():
            logging.debug("Cache still valid, skipping provider call")
            self._repaint_hourly()
            return self._state

        self._refresh_seq += 1
        seq = self._refresh_seq
        coords = location or self._last_location or DEFAULT_COORDINATES

        # Show whatever we had last while the provider is asked
        if self._state.weather is None:
            stale = self.cache.read_even_if_stale()
            if stale is not None:
                logging.info("Showing stale cached weather while refreshing")
                self._show_payload(stale)

        self._set_state(is_loading=True, error_message=None)
        logging.info(f"Refresh #{seq}: fetching weather for ({coords.latitude:.4f}, {coords.longitude:.4f})")

        try:
            package = await self._fetch_with_retries(coords)
        except WeatherProviderError as e:
            if seq != self._refresh_seq:
                logging.info(f"Refresh #{seq} failed after being superseded, ignoring")
                return self._state
            self._fall_back_to_cache(e)
            return self._state

        if seq != self._refresh_seq:
            logging.info(f"Discarding result of superseded refresh #{seq}")
            return self._state

        self._apply(package)
        return self._state

    async def manual_refresh(self) -> WeatherState:
        return await self.refresh(self._last_location, force=True)

    async def _fetch_with_retries(self, coords: Coordinates) -> WeatherPackage:
        last_error = None
        for attempt in range(self.max_retries):
            try:
                logging.debug(f"Weather fetch attempt {attempt + 1}/{self.max_retries}")
                return await asyncio.to_thread(
                    self.provider.fetch_weather_package, coords.latitude, coords.longitude
                )
            except WeatherProviderError as e:
                last_error = e
                logging.warning(f"Weather fetch attempt {attempt + 1} failed: {e}")
                # Don't retry on 4xx errors (bad request, auth, etc.)
                if _CLIENT_ERROR.search(str(e)):
                    logging.error("Non-retryable error (4xx), stopping retries")
                    break
                if attempt < self.max_retries - 1:
                    retry_delay = self.retry_delay_seconds * (attempt + 1)
                    logging.info(f"Retrying in {retry_delay}s...")
                    await asyncio.sleep(retry_delay)

        raise WeatherProviderError(
            f"Failed to fetch weather after {self.max_retries} attempts: {last_error}"
        )

    def _fall_back_to_cache(self, error: WeatherProviderError) -> None:
        payload = self.cache.read_even_if_stale()
        if payload is not None:
            age = payload.age_seconds(self.clock().timestamp())
            logging.warning(f"All retries failed, using cached weather (age: {age:.1f}s)")
            self._show_payload(payload, is_loading=False, error_message=None)
            return
        logging.error(f"Weather refresh failed and no cache available: {error}")
        self._set_state(is_loading=False, error_message=f"Failed to fetch weather: {error}")

    def _apply(self, package: WeatherPackage) -> None:
        weather = package.current
        outfit = self.stylist.recommend(weather.temperature, weather.condition, weather.is_bad_air)
        now = self.clock()
        location_name = self._state.location_name

        self.cache.write(CachePayload(
            saved_at=now.timestamp(),
            location_name=location_name,
            weather=weather,
            outfit=outfit,
            daily=package.daily,
            is_bad_air=weather.is_bad_air,
        ))
        self._publish_snapshot(location_name, weather, outfit)

        logging.info(
            f"Weather: {weather.temperature}°C {weather.condition.value}, "
            f"outfit: {outfit.top}/{outfit.bottom}/{outfit.shoes}"
        )
        self._set_state(
            weather=weather,
            outfit=outfit,
            daily=package.daily,
            hourly=tuple(hourly_forecast(weather, now)),
            is_loading=False,
            error_message=None,
        )

    async def update_location_name(self, coords: Coordinates) -> None:
        """Resolve a place name; failures keep the previous name."""
        if self.resolver is None:
            return
        self._name_seq += 1
        seq = self._name_seq
        try:
            name = await asyncio.to_thread(self.resolver.resolve, coords)
        except Exception as e:  # best-effort display text only
            logging.debug(f"Place name lookup failed: {e}")
            return
        if seq != self._name_seq:
            return
        name = name or PLACEHOLDER_LOCATION_NAME
        if name == self._state.location_name:
            return
        self._set_state(location_name=name)

        # The name may arrive after the weather; keep the shared copies in step
        weather = self._state.weather
        if weather is not None:
            self._publish_snapshot(name, weather, self._state.outfit)
            payload = self.cache.read_even_if_stale()
            if payload is not None:
                self.cache.write(replace(payload, location_name=name))

    async def on_location(self, coords: Coordinates) -> bool:
        """
        Handle a position update.

        Returns:
            bool: False if the move was too small to act on
        """
        if self._last_location is not None:
            moved = coords.distance_to(self._last_location)
            if moved < MIN_LOCATION_CHANGE_M:
                logging.debug(f"Ignoring location change of {moved:.1f}m")
                return False
        self._last_location = coords
        await asyncio.gather(self.update_location_name(coords), self.refresh(coords))
        return True

    async def run(self, location_provider: Optional[LocationProviderBase] = None) -> None:
        """Cold start: show the cache, then refresh for each position update."""
        self.load_cache()
        if location_provider is None:
            await self.refresh()
            return
        async for coords in location_provider.updates():
            await self.on_location(coords)
