"""Single-slot, time-boxed cache of the last successful refresh."""
import logging
import time
from typing import Callable, Optional

from shared_store import KeyValueStore
from weather_data import CachePayload

# Bump when CachePayload changes incompatibly; old entries then read as missing
CACHE_SCHEMA_VERSION = 2
CACHE_KEY = f"core-cache-v{CACHE_SCHEMA_VERSION}"
CACHE_TTL_SECONDS = 900


def cache_key(source: Optional[str] = None) -> str:
    """Storage key of the cache slot for one weather source ("mock", "live")."""
    return f"{CACHE_KEY}.{source}" if source else CACHE_KEY


class WeatherCache:
    """
    Keeps the last refresh so a cold start can paint immediately and a
    refresh can be skipped while the data is still fresh.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        key: str = CACHE_KEY
    ):
        """
        Initialize the cache.

        Args:
            store: Where the payload is persisted
            ttl_seconds: Age up to which a payload is considered valid
            clock: Returns the current UNIX time (injectable for tests)
            key: Storage key of the single slot
        """
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.key = key

    def read(self) -> Optional[CachePayload]:
        """Return the cached payload if it is still within the TTL."""
        payload = self.read_even_if_stale()
        if payload is None:
            return None
        age = payload.age_seconds(self.clock())
        if age <= self.ttl_seconds:
            logging.debug(f"Cache hit (age: {age:.1f}s, TTL: {self.ttl_seconds}s)")
            return payload
        logging.debug(f"Cache expired (age: {age:.1f}s > TTL: {self.ttl_seconds}s)")
        return None

    def read_even_if_stale(self) -> Optional[CachePayload]:
        """Return the cached payload regardless of its age."""
        return self.store.load(self.key, CachePayload)

    def is_valid(self) -> bool:
        return self.read() is not None

    def write(self, payload: CachePayload) -> None:
        self.store.save(payload, self.key)
