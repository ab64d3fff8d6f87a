"""Persisted manual pin of a mock scenario, shared with the companion display."""
import logging
from typing import Optional

from scenarios import Scenario
from shared_store import KeyValueStore

OVERRIDE_KEY = "wearweather.mock-scenario-override.v1"


class OverrideStore:
    """
    get/set/clear of the pinned scenario.

    No value means automatic, time-based selection. Writes are
    last-writer-wins; nothing is locked.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> Optional[Scenario]:
        raw = self.store.load(OVERRIDE_KEY)
        if raw is None:
            return None
        try:
            return Scenario(raw)
        except ValueError:
            logging.debug(f"Ignoring unknown scenario override {raw!r}")
            return None

    def set(self, scenario: Scenario) -> None:
        logging.info(f"Pinning mock scenario: {scenario.value}")
        self.store.save(scenario.value, OVERRIDE_KEY)

    def clear(self) -> None:
        logging.info("Clearing mock scenario override")
        self.store.remove(OVERRIDE_KEY)
