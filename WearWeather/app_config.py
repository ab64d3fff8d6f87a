"""Environment configuration shared by the app and the companion display."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from weather_provider import Coordinates

DEFAULT_GROUP_ID = "group.wearweather"
DEFAULT_SHARED_DIR = os.path.join("~", ".local", "share", "wearweather", "groups")
DEFAULT_DATA_DIR = os.path.join("~", ".local", "share", "wearweather", "local")


@dataclass(frozen=True)
class AppConfig:
    group_id: str
    shared_dir: str
    data_dir: str
    use_mock: bool
    coordinates: Optional[Coordinates]
    location_name: Optional[str]
    timeout: int

    def local_dir(self, role: str) -> str:
        """Private storage directory for one process role ("app", "widget")."""
        return os.path.join(self.data_dir, role)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise SystemExit(f"Invalid boolean value: {value!r}")


def load_config() -> AppConfig:
    """
    Read configuration from the environment (and a .env file if present).

    Raises:
        SystemExit: If a value is present but malformed
    """
    load_dotenv()
    lat = os.getenv("WEATHER_LAT")
    lon = os.getenv("WEATHER_LON")

    coordinates = None
    if lat or lon:
        if not lat or not lon:
            raise SystemExit("Set both WEATHER_LAT and WEATHER_LON, or neither")
        try:
            coordinates = Coordinates(float(lat), float(lon))
        except ValueError as exc:
            raise SystemExit(f"Invalid coordinates: {exc}") from exc

    try:
        timeout = int(os.getenv("WEATHER_TIMEOUT", "10"))
    except ValueError as exc:
        raise SystemExit(f"Invalid WEATHER_TIMEOUT: {exc}") from exc

    config = AppConfig(
        group_id=os.getenv("WEARWEATHER_GROUP_ID", DEFAULT_GROUP_ID),
        shared_dir=os.path.expanduser(os.getenv("WEARWEATHER_SHARED_DIR", DEFAULT_SHARED_DIR)),
        data_dir=os.path.expanduser(os.getenv("WEARWEATHER_DATA_DIR", DEFAULT_DATA_DIR)),
        use_mock=_parse_bool(os.getenv("WEARWEATHER_USE_MOCK", "true")),
        coordinates=coordinates,
        location_name=os.getenv("WEARWEATHER_LOCATION_NAME") or None,
        timeout=timeout,
    )
    logging.info(
        "Configuration loaded: group=%s mock=%s coordinates=%s",
        config.group_id,
        config.use_mock,
        config.coordinates,
    )
    return config
