"""WearWeather - what to wear for the current weather, shared with the companion display."""
import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime
from typing import Optional

from app_config import AppConfig, load_config
from mock_provider import ScenarioWeatherProvider
from open_meteo_provider import OpenMeteoProvider
from override_store import OverrideStore
from scenarios import Scenario
from shared_store import KeyValueStore, open_local_storage, open_shared_store
from stylist import Stylist
from weather_cache import WeatherCache, cache_key
from weather_data import round_half_away
from weather_provider import StaticLocationProvider, StaticPlaceNameResolver, WeatherProviderBase
from weather_service import DEFAULT_COORDINATES, WeatherService, WeatherState


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("WearWeather outfit recommendation")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--mock", dest="use_mock", action="store_true", default=None,
                        help="Use the built-in weather scenarios")
    source.add_argument("--live", dest="use_mock", action="store_false",
                        help="Use live Open-Meteo data")
    parser.add_argument("--scenario", choices=[s.value for s in Scenario],
                        help="Pin a mock scenario (shared with the companion display)")
    parser.add_argument("--clear-scenario", action="store_true",
                        help="Go back to time-based mock scenarios")
    parser.add_argument("--force", action="store_true", help="Ignore a still-valid cache")
    parser.add_argument("--watch", action="store_true", help="Keep refreshing")
    parser.add_argument("--interval", type=float, default=900.0, help="Seconds between refreshes with --watch")
    parser.add_argument("--max-retries", type=int, default=3)
    parser.add_argument("--retry-delay", type=float, default=2.0)
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def format_state(state: WeatherState, now: Optional[datetime] = None) -> str:
    """Plain-text rendering of the primary display."""
    if state.error_message:
        return f"{state.location_name}: {state.error_message}"
    weather = state.weather
    if weather is None:
        return f"{state.location_name}: loading..." if state.is_loading else f"{state.location_name}: no data"

    outfit = state.outfit
    today = (now or datetime.now()).date()
    lines = [
        f"{state.location_name}  {weather.temp_text} {weather.condition.short_text}"
        f"  (H {round_half_away(weather.daily_high)}° L {round_half_away(weather.daily_low)}°)",
        f"Feels {weather.feels_like_text}  Hum {weather.humidity_text}  Wind {weather.wind_text}"
        f"  Rain {weather.precip_chance_text}",
        f"AQI {weather.aqi_text} ({weather.aqi_status_text})  PM2.5 {weather.pm25_text}",
        "Wear: " + ", ".join(
            item for item in [outfit.outer, outfit.top, outfit.bottom, outfit.shoes, outfit.accessory] if item
        ) + ("  + mask" if outfit.has_mask else ""),
    ]
    if state.hourly:
        lines.append("Next hours: " + "  ".join(
            f"{item.hour_text} {item.temperature}°" for item in state.hourly
        ))
    for item in state.daily:
        lines.append(f"  {item.day_text(today):<9} {item.high:>4.0f}° / {item.low:>4.0f}°  {item.condition.short_text}")
    if state.is_loading:
        lines.append("(refreshing...)")
    return "\n".join(lines)


def build_weather_service(config: AppConfig, args: argparse.Namespace, shared: KeyValueStore) -> WeatherService:
    use_mock = config.use_mock if args.use_mock is None else args.use_mock
    if use_mock:
        provider: WeatherProviderBase = ScenarioWeatherProvider(OverrideStore(shared))
        resolver = StaticPlaceNameResolver(config.location_name or "Seoul")
    else:
        provider = OpenMeteoProvider(timeout=config.timeout)
        resolver = StaticPlaceNameResolver(config.location_name or "My Location")

    # The TTL cache belongs to this process only
    local = KeyValueStore(open_local_storage(config.local_dir("app")))
    service = WeatherService(
        provider=provider,
        cache=WeatherCache(local, key=cache_key("mock" if use_mock else "live")),
        shared_store=shared,
        stylist=Stylist(),
        resolver=resolver,
        max_retries=args.max_retries,
        retry_delay_seconds=args.retry_delay,
    )
    logging.info("Weather service ready (%s provider)", "mock" if use_mock else "live")
    return service


async def run(service: WeatherService, config: AppConfig, args: argparse.Namespace) -> None:
    location_provider = StaticLocationProvider(config.coordinates or DEFAULT_COORDINATES)
    await service.run(location_provider)
    if args.force:
        await service.manual_refresh()
    print(format_state(service.state))

    while args.watch:
        await asyncio.sleep(max(args.interval, 1.0))
        await service.manual_refresh()
        print()
        print(format_state(service.state))


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main() -> None:
    args = parse_args()
    setup_logging(args.log_file, args.verbose)
    config = load_config()

    shared = open_shared_store(config.group_id, config.shared_dir, config.local_dir("app"))
    overrides = OverrideStore(shared)
    if args.clear_scenario:
        overrides.clear()
    if args.scenario:
        overrides.set(Scenario(args.scenario))
    if args.scenario or args.clear_scenario:
        # A different scenario makes the cached result wrong
        args.force = True

    service = build_weather_service(config, args, shared)
    service.subscribe(lambda state: logging.debug(
        "State: loading=%s error=%s weather=%s", state.is_loading, state.error_message,
        state.weather.condition.value if state.weather else None
    ))

    signal.signal(signal.SIGTERM, signal_handler)
    try:
        asyncio.run(run(service, config, args))
    except KeyboardInterrupt:
        logging.info("Stopping")


if __name__ == "__main__":
    main()
